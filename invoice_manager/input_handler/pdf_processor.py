"""
PDF Processor Module.

This module reads invoice PDFs two ways:
    - digital PDFs: the embedded text layer, via pdfplumber
    - scanned PDFs: page rasterization via pdf2image (Poppler), for OCR

Author: ML Engineering Team
"""

from pathlib import Path
from typing import List, Union

import pdfplumber
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)
from PIL import Image

from invoice_manager.config import get_config
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.exceptions import CorruptedFileError, InputError

# Initialize module logger
logger = get_logger(__name__)


class PDFProcessor:
    """
    Text-layer extraction and rasterization for PDF invoices.

    Attributes:
        dpi: Rasterization resolution
        max_pages: Maximum number of pages read
        min_text_length: Text layers shorter than this count as scanned

    Example:
        >>> processor = PDFProcessor()
        >>> text = processor.extract_text("factura.pdf")
        >>> if not processor.has_text_layer(text):
        ...     images = processor.to_images("factura.pdf")
    """

    def __init__(self) -> None:
        self.dpi = get_config("input.pdf.dpi", 300)
        self.max_pages = get_config("input.pdf.max_pages", 10)
        self.min_text_length = get_config("input.pdf.min_text_length", 50)

        logger.debug(f"PDFProcessor initialized (DPI={self.dpi}, max_pages={self.max_pages})")

    def extract_text(self, filepath: Union[str, Path]) -> str:
        """
        Read the text layer of every page, joined by newlines.

        Raises:
            CorruptedFileError: If the PDF cannot be opened.
        """
        filepath = Path(filepath)
        logger.info(f"Reading PDF text layer: {filepath.name}")

        try:
            with pdfplumber.open(filepath) as pdf:
                pages = pdf.pages[:self.max_pages]
                if len(pdf.pages) > self.max_pages:
                    logger.warning(
                        f"PDF has {len(pdf.pages)} pages, limiting to {self.max_pages}"
                    )
                texts = [page.extract_text() or "" for page in pages]
        except Exception as e:
            logger.error(f"Could not read PDF {filepath}: {e}")
            raise CorruptedFileError(str(filepath), str(e)) from e

        return '\n'.join(texts).strip()

    def has_text_layer(self, text: str) -> bool:
        """A text layer is usable when it holds at least ``min_text_length`` characters."""
        return len(text.strip()) >= self.min_text_length

    def to_images(self, filepath: Union[str, Path]) -> List[Image.Image]:
        """
        Rasterize PDF pages for OCR.

        Raises:
            CorruptedFileError: If Poppler cannot parse the file.
            InputError: If Poppler is not installed.
        """
        filepath = Path(filepath)
        logger.debug(f"Rasterizing PDF at {self.dpi} DPI: {filepath.name}")

        try:
            images = convert_from_path(
                filepath,
                dpi=self.dpi,
                first_page=1,
                last_page=self.max_pages,
                fmt='png'
            )
        except PDFInfoNotInstalledError as e:
            raise InputError(
                "Poppler is not installed; scanned PDFs cannot be rasterized",
                {"filepath": str(filepath)}
            ) from e
        except (PDFPageCountError, PDFSyntaxError, PDFPopplerTimeoutError) as e:
            logger.error(f"pdf2image conversion failed: {e}")
            raise CorruptedFileError(str(filepath), str(e)) from e

        logger.info(f"Converted PDF to {len(images)} image(s)")
        return [img.convert('RGB') if img.mode != 'RGB' else img for img in images]
