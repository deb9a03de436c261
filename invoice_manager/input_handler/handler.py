"""
Main Input Handler Module.

This module provides the InputHandler class, the text-extraction entry
point of the pipeline. It validates invoice files, detects their type and
returns their plain text, using the PDF text layer when there is one and
OCR otherwise.

Usage:
    from invoice_manager.input_handler import InputHandler

    handler = InputHandler()
    document = handler.extract_text("factura.pdf")
    print(document.text)

Classes:
    DocumentText: Plain text of one invoice file
    InputHandler: Main class for file input handling
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from invoice_manager.config import get_config
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.helpers import get_file_extension
from invoice_manager.utils.exceptions import (
    CorruptedFileError,
    InputError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)
from invoice_manager.ocr_engine import OCREngine

from .image_processor import ImageProcessor
from .pdf_processor import PDFProcessor


# Initialize module logger
logger = get_logger(__name__)


@dataclass
class DocumentText:
    """
    Plain text extracted from an invoice file.

    Attributes:
        filepath: Original file path
        filename: Original filename
        file_type: 'pdf' or 'image'
        text: Extracted text
        method: 'text_layer' or 'ocr'
        page_count: Number of pages read
    """
    filepath: str
    filename: str
    file_type: str
    text: str
    method: str
    page_count: int = 1

    def __repr__(self) -> str:
        return (
            f"DocumentText(filename='{self.filename}', "
            f"method='{self.method}', "
            f"pages={self.page_count}, "
            f"chars={len(self.text)})"
        )


class InputHandler:
    """
    Validates invoice files and returns their text.

    The OCR engine is created on first use, so digital PDFs can be read
    on machines without Tesseract.

    Attributes:
        supported_extensions: Set of supported file extensions
        pdf_processor: PDFProcessor instance for PDF files
        image_processor: ImageProcessor instance for image files

    Example:
        >>> handler = InputHandler()
        >>> for path in handler.collect_files("./facturas/"):
        ...     print(handler.extract_text(path).text[:80])
    """

    PDF_EXTENSIONS = {'.pdf'}
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.webp'}

    def __init__(
        self,
        ocr_engine: Optional[OCREngine] = None,
        language: Optional[str] = None
    ) -> None:
        """
        Initialize the InputHandler.

        Args:
            ocr_engine: OCR engine to use. Created lazily if None.
            language: Tesseract language for the lazily created engine.
        """
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                sorted(self.PDF_EXTENSIONS | self.IMAGE_EXTENSIONS)
            )
        }

        self.pdf_processor = PDFProcessor()
        self.image_processor = ImageProcessor()
        self._ocr_engine = ocr_engine
        self._language = language

        logger.info(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    @property
    def ocr_engine(self) -> OCREngine:
        if self._ocr_engine is None:
            self._ocr_engine = OCREngine(self._language)
        return self._ocr_engine

    def detect_file_type(self, filepath: Union[str, Path]) -> str:
        """
        Detect the type of input file.

        Returns:
            File type string: 'pdf' or 'image'.

        Raises:
            UnsupportedFileTypeError: If file type is not supported.
        """
        extension = get_file_extension(filepath)

        if extension in self.PDF_EXTENSIONS:
            return 'pdf'
        if extension in self.IMAGE_EXTENSIONS and extension in self.supported_extensions:
            return 'image'

        raise UnsupportedFileTypeError(extension, list(self.supported_extensions))

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, is supported and is not empty.

        Returns:
            Path object pointing to the validated file.

        Raises:
            InputFileNotFoundError: If file doesn't exist.
            UnsupportedFileTypeError: If file type is not supported.
            CorruptedFileError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise InputFileNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}", {"filepath": str(filepath)})

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, list(self.supported_extensions))

        if path.stat().st_size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")

        logger.debug(f"File validated: {filepath}")
        return path

    def extract_text(self, filepath: Union[str, Path]) -> DocumentText:
        """
        Return the plain text of an invoice file.

        PDFs use their text layer when it is long enough and are
        rasterized and OCR'd otherwise. Images are always OCR'd.

        Raises:
            InputError: For missing, unsupported or unreadable files.
            RecognitionError: If OCR fails or finds no text.
        """
        path = self.validate_file(filepath)
        file_type = self.detect_file_type(path)
        logger.info(f"Extracting text: {path.name} ({file_type})")

        if file_type == 'pdf':
            text = self.pdf_processor.extract_text(path)
            if self.pdf_processor.has_text_layer(text):
                logger.info(f"Using PDF text layer ({len(text)} chars)")
                return DocumentText(str(filepath), path.name, file_type, text, 'text_layer')

            logger.info("PDF has no usable text layer, falling back to OCR")
            images = self.pdf_processor.to_images(path)
        else:
            images = [self.image_processor.process(path)]

        text = self.ocr_engine.extract_text(images, source=str(filepath))
        return DocumentText(str(filepath), path.name, file_type, text, 'ocr', len(images))

    def collect_files(
        self,
        directory: Union[str, Path],
        recursive: bool = False
    ) -> List[Path]:
        """
        List all supported files in a directory, sorted by path.

        Raises:
            InputFileNotFoundError: If the directory doesn't exist.
            InputError: If the path is not a directory.
        """
        directory = Path(directory)

        if not directory.exists():
            raise InputFileNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}", {"path": str(directory)})

        pattern = "**/*" if recursive else "*"
        files = sorted(
            path for path in directory.glob(pattern)
            if path.is_file() and get_file_extension(path) in self.supported_extensions
        )

        logger.info(f"Found {len(files)} files to process in {directory}")
        return files
