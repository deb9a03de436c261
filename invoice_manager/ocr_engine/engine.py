"""
Main OCR Engine Module.

This module provides the OCREngine class, the text-recognition entry
point used by the input handler for photos and scanned PDF pages.

Usage:
    from invoice_manager.ocr_engine import OCREngine

    engine = OCREngine()
    result = engine.extract(image)
    print(result.text)

Author: ML Engineering Team
"""

from typing import List, Optional

from PIL import Image

from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.exceptions import RecognitionError
from .ocr_result import OCRResult
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    Text recognition over one or more page images.

    Recognition failures are reported as ``RecognitionError``; they are
    never retried here. A page set that yields no text at all is also a
    recognition failure.

    Example:
        >>> engine = OCREngine(language="spa")
        >>> text = engine.extract_text([page1, page2], source="scan.pdf")
    """

    def __init__(self, language: Optional[str] = None) -> None:
        self.backend = TesseractBackend(language)
        logger.info(f"OCR Engine initialized (lang={self.backend.language})")

    def extract(self, image: Image.Image, source: str = "image") -> OCRResult:
        return self.backend.extract(image, source)

    def extract_pages(self, images: List[Image.Image], source: str = "document") -> OCRResult:
        """Recognize every page image and merge the results in page order."""
        results = []
        for index, image in enumerate(images, start=1):
            logger.debug(f"Recognizing page {index}/{len(images)} of {source}")
            results.append(self.backend.extract(image, source))
        return OCRResult.combine(results)

    def extract_text(self, images: List[Image.Image], source: str = "document") -> str:
        """
        Recognize page images and return their plain text.

        Raises:
            RecognitionError: If recognition fails or finds no text.
        """
        result = self.extract_pages(images, source)
        if result.is_empty():
            raise RecognitionError(source, "no text recognized")
        return result.text
