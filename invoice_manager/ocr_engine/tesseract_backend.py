"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).

Requirements:
    - Tesseract OCR installed on the system, with the configured
      language data (``spa`` by default)
    - pytesseract Python package

Author: ML Engineering Team
"""

import time
from typing import Any, Dict, List, Optional

import pytesseract
from PIL import Image

from invoice_manager.config import get_config
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.exceptions import OCREngineNotAvailableError, RecognitionError
from .ocr_result import OCRResult, OCRWord

# Initialize module logger
logger = get_logger(__name__)


def parse_tesseract_data(data: Dict[str, List[Any]], page: int = 0) -> List[OCRWord]:
    """
    Parse ``image_to_data`` dictionary output into OCRWord objects.

    Empty tokens and zero-sized boxes are skipped; Tesseract's ``-1``
    confidence for non-word elements is clamped to 0.

    Args:
        data: Dictionary output from ``pytesseract.image_to_data``.
        page: Page number stored in each word's line key.

    Returns:
        List of OCRWord objects in reading order.
    """
    words = []

    for i in range(len(data['text'])):
        text = data['text'][i]
        if not text or not str(text).strip():
            continue

        x, y = data['left'][i], data['top'][i]
        w, h = data['width'][i], data['height'][i]
        if w <= 0 or h <= 0:
            continue

        conf = max(0.0, float(data['conf'][i]))

        words.append(OCRWord(
            text=str(text).strip(),
            bbox=(x, y, x + w, y + h),
            confidence=conf,
            line_key=(page, data['block_num'][i], data['par_num'][i], data['line_num'][i]),
        ))

    return words


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Attributes:
        language: Tesseract language code (e.g., "spa")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration

    Example:
        >>> backend = TesseractBackend()
        >>> result = backend.extract(image)
        >>> print(f"Found {result.word_count} words")
    """

    def __init__(self, language: Optional[str] = None) -> None:
        self.language = language or get_config("ocr.tesseract.lang", "spa")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check if the Tesseract binary is available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            ) from e

        logger.info(f"Tesseract version: {version}")

    def _build_config(self) -> str:
        config_parts = [f"--psm {self.psm}", f"--oem {self.oem}"]
        if self.extra_config:
            config_parts.append(self.extra_config)
        return ' '.join(config_parts)

    def extract(self, image: Image.Image, source: str = "image") -> OCRResult:
        """
        Extract words from an image.

        Args:
            image: PIL Image to process.
            source: Name reported in errors (usually the file path).

        Returns:
            OCRResult containing the recognized words.

        Raises:
            RecognitionError: If Tesseract fails on the image.
        """
        start_time = time.time()

        if image.mode != 'RGB':
            image = image.convert('RGB')

        config = self._build_config()
        logger.debug(f"Running Tesseract OCR (config: {config})")

        try:
            data = pytesseract.image_to_data(
                image,
                lang=self.language,
                config=config,
                output_type=pytesseract.Output.DICT
            )
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            logger.error(f"OCR processing failed: {e}")
            raise RecognitionError(source, str(e)) from e

        result = OCRResult(
            words=parse_tesseract_data(data),
            language=self.language,
            engine="tesseract",
            processing_time=time.time() - start_time,
        )

        logger.info(
            f"OCR completed: {result.word_count} words, "
            f"avg confidence: {result.average_confidence:.1f}% "
            f"({result.processing_time:.2f}s)"
        )
        return result
