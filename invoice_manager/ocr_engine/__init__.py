"""
OCR Engine Module for the Invoice Manager.

This module provides OCR functionality including:
    - Text extraction from invoice photos and scanned pages
    - Word positions and confidence scores
    - Multi-page result merging

Backend: Tesseract (pytesseract), Spanish language data by default.

Author: ML Engineering Team
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend, parse_tesseract_data
from .ocr_result import OCRResult, OCRWord

__all__ = ['OCREngine', 'TesseractBackend', 'parse_tesseract_data', 'OCRResult', 'OCRWord']
