"""
Input Handler Module for the Invoice Manager.

This module handles loading invoice files and turning them into text:
    - Digital PDFs: embedded text layer (pdfplumber)
    - Scanned PDFs: rasterization (pdf2image) followed by OCR
    - Images: orientation fix and resizing (Pillow) followed by OCR

Author: ML Engineering Team
"""

from .handler import DocumentText, InputHandler
from .image_processor import ImageProcessor
from .pdf_processor import PDFProcessor

__all__ = ['DocumentText', 'InputHandler', 'ImageProcessor', 'PDFProcessor']
