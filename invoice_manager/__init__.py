"""
Invoice Manager - Source Package.

This package turns invoice images and PDFs into normalized, stored
invoice records and offers views over them. Each module has a single
responsibility.

Modules:
    - input_handler: PDF text layer and image loading
    - ocr_engine: Tesseract text recognition
    - model_inference: Gemini structured extraction
    - postprocessor: Field normalization and validation
    - output_handler: SQLite invoice store
    - analytics: Dashboard statistics, expense evolution, search
    - calculator: Manual invoice composition
    - pipeline: End-to-end processing with status tracking

Architecture:
    Input -> OCR -> Model Inference -> Post-Processing -> Store
                                                          |
                                                      Analytics
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'ocr_engine',
    'model_inference',
    'postprocessor',
    'output_handler',
    'analytics',
    'calculator',
    'pipeline',
    'utils'
]
