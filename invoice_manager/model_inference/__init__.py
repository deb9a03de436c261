"""
Model Inference Module for the Invoice Manager.

This module provides structured field extraction with a hosted Gemini
model.

Features:
    - Spanish extraction, classification and basic-data prompts
    - Lenient JSON location in free-form model output
    - Quota error mapping and cooldown tracking

Author: ML Engineering Team
"""

from .extractor import InvoiceExtractor, parse_retry_after
from .prompts import EXPENSE_CATEGORIES, DEFAULT_CATEGORY
from .rate_limit import QuotaCooldown
from .response_parser import extract_json_object, find_json_block

__all__ = [
    'InvoiceExtractor',
    'parse_retry_after',
    'EXPENSE_CATEGORIES',
    'DEFAULT_CATEGORY',
    'QuotaCooldown',
    'extract_json_object',
    'find_json_block',
]
