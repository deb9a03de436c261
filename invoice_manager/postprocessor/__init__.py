"""
Post-Processing Module for the Invoice Manager.

This module provides functionality for:
    - Field normalization of model output into InvoiceRecord
    - Amount, date, currency and text cleaning
    - Completeness validation

Author: ML Engineering Team
"""

from .invoice_record import InvoiceItem, InvoiceRecord, RECORD_PAYLOAD_KEYS, ITEM_PAYLOAD_KEYS
from .normalizers import (
    AmountNormalizer,
    CurrencyNormalizer,
    DateNormalizer,
    TaxIdNormalizer,
    TextNormalizer,
)
from .processor import FieldNormalizer, PostProcessor, normalize_invoice
from .validators import DateValidator, FieldValidator, ValidationResult

__all__ = [
    'InvoiceItem',
    'InvoiceRecord',
    'RECORD_PAYLOAD_KEYS',
    'ITEM_PAYLOAD_KEYS',
    'AmountNormalizer',
    'CurrencyNormalizer',
    'DateNormalizer',
    'TaxIdNormalizer',
    'TextNormalizer',
    'FieldNormalizer',
    'PostProcessor',
    'normalize_invoice',
    'DateValidator',
    'FieldValidator',
    'ValidationResult',
]
