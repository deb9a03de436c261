"""
Output Handler Module for the Invoice Manager.

This module persists invoice files, their processing status and their
normalized data in SQLite.

Author: ML Engineering Team
"""

from .database_handler import InvoiceStore
from .stored_invoice import (
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_PROCESSED,
    STATUS_PROCESSING,
    STATUS_UPLOADED,
    VALID_STATUSES,
    StoredInvoice,
)

__all__ = [
    'InvoiceStore',
    'StoredInvoice',
    'STATUS_PENDING',
    'STATUS_UPLOADED',
    'STATUS_PROCESSING',
    'STATUS_PROCESSED',
    'STATUS_ERROR',
    'VALID_STATUSES',
]
