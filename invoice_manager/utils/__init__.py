"""
Utility Module for the Invoice Manager.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and formatting helpers
"""

from .logger import setup_logger, get_logger, invoice_context
from .helpers import ensure_directory, get_file_extension, get_file_name, format_currency

__all__ = [
    'setup_logger',
    'get_logger',
    'invoice_context',
    'ensure_directory',
    'get_file_extension',
    'get_file_name',
    'format_currency'
]
