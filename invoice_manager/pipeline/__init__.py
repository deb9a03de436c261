"""
Pipeline Module for the Invoice Manager.

End-to-end processing of invoice files with per-invoice status tracking.
"""

from .invoice_pipeline import InvoicePipeline, ProcessingOutcome

__all__ = ['InvoicePipeline', 'ProcessingOutcome']
