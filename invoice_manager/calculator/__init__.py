"""
Calculator Module for the Invoice Manager.

Manual invoice composition with automatic tax and total calculation.
"""

from .invoice_calculator import CalculatorItem, CalculatorTotals, InvoiceCalculator

__all__ = ['CalculatorItem', 'CalculatorTotals', 'InvoiceCalculator']
