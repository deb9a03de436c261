"""
Invoice Record Data Classes.

This module defines the strictly-typed output of normalization:
``InvoiceRecord`` and its ``InvoiceItem`` line items. Both are frozen;
callers persist them, copy them with ``dataclasses.replace`` or discard
them.

Missing values are always ``None`` (never omitted, never zero), except for
an item's description which falls back to an empty string.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# Attribute name -> external (AI payload / storage column) key
RECORD_PAYLOAD_KEYS: Dict[str, str] = {
    'provider': 'proveedor',
    'issue_date': 'fecha',
    'total_amount': 'monto',
    'invoice_number': 'numeroFactura',
    'category': 'categoria',
    'currency': 'moneda',
    'tax_amount': 'impuestos',
    'subtotal_amount': 'subtotal',
    'discount_amount': 'descuentos',
    'due_date': 'fechaVencimiento',
    'payment_method': 'metodoPago',
    'provider_address': 'direccionProveedor',
    'provider_tax_id': 'rfcProveedor',
}

ITEM_PAYLOAD_KEYS: Dict[str, str] = {
    'description': 'descripcion',
    'quantity': 'cantidad',
    'unit_price': 'precioUnitario',
    'subtotal': 'subtotal',
}


@dataclass(frozen=True)
class InvoiceItem:
    """
    A single line item of an invoice.

    Attributes:
        description: Renderable label ("" when not extracted)
        quantity: Non-negative quantity or None
        unit_price: Non-negative unit price or None
        subtotal: Non-negative line subtotal or None
    """
    description: str = ""
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    subtotal: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the external Spanish-keyed shape."""
        return {key: getattr(self, attr) for attr, key in ITEM_PAYLOAD_KEYS.items()}


@dataclass(frozen=True)
class InvoiceRecord:
    """
    Normalized invoice data.

    Example:
        >>> record = InvoiceRecord(provider="ACME Corp", total_amount=1000.0)
        >>> record.to_payload()["proveedor"]
        'ACME Corp'
    """
    provider: Optional[str] = None
    issue_date: Optional[str] = None
    total_amount: Optional[float] = None
    invoice_number: Optional[str] = None
    category: Optional[str] = None
    currency: Optional[str] = None
    tax_amount: Optional[float] = None
    subtotal_amount: Optional[float] = None
    discount_amount: Optional[float] = None
    due_date: Optional[str] = None
    payment_method: Optional[str] = None
    provider_address: Optional[str] = None
    provider_tax_id: Optional[str] = None
    items: Tuple[InvoiceItem, ...] = field(default_factory=tuple)

    @property
    def fields(self) -> Dict[str, Any]:
        """All scalar fields keyed by attribute name."""
        return {attr: getattr(self, attr) for attr in RECORD_PAYLOAD_KEYS}

    @property
    def missing_fields(self) -> List[str]:
        return [name for name, value in self.fields.items() if value is None]

    @property
    def extracted_fields(self) -> Dict[str, Any]:
        return {name: value for name, value in self.fields.items() if value is not None}

    def to_payload(self) -> Dict[str, Any]:
        """
        Convert to the external Spanish-keyed shape.

        This is the shape the model is asked to produce and the column
        layout of the invoice store, so ``normalize_invoice(record.to_payload())``
        returns an equal record.
        """
        payload = {key: getattr(self, attr) for attr, key in RECORD_PAYLOAD_KEYS.items()}
        payload['items'] = [item.to_payload() for item in self.items]
        return payload

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_payload(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"InvoiceRecord("
            f"provider={self.provider!r}, "
            f"date={self.issue_date}, "
            f"total={self.total_amount}, "
            f"items={len(self.items)})"
        )
