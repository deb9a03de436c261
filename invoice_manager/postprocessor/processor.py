"""
Main Post-Processor Module.

This module turns the loosely-typed object returned by the structured
extraction model into an ``InvoiceRecord``.

Operations:
    - Funnel every field through its coercion rule (FieldNormalizer)
    - Check completeness of the result (PostProcessor)
    - Log a summary

Normalization is a pure function: malformed fields become None, the
record as a whole is never rejected, and nothing here raises.

Author: ML Engineering Team
"""

from collections.abc import Mapping
from typing import Any, Tuple

from invoice_manager.utils.logger import get_logger
from .invoice_record import InvoiceItem, InvoiceRecord
from .normalizers import (
    AmountNormalizer,
    CurrencyNormalizer,
    DateNormalizer,
    TaxIdNormalizer,
    TextNormalizer,
)
from .validators import FieldValidator, ValidationResult

# Initialize module logger
logger = get_logger(__name__)


class FieldNormalizer:
    """
    Converts a raw extraction payload into an ``InvoiceRecord``.

    The payload uses the Spanish keys the model is prompted with
    (``proveedor``, ``fecha``, ``monto``...). Non-mapping payloads produce
    a record with every field missing.

    Example:
        >>> normalizer = FieldNormalizer()
        >>> record = normalizer.normalize({"proveedor": "  ACME   Corp  ", "monto": "$1,000.00"})
        >>> record.provider, record.total_amount
        ('ACME Corp', 1000.0)
    """

    def __init__(self) -> None:
        self.text_normalizer = TextNormalizer()
        self.tax_id_normalizer = TaxIdNormalizer()
        self.amount_normalizer = AmountNormalizer()
        self.date_normalizer = DateNormalizer()
        self.currency_normalizer = CurrencyNormalizer()

    def normalize(self, raw: Any) -> InvoiceRecord:
        if isinstance(raw, InvoiceRecord):
            raw = raw.to_payload()

        if not isinstance(raw, Mapping):
            logger.debug(f"Payload is not an object ({type(raw).__name__}), all fields missing")
            raw = {}

        text = self.text_normalizer.normalize
        amount = self.amount_normalizer.to_float
        as_date = self.date_normalizer.normalize

        return InvoiceRecord(
            provider=text(raw.get('proveedor')),
            issue_date=as_date(raw.get('fecha')),
            total_amount=amount(raw.get('monto')),
            invoice_number=text(raw.get('numeroFactura')),
            category=text(raw.get('categoria')),
            currency=self.currency_normalizer.normalize(raw.get('moneda')),
            tax_amount=amount(raw.get('impuestos')),
            subtotal_amount=amount(raw.get('subtotal')),
            discount_amount=amount(raw.get('descuentos')),
            due_date=as_date(raw.get('fechaVencimiento')),
            payment_method=text(raw.get('metodoPago')),
            provider_address=text(raw.get('direccionProveedor')),
            provider_tax_id=self.tax_id_normalizer.normalize(raw.get('rfcProveedor')),
            items=self._normalize_items(raw.get('items')),
        )

    def _normalize_items(self, raw_items: Any) -> Tuple[InvoiceItem, ...]:
        if not isinstance(raw_items, list):
            return ()
        return tuple(self.normalize_item(raw_item) for raw_item in raw_items)

    def normalize_item(self, raw_item: Any) -> InvoiceItem:
        """Normalize one line item; non-mapping items become an empty item."""
        if not isinstance(raw_item, Mapping):
            raw_item = {}

        amount = self.amount_normalizer.to_float
        return InvoiceItem(
            description=self.text_normalizer.normalize(raw_item.get('descripcion')) or '',
            quantity=amount(raw_item.get('cantidad')),
            unit_price=amount(raw_item.get('precioUnitario')),
            subtotal=amount(raw_item.get('subtotal')),
        )


_default_normalizer = FieldNormalizer()


def normalize_invoice(raw: Any) -> InvoiceRecord:
    """
    Normalize a raw extraction payload with the shared normalizer.

    Args:
        raw: Any value, typically the parsed JSON object from the model.

    Returns:
        Fully-shaped InvoiceRecord.
    """
    return _default_normalizer.normalize(raw)


class PostProcessor:
    """
    Normalization plus completeness validation.

    Example:
        >>> processor = PostProcessor()
        >>> record, validation = processor.process(payload)
        >>> if validation.warnings:
        ...     print(validation.warnings)
    """

    def __init__(self) -> None:
        self.field_normalizer = FieldNormalizer()
        self.field_validator = FieldValidator()

        logger.debug("PostProcessor initialized")

    def process(self, raw: Any) -> Tuple[InvoiceRecord, ValidationResult]:
        record = self.field_normalizer.normalize(raw)
        validation = self.field_validator.validate(record)

        self._log_processing_summary(raw, record, validation)
        return record, validation

    def _log_processing_summary(
        self,
        raw: Any,
        record: InvoiceRecord,
        validation: ValidationResult
    ) -> None:
        raw_keys = len(raw) if isinstance(raw, Mapping) else 0
        logger.info(
            f"Post-processing complete: "
            f"{len(record.extracted_fields)}/{len(record.fields)} fields "
            f"from {raw_keys} raw keys, "
            f"{len(record.items)} items, "
            f"{len(validation.warnings)} warnings"
        )

        for warning in validation.warnings:
            logger.warning(warning)
