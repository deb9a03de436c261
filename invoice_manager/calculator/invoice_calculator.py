"""
Invoice Calculator Module.

Composes an invoice by hand from line items and a tax rate, and turns it
into a normalized ``InvoiceRecord`` ready to store.
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from invoice_manager.config import get_config
from invoice_manager.postprocessor import InvoiceRecord, normalize_invoice
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.exceptions import ValidationError

# Initialize module logger
logger = get_logger(__name__)


MANUAL_CATEGORY = "Manual"
MANUAL_PAYMENT_METHOD = "Por definir"


@dataclass
class CalculatorItem:
    id: int
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class CalculatorTotals:
    subtotal: float
    taxes: float
    total: float


class InvoiceCalculator:
    """
    Manual invoice composition.

    The calculator always holds at least one item.

    Example:
        >>> calc = InvoiceCalculator(tax_rate=0.16)
        >>> first = calc.items[0].id
        >>> calc.update_item(first, description="Consultoría", quantity=2, unit_price=500)
        >>> calc.totals()
        CalculatorTotals(subtotal=1000.0, taxes=160.0, total=1160.0)
    """

    UPDATABLE_FIELDS = ('description', 'quantity', 'unit_price')

    def __init__(
        self,
        tax_rate: Optional[float] = None,
        currency: Optional[str] = None
    ) -> None:
        self.tax_rate = tax_rate if tax_rate is not None else get_config("calculator.tax_rate", 0.16)
        self.currency = currency or get_config("calculator.currency", "MXN")
        self._next_id = 1
        self.items: List[CalculatorItem] = []
        self.add_item()

    def add_item(
        self,
        description: str = "",
        quantity: float = 1.0,
        unit_price: float = 0.0
    ) -> int:
        """Append an item and return its id."""
        item = CalculatorItem(self._next_id, description, quantity, unit_price)
        self._next_id += 1
        self.items.append(item)
        return item.id

    def remove_item(self, item_id: int) -> bool:
        """
        Remove an item.

        Returns:
            False when the item is the last one (it is kept) or unknown.
        """
        if len(self.items) == 1:
            return False

        remaining = [item for item in self.items if item.id != item_id]
        removed = len(remaining) != len(self.items)
        self.items = remaining
        return removed

    def update_item(self, item_id: int, **changes) -> None:
        """
        Change fields of an item.

        Raises:
            ValidationError: For an unknown item or field name.
        """
        unknown = set(changes) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError("item", sorted(unknown), "unknown item field")

        for item in self.items:
            if item.id == item_id:
                for name, value in changes.items():
                    setattr(item, name, value)
                return

        raise ValidationError("item", item_id, "unknown item id")

    def totals(self) -> CalculatorTotals:
        subtotal = sum(item.subtotal for item in self.items)
        taxes = subtotal * self.tax_rate
        return CalculatorTotals(subtotal=subtotal, taxes=taxes, total=subtotal + taxes)

    def to_record(self, provider: str, today: Optional[date] = None) -> InvoiceRecord:
        """
        Build the normalized record for the current items.

        Args:
            provider: Provider name (required).
            today: Issue date (defaults to the current date).

        Raises:
            ValidationError: If ``provider`` is blank.
        """
        if not provider or not provider.strip():
            raise ValidationError("provider", provider, "El nombre del proveedor es requerido")

        today = today or date.today()
        totals = self.totals()

        return normalize_invoice({
            'proveedor': provider,
            'fecha': today.isoformat(),
            'monto': totals.total,
            'moneda': self.currency,
            'impuestos': totals.taxes,
            'subtotal': totals.subtotal,
            'categoria': MANUAL_CATEGORY,
            'metodoPago': MANUAL_PAYMENT_METHOD,
            'items': [
                {
                    'descripcion': item.description,
                    'cantidad': item.quantity,
                    'precioUnitario': item.unit_price,
                    'subtotal': item.subtotal,
                }
                for item in self.items
            ],
        })

    @staticmethod
    def manual_file_path() -> str:
        """Placeholder path for a manually composed invoice."""
        return f"manual/{int(time.time() * 1000)}_calculator.pdf"

    def save(self, store, provider: str, today: Optional[date] = None) -> int:
        """
        Store the current invoice as processed and reset the items.

        Returns:
            The new invoice id.
        """
        record = self.to_record(provider, today)
        invoice_id = store.insert_record(record, self.manual_file_path())
        logger.info(f"Saved manual invoice {invoice_id} ({record.total_amount} {self.currency})")

        self.items = []
        self.add_item()
        return invoice_id
