"""
Dashboard Statistics Module.

Aggregate figures over the processed invoices of the store: totals,
category counts, invoices due soon.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from invoice_manager.config import get_config
from invoice_manager.output_handler.stored_invoice import StoredInvoice
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


UNCATEGORIZED = "Sin categoría"


@dataclass
class DashboardStats:
    """
    Aggregate statistics for the dashboard.

    Attributes:
        total_files: Every stored file, whatever its status
        processed_files: Files with status ``processed``
        total_amount: Sum of processed totals
        total_taxes: Sum of processed taxes
        total_discounts: Sum of processed discounts
        categories: Processed invoices per category
        upcoming_invoices: Processed invoices due within the window
        average_amount: Mean processed total (0 when none)
    """
    total_files: int = 0
    processed_files: int = 0
    total_amount: float = 0.0
    total_taxes: float = 0.0
    total_discounts: float = 0.0
    categories: Dict[str, int] = field(default_factory=dict)
    upcoming_invoices: int = 0
    average_amount: float = 0.0

    def top_categories(self, n: Optional[int] = None) -> List[Tuple[str, int]]:
        """Categories by descending count; ties keep first-seen order."""
        n = n if n is not None else get_config("analytics.top_categories", 5)
        return sorted(self.categories.items(), key=lambda item: item[1], reverse=True)[:n]

    def to_dict(self) -> Dict[str, object]:
        return {
            'total_files': self.total_files,
            'processed_files': self.processed_files,
            'total_amount': self.total_amount,
            'total_taxes': self.total_taxes,
            'total_discounts': self.total_discounts,
            'categories': dict(self.categories),
            'upcoming_invoices': self.upcoming_invoices,
            'average_amount': self.average_amount,
        }


def _parse_iso(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def compute_dashboard_stats(
    invoices: Iterable[StoredInvoice],
    today: Optional[date] = None,
    upcoming_days: Optional[int] = None
) -> DashboardStats:
    """
    Compute dashboard statistics.

    Only ``processed`` invoices contribute amounts and categories; missing
    amounts count as 0. An invoice is upcoming when its due date falls in
    ``[today, today + upcoming_days]``.

    Args:
        invoices: Stored invoices.
        today: Reference date (defaults to the current date).
        upcoming_days: Window size in days (defaults to configuration, 30).

    Returns:
        DashboardStats.
    """
    invoices = list(invoices)
    today = today or date.today()
    if upcoming_days is None:
        upcoming_days = get_config("analytics.upcoming_days", 30)
    horizon = today + timedelta(days=upcoming_days)

    processed = [invoice for invoice in invoices if invoice.is_processed]
    stats = DashboardStats(total_files=len(invoices), processed_files=len(processed))

    for invoice in processed:
        record = invoice.record
        stats.total_amount += record.total_amount or 0.0
        stats.total_taxes += record.tax_amount or 0.0
        stats.total_discounts += record.discount_amount or 0.0

        category = record.category or UNCATEGORIZED
        stats.categories[category] = stats.categories.get(category, 0) + 1

        due = _parse_iso(record.due_date)
        if due is not None and today <= due <= horizon:
            stats.upcoming_invoices += 1

    if processed:
        stats.average_amount = stats.total_amount / len(processed)

    logger.debug(
        f"Dashboard stats: {stats.processed_files}/{stats.total_files} processed, "
        f"total {stats.total_amount:.2f}"
    )
    return stats
