"""
Expense Evolution Module.

Monthly aggregation of processed invoices by issue date, with
month-over-month growth.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from invoice_manager.output_handler.stored_invoice import StoredInvoice
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


TIME_RANGES = ('6m', 'year', 'all')

SPANISH_MONTHS = ['ene', 'feb', 'mar', 'abr', 'may', 'jun',
                  'jul', 'ago', 'sep', 'oct', 'nov', 'dic']

DEFAULT_CATEGORY = "Otros"
NO_CATEGORY = "N/A"


@dataclass
class MonthlyData:
    """
    Expense totals for one calendar month.

    Attributes:
        month_key: ``YYYY-MM``
        name: Short Spanish label, e.g. "mar 2024"
        count: Number of invoices
        total: Sum of totals
        taxes: Sum of taxes
        discounts: Sum of discounts
        top_category: Category with the highest amount
        prev_total: Total of the previous month present in the data (0 if first)
    """
    month_key: str
    name: str
    count: int
    total: float
    taxes: float
    discounts: float
    top_category: str
    prev_total: float = 0.0

    @property
    def growth(self) -> float:
        """Percentage change against ``prev_total``; 0 when there is no previous total."""
        if self.prev_total <= 0:
            return 0.0
        return (self.total - self.prev_total) / self.prev_total * 100


def _month_label(year: int, month: int) -> str:
    return f"{SPANISH_MONTHS[month - 1]} {year}"


def compute_monthly_evolution(
    invoices: Iterable[StoredInvoice],
    time_range: str = '6m',
    today: Optional[date] = None
) -> List[MonthlyData]:
    """
    Group processed invoices with an issue date by month.

    Args:
        invoices: Stored invoices.
        time_range: ``6m`` (last six months with data), ``year`` (current
            calendar year) or ``all``.
        today: Reference date for ``year`` (defaults to the current date).

    Returns:
        Months in ascending order.

    Raises:
        ValueError: If ``time_range`` is unknown.
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range '{time_range}', expected one of {TIME_RANGES}")

    today = today or date.today()
    groups: Dict[str, dict] = {}

    for invoice in invoices:
        record = invoice.record
        if not invoice.is_processed or not record.issue_date:
            continue

        try:
            issued = date.fromisoformat(record.issue_date)
        except ValueError:
            continue

        key = f"{issued.year:04d}-{issued.month:02d}"
        group = groups.setdefault(key, {
            'name': _month_label(issued.year, issued.month),
            'count': 0, 'total': 0.0, 'taxes': 0.0, 'discounts': 0.0,
            'categories': {},
        })

        amount = record.total_amount or 0.0
        group['count'] += 1
        group['total'] += amount
        group['taxes'] += record.tax_amount or 0.0
        group['discounts'] += record.discount_amount or 0.0

        category = record.category or DEFAULT_CATEGORY
        group['categories'][category] = group['categories'].get(category, 0.0) + amount

    months: List[MonthlyData] = []
    prev_total = 0.0
    for key in sorted(groups):
        group = groups[key]
        categories = group['categories']
        top_category = max(categories, key=categories.get) if categories else NO_CATEGORY

        months.append(MonthlyData(
            month_key=key,
            name=group['name'],
            count=group['count'],
            total=group['total'],
            taxes=group['taxes'],
            discounts=group['discounts'],
            top_category=top_category,
            prev_total=prev_total,
        ))
        prev_total = group['total']

    if time_range == '6m':
        months = months[-6:]
    elif time_range == 'year':
        months = [month for month in months if month.month_key.startswith(str(today.year))]

    logger.debug(f"Expense evolution ({time_range}): {len(months)} months")
    return months
