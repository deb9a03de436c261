"""
Advanced Search Module.

Filters for stored invoices. ``"all"`` disables the status, category and
provider filters; empty values disable the rest.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from invoice_manager.output_handler.stored_invoice import StoredInvoice

ALL = "all"


@dataclass
class SearchFilters:
    """
    Search criteria for stored invoices.

    Attributes:
        search_term: Case-insensitive substring of provider, invoice number
            or file name
        status: Exact status, or "all"
        category: Exact category, or "all"
        provider: Exact provider, or "all"
        date_from: Earliest issue date (YYYY-MM-DD, inclusive)
        date_to: Latest issue date (YYYY-MM-DD, inclusive)
        amount_min: Minimum total amount (inclusive)
        amount_max: Maximum total amount (inclusive)

    Example:
        >>> filters = SearchFilters(search_term="acme", status="processed")
        >>> matches = filters.apply(store.list_all())
    """
    search_term: str = ""
    status: str = ALL
    category: str = ALL
    provider: str = ALL
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    amount_min: Optional[float] = None
    amount_max: Optional[float] = None

    @property
    def has_active_filters(self) -> bool:
        return any([
            self.search_term,
            self.status != ALL,
            self.category != ALL,
            self.provider != ALL,
            self.date_from,
            self.date_to,
            self.amount_min is not None,
            self.amount_max is not None,
        ])

    def matches(self, invoice: StoredInvoice) -> bool:
        record = invoice.record

        if self.search_term:
            term = self.search_term.lower()
            haystacks = [record.provider, record.invoice_number, invoice.file_name]
            if not any(term in value.lower() for value in haystacks if value):
                return False

        if self.status != ALL and invoice.status != self.status:
            return False
        if self.category != ALL and record.category != self.category:
            return False
        if self.provider != ALL and record.provider != self.provider:
            return False

        # ISO dates compare correctly as strings
        if self.date_from and (not record.issue_date or record.issue_date < self.date_from):
            return False
        if self.date_to and (not record.issue_date or record.issue_date > self.date_to):
            return False

        if self.amount_min is not None and (record.total_amount is None or record.total_amount < self.amount_min):
            return False
        if self.amount_max is not None and (record.total_amount is None or record.total_amount > self.amount_max):
            return False

        return True

    def apply(self, invoices: Iterable[StoredInvoice]) -> List[StoredInvoice]:
        return [invoice for invoice in invoices if self.matches(invoice)]


def filter_invoices(invoices: Iterable[StoredInvoice], filters: SearchFilters) -> List[StoredInvoice]:
    """Invoices matching ``filters``, in their original order."""
    return filters.apply(invoices)


def unique_categories(invoices: Iterable[StoredInvoice]) -> List[str]:
    """Distinct non-empty categories, sorted, for filter choices."""
    return sorted({invoice.record.category for invoice in invoices if invoice.record.category})


def unique_providers(invoices: Iterable[StoredInvoice]) -> List[str]:
    return sorted({invoice.record.provider for invoice in invoices if invoice.record.provider})
