"""
Data Validators Module.

This module provides post-hoc checks on normalized invoice records:
    - Completeness of the basic fields (provider, issue date, total)
    - Date relationships (due date on or after issue date)

Validators never modify the record; they report through
``ValidationResult``.

Author: ML Engineering Team
"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from invoice_manager.config import get_config
from invoice_manager.utils.logger import get_logger
from .invoice_record import InvoiceRecord

# Initialize module logger
logger = get_logger(__name__)


class DateValidator:
    """
    Validates relationships between ISO date fields.

    Example:
        >>> DateValidator().is_due_after_issue("2024-03-01", "2024-02-01")
        (False, 'Due date is before issue date')
    """

    def is_due_after_issue(
        self,
        issue_date: str,
        due_date: str
    ) -> Tuple[bool, str]:
        """
        Check if the due date is on or after the issue date.

        Args:
            issue_date: Issue date (YYYY-MM-DD).
            due_date: Due date (YYYY-MM-DD).

        Returns:
            Tuple of (is_valid, message).
        """
        try:
            issued = date.fromisoformat(issue_date)
            due = date.fromisoformat(due_date)
        except (TypeError, ValueError):
            return True, "Could not validate date relationship"

        if due < issued:
            return False, "Due date is before issue date"

        return True, "Valid date relationship"


class FieldValidator:
    """
    Completeness checks for normalized invoices.

    A record is "basic-complete" when at least one of the configured basic
    fields was extracted. Records with none of them are kept but flagged:
    the invoice may be very simple or the image unclear.

    Example:
        >>> validator = FieldValidator()
        >>> result = validator.validate(record)
        >>> result.warnings
        []
    """

    DEFAULT_BASIC_FIELDS = ["provider", "issue_date", "total_amount"]

    def __init__(self, basic_fields: Optional[List[str]] = None) -> None:
        self.basic_fields = basic_fields or get_config(
            "postprocessing.validation.basic_fields",
            self.DEFAULT_BASIC_FIELDS
        )
        self.date_validator = DateValidator()

        logger.debug(f"FieldValidator initialized (basic: {self.basic_fields})")

    def check_basic_fields(self, record: InvoiceRecord) -> Tuple[int, List[str]]:
        """
        Count the basic fields present in a record.

        Returns:
            Tuple of (number found, list of missing basic fields).
        """
        not_extracted = set(record.missing_fields)
        missing = [name for name in self.basic_fields if name in not_extracted]
        return len(self.basic_fields) - len(missing), missing

    def validate(self, record: InvoiceRecord) -> 'ValidationResult':
        validation = ValidationResult()

        found, missing = self.check_basic_fields(record)
        for name in missing:
            validation.add_field_result(name, False, "not extracted")

        if found == 0:
            validation.add_warning(
                "No basic fields found ("
                + ", ".join(self.basic_fields)
                + "). The invoice may be very simple or the image unclear."
            )

        if record.issue_date and record.due_date:
            is_valid, message = self.date_validator.is_due_after_issue(
                record.issue_date,
                record.due_date
            )
            if not is_valid:
                validation.add_warning(message)

        return validation


class ValidationResult:
    """
    Contains the result of validation checks.

    Validation never rejects a record; it only reports.

    Attributes:
        warnings: List of warning messages
        field_results: Per-field (ok, message) results for missing basic fields
    """

    def __init__(self):
        self.warnings: List[str] = []
        self.field_results: Dict[str, Tuple[bool, str]] = {}

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_field_result(self, field: str, is_valid: bool, message: str) -> None:
        self.field_results[field] = (is_valid, message)
