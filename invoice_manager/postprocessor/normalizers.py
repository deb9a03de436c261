"""
Data Normalizers Module.

This module provides the per-field coercion rules applied to values
returned by the structured-extraction model:
    - Text cleaning (whitespace collapse, tax id length)
    - Amount parsing
    - Date normalization to YYYY-MM-DD
    - Currency code lookup

Every ``normalize``/``to_float`` method accepts any value and returns either
the typed value or None. None of them raise.

Author: ML Engineering Team
"""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from dateutil import parser as date_parser

from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class TextNormalizer:
    """
    Normalizes free-text fields.

    Example:
        >>> TextNormalizer().normalize("  ACME   Corp  ")
        'ACME Corp'
        >>> TextNormalizer().normalize("   ") is None
        True
    """

    WHITESPACE_RE = re.compile(r'\s+')

    def normalize(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None

        cleaned = self.WHITESPACE_RE.sub(' ', value.strip())
        return cleaned or None


class TaxIdNormalizer(TextNormalizer):
    """
    Normalizes the provider tax id (RFC).

    Values shorter than ``MIN_LENGTH`` after text cleaning are dropped. The
    threshold is a loose heuristic, not a checksum: a Mexican RFC has 12 or
    13 characters.
    """

    MIN_LENGTH = 10

    def normalize(self, value: Any) -> Optional[str]:
        cleaned = super().normalize(value)
        if cleaned is None or len(cleaned) < self.MIN_LENGTH:
            return None
        return cleaned


class AmountNormalizer:
    """
    Normalizes monetary amounts and quantities.

    Strings keep only digits, dots and minus signs, then the longest leading
    float literal is parsed. Results must be finite and non-negative;
    negative values are rejected, never clamped.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_float("$1,234.50")
        1234.5
        >>> normalizer.to_float("-5.00") is None
        True
    """

    NON_NUMERIC_RE = re.compile(r'[^\d.\-]', re.ASCII)
    LEADING_FLOAT_RE = re.compile(r'-?(?:\d+\.?\d*|\.\d+)', re.ASCII)

    def to_float(self, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None

        if isinstance(value, (int, float, Decimal)):
            try:
                number = float(value)
            except OverflowError:
                return None
            return self._accept(number)

        if isinstance(value, str):
            return self._parse_string(value)

        return None

    def _parse_string(self, value: str) -> Optional[float]:
        stripped = self.NON_NUMERIC_RE.sub('', value)
        match = self.LEADING_FLOAT_RE.match(stripped)
        if match is None:
            logger.debug(f"Could not parse amount: {value!r}")
            return None

        return self._accept(float(match.group(0)))

    @staticmethod
    def _accept(number: float) -> Optional[float]:
        if not math.isfinite(number) or number < 0:
            return None
        # -0.0 is not a meaningful amount
        return number + 0.0


class DateNormalizer:
    """
    Normalizes dates to ISO ``YYYY-MM-DD``.

    Accepted inputs:
        - strings understood by ``dateutil`` (ISO, "March 3, 2024", ...)
        - ``date``/``datetime`` objects
        - numbers, read as epoch milliseconds (UTC)

    Only the calendar date is kept; time of day and offsets are dropped.
    Components missing from a string default to January 1st of the
    current year.

    Example:
        >>> DateNormalizer().normalize("March 3, 2024")
        '2024-03-03'
        >>> DateNormalizer().normalize("not-a-date") is None
        True
    """

    def normalize(self, value: Any) -> Optional[str]:
        if not value or isinstance(value, bool):
            return None

        if isinstance(value, datetime):
            return value.date().isoformat()

        if isinstance(value, date):
            return value.isoformat()

        if isinstance(value, (int, float)):
            return self._from_epoch_millis(value)

        if isinstance(value, str):
            return self._parse_string(value)

        return None

    def _parse_string(self, value: str) -> Optional[str]:
        text = value.strip()
        if not text:
            return None

        default = datetime(datetime.now().year, 1, 1)
        try:
            parsed = date_parser.parse(text, default=default)
        except (ValueError, OverflowError, TypeError):
            logger.debug(f"Could not parse date: {value!r}")
            return None

        return parsed.date().isoformat()

    @staticmethod
    def _from_epoch_millis(value: float) -> Optional[str]:
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
        return parsed.date().isoformat()


class CurrencyNormalizer:
    """
    Maps currency names and codes to MXN, USD or EUR.

    Only the exact aliases below are recognized. A bare "$" maps to USD even
    though it is also the peso sign.

    Example:
        >>> CurrencyNormalizer().normalize(" pesos ")
        'MXN'
        >>> CurrencyNormalizer().normalize("yen") is None
        True
    """

    CURRENCY_ALIASES = {
        'MXN': 'MXN', 'PESOS': 'MXN', 'PESO': 'MXN',
        'USD': 'USD', 'DOLARES': 'USD', 'DOLAR': 'USD', '$': 'USD',
        'EUR': 'EUR', 'EUROS': 'EUR', 'EURO': 'EUR',
    }

    def normalize(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        return self.CURRENCY_ALIASES.get(value.strip().upper())
