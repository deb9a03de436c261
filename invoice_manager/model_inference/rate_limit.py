"""
Quota cooldown tracking.

After the model service reports its quota is exhausted, no further calls
should be attempted until the retry delay elapses. ``QuotaCooldown`` keeps
that deadline and answers how long is left.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from invoice_manager.utils.exceptions import QuotaExceededError
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuotaCooldown:
    """
    Deadline before which model calls are blocked.

    Example:
        >>> cooldown = QuotaCooldown()
        >>> cooldown.start(30)
        >>> cooldown.is_active()
        True
        >>> cooldown.seconds_left()
        30
    """

    def __init__(self) -> None:
        self.retry_until: Optional[datetime] = None

    def start(self, retry_after: float, now: Optional[datetime] = None) -> None:
        """Block calls for ``retry_after`` seconds from ``now``."""
        now = now or _utcnow()
        self.retry_until = now + timedelta(seconds=max(0.0, retry_after))
        logger.warning(
            f"Model quota exhausted, cooling down until {self.retry_until.isoformat()}"
        )

    def record(self, error: QuotaExceededError, now: Optional[datetime] = None) -> None:
        self.start(error.retry_after, now)

    def seconds_left(self, now: Optional[datetime] = None) -> int:
        """Whole seconds remaining, rounded up; 0 once elapsed."""
        if self.retry_until is None:
            return 0

        now = now or _utcnow()
        remaining = math.ceil((self.retry_until - now).total_seconds())
        if remaining <= 0:
            self.clear()
            return 0
        return remaining

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.seconds_left(now) > 0

    def check(self, now: Optional[datetime] = None) -> None:
        """
        Raise if the cooldown is still running.

        Raises:
            QuotaExceededError: With the remaining seconds as ``retry_after``.
        """
        remaining = self.seconds_left(now)
        if remaining > 0:
            raise QuotaExceededError(remaining, "cooldown still active")

    def clear(self) -> None:
        if self.retry_until is not None:
            logger.info("Model quota cooldown finished")
        self.retry_until = None
