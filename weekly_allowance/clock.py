"""
Wall clock for the ledger and the allowance scheduler.

Transactions are timestamped with now(); the scheduler asks today()
which weekday it is. Both honour the configured timezone so that a
Sunday allowance is paid on the family's Sunday, not UTC's.
Services take a clock argument so tests can pin the date.
"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from weekly_allowance.config import get_settings


class SystemClock:
    """Reads the real time in a fixed timezone."""

    def __init__(self, timezone: Optional[str] = None):
        self._zone = ZoneInfo(timezone or get_settings().allowance.timezone)

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    def now(self) -> datetime:
        return datetime.now(self._zone)

    def today(self) -> date:
        return self.now().date()
