# core/clock.py
from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from core.config import settings


class ClockSource(Protocol):
    """Supplies the reference date used by every billing computation."""

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock, read in the billing time zone."""

    def __init__(self, tz_name: str = "UTC"):
        self.tz = ZoneInfo(tz_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Clock pinned to one date (tests, back-dated reports)."""

    def __init__(self, fixed: date):
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed


# ============================================================
# ✅ Dependency: clock injected into the HTTP layer
# ============================================================
def get_clock() -> ClockSource:
    return SystemClock(settings.BILLING_TIMEZONE)
