"""
Clock capability for the scheduling core.

Scheduling works in the gym's wall-clock time: every value handed to the
slot resolver and the booking validator is a naive datetime expressed in
GYM_TIMEZONE. Routers obtain the clock through the get_clock dependency so
tests can pin "now" with FixedClock.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .config import GYM_TIMEZONE


class SystemClock:
    """Reads the real time and converts it to gym-local wall time"""

    def __init__(self, tz_name: str = GYM_TIMEZONE):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self.tz).replace(tzinfo=None)


class FixedClock:
    """Always returns the same instant"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


_system_clock = SystemClock()


def get_clock() -> SystemClock:
    """Dependency injection for the clock"""
    return _system_clock
