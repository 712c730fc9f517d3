"""
clock abstraction

the composer needs "today" (no booking in the past) and the timeline needs
"now" (the current time marker). both go through a Clock so tests and demos
can pin time instead of depending on when they run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in the practice time zone."""

    def __init__(self, tz: str):
        self.tz = ZoneInfo(tz)

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """Always returns the same instant. Handy for tests and the demo dataset."""

    def __init__(self, at: datetime):
        self.at = at

    def now(self) -> datetime:
        return self.at
