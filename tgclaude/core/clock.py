"""Time source and usage period keys."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Anything with a ``now()`` returning the current local datetime."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in the process's local timezone (windows reset at local midnight)."""

    def now(self) -> datetime:
        return datetime.now()


@dataclass(frozen=True)
class PeriodKeys:
    """Identifiers of the day, hour and minute a moment falls in.

    Keys include the date, so 10:00 today and 10:00 tomorrow are different hours.
    """

    day: str
    hour: str
    minute: str

    @classmethod
    def from_datetime(cls, dt: datetime) -> PeriodKeys:
        return cls(
            day=dt.strftime("%Y-%m-%d"),
            hour=dt.strftime("%Y-%m-%dT%H"),
            minute=dt.strftime("%Y-%m-%dT%H:%M"),
        )
