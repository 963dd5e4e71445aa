"""Clock abstraction for "today"-relative analytics.

WallClock: real local time (dashboards)
SimClock: fixed or manually advanced time (tests, historical replay)

Risk progress and the dashboard aggregate never call datetime.now()
directly; they take a ``today`` date or an IClock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current local time."""
        ...

    def today(self) -> date:
        """Current local calendar date."""
        ...


class WallClock:
    """Real wall-clock time, optionally in a configured timezone."""

    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now().date()


class SimClock:
    """Simulated clock.

    Time advances only when explicitly set.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1)

    def now(self) -> datetime:
        return self._time

    def today(self) -> date:
        return self._time.date()

    def set_time(self, t: datetime) -> None:
        """Move the clock. Must be monotonically increasing."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance_days(self, days: int) -> None:
        self.set_time(self._time + timedelta(days=days))
