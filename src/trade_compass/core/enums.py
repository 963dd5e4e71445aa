"""Enumerations used across the analytics engine."""

from enum import Enum


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeOutcome(str, Enum):
    """Win / loss / break-even classification."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"

    @classmethod
    def _missing_(cls, value: object) -> "TradeOutcome | None":
        # Stored documents use the short form "be"
        if isinstance(value, str) and value.lower() in ("be", "break_even", "break-even"):
            return cls.BREAKEVEN
        return None


class DateField(str, Enum):
    """Which trade timestamp a resolver should try first."""

    OPEN = "open"
    CLOSE = "close"


class TradingSession(str, Enum):
    ASIA = "Asia"
    LONDON = "London"
    NEW_YORK = "NewYork"
    OTHER = "Other"

    @property
    def hours(self) -> tuple[int, int] | None:
        """Local hour window (inclusive start, exclusive end)."""
        mapping = {"Asia": (0, 7), "London": (7, 14), "NewYork": (14, 22)}
        return mapping.get(self.value)


class DurationBucket(str, Enum):
    """Holding-time buckets, declared in display order."""

    UNDER_5M = "0-5m"
    M5_TO_30M = "5-30m"
    M30_TO_2H = "30m-120m"
    H2_TO_6H = "2-6h"
    H6_TO_24H = "6-24h"
    OVER_24H = "24h+"

    @property
    def min_minutes(self) -> int:
        return _DURATION_EDGES[self.value][0]

    @property
    def max_minutes(self) -> int | None:
        return _DURATION_EDGES[self.value][1]


_DURATION_EDGES: dict[str, tuple[int, int | None]] = {
    "0-5m": (0, 5),
    "5-30m": (5, 30),
    "30m-120m": (30, 120),
    "2-6h": (120, 360),
    "6-24h": (360, 1440),
    "24h+": (1440, None),
}


class ScoreProfile(str, Enum):
    """Which Compass Score strategy to apply.

    DASHBOARD scores six raw trade metrics with a flat weighted sum.
    PERIOD_SUMMARY scores daily aggregates through four composite tiers
    and adds strengths / weaknesses narrative.
    """

    DASHBOARD = "dashboard"
    PERIOD_SUMMARY = "period_summary"


class CompassLevel(str, Enum):
    WEAK = "Weak"
    DEVELOPING = "Developing"
    SOLID = "Solid"
    STRONG = "Strong"
    ELITE = "Elite"


class RiskGuardState(str, Enum):
    NONE = "none"
    DAILY_WARNING = "daily-warning"
    DAILY_LOCKED = "daily-locked"
    WEEKLY_WARNING = "weekly-warning"
    WEEKLY_LOCKED = "weekly-locked"


class RiskStatusLevel(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    LIMIT = "limit"
    TARGET = "target"

    @property
    def label(self) -> str:
        mapping = {
            "safe": "Safe",
            "warning": "Warning",
            "limit": "Limit hit",
            "target": "Target reached",
        }
        return mapping[self.value]


class CalendarCategory(str, Enum):
    WIN_DAY = "winDay"
    LOSS_DAY = "lossDay"
    FLAT_DAY = "flatDay"
    NO_TRADE = "noTrade"
