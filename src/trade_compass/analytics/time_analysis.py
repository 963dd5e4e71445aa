"""Weekday, session and holding-duration performance analysis.

Breaks trading performance down by when a trade was opened and how long
it was held, to answer questions like "Am I better in the London
session?" or "Do my scalps under five minutes lose money?"

Only trades with both an effective open and an effective close time take
part.  Weekday and session come from the effective open time (local
wall time); duration is effective close minus effective open.

Usage::

    result = aggregate_time_analytics(trades)
    for stat in result.session_stats:
        print(stat.label, stat.win_rate, stat.net_pnl)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Sequence

from trade_compass.core.enums import DurationBucket, TradingSession
from trade_compass.core.models import Trade

from .buckets import BucketAccumulator, BucketStat
from .dates import effective_close_time, effective_open_time

logger = logging.getLogger(__name__)

# Index 0 = Sunday
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_SESSION_ORDER = list(TradingSession)
_DURATION_ORDER = list(DurationBucket)


@dataclass
class TimeAnalytics:
    """Per-bucket statistics; only buckets with at least one trade appear."""

    weekday_stats: list[BucketStat] = field(default_factory=list)
    session_stats: list[BucketStat] = field(default_factory=list)
    duration_stats: list[BucketStat] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekday_stats": [s.to_dict() for s in self.weekday_stats],
            "session_stats": [s.to_dict() for s in self.session_stats],
            "duration_stats": [s.to_dict() for s in self.duration_stats],
        }


# ------------------------------------------------------------------ #
# Classification                                                       #
# ------------------------------------------------------------------ #

def weekday_index(dt: datetime) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday."""
    return (dt.weekday() + 1) % 7


def classify_session(dt: datetime) -> TradingSession:
    """Map the local hour of *dt* onto a trading session."""
    hour = dt.hour
    for session in _SESSION_ORDER:
        hours = session.hours
        if hours is None:
            continue
        start_h, end_h = hours
        if start_h <= hour < end_h:
            return session
    return TradingSession.OTHER


def classify_duration_bucket(minutes: float) -> DurationBucket:
    """Bucket a holding time.  Edges are half-open: [min, max).

    Negative durations (close before open) land in the first bucket.
    """
    for bucket in _DURATION_ORDER:
        upper = bucket.max_minutes
        if upper is None or minutes < upper:
            return bucket
    return DurationBucket.OVER_24H


# ------------------------------------------------------------------ #
# Aggregation                                                          #
# ------------------------------------------------------------------ #

def aggregate_time_analytics(
    trades: Sequence[Trade],
    tz: tzinfo | None = None,
) -> TimeAnalytics:
    """Bucket trades by weekday, session and holding duration.

    Parameters
    ----------
    trades : Sequence[Trade]
        Trades already scoped to the desired account and period.
    tz : tzinfo, optional
        Zone used to read hours and weekdays from timezone-aware
        timestamps.  Defaults to the system local zone.
    """
    by_weekday: dict[int, BucketAccumulator] = defaultdict(BucketAccumulator)
    by_session: dict[TradingSession, BucketAccumulator] = defaultdict(BucketAccumulator)
    by_duration: dict[DurationBucket, BucketAccumulator] = defaultdict(BucketAccumulator)

    skipped = 0
    for trade in trades:
        opened = effective_open_time(trade, tz)
        closed = effective_close_time(trade, tz)
        if opened is None or closed is None:
            skipped += 1
            continue

        minutes = (closed - opened).total_seconds() / 60

        by_weekday[weekday_index(opened)].record(trade)
        by_session[classify_session(opened)].record(trade)
        by_duration[classify_duration_bucket(minutes)].record(trade)

    if skipped:
        logger.debug("Time analytics skipped %d trade(s) without usable times", skipped)

    weekday_stats = [
        by_weekday[day].finalize(day, WEEKDAY_LABELS[day])
        for day in sorted(by_weekday)
    ]
    session_stats = [
        by_session[session].finalize(session.value, session.value)
        for session in _SESSION_ORDER
        if session in by_session
    ]
    duration_stats = [
        by_duration[bucket].finalize(
            bucket.value,
            bucket.value,
            min_minutes=bucket.min_minutes,
            max_minutes=bucket.max_minutes,
        )
        for bucket in _DURATION_ORDER
        if bucket in by_duration
    ]

    return TimeAnalytics(
        weekday_stats=weekday_stats,
        session_stats=session_stats,
        duration_stats=duration_stats,
    )
