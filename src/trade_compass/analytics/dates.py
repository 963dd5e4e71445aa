"""Effective date/time resolution for trades.

Every aggregator needs "the" timestamp of a trade, but journal records
are inconsistent: some carry both open and close times, some only one,
older ones only a ``trade_date`` string.  A single parameterised
fallback chain resolves them:

    preferred field -> the other timestamp field -> trade_date -> None

Timestamps may arrive as ``datetime``/``date`` objects, ISO-like strings
or platform timestamp objects (Firestore/protobuf style).  All of them
normalise to a *naive local* ``datetime`` so that instants from different
sources compare and subtract cleanly.  Aware values are converted into
the requested timezone (or the system local zone) first.

Usage::

    when = resolve_date(trade, DateField.CLOSE)
    key = date_key(when) if when else None
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any

from trade_compass.core.enums import DateField
from trade_compass.core.models import Trade

logger = logging.getLogger(__name__)

# Accessors exposed by platform timestamp objects, tried in order.
# protobuf's ToDatetime() returns naive UTC.
_TIMESTAMP_ACCESSORS: tuple[tuple[str, bool], ...] = (
    ("to_datetime", False),
    ("ToDatetime", True),
    ("to_pydatetime", False),
    ("toDate", False),
)


def _to_local(dt: datetime, tz: tzinfo | None) -> datetime | None:
    if dt.tzinfo is None:
        return dt
    try:
        converted = dt.astimezone(tz) if tz is not None else dt.astimezone()
    except (OverflowError, ValueError):
        # Instants at the edge of the datetime range cannot be shifted
        logger.debug("Timestamp %r out of range for local conversion", dt)
        return None
    return converted.replace(tzinfo=None)


def _parse_string(text: str) -> datetime | None:
    text = text.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    if text.endswith(("Z", "z")):
        try:
            return datetime.fromisoformat(text[:-1] + "+00:00")
        except ValueError:
            pass
    logger.debug("Unparseable timestamp string %r", text)
    return None


def normalize_timestamp(value: Any, tz: tzinfo | None = None) -> datetime | None:
    """Normalise any supported timestamp form to a naive local datetime.

    Returns None for absent or unusable values; never raises.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_local(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        parsed = _parse_string(value)
        return _to_local(parsed, tz) if parsed is not None else None

    for accessor, naive_is_utc in _TIMESTAMP_ACCESSORS:
        method = getattr(value, accessor, None)
        if not callable(method):
            continue
        try:
            result = method()
        except (TypeError, ValueError, OverflowError):
            logger.debug("Timestamp accessor %s failed on %r", accessor, value)
            return None
        if not isinstance(result, datetime):
            return None
        if naive_is_utc and result.tzinfo is None:
            result = result.replace(tzinfo=timezone.utc)
        return _to_local(result, tz)

    return None


def resolve_date(
    trade: Trade,
    preferred: DateField = DateField.CLOSE,
    tz: tzinfo | None = None,
) -> datetime | None:
    """Best-available timestamp for *trade*, trying *preferred* first."""
    if preferred == DateField.CLOSE:
        chain = (trade.close_time, trade.open_time)
    else:
        chain = (trade.open_time, trade.close_time)

    for candidate in chain:
        resolved = normalize_timestamp(candidate, tz)
        if resolved is not None:
            return resolved

    if trade.trade_date:
        return normalize_timestamp(trade.trade_date, tz)
    return None


def effective_date(trade: Trade, tz: tzinfo | None = None) -> datetime | None:
    """Timestamp used for day bucketing (close time first)."""
    return resolve_date(trade, DateField.CLOSE, tz)


def effective_open_time(trade: Trade, tz: tzinfo | None = None) -> datetime | None:
    return resolve_date(trade, DateField.OPEN, tz)


def effective_close_time(trade: Trade, tz: tzinfo | None = None) -> datetime | None:
    return resolve_date(trade, DateField.CLOSE, tz)


def date_key(value: datetime | date) -> str:
    """Format as ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def effective_date_key(trade: Trade, tz: tzinfo | None = None) -> str | None:
    """``YYYY-MM-DD`` of the trade's effective date, or None."""
    when = effective_date(trade, tz)
    return date_key(when) if when is not None else None
