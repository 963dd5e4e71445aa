"""Core domain model consumed by every aggregator.

A Trade is an already-normalised journal record handed over by the
persistence or import layer.  The analytics core only reads it.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import Side, TradeOutcome

_NUMERIC_FIELDS = (
    "entry_price",
    "exit_price",
    "position_size",
    "pnl_points",
    "pnl_currency",
    "r_multiple",
    "rating",
    "commission",
    "swap",
)


def _to_float(value: Any) -> float | None:
    """Best-effort numeric coercion; anything unusable becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class Trade(BaseModel):
    """One closed trade as stored in the journal.

    ``open_time`` / ``close_time`` may hold a ``datetime``, a ``date``,
    an ISO-like string, a platform timestamp object or nothing at all;
    see :mod:`trade_compass.analytics.dates` for how they are resolved.
    Field names also accept their camelCase document spelling
    (``pnlCurrency``, ``rMultiple``, ...).
    """

    id: str = ""
    user_id: str = ""
    account_id: str = ""
    symbol: str = ""
    side: Side = Side.BUY

    entry_price: float | None = None
    exit_price: float | None = None
    position_size: float | None = None

    open_time: Any = None
    close_time: Any = None
    trade_date: str = ""  # "YYYY-MM-DD"

    pnl_points: float | None = None
    pnl_currency: float | None = None
    r_multiple: float | None = None
    commission: float | None = None
    swap: float | None = None

    status: TradeOutcome | None = None  # Stored classification, may be stale
    playbook_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    rating: float | None = None  # 1-5
    notes: str = ""
    source: str = ""  # e.g. "manual", "mt5_positions"

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
    }

    # ------------------------------------------------------------------ #
    # Lenient input coercion                                               #
    # ------------------------------------------------------------------ #

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return _to_float(value)

    @field_validator("side", mode="before")
    @classmethod
    def _coerce_side(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("long", "buy"):
                return Side.BUY
            if lowered in ("short", "sell"):
                return Side.SELL
        if isinstance(value, Side):
            return value
        return Side.BUY

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> TradeOutcome | None:
        if value is None or isinstance(value, TradeOutcome):
            return value
        try:
            return TradeOutcome(str(value).strip().lower())
        except ValueError:
            return None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set)):
            return []
        return [str(t) for t in value if t is not None and str(t) != ""]

    @field_validator("trade_date", "notes", "source", "symbol", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    # ------------------------------------------------------------------ #
    # Derived classification                                               #
    # ------------------------------------------------------------------ #

    @property
    def has_pnl(self) -> bool:
        return self.pnl_currency is not None

    @property
    def pnl(self) -> float:
        """Currency P&L with a missing value treated as zero."""
        return self.pnl_currency if self.pnl_currency is not None else 0.0

    @property
    def outcome(self) -> TradeOutcome | None:
        """Win / loss / break-even from the P&L sign (None without P&L)."""
        if self.pnl_currency is None:
            return None
        if self.pnl_currency > 0:
            return TradeOutcome.WIN
        if self.pnl_currency < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAKEVEN
