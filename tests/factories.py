"""Trade builders shared by the test suite."""

from __future__ import annotations

from typing import Any

from trade_compass.core.models import Trade


def make_trade(
    pnl: float | None = 0.0,
    r: float | None = None,
    *,
    close: Any = "2024-01-05T10:00:00",
    open: Any = None,
    trade_date: str = "",
    symbol: str = "EURUSD",
    tags: list[str] | None = None,
    **kwargs: Any,
) -> Trade:
    """Build a Trade with sensible defaults; extra fields go straight through."""
    return Trade(
        symbol=symbol,
        pnl_currency=pnl,
        r_multiple=r,
        open_time=open,
        close_time=close,
        trade_date=trade_date,
        tags=tags or [],
        **kwargs,
    )


def make_day_trade(day: str, pnl: float | None, r: float | None = None, **kwargs: Any) -> Trade:
    """Trade closed at noon on ``day`` ("YYYY-MM-DD")."""
    return make_trade(pnl, r, close=f"{day}T12:00:00", **kwargs)
