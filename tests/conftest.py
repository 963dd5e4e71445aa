"""Shared fixtures for the trade-compass test suite."""

from __future__ import annotations

import json
from datetime import date, datetime

import pytest

from trade_compass.core.clock import SimClock
from trade_compass.core.config import RiskSettings

from .factories import make_day_trade


@pytest.fixture
def sim_clock() -> SimClock:
    """Thursday 2024-03-14, midday."""
    return SimClock(datetime(2024, 3, 14, 12, 0, 0))


@pytest.fixture
def today() -> date:
    return date(2024, 3, 14)


@pytest.fixture
def risk_settings() -> RiskSettings:
    return RiskSettings(
        max_daily_loss_percent=4.0,
        max_weekly_loss_percent=10.0,
        target_daily_profit_percent=3.0,
        target_weekly_profit_percent=15.0,
    )


@pytest.fixture
def example_trades():
    """+100 (R 2.0), -50 (R -1.0) and a break-even, on three different days."""
    return [
        make_day_trade("2024-01-03", 100.0, 2.0),
        make_day_trade("2024-01-04", -50.0, -1.0),
        make_day_trade("2024-01-05", 0.0),
    ]


@pytest.fixture
def trades_file(tmp_path):
    """JSON trade file in the stored-document (camelCase) spelling."""
    records = [
        {"id": "t1", "accountId": "acc-1", "symbol": "EURUSD", "side": "buy",
         "closeTime": "2024-01-05T10:00:00", "tradeDate": "2024-01-05",
         "pnlCurrency": 30.0, "rMultiple": 1.5, "tags": ["breakout"],
         "playbookId": "pb-1", "status": "win"},
        {"id": "t2", "accountId": "acc-1", "symbol": "EURUSD", "side": "sell",
         "closeTime": "2024-01-05T15:00:00", "tradeDate": "2024-01-05",
         "pnlCurrency": -10.0, "rMultiple": -0.5, "tags": ["breakout", "news"],
         "playbookId": "pb-1", "status": "loss"},
        {"id": "t3", "accountId": "acc-1", "symbol": "GBPUSD", "side": "buy",
         "closeTime": "2024-01-06T09:00:00", "tradeDate": "2024-01-06",
         "pnlCurrency": 5.0, "status": "win"},
        {"id": "t4", "accountId": "acc-2", "symbol": "EURUSD", "side": "buy",
         "closeTime": "2024-01-06T09:00:00", "tradeDate": "2024-01-06",
         "pnlCurrency": 999.0},
    ]
    path = tmp_path / "trades.json"
    path.write_text(json.dumps(records))
    return path


@pytest.fixture
def quiet_config(tmp_path):
    path = tmp_path / "compass.toml"
    path.write_text(
        "[risk]\n"
        "max_daily_loss_percent = 4.0\n"
        "max_weekly_loss_percent = 10.0\n"
        "\n"
        "[observability]\n"
        'log_level = "ERROR"\n'
    )
    return path
