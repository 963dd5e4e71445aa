"""Tests for the Trade model's lenient input handling."""

import math

import pytest
from pydantic import ValidationError

from trade_compass.core.enums import Side, TradeOutcome
from trade_compass.core.models import Trade


class TestTradeParsing:
    def test_camel_case_aliases(self):
        trade = Trade.model_validate({
            "accountId": "acc-1",
            "pnlCurrency": 12.5,
            "rMultiple": 1.2,
            "tradeDate": "2024-01-05",
            "playbookId": "pb",
        })
        assert trade.account_id == "acc-1"
        assert trade.pnl_currency == 12.5
        assert trade.r_multiple == 1.2
        assert trade.trade_date == "2024-01-05"
        assert trade.playbook_id == "pb"

    def test_snake_case_names(self):
        trade = Trade(account_id="acc-1", pnl_currency=3)
        assert trade.pnl_currency == 3.0

    @pytest.mark.parametrize("raw", ["abc", float("nan"), float("inf"), True, [1]])
    def test_unusable_numbers_become_none(self, raw):
        assert Trade(pnl_currency=raw).pnl_currency is None

    def test_numeric_strings(self):
        assert Trade(pnl_currency=" -4.5 ").pnl_currency == -4.5

    @pytest.mark.parametrize(
        "raw, side",
        [("long", Side.BUY), ("BUY", Side.BUY), ("short", Side.SELL),
         ("sell", Side.SELL), ("sideways", Side.BUY), (None, Side.BUY)],
    )
    def test_side(self, raw, side):
        assert Trade(side=raw).side == side

    @pytest.mark.parametrize(
        "raw, status",
        [("win", TradeOutcome.WIN), ("LOSS", TradeOutcome.LOSS),
         ("be", TradeOutcome.BREAKEVEN), ("breakeven", TradeOutcome.BREAKEVEN),
         ("open", None), (None, None)],
    )
    def test_status(self, raw, status):
        assert Trade(status=raw).status == status

    def test_tags(self):
        assert Trade(tags=None).tags == []
        assert Trade(tags="news").tags == ["news"]
        assert Trade(tags=["a", "", None, "b"]).tags == ["a", "b"]
        assert Trade(tags=42).tags == []

    def test_none_strings_become_empty(self):
        trade = Trade(symbol=None, trade_date=None)
        assert trade.symbol == ""
        assert trade.trade_date == ""

    def test_unknown_fields_ignored(self):
        trade = Trade.model_validate({"symbol": "X", "screenshotUrl": "http://..."})
        assert trade.symbol == "X"

    def test_frozen(self):
        trade = Trade(symbol="X")
        with pytest.raises(ValidationError):
            trade.symbol = "Y"


class TestTradeOutcome:
    @pytest.mark.parametrize(
        "pnl, outcome",
        [(10.0, TradeOutcome.WIN), (-0.01, TradeOutcome.LOSS),
         (0.0, TradeOutcome.BREAKEVEN), (None, None)],
    )
    def test_outcome_from_sign(self, pnl, outcome):
        assert Trade(pnl_currency=pnl).outcome == outcome

    def test_outcome_ignores_stored_status(self):
        trade = Trade(pnl_currency=-5.0, status="win")
        assert trade.outcome == TradeOutcome.LOSS

    def test_pnl_defaults_to_zero(self):
        trade = Trade()
        assert not trade.has_pnl
        assert trade.pnl == 0.0
        assert not math.isnan(trade.pnl)
