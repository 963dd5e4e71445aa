"""Shared per-bucket accumulator for weekday/session/duration/tag stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trade_compass.core.enums import TradeOutcome
from trade_compass.core.models import Trade


@dataclass
class BucketStat:
    """Finalised statistics for one bucket."""

    key: Any
    label: str
    trades_count: int
    wins_count: int
    losses_count: int
    breakeven_count: int
    net_pnl: float
    win_rate: float  # 0-1, wins / (wins + losses)
    avg_r: float | None
    profit_factor: float | None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "trades_count": self.trades_count,
            "wins_count": self.wins_count,
            "losses_count": self.losses_count,
            "breakeven_count": self.breakeven_count,
            "net_pnl": self.net_pnl,
            "win_rate": self.win_rate,
            "avg_r": self.avg_r,
            "profit_factor": self.profit_factor,
            **self.extra,
        }


@dataclass
class BucketAccumulator:
    """Running totals for a bucket."""

    trades: int = 0
    wins: int = 0
    losses: int = 0
    breakevens: int = 0
    net_pnl: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0  # absolute value
    sum_r: float = 0.0
    count_r: int = 0

    def record(self, trade: Trade) -> None:
        pnl = trade.pnl
        self.trades += 1
        self.net_pnl += pnl

        outcome = trade.outcome
        if outcome == TradeOutcome.WIN:
            self.wins += 1
            self.gross_profit += pnl
        elif outcome == TradeOutcome.LOSS:
            self.losses += 1
            self.gross_loss += abs(pnl)
        elif outcome == TradeOutcome.BREAKEVEN:
            self.breakevens += 1

        if trade.r_multiple is not None:
            self.sum_r += trade.r_multiple
            self.count_r += 1

    @property
    def win_rate(self) -> float:
        decided = self.wins + self.losses
        return self.wins / decided if decided > 0 else 0.0

    @property
    def avg_r(self) -> float | None:
        return self.sum_r / self.count_r if self.count_r > 0 else None

    @property
    def profit_factor(self) -> float | None:
        return self.gross_profit / self.gross_loss if self.gross_loss > 0 else None

    def finalize(self, key: Any, label: str, **extra: Any) -> BucketStat:
        return BucketStat(
            key=key,
            label=label,
            trades_count=self.trades,
            wins_count=self.wins,
            losses_count=self.losses,
            breakeven_count=self.breakevens,
            net_pnl=self.net_pnl,
            win_rate=self.win_rate,
            avg_r=self.avg_r,
            profit_factor=self.profit_factor,
            extra=extra,
        )
