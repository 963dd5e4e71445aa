"""Per-playbook performance.

Unlike every other aggregator this one trusts the *stored* ``status``
of each trade rather than the P&L sign: a playbook review reflects how
the trader classified the trade when journaling it.  Anything that is
not a stored win or loss (including a missing status) counts as
break-even.  This differs from the stored-document default, where a
playbook trade saved without a status reads back as a loss; an
unclassified trade is not treated as a loss here.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Sequence

from trade_compass.core.enums import TradeOutcome
from trade_compass.core.models import Trade

logger = logging.getLogger(__name__)


@dataclass
class PlaybookStat:
    playbook_id: str
    trades_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    breakeven_count: int = 0
    win_rate: float = 0.0  # 0-100, over all trades
    net_pnl: float = 0.0
    avg_r: float | None = None
    profit_factor: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def summarize_playbook(trades: Sequence[Trade], playbook_id: str = "") -> PlaybookStat:
    """Stats for one playbook's trades."""
    stat = PlaybookStat(playbook_id=playbook_id)
    if not trades:
        return stat

    gross_profit = 0.0
    gross_loss = 0.0
    r_values: list[float] = []

    for trade in trades:
        pnl = trade.pnl
        stat.net_pnl += pnl

        if trade.status == TradeOutcome.WIN:
            stat.win_count += 1
            if pnl > 0:
                gross_profit += pnl
        elif trade.status == TradeOutcome.LOSS:
            stat.loss_count += 1
            if pnl < 0:
                gross_loss += abs(pnl)
        else:
            stat.breakeven_count += 1

        if trade.r_multiple is not None:
            r_values.append(trade.r_multiple)

    stat.trades_count = len(trades)
    stat.win_rate = (stat.win_count / stat.trades_count) * 100
    stat.avg_r = sum(r_values) / len(r_values) if r_values else None
    stat.profit_factor = gross_profit / gross_loss if gross_loss > 0 else None
    return stat


def aggregate_playbook_stats(trades: Sequence[Trade]) -> dict[str, PlaybookStat]:
    """Group trades by ``playbook_id`` and summarise each group.

    Trades without a playbook are skipped.
    """
    grouped: dict[str, list[Trade]] = defaultdict(list)
    unassigned = 0
    for trade in trades:
        if trade.playbook_id:
            grouped[trade.playbook_id].append(trade)
        else:
            unassigned += 1

    if unassigned:
        logger.debug("Playbook stats: %d trade(s) without a playbook skipped", unassigned)
    return {pid: summarize_playbook(group, pid) for pid, group in grouped.items()}
