"""Per-tag performance across multi-valued tag sets.

A trade tagged ``["breakout", "news"]`` contributes its full, unsplit
P&L to both buckets.  Untagged trades are left out entirely.  A tag
repeated on the same trade counts once for that trade.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from trade_compass.core.models import Trade

from .buckets import BucketAccumulator, BucketStat

logger = logging.getLogger(__name__)


def aggregate_tag_stats(trades: Sequence[Trade]) -> list[BucketStat]:
    """Aggregate trades by tag, best net P&L first (ties: more trades first)."""
    by_tag: dict[str, BucketAccumulator] = defaultdict(BucketAccumulator)

    for trade in trades:
        if not trade.tags:
            continue
        for tag in dict.fromkeys(trade.tags):
            by_tag[tag].record(trade)

    stats = [acc.finalize(tag, tag) for tag, acc in by_tag.items()]
    stats.sort(key=lambda s: (-s.net_pnl, -s.trades_count))
    logger.debug("Tag stats: %d tag(s) over %d trade(s)", len(stats), len(trades))
    return stats
