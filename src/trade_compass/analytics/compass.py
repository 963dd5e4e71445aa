"""Compass Score: a single 0-100 "trading health" number.

Two scoring profiles coexist and are kept deliberately separate because
they feed different screens and produce different numbers:

    Profile          Input           Composition
    ─────────────────────────────────────────────────────────────────
    DASHBOARD        raw trades      flat weighted sum of six metric
                                     scores (win rate, profit factor,
                                     avg win/loss, max drawdown,
                                     recovery factor, consistency)
    PERIOD_SUMMARY   daily stats     performance / consistency / risk /
                                     discipline tiers, plus a short
                                     strengths & weaknesses narrative

Both map the final score onto the same level ladder:

    < 40 Weak   < 60 Developing   < 75 Solid   < 90 Strong   else Elite

Usage::

    compass = compute_compass_score(trades, ScoreProfile.DASHBOARD)
    print(compass.score, compass.level.value)

    summary = compute_compass_score(
        trades, ScoreProfile.PERIOD_SUMMARY, start="2024-01-01", end="2024-01-31",
    )
    print(summary.breakdown["discipline"], summary.strengths)
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Any, Callable, Sequence

import numpy as np

from trade_compass.core.enums import CompassLevel, ScoreProfile
from trade_compass.core.models import Trade

from .kpis import DailyStat, build_daily_stats, daily_pnl_by_date, kpis_from_daily_stats

logger = logging.getLogger(__name__)


# ================================================================== #
# Result types                                                        #
# ================================================================== #

@dataclass
class CompassMetric:
    """One raw metric with its normalised 0-100 score."""

    name: str
    value: float
    score: float
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "score": self.score,
            "weight": self.weight,
        }


@dataclass
class CompassScore:
    profile: ScoreProfile
    score: float = 0.0
    level: CompassLevel = CompassLevel.WEAK
    breakdown: dict[str, float] = field(default_factory=dict)
    metrics: list[CompassMetric] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)

    def metric(self, name: str) -> CompassMetric | None:
        for m in self.metrics:
            if m.name == name:
                return m
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.value,
            "score": self.score,
            "level": self.level.value,
            "breakdown": dict(self.breakdown),
            "metrics": [m.to_dict() for m in self.metrics],
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
        }


# Minimum score for each level
_LEVEL_THRESHOLDS: list[tuple[float, CompassLevel]] = [
    (90.0, CompassLevel.ELITE),
    (75.0, CompassLevel.STRONG),
    (60.0, CompassLevel.SOLID),
    (40.0, CompassLevel.DEVELOPING),
]


def score_to_level(score: float) -> CompassLevel:
    """Convert a 0-100 score to its qualitative level."""
    for threshold, level in _LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return CompassLevel.WEAK


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return min(high, max(low, value))


# ================================================================== #
# Metric curves                                                       #
# ================================================================== #

def score_win_rate(win_rate_pct: float) -> float:
    """Win rate in percent scores itself, clamped to 0-100."""
    if not math.isfinite(win_rate_pct) or win_rate_pct < 0:
        return 0.0
    return _clamp(win_rate_pct)


def score_profit_factor(pf: float) -> float:
    """Dashboard curve: 1.0 ~ 30, 1.5 ~ 60, 2.0 ~ 80, 3.0+ ~ 100."""
    if not math.isfinite(pf) or pf <= 0:
        return 0.0
    if pf >= 3:
        return 100.0
    if pf >= 2:
        return 80 + (pf - 2) * 20
    if pf >= 1.5:
        return 60 + (pf - 1.5) * 40
    if pf >= 1:
        return 30 + (pf - 1) * 60
    return 10.0


def score_profit_factor_tiered(pf: float | None) -> float:
    """Period-summary curve: stepped up to 2.0, then 80 -> 95 up to 3.0.

    None (no losing days) scores 0.
    """
    if pf is None or not math.isfinite(pf):
        return 0.0
    if pf <= 0.8:
        return 20.0
    if pf <= 1.0:
        return 40.0
    if pf <= 1.5:
        return 65.0
    if pf <= 2.0:
        return 80.0
    if pf >= 3.0:
        return 95.0
    return 80 + (pf - 2.0) * 15


def score_avg_r(avg_r: float | None) -> float:
    """Average R clamped to [-0.5, 3]: -0.5 -> 0, 0 -> 40, 1 -> 60, 2 -> 80, 3 -> 95."""
    if avg_r is None or not math.isfinite(avg_r):
        return 0.0
    r = max(-0.5, min(3.0, avg_r))
    if r <= 0:
        return 40 + (r / 0.5) * 40
    if r <= 1:
        return 40 + r * 20
    if r <= 2:
        return 60 + (r - 1) * 20
    return 80 + (r - 2) * 15


def score_avg_win_loss(ratio: float) -> float:
    """1.0 ~ 40, 2.0 ~ 70, 3.0 ~ 90, 4.0+ ~ 100."""
    if not math.isfinite(ratio) or ratio <= 0:
        return 0.0
    if ratio >= 4:
        return 100.0
    if ratio >= 3:
        return 90 + (ratio - 3) * 10
    if ratio >= 2:
        return 70 + (ratio - 2) * 20
    if ratio >= 1:
        return 40 + (ratio - 1) * 30
    return 10.0


def score_max_drawdown(max_dd: float, total_profit: float) -> float:
    """Smaller drawdown relative to net profit scores higher.

    Falls back to 10 when there is no drawdown or no net profit.
    """
    if not math.isfinite(max_dd) or max_dd <= 0 or total_profit <= 0:
        return 10.0
    ratio = max_dd / (abs(total_profit) + max_dd)
    return _clamp(100 * (1 - ratio))


def score_recovery_factor(rf: float) -> float:
    """1 ~ 30, 2 ~ 60, 3 ~ 80, 5+ ~ 100."""
    if not math.isfinite(rf) or rf <= 0:
        return 0.0
    if rf >= 5:
        return 100.0
    if rf >= 3:
        return 80 + (rf - 3) * 10
    if rf >= 2:
        return 60 + (rf - 2) * 20
    if rf >= 1:
        return 30 + (rf - 1) * 30
    return 10.0


def score_consistency(raw: float) -> float:
    """Lower std-dev / total profit is better; a raw ratio <= 0 scores 100."""
    if not math.isfinite(raw) or raw <= 0:
        return 100.0
    return _clamp(100 - raw * 100)


# ================================================================== #
# Dashboard profile                                                   #
# ================================================================== #

# Weights (sum to 1)
DASHBOARD_WEIGHTS: dict[str, float] = {
    "win_rate": 0.2,
    "profit_factor": 0.2,
    "avg_win_loss": 0.2,
    "max_drawdown": 0.15,
    "recovery_factor": 0.15,
    "consistency": 0.1,
}


def max_drawdown(daily_pnl: Sequence[float]) -> float:
    """Largest peak-to-trough fall of the cumulative equity curve.

    Equity and peak both start at 0, so a losing first day already
    counts as drawdown.  Returned as a positive amount.
    """
    if not daily_pnl:
        return 0.0
    equity = np.cumsum(np.asarray(daily_pnl, dtype=float))
    peak = np.maximum.accumulate(np.concatenate(([0.0], equity)))[1:]
    return float(np.max(peak - equity))


def consistency_ratio(daily_pnl: Sequence[float], total_profit: float) -> float:
    """Sample std-dev of non-zero daily P&L over |total profit|.

    Returns the worst-case ratio of 1 with fewer than two non-zero days
    or without a positive total profit.
    """
    active = [p for p in daily_pnl if p != 0]
    if len(active) < 2 or total_profit <= 0:
        return 1.0
    return statistics.stdev(active) / abs(total_profit)


def _score_dashboard(
    trades: Sequence[Trade],
    *,
    start: date | str | None = None,
    end: date | str | None = None,
    tz: tzinfo | None = None,
) -> CompassScore:
    # start / end are not used: the dashboard profile always scores the
    # full trade history it is given.
    pnls = [t.pnl for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]

    total_profit = sum(pnls)
    gross_profit = sum(wins)
    gross_loss = abs(sum(losses))
    avg_win = gross_profit / len(wins) if wins else 0.0
    avg_loss = gross_loss / len(losses) if losses else 0.0

    decided = len(wins) + len(losses)
    win_rate = (len(wins) / decided) * 100 if decided > 0 else 0.0
    profit_factor = gross_profit / gross_loss if gross_loss > 0 else 0.0
    avg_win_loss = avg_win / avg_loss if avg_loss > 0 else 0.0

    daily_pnl = list(daily_pnl_by_date(trades, tz).values())
    drawdown = max_drawdown(daily_pnl)
    recovery = total_profit / drawdown if drawdown > 0 else 0.0
    consistency = consistency_ratio(daily_pnl, total_profit)

    metrics = [
        CompassMetric("win_rate", win_rate, score_win_rate(win_rate), DASHBOARD_WEIGHTS["win_rate"]),
        CompassMetric(
            "profit_factor", profit_factor,
            score_profit_factor(profit_factor), DASHBOARD_WEIGHTS["profit_factor"],
        ),
        CompassMetric(
            "avg_win_loss", avg_win_loss,
            score_avg_win_loss(avg_win_loss), DASHBOARD_WEIGHTS["avg_win_loss"],
        ),
        CompassMetric(
            "max_drawdown", drawdown,
            score_max_drawdown(drawdown, total_profit), DASHBOARD_WEIGHTS["max_drawdown"],
        ),
        CompassMetric(
            "recovery_factor", recovery,
            score_recovery_factor(recovery), DASHBOARD_WEIGHTS["recovery_factor"],
        ),
        CompassMetric(
            "consistency", consistency,
            score_consistency(consistency), DASHBOARD_WEIGHTS["consistency"],
        ),
    ]

    total = _clamp(sum(m.score * m.weight for m in metrics))
    return CompassScore(
        profile=ScoreProfile.DASHBOARD,
        score=total,
        level=score_to_level(total),
        metrics=metrics,
    )


# ================================================================== #
# Period-summary profile                                              #
# ================================================================== #

_NO_DATA_WEAKNESS = "No trading data available."
_FALLBACK_STRENGTH = "Building trading foundation."
_FALLBACK_WEAKNESS = "Continue monitoring performance metrics."
_MAX_NARRATIVE_ITEMS = 3


def score_daily_stats(daily_stats: Sequence[DailyStat]) -> CompassScore:
    """Period-summary Compass Score from per-day aggregates.

    Every row counts as a day in range, traded or not; pass the
    zero-filled output of :func:`build_daily_stats` with a start and end
    to score a calendar period.
    """
    if not daily_stats:
        return CompassScore(
            profile=ScoreProfile.PERIOD_SUMMARY,
            breakdown={"performance": 0.0, "consistency": 0.0, "risk": 0.0, "discipline": 0.0},
            weaknesses=[_NO_DATA_WEAKNESS],
        )

    kpis = kpis_from_daily_stats(daily_stats)
    pf = kpis.profit_factor

    # --- Performance: profit factor 60%, avg R 40% ---
    performance = _clamp(score_profit_factor_tiered(pf) * 0.6 + score_avg_r(kpis.avg_r) * 0.4)

    # --- Consistency: share of days traded, penalised for volatility ---
    days_traded_ratio = kpis.days_traded / len(daily_stats)
    consistency = days_traded_ratio * 100

    pnl_values = [s.net_pnl for s in daily_stats]
    mean_pnl = statistics.fmean(pnl_values)
    cv = statistics.pstdev(pnl_values) / abs(mean_pnl) if mean_pnl != 0 else 0.0
    if cv > 2:
        consistency *= 0.7
    elif cv > 1:
        consistency *= 0.85
    consistency = _clamp(consistency)

    # --- Risk: size of the average losing day vs the average winning day ---
    winning_days = [s.net_pnl for s in daily_stats if s.net_pnl > 0]
    losing_days = [s.net_pnl for s in daily_stats if s.net_pnl < 0]
    avg_winning_day = sum(winning_days) / len(winning_days) if winning_days else 0.0
    avg_losing_day = abs(sum(losing_days) / len(losing_days)) if losing_days else 0.0

    risk = 80.0
    if avg_losing_day > 0 and avg_winning_day > 0:
        ratio = avg_losing_day / avg_winning_day
        if ratio <= 1:
            risk = 90.0
        elif ratio <= 2:
            risk = 70.0
        elif ratio <= 3:
            risk = 40.0
        else:
            risk = 20.0
    elif avg_losing_day > 0:
        risk = 20.0

    # --- Discipline ---
    win_rate = kpis.win_rate
    pf_or_zero = pf if pf is not None else 0.0
    discipline = 50.0
    if 45 <= win_rate <= 60 and pf_or_zero > 1.3:
        discipline = 80.0
    elif 40 <= win_rate < 45 and pf_or_zero > 1.2:
        discipline = 65.0
    elif win_rate < 40 or pf_or_zero < 1.0:
        discipline = 30.0

    very_large_loss_days = [p for p in losing_days if abs(p) > avg_losing_day * 2]
    if len(very_large_loss_days) > len(losing_days) * 0.3:
        discipline *= 0.7
    discipline = _clamp(discipline)

    overall = _clamp(
        performance * 0.35 + consistency * 0.25 + risk * 0.25 + discipline * 0.15
    )

    # --- Narrative ---
    strengths: list[str] = []
    weaknesses: list[str] = []

    if win_rate >= 50:
        strengths.append("Good accuracy (solid win rate).")
    elif win_rate < 40:
        weaknesses.append("Low win rate with many losing days.")

    if pf is not None and pf > 1.5:
        strengths.append("Strong profit factor.")
    elif pf is not None and pf <= 1.1:
        weaknesses.append("Profit factor close to 1.0 (break-even).")

    if 0 < avg_losing_day <= avg_winning_day:
        strengths.append("Losses are relatively small compared to wins.")
    elif avg_losing_day > avg_winning_day * 2:
        weaknesses.append("Average losing day is much larger than average winning day.")

    if days_traded_ratio >= 0.7:
        strengths.append("Consistent trading activity.")
    elif days_traded_ratio < 0.3:
        weaknesses.append("Highly inconsistent trading activity (few days traded in the range).")

    if kpis.avg_r is not None and kpis.avg_r > 1.5:
        strengths.append("Strong risk-reward ratio.")

    if not strengths:
        strengths.append(_FALLBACK_STRENGTH)
    if not weaknesses:
        weaknesses.append(_FALLBACK_WEAKNESS)

    return CompassScore(
        profile=ScoreProfile.PERIOD_SUMMARY,
        score=overall,
        level=score_to_level(overall),
        breakdown={
            "performance": performance,
            "consistency": consistency,
            "risk": risk,
            "discipline": discipline,
        },
        strengths=strengths[:_MAX_NARRATIVE_ITEMS],
        weaknesses=weaknesses[:_MAX_NARRATIVE_ITEMS],
    )


def _score_period_summary(
    trades: Sequence[Trade],
    *,
    start: date | str | None = None,
    end: date | str | None = None,
    tz: tzinfo | None = None,
) -> CompassScore:
    return score_daily_stats(build_daily_stats(trades, start, end, tz))


# ================================================================== #
# Entry point                                                         #
# ================================================================== #

_STRATEGIES: dict[ScoreProfile, Callable[..., CompassScore]] = {
    ScoreProfile.DASHBOARD: _score_dashboard,
    ScoreProfile.PERIOD_SUMMARY: _score_period_summary,
}


def compute_compass_score(
    trades: Sequence[Trade],
    profile: ScoreProfile | str = ScoreProfile.DASHBOARD,
    *,
    start: date | str | None = None,
    end: date | str | None = None,
    tz: tzinfo | None = None,
) -> CompassScore:
    """Score *trades* with the strategy selected by *profile*.

    Parameters
    ----------
    trades : Sequence[Trade]
        Trades already scoped to the account being scored.
    profile : ScoreProfile
        DASHBOARD or PERIOD_SUMMARY.
    start, end : date or "YYYY-MM-DD", optional
        Period bounds (inclusive).  Only PERIOD_SUMMARY uses them; with
        both given, untraded days in the period count against the
        consistency score.
    tz : tzinfo, optional
        Zone for bucketing aware timestamps into local days.
    """
    profile = ScoreProfile(profile)
    result = _STRATEGIES[profile](trades, start=start, end=end, tz=tz)
    logger.debug(
        "Compass score (%s): %.2f %s over %d trades",
        profile.value, result.score, result.level.value, len(trades),
    )
    return result
