"""Property tests: invariants that must hold for any trade list.

Generates random journals (P&L possibly missing, R possibly missing,
1-3 tags from a small pool, close times within one quarter) and checks
that the aggregators agree with each other and stay within bounds.
"""

import math
from datetime import datetime, timedelta

from hypothesis import given, settings, strategies as st

from trade_compass.analytics.compass import compute_compass_score, score_daily_stats
from trade_compass.analytics.kpis import build_daily_stats, compute_kpis, kpis_from_daily_stats
from trade_compass.analytics.risk import RiskProgress, evaluate_risk_guard
from trade_compass.analytics.tags import aggregate_tag_stats
from trade_compass.analytics.time_analysis import classify_duration_bucket
from trade_compass.core.config import RiskSettings
from trade_compass.core.enums import DurationBucket, RiskGuardState, ScoreProfile
from trade_compass.core.models import Trade

_BASE = datetime(2024, 1, 1)

pnl_values = st.one_of(
    st.none(),
    st.just(0.0),
    st.floats(min_value=-5_000, max_value=5_000, allow_nan=False, allow_infinity=False),
)


@st.composite
def trades_strategy(draw, max_size=40):
    n = draw(st.integers(min_value=0, max_value=max_size))
    trades = []
    for i in range(n):
        close = _BASE + timedelta(minutes=draw(st.integers(min_value=0, max_value=90 * 24 * 60)))
        held = draw(st.integers(min_value=0, max_value=3 * 24 * 60))
        trades.append(Trade(
            id=f"t{i}",
            symbol=draw(st.sampled_from(["EURUSD", "GBPUSD", "XAUUSD"])),
            open_time=close - timedelta(minutes=held),
            close_time=close,
            pnl_currency=draw(pnl_values),
            r_multiple=draw(st.one_of(st.none(), st.floats(min_value=-3, max_value=5))),
            tags=draw(st.lists(st.sampled_from(["a", "b", "c"]), max_size=3)),
        ))
    return trades


@given(trades=trades_strategy())
@settings(max_examples=100, deadline=None)
def test_net_pnl_equals_sum_of_defined_pnl(trades):
    expected = sum(t.pnl_currency for t in trades if t.pnl_currency is not None)
    assert math.isclose(compute_kpis(trades).net_pnl, expected, abs_tol=1e-6)
    daily_total = sum(s.net_pnl for s in build_daily_stats(trades))
    assert math.isclose(daily_total, expected, abs_tol=1e-6)


@given(trades=trades_strategy())
@settings(max_examples=100, deadline=None)
def test_outcome_counts_cover_trades_with_pnl(trades):
    kpis = compute_kpis(trades)
    with_pnl = sum(1 for t in trades if t.pnl_currency is not None)
    assert kpis.win_count + kpis.loss_count + kpis.breakeven_count == with_pnl
    assert kpis.total_trades == len(trades)
    assert 0.0 <= kpis.win_rate <= 100.0


@given(trades=trades_strategy())
@settings(max_examples=100, deadline=None)
def test_profit_factor_none_without_losses(trades):
    kpis = compute_kpis(trades)
    if kpis.loss_count == 0:
        assert kpis.profit_factor is None
    else:
        assert kpis.profit_factor is not None and kpis.profit_factor >= 0


@given(trades=trades_strategy())
@settings(max_examples=60, deadline=None)
def test_compass_scores_within_bounds(trades):
    dashboard = compute_compass_score(trades, ScoreProfile.DASHBOARD)
    assert 0.0 <= dashboard.score <= 100.0
    for metric in dashboard.metrics:
        assert 0.0 <= metric.score <= 100.0

    summary = compute_compass_score(
        trades, ScoreProfile.PERIOD_SUMMARY, start="2024-01-01", end="2024-03-31",
    )
    assert 0.0 <= summary.score <= 100.0
    for value in summary.breakdown.values():
        assert 0.0 <= value <= 100.0
    assert 1 <= len(summary.weaknesses) <= 3
    assert len(summary.strengths) <= 3


@given(trades=trades_strategy())
@settings(max_examples=60, deadline=None)
def test_aggregation_is_idempotent(trades):
    snapshot = list(trades)
    first = score_daily_stats(build_daily_stats(trades, "2024-01-01", "2024-03-31"))
    second = score_daily_stats(build_daily_stats(trades, "2024-01-01", "2024-03-31"))
    assert first.to_dict() == second.to_dict()
    assert kpis_from_daily_stats(build_daily_stats(trades)) == kpis_from_daily_stats(
        build_daily_stats(trades)
    )
    assert trades == snapshot


@given(minutes=st.floats(min_value=-100, max_value=5_000, allow_nan=False))
def test_duration_buckets_half_open(minutes):
    bucket = classify_duration_bucket(minutes)
    if minutes >= 0:
        assert bucket.min_minutes <= minutes
    if bucket.max_minutes is not None:
        assert minutes < bucket.max_minutes
    else:
        assert bucket == DurationBucket.OVER_24H


@given(
    daily=st.floats(min_value=-20, max_value=20, allow_nan=False),
    weekly=st.floats(min_value=-40, max_value=40, allow_nan=False),
)
def test_daily_lock_has_priority(daily, weekly):
    settings_ = RiskSettings(max_daily_loss_percent=4.0, max_weekly_loss_percent=10.0)
    result = evaluate_risk_guard(
        RiskProgress(daily_pnl_percent=daily, weekly_pnl_percent=weekly), settings_,
    )
    if daily <= -4.0:
        assert result.state == RiskGuardState.DAILY_LOCKED
    elif weekly <= -10.0:
        assert result.state == RiskGuardState.WEEKLY_LOCKED
    elif daily > -2.0 and weekly > -5.0:
        assert result.state == RiskGuardState.NONE


@given(trades=trades_strategy())
@settings(max_examples=100, deadline=None)
def test_every_tag_gets_full_trade_pnl(trades):
    stats = {s.key: s for s in aggregate_tag_stats(trades)}
    for tag, stat in stats.items():
        tagged = [t for t in trades if tag in t.tags]
        assert stat.trades_count == len(tagged)
        assert math.isclose(stat.net_pnl, sum(t.pnl for t in tagged), abs_tol=1e-6)
    assert set(stats) == {tag for t in trades for tag in t.tags}
