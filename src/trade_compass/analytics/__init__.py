"""Trade analytics: pure aggregations over a journal trade snapshot.

Every function takes an in-memory list of :class:`~trade_compass.core.models.Trade`
records (already scoped to one account by the caller), never mutates it,
and returns plain dataclasses with ``to_dict()`` for JSON output.

Key components
--------------
resolve_date              Effective timestamp with a parameterised fallback chain
compute_kpis              Net P&L, win rate, profit factor, avg R, days traded
build_daily_stats         Per-day aggregates (optionally zero-filled over a range)
compute_compass_score     Composite 0-100 score, DASHBOARD or PERIOD_SUMMARY profile
compute_risk_progress     Daily / weekly P&L against a rolling equity base
evaluate_risk_guard       Risk-guard state machine (locked / warning / none)
aggregate_time_analytics  Weekday, session and holding-duration buckets
aggregate_tag_stats       Per-tag performance, full P&L to every tag
aggregate_playbook_stats  Per-playbook performance from stored status
aggregate_calendar        Per-day calendar with best / worst day
aggregate_dashboard       Landing-screen block composing the above
"""

from .buckets import BucketStat
from .calendar import (
    CalendarMonth,
    aggregate_calendar,
    build_calendar_model,
    build_weekly_summary,
)
from .compass import (
    CompassMetric,
    CompassScore,
    compute_compass_score,
    score_daily_stats,
    score_to_level,
)
from .dashboard import (
    DashboardStats,
    aggregate_dashboard,
    build_cumulative_pnl_series,
    build_daily_pnl_series,
)
from .dates import (
    date_key,
    effective_close_time,
    effective_date,
    effective_open_time,
    normalize_timestamp,
    resolve_date,
)
from .kpis import (
    DailyStat,
    DashboardKpis,
    KpiSet,
    SymbolStat,
    build_daily_stats,
    compute_dashboard_kpis,
    compute_kpis,
    compute_symbol_stats,
    kpis_from_daily_stats,
)
from .playbooks import PlaybookStat, aggregate_playbook_stats
from .risk import (
    RiskGuardEvaluation,
    RiskProgress,
    RiskStatus,
    RiskTimeline,
    build_risk_timeline,
    compute_risk_progress,
    daily_risk_status,
    evaluate_risk_guard,
    weekly_risk_status,
)
from .tags import aggregate_tag_stats
from .time_analysis import (
    TimeAnalytics,
    aggregate_time_analytics,
    classify_duration_bucket,
    classify_session,
)

__all__ = [
    "BucketStat",
    "CalendarMonth",
    "aggregate_calendar",
    "build_calendar_model",
    "build_weekly_summary",
    "CompassMetric",
    "CompassScore",
    "compute_compass_score",
    "score_daily_stats",
    "score_to_level",
    "DashboardStats",
    "aggregate_dashboard",
    "build_cumulative_pnl_series",
    "build_daily_pnl_series",
    "date_key",
    "effective_close_time",
    "effective_date",
    "effective_open_time",
    "normalize_timestamp",
    "resolve_date",
    "DailyStat",
    "DashboardKpis",
    "KpiSet",
    "SymbolStat",
    "build_daily_stats",
    "compute_dashboard_kpis",
    "compute_kpis",
    "compute_symbol_stats",
    "kpis_from_daily_stats",
    "PlaybookStat",
    "aggregate_playbook_stats",
    "RiskGuardEvaluation",
    "RiskProgress",
    "RiskStatus",
    "RiskTimeline",
    "build_risk_timeline",
    "compute_risk_progress",
    "daily_risk_status",
    "evaluate_risk_guard",
    "weekly_risk_status",
    "aggregate_tag_stats",
    "TimeAnalytics",
    "aggregate_time_analytics",
    "classify_duration_bucket",
    "classify_session",
]
