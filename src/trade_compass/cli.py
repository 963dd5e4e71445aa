"""CLI entry point for trade-compass.

Every command reads a trades file (JSON array or JSONL), narrows it with
the optional account / symbol / date filters and prints the result as
JSON on stdout.  Logs go to stderr.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Callable

import click

from .core.config import Settings, load_settings
from .core.enums import ScoreProfile
from .core.errors import CompassError
from .core.models import Trade


def _to_date(ctx: click.Context, param: click.Parameter, value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def _date_option(name: str, help: str) -> Callable[..., Any]:
    return click.option(
        name,
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        callback=_to_date,
        help=help,
    )


def _common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every analytics command."""
    decorators = [
        click.argument("trades_file", type=click.Path(dir_okay=False)),
        click.option("--config", default=None, help="Config file path (TOML)"),
        click.option("--account", default="", help="Only trades of this account id"),
        click.option("--symbol", default=None, help="Only this symbol (ALL = no filter)"),
        _date_option("--start", "Start date (YYYY-MM-DD), inclusive"),
        _date_option("--end", "End date (YYYY-MM-DD), inclusive"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _today_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return _date_option("--today", "Reference day (YYYY-MM-DD); defaults to the wall clock")(func)


def _prepare(
    command: str,
    trades_file: str,
    config: str | None,
    account: str,
    symbol: str | None,
    start: date | None,
    end: date | None,
) -> tuple[Settings, list[Trade]]:
    """Load settings, configure logging and fetch the filtered trade list."""
    from .observability.logger import (
        bind_context,
        clear_context,
        get_logger,
        new_run_id,
        setup_logging,
    )
    from .sources import InMemoryTradeSource, load_trades

    try:
        settings = load_settings(config)
        tz = settings.analytics.get_tzinfo()
        setup_logging(
            level=settings.observability.log_level,
            format=settings.observability.log_format,
        )
        clear_context()
        new_run_id()
        bind_context(command=command)

        source = InMemoryTradeSource(load_trades(trades_file), tz=tz)
        trades = source.fetch_trades("", account, start, end, symbol)
    except CompassError as exc:
        raise click.ClickException(str(exc)) from exc

    get_logger(__name__).info(
        "trades_selected", total=len(source), selected=len(trades), account=account or None,
    )
    return settings, trades


def _emit(result: Any) -> None:
    payload = result.to_dict() if hasattr(result, "to_dict") else result
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
def main() -> None:
    """Trade Compass: trading-journal analytics."""


@main.command()
@_common_options
@click.option("--from-daily", is_flag=True, help="Compute from per-day aggregates")
def kpis(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None, from_daily: bool,
) -> None:
    """Net P&L, win rate, profit factor, average R, days traded."""
    from .analytics.kpis import build_daily_stats, compute_kpis, kpis_from_daily_stats

    settings, trades = _prepare("kpis", trades_file, config, account, symbol, start, end)
    tz = settings.analytics.get_tzinfo()
    if from_daily:
        _emit(kpis_from_daily_stats(build_daily_stats(trades, start, end, tz)))
    else:
        _emit(compute_kpis(trades, tz))


@main.command()
@_common_options
@click.option(
    "--profile",
    type=click.Choice([p.value for p in ScoreProfile]),
    default=ScoreProfile.PERIOD_SUMMARY.value,
    help="Scoring profile",
)
def score(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None, profile: str,
) -> None:
    """Compass Score for the selected trades."""
    from .analytics.compass import compute_compass_score

    settings, trades = _prepare("score", trades_file, config, account, symbol, start, end)
    _emit(compute_compass_score(
        trades, ScoreProfile(profile), start=start, end=end,
        tz=settings.analytics.get_tzinfo(),
    ))


@main.command()
@_common_options
@_today_option
@click.option("--timeline", is_flag=True, help="Include the daily / weekly risk timeline")
def risk(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None, today: date | None, timeline: bool,
) -> None:
    """Risk progress, guard state and status badges."""
    from .analytics.risk import (
        build_risk_timeline,
        compute_risk_progress,
        daily_risk_status,
        evaluate_risk_guard,
        weekly_risk_status,
    )

    settings, trades = _prepare("risk", trades_file, config, account, symbol, start, end)
    cfg = settings.analytics
    tz = cfg.get_tzinfo()

    progress = compute_risk_progress(
        trades, today=today, default_base_balance=cfg.default_base_balance, tz=tz,
    )
    guard = evaluate_risk_guard(
        progress, settings.risk, warning_threshold=cfg.warning_threshold_percent,
    )
    result: dict[str, Any] = {
        "progress": progress.to_dict(),
        "guard": guard.to_dict(),
        "daily_status": daily_risk_status(
            progress.daily_pnl_percent, settings.risk,
            warning_threshold=cfg.warning_threshold_percent,
        ).to_dict(),
        "weekly_status": weekly_risk_status(
            progress.weekly_pnl_percent, settings.risk,
            warning_threshold=cfg.warning_threshold_percent,
        ).to_dict(),
    }
    if timeline:
        result["timeline"] = build_risk_timeline(
            trades,
            days=cfg.timeline_days,
            weeks=cfg.timeline_weeks,
            today=today,
            default_base_balance=cfg.default_base_balance,
            tz=tz,
        ).to_dict()
    _emit(result)


@main.command("time")
@_common_options
def time_cmd(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None,
) -> None:
    """Weekday, session and holding-duration breakdown."""
    from .analytics.time_analysis import aggregate_time_analytics

    settings, trades = _prepare("time", trades_file, config, account, symbol, start, end)
    _emit(aggregate_time_analytics(trades, settings.analytics.get_tzinfo()))


@main.command()
@_common_options
def tags(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None,
) -> None:
    """Per-tag performance."""
    from .analytics.tags import aggregate_tag_stats

    _, trades = _prepare("tags", trades_file, config, account, symbol, start, end)
    _emit([s.to_dict() for s in aggregate_tag_stats(trades)])


@main.command()
@_common_options
def playbooks(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None,
) -> None:
    """Per-playbook performance (stored trade status)."""
    from .analytics.playbooks import aggregate_playbook_stats

    _, trades = _prepare("playbooks", trades_file, config, account, symbol, start, end)
    _emit({pid: s.to_dict() for pid, s in aggregate_playbook_stats(trades).items()})


@main.command("calendar")
@_common_options
@click.option("--year", type=int, required=True, help="Calendar year, e.g. 2024")
@click.option("--month", type=click.IntRange(1, 12), required=True, help="Month 1-12")
def calendar_cmd(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None, year: int, month: int,
) -> None:
    """Per-day calendar for one month, with heat-map cells and week rows."""
    from .analytics.calendar import (
        aggregate_calendar,
        build_calendar_model,
        build_weekly_summary,
        month_bounds,
    )
    from .analytics.kpis import build_daily_stats

    settings, trades = _prepare("calendar", trades_file, config, account, symbol, start, end)
    tz = settings.analytics.get_tzinfo()

    first, last = month_bounds(year, month)
    daily = build_daily_stats(trades, first, last, tz)
    _emit({
        "month": aggregate_calendar(trades, year=year, month=month, tz=tz).to_dict(),
        "cells": [c.to_dict() for c in build_calendar_model(daily, first)],
        "weeks": [w.to_dict() for w in build_weekly_summary(daily, first)],
    })


@main.command()
@_common_options
@_today_option
def dashboard(
    trades_file: str, config: str | None, account: str, symbol: str | None,
    start: date | None, end: date | None, today: date | None,
) -> None:
    """Dashboard block: KPIs, daily P&L, top symbols, Compass Score, risk."""
    from .analytics.dashboard import aggregate_dashboard

    settings, trades = _prepare("dashboard", trades_file, config, account, symbol, start, end)
    cfg = settings.analytics
    _emit(aggregate_dashboard(
        trades,
        days=cfg.dashboard_days,
        top_symbols=cfg.top_symbols,
        today=today,
        default_base_balance=cfg.default_base_balance,
        tz=cfg.get_tzinfo(),
    ))


if __name__ == "__main__":
    main()
