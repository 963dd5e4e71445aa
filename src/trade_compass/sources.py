"""Trade sources: where the analytics get their trade snapshot from.

The aggregators never fetch anything themselves.  Callers obtain a list
of trades from a :class:`TradeSource` (a persistence layer in production,
:class:`InMemoryTradeSource` in tests and the CLI) and pass it in.
"""

from __future__ import annotations

import json
import logging
from datetime import date, tzinfo
from pathlib import Path
from typing import Any, Iterable, Protocol, runtime_checkable

from pydantic import ValidationError

from trade_compass.analytics.dates import date_key, effective_date_key, normalize_timestamp
from trade_compass.core.errors import TradeLoadError
from trade_compass.core.models import Trade

logger = logging.getLogger(__name__)

ALL_SYMBOLS = "ALL"


@runtime_checkable
class TradeSource(Protocol):
    """Supplies trades for one user/account over an inclusive date range."""

    def fetch_trades(
        self,
        user_id: str,
        account_id: str,
        start: date | str | None,
        end: date | str | None,
        symbol: str | None = None,
    ) -> list[Trade]: ...


def _key(value: date | str | None) -> str | None:
    if value is None or value == "":
        return None
    return date_key(value) if isinstance(value, date) else str(value)


class InMemoryTradeSource:
    """Trade source over an in-memory list.

    Filtering mirrors the journal store: account match, optional symbol
    (``"ALL"`` means no filter) and an inclusive date range checked
    against ``trade_date`` when present, else the effective date.  Trades
    without any usable date are excluded from date-filtered results.

    Parameters
    ----------
    trades : Iterable[Trade]
        The snapshot to serve.  Copied on construction.
    tz : tzinfo, optional
        Zone for reading local dates from aware timestamps.
    """

    def __init__(self, trades: Iterable[Trade], *, tz: tzinfo | None = None) -> None:
        self._trades: list[Trade] = list(trades)
        self._tz = tz

    def __len__(self) -> int:
        return len(self._trades)

    def _day_of(self, trade: Trade) -> str | None:
        # trade_date wins only when it parses; otherwise the timestamps decide
        if trade.trade_date:
            stored = normalize_timestamp(trade.trade_date)
            if stored is not None:
                return date_key(stored)
        return effective_date_key(trade, self._tz)

    def fetch_trades(
        self,
        user_id: str,
        account_id: str,
        start: date | str | None,
        end: date | str | None,
        symbol: str | None = None,
    ) -> list[Trade]:
        start_key, end_key = _key(start), _key(end)

        selected: list[Trade] = []
        for trade in self._trades:
            if user_id and trade.user_id and trade.user_id != user_id:
                continue
            if account_id and trade.account_id != account_id:
                continue
            if symbol and symbol != ALL_SYMBOLS and trade.symbol != symbol:
                continue
            if start_key is not None or end_key is not None:
                day = self._day_of(trade)
                if day is None:
                    continue
                if start_key is not None and day < start_key:
                    continue
                if end_key is not None and day > end_key:
                    continue
            selected.append(trade)

        selected.sort(key=lambda t: self._day_of(t) or "")
        return selected


# ------------------------------------------------------------------ #
# File loading                                                         #
# ------------------------------------------------------------------ #

def _read_records(path: Path) -> list[Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TradeLoadError(str(path), str(exc)) from exc

    try:
        if path.suffix == ".jsonl":
            return [json.loads(line) for line in text.splitlines() if line.strip()]
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TradeLoadError(str(path), f"invalid JSON ({exc})") from exc

    if isinstance(data, dict) and isinstance(data.get("trades"), list):
        data = data["trades"]
    if not isinstance(data, list):
        raise TradeLoadError(str(path), "expected a list of trade objects")
    return data


def load_trades(path: str | Path) -> list[Trade]:
    """Load already-normalised trade records from a JSON or JSONL file.

    A ``.json`` file holds either an array of trade objects or an object
    with a ``"trades"`` array; a ``.jsonl`` file holds one object per
    line.  Field names may use snake_case or camelCase.

    Raises
    ------
    TradeLoadError
        If the file is unreadable, not valid JSON, or a record is not a
        trade object.
    """
    path = Path(path)
    records = _read_records(path)

    trades: list[Trade] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise TradeLoadError(str(path), f"record {index} is not an object")
        try:
            trades.append(Trade.model_validate(record))
        except ValidationError as exc:
            raise TradeLoadError(str(path), f"record {index}: {exc}") from exc

    logger.info("Loaded %d trades from %s", len(trades), path)
    return trades
