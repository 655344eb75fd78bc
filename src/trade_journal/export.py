"""Trade export: CSV/JSON output of matched trades and open positions.

Usage::

    exporter = TradeExporter()
    csv_str = exporter.matched_to_csv(result.matched)
    json_str = exporter.open_to_json(result.open)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from decimal import Decimal
from typing import Any, Iterable

from .core.models import MatchedTrade, OpenPosition
from .core.numbers import round_half_up

logger = logging.getLogger(__name__)

MATCHED_COLUMNS = [
    "trade_id",
    "symbol",
    "direction",
    "quantity",
    "buy_price",
    "sell_price",
    "buy_timestamp",
    "sell_timestamp",
    "pnl",
    "pnl_pct",
    "commission",
    "net_pnl",
    "duration_minutes",
]

OPEN_COLUMNS = [
    "position_id",
    "symbol",
    "side",
    "quantity",
    "remaining_quantity",
    "price",
    "timestamp",
    "is_investment",
    "is_manually_closed",
    "manual_close_date",
    "manual_close_reason",
    "notes",
]

# Money fields rounded on export; quantities and prices are left exact
_ROUNDED = frozenset({"pnl", "pnl_pct", "commission", "net_pnl"})


class TradeExporter:
    """Export matched trades and open positions.

    Parameters
    ----------
    decimal_places : int
        Rounding precision for P&L fields.  Default 2.
    """

    def __init__(self, *, decimal_places: int = 2) -> None:
        self._dp = decimal_places

    # ------------------------------------------------------------------ #
    # Matched trades                                                       #
    # ------------------------------------------------------------------ #

    def matched_to_csv(
        self,
        trades: Iterable[MatchedTrade],
        *,
        columns: list[str] | None = None,
    ) -> str:
        return self._to_csv(
            (self._matched_row(t) for t in trades), columns or MATCHED_COLUMNS
        )

    def matched_to_json(self, trades: Iterable[MatchedTrade], *, indent: int = 2) -> str:
        rows = [self._matched_row(t) for t in trades]
        return json.dumps(rows, indent=indent, default=str)

    # ------------------------------------------------------------------ #
    # Open positions                                                       #
    # ------------------------------------------------------------------ #

    def open_to_csv(
        self,
        positions: Iterable[OpenPosition],
        *,
        columns: list[str] | None = None,
    ) -> str:
        return self._to_csv(
            (p.to_dict() for p in positions), columns or OPEN_COLUMNS
        )

    def open_to_json(self, positions: Iterable[OpenPosition], *, indent: int = 2) -> str:
        rows = [p.to_dict() for p in positions]
        return json.dumps(rows, indent=indent, default=str)

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    def _matched_row(self, trade: MatchedTrade) -> dict[str, Any]:
        row = trade.to_dict()
        for key in _ROUNDED:
            row[key] = round_half_up(Decimal(row[key]), self._dp)
        return row

    @staticmethod
    def _to_csv(rows: Iterable[dict[str, Any]], columns: list[str]) -> str:
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        count = 0
        for row in rows:
            writer.writerow({c: "" if row.get(c) is None else row.get(c) for c in columns})
            count += 1
        logger.debug("Exported %d row(s)", count)
        return buf.getvalue()
