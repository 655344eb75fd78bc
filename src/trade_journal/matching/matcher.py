"""FIFO lot matching of buy/sell rows into round trips.

For every symbol the rows are walked in time order.  Each event first
eats into the *opposite* side's queue, oldest lot first, emitting one
:class:`MatchedTrade` per overlap.  Whatever is left of the event joins
its own side's queue.  A sell that finds no buy lots therefore opens a
short lot, closed later by a buy.

Rows with identical timestamps keep their input order (``sorted`` is
stable), which makes the output reproducible for identical input.
Lots are copied into private mutable state, the input rows are never
modified.

Usage::

    result = match_trades(rows)
    result.matched      # list[MatchedTrade]
    result.open         # list[OpenPosition]
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from trade_journal.core.enums import Direction, TradeSide
from trade_journal.core.models import MatchedTrade, MatchResult, OpenPosition, RawTradeRow

logger = logging.getLogger(__name__)


@dataclass
class _Lot:
    """Unconsumed part of one input row."""

    row: RawTradeRow
    remaining: Decimal

    @property
    def side(self) -> TradeSide:
        return self.row.side

    @property
    def price(self) -> Decimal:
        return self.row.price

    @property
    def timestamp(self) -> datetime:
        return self.row.timestamp

    def commission_for(self, qty: Decimal) -> Decimal:
        """Share of the row's commission attributable to *qty*."""
        if self.row.commission == 0:
            return Decimal("0")
        return self.row.commission * qty / self.row.quantity


class TradeMatcher:
    """Stateless FIFO matcher.  One instance can be reused across calls."""

    def match(self, rows: Iterable[RawTradeRow]) -> MatchResult:
        result = MatchResult()
        for symbol, symbol_rows in self._group_by_symbol(rows).items():
            matched, open_positions = self._match_symbol(symbol, symbol_rows)
            result.matched.extend(matched)
            result.open.extend(open_positions)

        logger.info(
            "Matched %d round trip(s), %d open position(s), net %s",
            result.total_matched,
            result.total_unmatched,
            result.net_profit,
        )
        return result

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _group_by_symbol(rows: Iterable[RawTradeRow]) -> dict[str, list[RawTradeRow]]:
        groups: dict[str, list[RawTradeRow]] = {}
        for index, row in enumerate(rows, start=1):
            if row.row_number == 0:
                # Rows built in code carry no source line; use input position
                row = replace(row, row_number=index)
            groups.setdefault(row.symbol.upper(), []).append(row)
        return groups

    def _match_symbol(
        self, symbol: str, rows: list[RawTradeRow]
    ) -> tuple[list[MatchedTrade], list[OpenPosition]]:
        ordered = sorted(rows, key=lambda r: r.timestamp)
        queues: dict[TradeSide, deque[_Lot]] = {
            TradeSide.BUY: deque(),
            TradeSide.SELL: deque(),
        }
        matched: list[MatchedTrade] = []

        for row in ordered:
            lot = _Lot(row=row, remaining=row.quantity)
            opposite = queues[
                TradeSide.SELL if lot.side == TradeSide.BUY else TradeSide.BUY
            ]
            while lot.remaining > 0 and opposite:
                resting = opposite[0]
                qty = min(lot.remaining, resting.remaining)
                matched.append(self._pair(symbol, resting, lot, qty))
                lot.remaining -= qty
                resting.remaining -= qty
                if resting.remaining == 0:
                    opposite.popleft()
            if lot.remaining > 0:
                queues[lot.side].append(lot)

        open_positions = [
            self._to_open_position(symbol, lot)
            for side in (TradeSide.BUY, TradeSide.SELL)
            for lot in queues[side]
        ]
        return matched, open_positions

    @staticmethod
    def _pair(symbol: str, resting: _Lot, incoming: _Lot, qty: Decimal) -> MatchedTrade:
        """Build the trade for *qty* units of overlap.

        *resting* is the older lot and decides the direction.
        """
        if resting.side == TradeSide.BUY:
            buy, sell, direction = resting, incoming, Direction.LONG
        else:
            buy, sell, direction = incoming, resting, Direction.SHORT
        return MatchedTrade(
            symbol=symbol,
            quantity=qty,
            buy_price=buy.price,
            sell_price=sell.price,
            buy_timestamp=buy.timestamp,
            sell_timestamp=sell.timestamp,
            direction=direction,
            commission=buy.commission_for(qty) + sell.commission_for(qty),
            buy_row=buy.row.row_number,
            sell_row=sell.row.row_number,
        )

    @staticmethod
    def _to_open_position(symbol: str, lot: _Lot) -> OpenPosition:
        return OpenPosition(
            position_id=f"{symbol}:{lot.row.row_number}:{lot.side.value}",
            symbol=symbol,
            side=lot.side,
            quantity=lot.row.quantity,
            remaining_quantity=lot.remaining,
            price=lot.price,
            timestamp=lot.timestamp,
            commission=lot.commission_for(lot.remaining),
            row_number=lot.row.row_number,
            last_updated=lot.timestamp,
        )


def match_trades(rows: Iterable[RawTradeRow]) -> MatchResult:
    """Convenience wrapper around :meth:`TradeMatcher.match`."""
    return TradeMatcher().match(rows)
