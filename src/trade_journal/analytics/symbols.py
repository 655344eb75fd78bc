"""Per-symbol breakdown with top / worst / most-traded rankings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any, Iterable

from trade_journal.core.models import MatchedTrade
from trade_journal.core.numbers import round_half_up

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_SECONDS_PER_HOUR = Decimal(3600)


@dataclass
class SymbolStats:
    """Accumulator for one symbol."""

    symbol: str
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_pnl: Decimal = _ZERO
    gross_profit: Decimal = _ZERO
    gross_loss: Decimal = _ZERO
    total_duration: timedelta = field(default_factory=timedelta)

    def record(self, trade: MatchedTrade) -> None:
        pnl = trade.pnl
        self.total_trades += 1
        self.total_pnl += pnl
        self.total_duration += trade.duration
        if pnl > 0:
            self.winning_trades += 1
            self.gross_profit += pnl
        elif pnl < 0:
            self.losing_trades += 1
            self.gross_loss += -pnl

    @property
    def win_rate(self) -> Decimal:
        if self.total_trades == 0:
            return _ZERO
        return Decimal(self.winning_trades) / self.total_trades * 100

    @property
    def avg_pnl(self) -> Decimal:
        if self.total_trades == 0:
            return _ZERO
        return self.total_pnl / self.total_trades

    @property
    def profit_factor(self) -> Decimal:
        if self.gross_loss == 0:
            return _ZERO
        return self.gross_profit / self.gross_loss

    @property
    def avg_duration_hours(self) -> Decimal:
        if self.total_trades == 0:
            return _ZERO
        seconds = Decimal(str(self.total_duration.total_seconds()))
        return seconds / self.total_trades / _SECONDS_PER_HOUR

    @property
    def performance(self) -> Decimal:
        """``total_pnl / |total_pnl + gross_loss|``.

        Ad hoc score kept for compatibility with existing dashboards; it
        has no rigorous interpretation and should not be reused elsewhere.
        0 when the denominator is 0.
        """
        denominator = abs(self.total_pnl + self.gross_loss)
        if denominator == 0:
            return _ZERO
        return self.total_pnl / denominator

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "win_rate": round_half_up(self.win_rate),
            "total_pnl": round_half_up(self.total_pnl),
            "avg_pnl": round_half_up(self.avg_pnl),
            "gross_profit": round_half_up(self.gross_profit),
            "gross_loss": round_half_up(self.gross_loss),
            "profit_factor": round_half_up(self.profit_factor),
            "avg_duration": round_half_up(self.avg_duration_hours, 1),
            "performance": round_half_up(self.performance),
        }


@dataclass
class SymbolAnalysis:
    symbols: list[SymbolStats] = field(default_factory=list)
    top_n: int = 5

    @property
    def top_performers(self) -> list[SymbolStats]:
        return sorted(self.symbols, key=lambda s: s.total_pnl, reverse=True)[: self.top_n]

    @property
    def worst_performers(self) -> list[SymbolStats]:
        return sorted(self.symbols, key=lambda s: s.total_pnl)[: self.top_n]

    @property
    def most_traded(self) -> list[SymbolStats]:
        return sorted(
            self.symbols, key=lambda s: s.total_trades, reverse=True
        )[: self.top_n]

    def get(self, symbol: str) -> SymbolStats | None:
        for stats in self.symbols:
            if stats.symbol == symbol:
                return stats
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "top_performers": [s.to_dict() for s in self.top_performers],
            "worst_performers": [s.to_dict() for s in self.worst_performers],
            "most_traded": [s.to_dict() for s in self.most_traded],
            "symbol_analysis": [s.to_dict() for s in self.symbols],
        }


def analyze_symbols(trades: Iterable[MatchedTrade], *, top_n: int = 5) -> SymbolAnalysis:
    """Group *trades* by symbol, in first-seen order."""
    by_symbol: dict[str, SymbolStats] = {}
    for trade in trades:
        stats = by_symbol.get(trade.symbol)
        if stats is None:
            stats = by_symbol[trade.symbol] = SymbolStats(symbol=trade.symbol)
        stats.record(trade)

    logger.debug("Symbol analysis over %d symbol(s)", len(by_symbol))
    return SymbolAnalysis(symbols=list(by_symbol.values()), top_n=top_n)
