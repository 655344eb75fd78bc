"""Aggregate performance report over matched trades.

Usage::

    report = summarize(result.matched)
    report.to_dict()["win_rate"]

Everything is computed in :class:`~decimal.Decimal` and rounded to two
places only in :meth:`PerformanceReport.to_dict`.  Ratios whose
denominator is zero (profit factor, Sharpe-like ratio, drawdown
percentage) are reported as 0.

Two figures depend on the order of *trades* as given:

* drawdown is sequential, so pass trades in chronological order;
* month buckets are emitted in first-seen order, not sorted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from trade_journal.core.models import MatchedTrade
from trade_journal.core.numbers import round_half_up

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


@dataclass
class DrawdownStats:
    """Result of a sequential peak-to-trough walk."""

    max_drawdown: Decimal = _ZERO
    peak_at_max: Decimal = _ZERO

    @property
    def pct_of_peak(self) -> Decimal:
        if self.peak_at_max <= 0:
            return _ZERO
        return self.max_drawdown / self.peak_at_max * 100


@dataclass
class PerformanceReport:
    """Read-only aggregate; recomputed on demand, never stored."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    gross_profit: Decimal = _ZERO
    gross_loss: Decimal = _ZERO  # Absolute value
    total_pnl: Decimal = _ZERO
    drawdown: DrawdownStats = field(default_factory=DrawdownStats)
    sharpe_ratio: Decimal = _ZERO  # Per-trade, not annualized
    trades_by_month: dict[str, int] = field(default_factory=dict)
    pnl_by_month: dict[str, Decimal] = field(default_factory=dict)

    @property
    def net_profit(self) -> Decimal:
        return self.gross_profit - self.gross_loss

    @property
    def win_rate(self) -> Decimal:
        if self.total_trades == 0:
            return _ZERO
        return Decimal(self.winning_trades) / self.total_trades * 100

    @property
    def average_win(self) -> Decimal:
        if self.winning_trades == 0:
            return _ZERO
        return self.gross_profit / self.winning_trades

    @property
    def average_loss(self) -> Decimal:
        if self.losing_trades == 0:
            return _ZERO
        return self.gross_loss / self.losing_trades

    @property
    def profit_factor(self) -> Decimal:
        """Gross profit over gross loss; 0 when there are no losses."""
        if self.gross_loss == 0:
            return _ZERO
        return self.gross_profit / self.gross_loss

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "win_rate": round_half_up(self.win_rate),
            "total_pnl": round_half_up(self.total_pnl),
            "gross_profit": round_half_up(self.gross_profit),
            "gross_loss": round_half_up(self.gross_loss),
            "net_profit": round_half_up(self.net_profit),
            "average_win": round_half_up(self.average_win),
            "average_loss": round_half_up(self.average_loss),
            "profit_factor": round_half_up(self.profit_factor),
            "max_drawdown": round_half_up(self.drawdown.pct_of_peak),
            "max_drawdown_amount": round_half_up(self.drawdown.max_drawdown),
            "sharpe_ratio": round_half_up(self.sharpe_ratio),
            "trades_by_month": [
                {"month": m, "count": c} for m, c in self.trades_by_month.items()
            ],
            "pnl_by_month": [
                {"month": m, "pnl": round_half_up(p)}
                for m, p in self.pnl_by_month.items()
            ],
        }


def sequential_drawdown(pnls: Iterable[Decimal]) -> DrawdownStats:
    """Largest fall of the running P&L total below its running peak.

    The peak starts at zero, so an opening loss counts as drawdown with a
    zero peak (and a 0% figure).
    """
    stats = DrawdownStats()
    peak = _ZERO
    running = _ZERO
    for pnl in pnls:
        running += pnl
        if running > peak:
            peak = running
        dd = peak - running
        if dd > stats.max_drawdown:
            stats.max_drawdown = dd
            stats.peak_at_max = peak
    return stats


def per_trade_sharpe(pnls: list[Decimal]) -> Decimal:
    """Population mean over population std-dev of per-trade P&L.

    A single-period figure, not an annualized Sharpe ratio.
    """
    if not pnls:
        return _ZERO
    n = len(pnls)
    mean = sum(pnls, _ZERO) / n
    variance = sum(((p - mean) ** 2 for p in pnls), _ZERO) / n
    if variance == 0:
        return _ZERO
    return mean / variance.sqrt()


def summarize(trades: Iterable[MatchedTrade], *, tz: str = "UTC") -> PerformanceReport:
    """Compute the performance report for *trades* in the order given.

    Month buckets use the buy date as seen in *tz*.
    """
    zone = ZoneInfo(tz)
    trades = list(trades)
    report = PerformanceReport(total_trades=len(trades))
    if not trades:
        return report

    pnls: list[Decimal] = []
    for trade in trades:
        pnl = trade.pnl
        pnls.append(pnl)
        report.total_pnl += pnl
        if pnl > 0:
            report.winning_trades += 1
            report.gross_profit += pnl
        elif pnl < 0:
            report.losing_trades += 1
            report.gross_loss += -pnl

        month = trade.buy_timestamp.astimezone(zone).strftime("%Y-%m")
        report.trades_by_month[month] = report.trades_by_month.get(month, 0) + 1
        report.pnl_by_month[month] = report.pnl_by_month.get(month, _ZERO) + pnl

    report.drawdown = sequential_drawdown(pnls)
    report.sharpe_ratio = per_trade_sharpe(pnls)

    logger.debug(
        "Performance: %d trades, win rate %s, net %s",
        report.total_trades,
        report.win_rate,
        report.net_profit,
    )
    return report
