"""Daily risk overview for the dashboard header.

Summarizes one calendar day of trading and classifies it against the
configured daily loss thresholds::

    overview = daily_overview(trades, date(2024, 3, 4), risk=settings.risk)
    overview.status   # RiskStatus.AMBER
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from trade_journal.core.config import RiskConfig
from trade_journal.core.enums import RiskStatus
from trade_journal.core.models import MatchedTrade
from trade_journal.core.numbers import round_half_up

from .performance import DrawdownStats, sequential_drawdown

logger = logging.getLogger(__name__)

_MESSAGES = {
    RiskStatus.GREEN: "All systems normal",
    RiskStatus.AMBER: "Approaching daily loss limit",
    RiskStatus.RED: "High daily loss - consider stopping",
}


@dataclass
class DailyOverview:
    day: date
    total_trades: int
    winning_trades: int
    day_pnl: Decimal
    status: RiskStatus
    recent_drawdown: DrawdownStats

    @property
    def win_rate(self) -> Decimal:
        if self.total_trades == 0:
            return Decimal("0")
        return Decimal(self.winning_trades) / self.total_trades * 100

    @property
    def message(self) -> str:
        return _MESSAGES[self.status]

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "win_rate": round_half_up(self.win_rate),
            "day_pnl": round_half_up(self.day_pnl),
            "risk_status": self.status.value,
            "risk_message": self.message,
            "max_drawdown": round_half_up(self.recent_drawdown.pct_of_peak),
            "max_drawdown_amount": round_half_up(self.recent_drawdown.max_drawdown),
        }


def classify_daily_pnl(day_pnl: Decimal, risk: RiskConfig) -> RiskStatus:
    """Red beyond the red loss threshold, amber beyond amber, else green."""
    if day_pnl < -risk.red_daily_loss:
        return RiskStatus.RED
    if day_pnl < -risk.amber_daily_loss:
        return RiskStatus.AMBER
    return RiskStatus.GREEN


def daily_overview(
    trades: Iterable[MatchedTrade],
    day: date,
    *,
    risk: RiskConfig | None = None,
    tz: str = "UTC",
) -> DailyOverview:
    """Summarize trades whose buy or sell leg falls on *day*.

    *trades* should be in chronological order; the drawdown figure uses
    the last ``risk.drawdown_lookback`` of them.
    """
    risk = risk or RiskConfig()
    zone = ZoneInfo(tz)
    trades = list(trades)

    todays = [
        t for t in trades
        if t.buy_timestamp.astimezone(zone).date() == day
        or t.sell_timestamp.astimezone(zone).date() == day
    ]
    day_pnl = sum((t.pnl for t in todays), Decimal("0"))
    status = classify_daily_pnl(day_pnl, risk)
    if status != RiskStatus.GREEN:
        logger.warning("Daily P&L %s on %s: %s", day_pnl, day, status.value)

    recent = trades[-risk.drawdown_lookback:]
    return DailyOverview(
        day=day,
        total_trades=len(todays),
        winning_trades=sum(1 for t in todays if t.pnl > 0),
        day_pnl=day_pnl,
        status=status,
        recent_drawdown=sequential_drawdown(t.pnl for t in recent),
    )
