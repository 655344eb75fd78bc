"""Time-of-day, weekday and monthly performance patterns.

Breaks matched trades down by the hour they were opened, the day of the
week, and the calendar month, and labels each hourly slot with an
"emotional zone" so the dashboard can highlight hours where the trader
tends to over-reach or freeze up.

Usage::

    report = analyze_patterns(trades, tz="Asia/Kolkata")
    report["emotional_zones"]   # only slots with trades
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from trade_journal.core.enums import EmotionalZone
from trade_journal.core.models import MatchedTrade
from trade_journal.core.numbers import round_half_up

logger = logging.getLogger(__name__)

# Dashboard order: market hours first, then wrap around midnight
SLOT_HOURS: tuple[int, ...] = tuple(range(9, 24)) + tuple(range(0, 9))

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

_ZERO = Decimal("0")


@dataclass
class _BucketStats:
    """Accumulator for a time bucket."""

    trades: int = 0
    wins: int = 0
    total_pnl: Decimal = _ZERO

    def record(self, trade: MatchedTrade) -> None:
        self.trades += 1
        self.total_pnl += trade.pnl
        if trade.pnl > 0:
            self.wins += 1

    @property
    def win_ratio(self) -> Decimal:
        if self.trades == 0:
            return _ZERO
        return Decimal(self.wins) / self.trades

    @property
    def avg_pnl(self) -> Decimal:
        if self.trades == 0:
            return _ZERO
        return self.total_pnl / self.trades

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_trades": self.trades,
            "win_rate": round_half_up(self.win_ratio * 100, 0),
            "avg_pnl": round_half_up(self.avg_pnl),
            "total_pnl": round_half_up(self.total_pnl),
        }


def classify_zone(win_ratio: Decimal, avg_pnl: Decimal) -> EmotionalZone:
    """Label a slot from its win ratio (0..1) and average P&L."""
    if win_ratio > Decimal("0.6") and avg_pnl > 0:
        return EmotionalZone.EUPHORIC
    if win_ratio < Decimal("0.4") and avg_pnl < 0:
        return EmotionalZone.FEARFUL
    if win_ratio > Decimal("0.5") and avg_pnl > 0:
        return EmotionalZone.CONFIDENT
    if win_ratio < Decimal("0.5") and avg_pnl < 0:
        return EmotionalZone.ANXIOUS
    return EmotionalZone.NEUTRAL


def _slot_label(hour: int) -> str:
    return f"{hour:02d}:00-{(hour + 1) % 24:02d}:00"


def analyze_patterns(trades: Iterable[MatchedTrade], *, tz: str = "UTC") -> dict[str, Any]:
    """Build the hourly / weekday / monthly breakdown.

    Returns
    -------
    dict
        ``time_slots`` : all 24 hourly slots with an ``emotional_zone``
        ``emotional_zones`` : the slots that contain trades
        ``day_of_week`` : seven entries, Sunday first
        ``monthly_patterns`` : per entry month, first-seen order
    """
    zone = ZoneInfo(tz)
    by_hour = {h: _BucketStats() for h in range(24)}
    by_day = {d: _BucketStats() for d in range(7)}
    by_month: dict[str, _BucketStats] = {}

    for trade in trades:
        opened = trade.opened_at.astimezone(zone)
        by_hour[opened.hour].record(trade)
        # isoweekday: Monday=1 .. Sunday=7 -> Sunday=0
        by_day[opened.isoweekday() % 7].record(trade)
        month = opened.strftime("%Y-%m")
        by_month.setdefault(month, _BucketStats()).record(trade)

    time_slots = []
    for hour in SLOT_HOURS:
        stats = by_hour[hour]
        entry = {"slot": _slot_label(hour), **stats.to_dict()}
        entry["emotional_zone"] = (
            classify_zone(stats.win_ratio, stats.avg_pnl).value
            if stats.trades
            else EmotionalZone.NEUTRAL.value
        )
        time_slots.append(entry)

    report = {
        "emotional_zones": [s for s in time_slots if s["total_trades"] > 0],
        "time_slots": time_slots,
        "day_of_week": [
            {"day": DAY_NAMES[d], **by_day[d].to_dict()} for d in range(7)
        ],
        "monthly_patterns": [
            {"month": m, **s.to_dict()} for m, s in by_month.items()
        ],
    }
    logger.debug(
        "Pattern analysis: %d active slot(s)", len(report["emotional_zones"])
    )
    return report
