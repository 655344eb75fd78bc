"""Core trade models shared by the normalizer, matcher and analytics.

``RawTradeRow`` is what the normalizer produces from one uploaded row.
``MatchedTrade`` is one closed round trip (or the overlapping part of
one) and ``OpenPosition`` is the unmatched remainder of a lot.

Rows and matched trades are frozen: an edit means re-running the match.
Open positions carry the mutable bookkeeping fields the user touches
afterwards (notes, investment flag, manual close).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from .enums import Direction, TradeSide


@dataclass(frozen=True)
class RawTradeRow:
    """One validated buy or sell execution."""

    symbol: str
    side: TradeSide
    quantity: Decimal
    price: Decimal
    timestamp: datetime
    amount: Decimal | None = None
    commission: Decimal = Decimal("0")
    row_number: int = 0  # 1-based data row in the source file

    def __post_init__(self) -> None:
        if self.amount is None:
            object.__setattr__(self, "amount", self.quantity * self.price)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": str(self.quantity),
            "price": str(self.price),
            "amount": str(self.amount),
            "commission": str(self.commission),
            "timestamp": self.timestamp.isoformat(),
            "row_number": self.row_number,
        }


@dataclass(frozen=True)
class MatchedTrade:
    """A buy lot paired against a sell lot for the same symbol.

    ``buy_row`` / ``sell_row`` point back at the source rows so the id is
    stable across runs on identical input.
    """

    symbol: str
    quantity: Decimal
    buy_price: Decimal
    sell_price: Decimal
    buy_timestamp: datetime
    sell_timestamp: datetime
    direction: Direction = Direction.LONG
    commission: Decimal = Decimal("0")
    buy_row: int = 0
    sell_row: int = 0

    @property
    def trade_id(self) -> str:
        return f"{self.symbol}:{self.buy_row}-{self.sell_row}"

    @property
    def pnl(self) -> Decimal:
        """Realized gross P&L.  Same formula for longs and shorts."""
        return self.quantity * (self.sell_price - self.buy_price)

    @property
    def net_pnl(self) -> Decimal:
        return self.pnl - self.commission

    @property
    def entry_price(self) -> Decimal:
        return self.buy_price if self.direction == Direction.LONG else self.sell_price

    @property
    def pnl_pct(self) -> Decimal:
        """P&L as a percentage of entry notional."""
        notional = self.entry_price * self.quantity
        if notional == 0:
            return Decimal("0")
        return self.pnl / notional * 100

    @property
    def opened_at(self) -> datetime:
        if self.direction == Direction.LONG:
            return self.buy_timestamp
        return self.sell_timestamp

    @property
    def closed_at(self) -> datetime:
        if self.direction == Direction.LONG:
            return self.sell_timestamp
        return self.buy_timestamp

    @property
    def duration(self) -> timedelta:
        return self.closed_at - self.opened_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "trade_id": self.trade_id,
            "symbol": self.symbol,
            "direction": self.direction.value,
            "quantity": str(self.quantity),
            "buy_price": str(self.buy_price),
            "sell_price": str(self.sell_price),
            "buy_timestamp": self.buy_timestamp.isoformat(),
            "sell_timestamp": self.sell_timestamp.isoformat(),
            "pnl": str(self.pnl),
            "pnl_pct": str(self.pnl_pct),
            "commission": str(self.commission),
            "net_pnl": str(self.net_pnl),
            "duration_minutes": int(self.duration.total_seconds() // 60),
        }


@dataclass
class OpenPosition:
    """Unmatched remainder of a lot after the matching pass."""

    position_id: str
    symbol: str
    side: TradeSide
    quantity: Decimal  # Original lot size
    remaining_quantity: Decimal
    price: Decimal
    timestamp: datetime
    commission: Decimal = Decimal("0")
    row_number: int = 0

    # User-managed lifecycle
    is_investment: bool = False
    is_manually_closed: bool = False
    manual_close_date: datetime | None = None
    manual_close_reason: str | None = None
    notes: str | None = None
    last_updated: datetime | None = None

    @property
    def is_active(self) -> bool:
        return not self.is_manually_closed

    def to_dict(self) -> dict[str, Any]:
        return {
            "position_id": self.position_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": str(self.quantity),
            "remaining_quantity": str(self.remaining_quantity),
            "price": str(self.price),
            "timestamp": self.timestamp.isoformat(),
            "is_investment": self.is_investment,
            "is_manually_closed": self.is_manually_closed,
            "manual_close_date": (
                self.manual_close_date.isoformat() if self.manual_close_date else None
            ),
            "manual_close_reason": self.manual_close_reason,
            "notes": self.notes,
        }


@dataclass
class MatchResult:
    """Output of one matching pass."""

    matched: list[MatchedTrade] = field(default_factory=list)
    open: list[OpenPosition] = field(default_factory=list)

    @property
    def total_matched(self) -> int:
        return len(self.matched)

    @property
    def total_unmatched(self) -> int:
        return len(self.open)

    @property
    def net_profit(self) -> Decimal:
        return sum((t.net_pnl for t in self.matched), Decimal("0"))
