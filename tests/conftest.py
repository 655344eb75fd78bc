"""Shared fixtures for the trade-journal test suite."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import structlog

from trade_journal.core.clock import FixedClock
from trade_journal.core.enums import Direction, TradeSide
from trade_journal.core.models import MatchedTrade, RawTradeRow


BASE_TIME = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _row(
    side: str = "BUY",
    qty: float | str = 100,
    price: float | str = 10,
    *,
    symbol: str = "X",
    minutes: int = 0,
    at: datetime | None = None,
    commission: float | str = 0,
    row_number: int = 0,
) -> RawTradeRow:
    return RawTradeRow(
        symbol=symbol,
        side=TradeSide(side),
        quantity=Decimal(str(qty)),
        price=Decimal(str(price)),
        timestamp=at or BASE_TIME + timedelta(minutes=minutes),
        commission=Decimal(str(commission)),
        row_number=row_number,
    )


def _trade(
    pnl: float | str,
    *,
    symbol: str = "X",
    qty: float | str = 1,
    buy_at: datetime | None = None,
    hold: timedelta = timedelta(hours=2),
) -> MatchedTrade:
    """Long round trip of *qty* units bought at 100 with the given P&L."""
    qty_d = Decimal(str(qty))
    buy_price = Decimal("100")
    sell_price = buy_price + Decimal(str(pnl)) / qty_d
    opened = buy_at or BASE_TIME
    return MatchedTrade(
        symbol=symbol,
        quantity=qty_d,
        buy_price=buy_price,
        sell_price=sell_price,
        buy_timestamp=opened,
        sell_timestamp=opened + hold,
        direction=Direction.LONG,
    )


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def make_row():
    """Factory for :class:`RawTradeRow` (side, qty, price, **kw)."""
    return _row


@pytest.fixture
def make_trade():
    """Factory for a long :class:`MatchedTrade` with a given P&L."""
    return _trade


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo handler and level changes made by ``setup_logging``."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler.get_name() == "trade_journal":
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Sample files
# ---------------------------------------------------------------------------

@pytest.fixture
def tradebook_csv() -> str:
    """Zerodha-style tradebook with a partial close and an open lot."""
    return (
        "Symbol,Trade Type,Quantity,Price,Amount,Trade Date\n"
        "INFY,buy,100,1500.00,150000,2024-01-02T09:30:00\n"
        "INFY,sell,60,1550.00,93000,2024-01-03T10:00:00\n"
        "TCS,BUY,10,\"3,400.00\",,2024-01-04T11:15:00\n"
        "TCS,S,10,3300,33000,2024-02-05T14:45:00\n"
    )


@pytest.fixture
def paytm_csv() -> str:
    """Day-first dates with a separate time column and brokerage."""
    return (
        "Date,Time,Script,Type,Qty,Rate,Brokerage\n"
        "02-01-2024,09:30:00,RELIANCE,B,5,2500,10\n"
        "02-01-2024,15:10:00,RELIANCE,S,5,2550,10\n"
    )
