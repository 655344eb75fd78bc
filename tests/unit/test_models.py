"""Tests for the core trade models."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from trade_journal.core.enums import Direction, TradeSide
from trade_journal.core.models import MatchedTrade, MatchResult, RawTradeRow

T0 = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)


class TestRawTradeRow:
    def test_amount_defaults_to_notional(self):
        row = RawTradeRow("X", TradeSide.BUY, Decimal("3"), Decimal("2.5"), T0)
        assert row.amount == Decimal("7.5")

    def test_explicit_amount_kept(self):
        row = RawTradeRow(
            "X", TradeSide.SELL, Decimal("3"), Decimal("2.5"), T0, amount=Decimal("7.4")
        )
        assert row.to_dict()["amount"] == "7.4"
        assert row.to_dict()["side"] == "SELL"


class TestMatchedTrade:
    def test_short_trade_times(self):
        trade = MatchedTrade(
            symbol="X",
            quantity=Decimal("2"),
            buy_price=Decimal("90"),
            sell_price=Decimal("100"),
            buy_timestamp=T0 + timedelta(hours=1),
            sell_timestamp=T0,
            direction=Direction.SHORT,
            commission=Decimal("1"),
            buy_row=4,
            sell_row=2,
        )
        assert trade.pnl == Decimal("20")
        assert trade.net_pnl == Decimal("19")
        assert trade.opened_at == T0
        assert trade.closed_at == T0 + timedelta(hours=1)
        assert trade.pnl_pct == Decimal("10")

        data = trade.to_dict()
        assert data["trade_id"] == "X:4-2"
        assert data["direction"] == "short"
        assert data["duration_minutes"] == 60


def test_match_result_net_profit_uses_net_pnl():
    trade = MatchedTrade(
        symbol="X", quantity=Decimal("1"), buy_price=Decimal("10"),
        sell_price=Decimal("15"), buy_timestamp=T0, sell_timestamp=T0,
        commission=Decimal("0.5"),
    )
    result = MatchResult(matched=[trade, trade])
    assert result.total_matched == 2
    assert result.net_profit == Decimal("9")
