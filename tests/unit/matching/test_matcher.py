"""Tests for FIFO trade matching."""

from decimal import Decimal

from trade_journal.core.enums import Direction, TradeSide
from trade_journal.matching import TradeMatcher, match_trades


class TestRoundTrips:
    def test_simple_round_trip(self, make_row):
        result = match_trades([
            make_row("BUY", 100, 10, minutes=0),
            make_row("SELL", 100, 12, minutes=60),
        ])
        assert result.total_matched == 1
        assert result.total_unmatched == 0
        trade = result.matched[0]
        assert trade.quantity == Decimal("100")
        assert trade.pnl == Decimal("200")
        assert trade.direction == Direction.LONG
        assert trade.pnl_pct == Decimal("20")
        assert trade.trade_id == "X:1-2"
        assert result.net_profit == Decimal("200")

    def test_partial_close_leaves_open_lot(self, make_row):
        result = match_trades([
            make_row("BUY", 100, 10, minutes=0),
            make_row("SELL", 60, 12, minutes=5),
        ])
        assert [t.quantity for t in result.matched] == [Decimal("60")]
        assert result.matched[0].pnl == Decimal("120")

        (position,) = result.open
        assert position.side == TradeSide.BUY
        assert position.quantity == Decimal("100")
        assert position.remaining_quantity == Decimal("40")
        assert position.position_id == "X:1:BUY"
        assert position.is_active

    def test_sell_spans_several_buy_lots_oldest_first(self, make_row):
        result = match_trades([
            make_row("BUY", 50, 10, minutes=0),
            make_row("BUY", 50, 20, minutes=1),
            make_row("SELL", 70, 30, minutes=2),
        ])
        assert [(t.quantity, t.buy_price) for t in result.matched] == [
            (Decimal("50"), Decimal("10")),
            (Decimal("20"), Decimal("20")),
        ]
        assert result.open[0].remaining_quantity == Decimal("30")
        assert result.open[0].price == Decimal("20")

    def test_rows_sorted_by_time_not_input_order(self, make_row):
        result = match_trades([
            make_row("SELL", 10, 15, minutes=30),
            make_row("BUY", 10, 10, minutes=0),
        ])
        trade = result.matched[0]
        assert trade.direction == Direction.LONG
        assert trade.pnl == Decimal("50")
        assert trade.trade_id == "X:2-1"

    def test_equal_timestamps_keep_input_order(self, make_row):
        result = match_trades([
            make_row("BUY", 10, 10, minutes=0),
            make_row("BUY", 10, 11, minutes=0),
            make_row("SELL", 10, 12, minutes=0),
        ])
        assert result.matched[0].buy_price == Decimal("10")
        assert result.open[0].price == Decimal("11")

    def test_symbols_matched_independently(self, make_row):
        result = match_trades([
            make_row("BUY", 10, 10, symbol="AAA"),
            make_row("SELL", 10, 12, symbol="BBB", minutes=1),
        ])
        assert result.matched == []
        assert {(p.symbol, p.side) for p in result.open} == {
            ("AAA", TradeSide.BUY), ("BBB", TradeSide.SELL),
        }

    def test_symbol_case_folded(self, make_row):
        result = match_trades([
            make_row("BUY", 1, 10, symbol="infy"),
            make_row("SELL", 1, 12, symbol="INFY", minutes=1),
        ])
        assert result.matched[0].symbol == "INFY"


class TestShorts:
    def test_sell_first_opens_short(self, make_row):
        result = match_trades([
            make_row("SELL", 10, 50, minutes=0),
            make_row("BUY", 10, 45, minutes=30),
        ])
        trade = result.matched[0]
        assert trade.direction == Direction.SHORT
        assert trade.pnl == Decimal("50")
        assert trade.pnl_pct == Decimal("10")
        assert trade.opened_at == trade.sell_timestamp
        assert trade.duration.total_seconds() == 30 * 60

    def test_unmatched_sell_is_open_short(self, make_row):
        result = match_trades([make_row("SELL", 5, 100)])
        (position,) = result.open
        assert position.side == TradeSide.SELL
        assert position.remaining_quantity == Decimal("5")
        assert position.position_id == "X:1:SELL"

    def test_oversized_buy_closes_short_then_opens_long(self, make_row):
        result = match_trades([
            make_row("SELL", 5, 100, minutes=0),
            make_row("BUY", 8, 90, minutes=1),
        ])
        assert result.matched[0].quantity == Decimal("5")
        assert result.matched[0].direction == Direction.SHORT
        (position,) = result.open
        assert position.side == TradeSide.BUY
        assert position.remaining_quantity == Decimal("3")


class TestCommission:
    def test_commission_split_pro_rata(self, make_row):
        result = match_trades([
            make_row("BUY", 100, 10, commission=20, minutes=0),
            make_row("SELL", 50, 12, commission=10, minutes=1),
        ])
        trade = result.matched[0]
        assert trade.commission == Decimal("20")
        assert trade.pnl == Decimal("100")
        assert trade.net_pnl == Decimal("80")
        assert result.net_profit == Decimal("80")
        assert result.open[0].commission == Decimal("10")


class TestDeterminism:
    def test_source_row_numbers_used_for_ids(self, make_row):
        result = match_trades([
            make_row("BUY", 1, 10, row_number=7),
            make_row("SELL", 1, 11, row_number=9, minutes=1),
        ])
        assert result.matched[0].trade_id == "X:7-9"

    def test_input_rows_untouched(self, make_row):
        rows = [make_row("BUY", 10, 10), make_row("SELL", 4, 11, minutes=1)]
        before = list(rows)
        match_trades(rows)
        assert rows == before
        assert rows[0].quantity == Decimal("10")

    def test_same_input_same_output(self, make_row):
        rows = [
            make_row("BUY", 3, 10),
            make_row("SELL", 1, 11, minutes=1),
            make_row("BUY", 2, 9, minutes=1),
            make_row("SELL", 4, 12, minutes=2),
        ]
        matcher = TradeMatcher()
        first = matcher.match(rows)
        second = matcher.match(rows)
        assert [t.to_dict() for t in first.matched] == [t.to_dict() for t in second.matched]
        assert [p.to_dict() for p in first.open] == [p.to_dict() for p in second.open]

    def test_empty_input(self):
        result = match_trades([])
        assert result.matched == []
        assert result.open == []
        assert result.net_profit == Decimal("0")
