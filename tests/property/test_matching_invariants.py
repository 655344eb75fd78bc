"""Property tests: FIFO matching conserves quantity and is deterministic.

For any sequence of buys and sells on one symbol, every unit either
appears in exactly one matched trade (counted once on each side) or is
left over in an open position.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given, settings, strategies as st

from trade_journal.core.enums import Direction, TradeSide
from trade_journal.core.models import RawTradeRow
from trade_journal.matching import match_trades

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

row_strategy = st.builds(
    lambda side, qty, price, minute, symbol: RawTradeRow(
        symbol=symbol,
        side=side,
        quantity=qty,
        price=price,
        timestamp=T0 + timedelta(minutes=minute),
    ),
    side=st.sampled_from([TradeSide.BUY, TradeSide.SELL]),
    qty=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("1000"), places=2),
    price=st.decimals(min_value=Decimal("0.05"), max_value=Decimal("50000"), places=2),
    minute=st.integers(min_value=0, max_value=500),
    symbol=st.sampled_from(["AAA", "BBB", "CCC"]),
)


@given(rows=st.lists(row_strategy, max_size=40))
@settings(max_examples=200)
def test_quantity_conserved(rows):
    """2 x matched + open == total input, per symbol."""
    result = match_trades(rows)
    for symbol in {r.symbol for r in rows}:
        total_in = sum((r.quantity for r in rows if r.symbol == symbol), Decimal("0"))
        matched = sum(
            (t.quantity for t in result.matched if t.symbol == symbol), Decimal("0")
        )
        remaining = sum(
            (p.remaining_quantity for p in result.open if p.symbol == symbol),
            Decimal("0"),
        )
        assert 2 * matched + remaining == total_in


@given(rows=st.lists(row_strategy, max_size=40))
@settings(max_examples=100)
def test_open_positions_one_sided_per_symbol(rows):
    """Leftovers for a symbol are all buys or all sells, never both."""
    result = match_trades(rows)
    for symbol in {p.symbol for p in result.open}:
        sides = {p.side for p in result.open if p.symbol == symbol}
        assert len(sides) == 1


@given(rows=st.lists(row_strategy, max_size=40))
@settings(max_examples=100)
def test_matched_trades_well_formed(rows):
    result = match_trades(rows)
    for trade in result.matched:
        assert trade.quantity > 0
        assert trade.duration >= timedelta(0)
        if trade.direction == Direction.LONG:
            assert trade.buy_timestamp <= trade.sell_timestamp
        else:
            assert trade.sell_timestamp <= trade.buy_timestamp
    for position in result.open:
        assert Decimal("0") < position.remaining_quantity <= position.quantity


@given(rows=st.lists(row_strategy, max_size=30))
@settings(max_examples=100)
def test_deterministic(rows):
    first = match_trades(rows)
    second = match_trades(rows)
    assert [t.to_dict() for t in first.matched] == [t.to_dict() for t in second.matched]
    assert [p.to_dict() for p in first.open] == [p.to_dict() for p in second.open]
