from decimal import Decimal

from mt_dashboard.backend.data_processor import aggregate_positions
from mt_dashboard.backend.models import NetType, Position, Side

_next_ticket = iter(range(1000, 100000))


def make_position(symbol, side, volume, profit="0", swap="0", commission="0"):
    return Position(
        ticket=next(_next_ticket),
        symbol=symbol,
        side=Side(side),
        volume=Decimal(volume),
        open_price=Decimal("1"),
        current_price=Decimal("1"),
        profit=Decimal(profit),
        swap=Decimal(swap),
        commission=Decimal(commission),
        open_time=None,
    )


def by_symbol(summaries):
    return {s.symbol: s for s in summaries}


def test_single_buy():
    [summary] = aggregate_positions([make_position("XAUUSD", "BUY", "0.10")])
    assert summary.symbol == "XAUUSD"
    assert summary.net_volume == Decimal("0.10")
    assert summary.net_type is NetType.BUY


def test_offsetting_positions_are_neutral():
    [summary] = aggregate_positions([
        make_position("EURUSD", "BUY", "0.50"),
        make_position("EURUSD", "SELL", "0.50"),
    ])
    assert summary.net_volume == Decimal("0")
    assert summary.net_type is NetType.NEUTRAL


def test_net_short():
    [summary] = aggregate_positions([
        make_position("EURUSD", "BUY", "0.30"),
        make_position("EURUSD", "SELL", "0.80"),
    ])
    assert summary.net_volume == Decimal("0.50")
    assert summary.net_type is NetType.SELL


def test_neutral_is_exact_for_values_that_drift_in_binary_floats():
    # 0.1 + 0.2 - 0.3 != 0 in floats
    [summary] = aggregate_positions([
        make_position("GBPUSD", "BUY", "0.1"),
        make_position("GBPUSD", "BUY", "0.2"),
        make_position("GBPUSD", "SELL", "0.3"),
    ])
    assert summary.net_type is NetType.NEUTRAL
    assert summary.net_volume == 0


def test_one_summary_per_symbol():
    positions = [
        make_position("EURUSD", "BUY", "1"),
        make_position("XAUUSD", "SELL", "0.2"),
        make_position("EURUSD", "BUY", "0.5"),
        make_position("USDJPY", "SELL", "0.7"),
    ]
    summaries = aggregate_positions(positions)
    assert [s.symbol for s in summaries] == ["EURUSD", "XAUUSD", "USDJPY"]
    assert set(by_symbol(summaries)) == {p.symbol for p in positions}


def test_totals_and_count():
    summaries = by_symbol(aggregate_positions([
        make_position("EURUSD", "BUY", "1", profit="10.5", swap="-1.2", commission="-3"),
        make_position("EURUSD", "SELL", "0.4", profit="-4.25", swap="-0.3", commission="-1"),
    ]))
    eur = summaries["EURUSD"]
    assert eur.total_profit == Decimal("6.25")
    assert eur.total_swap == Decimal("-1.5")
    assert eur.total_commission == Decimal("-4")
    assert eur.position_count == 2
    assert eur.net_volume == Decimal("0.6")


def test_empty_input():
    assert aggregate_positions([]) == []


def test_idempotent():
    positions = (
        make_position("EURUSD", "BUY", "0.3"),
        make_position("XAUUSD", "SELL", "0.1"),
    )
    assert aggregate_positions(positions) == aggregate_positions(positions)
