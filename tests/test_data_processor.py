from decimal import Decimal

from helpers import ACCOUNT_PAYLOAD, HISTORY_PAYLOAD, POSITIONS_PAYLOAD
from mt_dashboard.backend import data_processor
from mt_dashboard.backend.data_loader import parse_account_snapshot, parse_history, parse_positions


def test_positions_frame_columns():
    df = data_processor.build_positions_frame(parse_positions(POSITIONS_PAYLOAD))
    assert list(df["Symbol"]) == ["XAUUSD", "EURUSD"]
    assert list(df["Type"]) == ["Buy", "Sell"]
    assert df["P&L"].sum() == 57.5


def test_summary_and_exposure_frames():
    summaries = data_processor.aggregate_positions(parse_positions(POSITIONS_PAYLOAD))
    summary_df = data_processor.build_summary_frame(summaries)
    assert list(summary_df["Direction"]) == ["Buy", "Sell"]

    exposure = data_processor.build_exposure_frame(summaries)
    assert dict(zip(exposure["symbol"], exposure["exposure"])) == {"XAUUSD": 0.1, "EURUSD": -0.5}


def test_exposure_frame_empty():
    df = data_processor.build_exposure_frame([])
    assert df.empty
    assert list(df.columns) == ["symbol", "exposure"]


def test_history_frame_and_totals():
    history = parse_history(HISTORY_PAYLOAD)
    df = data_processor.build_history_frame(history)
    assert list(df["Ticket"]) == [123450]

    totals = data_processor.compute_history_totals(history)
    assert totals["trades"] == 1
    assert totals["wins"] == 1
    assert totals["total_profit"] == Decimal("90.0")
    assert totals["win_rate"] == 100.0


def test_history_totals_empty():
    totals = data_processor.compute_history_totals([])
    assert totals["trades"] == 0
    assert totals["win_rate"] == 0.0


def test_realized_pnl_is_cumulative():
    payload = {"data": [
        dict(HISTORY_PAYLOAD["data"][0], ticket=1, profit=-30, closeTime="2024-01-13 10:00:00"),
        dict(HISTORY_PAYLOAD["data"][0], ticket=2, profit=90, closeTime="2024-01-14 15:30:00"),
    ]}
    df = data_processor.build_realized_pnl_frame(parse_history(payload))
    assert list(df["cum_profit"]) == [-30.0, 60.0]


def test_margin_level_status():
    snapshot = parse_account_snapshot(ACCOUNT_PAYLOAD)
    assert data_processor.margin_level_status(snapshot) == "Safe"

    risky = dict(ACCOUNT_PAYLOAD["data"], marginLevel=150)
    assert data_processor.margin_level_status(parse_account_snapshot({"data": risky})) == "Danger"
    assert data_processor.margin_level_status(None) == "Unknown"
