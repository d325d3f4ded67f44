"""
Data processing and calculation functions for MetaTrader Account Dashboard
Handles per-symbol aggregation and the DataFrames the frontend renders.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .. import config
from .models import AccountSnapshot, HistoryTrade, NetType, Position, SymbolSummary

MARGIN_LEVEL_SAFE_THRESHOLD = config.MARGIN_LEVEL_SAFE_THRESHOLD
SIDE_LABELS = config.SIDE_LABELS

ZERO = Decimal("0")


def net_type_for(signed_volume: Decimal) -> NetType:
    if signed_volume > 0:
        return NetType.BUY
    if signed_volume < 0:
        return NetType.SELL
    return NetType.NEUTRAL


def aggregate_positions(positions: Iterable[Position]) -> List[SymbolSummary]:
    """Net exposure per symbol.

    BUY volume counts positive and SELL volume negative; the summary carries
    the absolute net volume and its direction. Symbols come out in the order
    they first appear in ``positions``.
    """
    totals: Dict[str, Dict] = {}
    for pos in positions:
        entry = totals.get(pos.symbol)
        if entry is None:
            entry = totals[pos.symbol] = {
                "signed": ZERO,
                "profit": ZERO,
                "swap": ZERO,
                "commission": ZERO,
                "count": 0,
            }
        entry["signed"] += pos.signed_volume
        entry["profit"] += pos.profit
        entry["swap"] += pos.swap
        entry["commission"] += pos.commission
        entry["count"] += 1

    return [
        SymbolSummary(
            symbol=symbol,
            net_volume=abs(entry["signed"]),
            net_type=net_type_for(entry["signed"]),
            total_profit=entry["profit"],
            total_swap=entry["swap"],
            total_commission=entry["commission"],
            position_count=entry["count"],
        )
        for symbol, entry in totals.items()
    ]


def margin_level_status(snapshot: Optional[AccountSnapshot]) -> str:
    if snapshot is None:
        return "Unknown"
    # Zero margin used reports a zero level; nothing is at risk then.
    if snapshot.margin == 0:
        return "Safe"
    return "Safe" if snapshot.margin_level > MARGIN_LEVEL_SAFE_THRESHOLD else "Danger"


def build_positions_frame(positions: Iterable[Position]) -> pd.DataFrame:
    rows = []
    for pos in positions:
        rows.append({
            "Ticket": pos.ticket,
            "Symbol": pos.symbol,
            "Type": SIDE_LABELS.get(pos.side.value, pos.side.value),
            "Volume": float(pos.volume),
            "Open Price": float(pos.open_price),
            "Current": float(pos.current_price),
            "Swap": float(pos.swap),
            "Commission": float(pos.commission),
            "P&L": float(pos.profit),
            "Open Time": pos.open_time,
        })
    return pd.DataFrame(rows)


def build_history_frame(history: Iterable[HistoryTrade]) -> pd.DataFrame:
    rows = []
    for trade in history:
        rows.append({
            "Ticket": trade.ticket,
            "Symbol": trade.symbol,
            "Type": SIDE_LABELS.get(trade.side.value, trade.side.value),
            "Volume": float(trade.volume),
            "Open Price": float(trade.open_price),
            "Close Price": float(trade.close_price),
            "P&L": float(trade.profit),
            "Open Time": trade.open_time,
            "Close Time": trade.close_time,
        })
    df = pd.DataFrame(rows)
    if df.empty:
        return df
    df["Close Time"] = pd.to_datetime(df["Close Time"], errors="coerce", utc=True)
    return df.sort_values("Close Time", ascending=False, na_position="last").reset_index(drop=True)


def build_summary_frame(summaries: Iterable[SymbolSummary]) -> pd.DataFrame:
    rows = []
    for summary in summaries:
        rows.append({
            "Symbol": summary.symbol,
            "Direction": SIDE_LABELS.get(summary.net_type.value, summary.net_type.value),
            "Net Volume": float(summary.net_volume),
            "Positions": summary.position_count,
            "P&L": float(summary.total_profit),
            "Swap": float(summary.total_swap),
            "Commission": float(summary.total_commission),
        })
    return pd.DataFrame(rows)


def build_exposure_frame(summaries: Iterable[SymbolSummary]) -> pd.DataFrame:
    rows = []
    for summary in summaries:
        sign = -1 if summary.net_type is NetType.SELL else 1
        rows.append({"symbol": summary.symbol, "exposure": sign * float(summary.net_volume)})
    return pd.DataFrame(rows, columns=["symbol", "exposure"])


def build_realized_pnl_frame(history: Iterable[HistoryTrade]) -> pd.DataFrame:
    rows = [
        {"datetime": trade.close_time, "profit": float(trade.profit)}
        for trade in history
        if trade.close_time is not None
    ]
    if not rows:
        return pd.DataFrame(columns=["datetime", "profit", "cum_profit"])
    df = pd.DataFrame(rows)
    df["datetime"] = pd.to_datetime(df["datetime"], utc=True)
    df = df.sort_values("datetime").reset_index(drop=True)
    df["cum_profit"] = df["profit"].cumsum()
    return df


def compute_history_totals(history: Iterable[HistoryTrade]) -> Dict:
    trades = list(history)
    wins = sum(1 for t in trades if t.profit > 0)
    losses = sum(1 for t in trades if t.profit < 0)
    total = sum((t.profit for t in trades), ZERO)
    return {
        "trades": len(trades),
        "wins": wins,
        "losses": losses,
        "total_profit": total,
        "win_rate": (wins / len(trades) * 100) if trades else 0.0,
    }
