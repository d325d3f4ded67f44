"""
Table rendering functions for MetaTrader Account Dashboard
Handles DataFrame display and formatting.
"""

import pandas as pd
import streamlit as st

from .. import config
from .components import format_volume

COLORS = config.COLORS

VOLUME_COLUMNS = ("Volume", "Net Volume")


def _pnl_color(value) -> str:
    if value > 0:
        return f"color: {COLORS['positive']}"
    if value < 0:
        return f"color: {COLORS['negative']}"
    return f"color: {COLORS['neutral']}"


def style_frame(df: pd.DataFrame):
    styler = df.style.map(_pnl_color, subset=["P&L"]).format(precision=2, subset=["P&L"])
    volumes = [col for col in VOLUME_COLUMNS if col in df.columns]
    if volumes:
        styler = styler.format(format_volume, subset=volumes)
    return styler


def render_summary_table(summary_df: pd.DataFrame) -> None:
    if summary_df.empty:
        st.info("No Open Positions")
        return
    st.dataframe(style_frame(summary_df), use_container_width=True, hide_index=True)


def render_positions_table(positions_df: pd.DataFrame) -> None:
    if positions_df.empty:
        st.info("No Open Positions")
        return
    st.dataframe(style_frame(positions_df), use_container_width=True, hide_index=True, height=300)


def render_history_table(history_df: pd.DataFrame) -> None:
    if history_df.empty:
        st.info("No Closed Trades In The Last 7 Days")
        return
    st.dataframe(style_frame(history_df), use_container_width=True, hide_index=True, height=300)


def render_history_totals(totals: dict, currency: str = "USD") -> None:
    cols = st.columns(4)
    cols[0].metric("Trades", totals.get("trades", 0))
    cols[1].metric("Wins", totals.get("wins", 0))
    cols[2].metric("Win Rate", f"{totals.get('win_rate', 0.0):.1f}%")
    cols[3].metric("Realized P&L", f"{float(totals.get('total_profit', 0)):,.2f} {currency}")
