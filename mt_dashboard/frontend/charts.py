"""
Chart rendering functions for MetaTrader Account Dashboard
Handles Plotly chart creation and rendering.
"""

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from .. import config

CHART_HEIGHTS = config.CHART_HEIGHTS
COLORS = config.COLORS


def build_exposure_figure(exposure_df: pd.DataFrame) -> go.Figure:
    colors = [
        COLORS["positive"] if v > 0 else COLORS["negative"] if v < 0 else COLORS["neutral"]
        for v in exposure_df["exposure"]
    ]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=exposure_df["symbol"],
        y=exposure_df["exposure"],
        marker_color=colors,
        name="Net lots",
    ))
    fig.update_layout(
        height=CHART_HEIGHTS["exposure"],
        margin=dict(l=10, r=10, t=30, b=10),
        yaxis_title="Net lots (buy + / sell -)",
        template="plotly_white",
        showlegend=False,
    )
    return fig


def render_exposure_chart(exposure_df: pd.DataFrame) -> None:
    if exposure_df.empty:
        st.info("No open exposure")
        return
    st.plotly_chart(build_exposure_figure(exposure_df), use_container_width=True)


def build_realized_pnl_figure(pnl_df: pd.DataFrame) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=pnl_df["datetime"],
        y=pnl_df["profit"],
        marker_color=[COLORS["positive"] if v >= 0 else COLORS["negative"] for v in pnl_df["profit"]],
        name="Trade P&L",
        opacity=0.6,
    ))
    fig.add_trace(go.Scatter(
        x=pnl_df["datetime"],
        y=pnl_df["cum_profit"],
        mode="lines+markers",
        line=dict(color=COLORS["info"], width=2),
        name="Cumulative",
    ))
    fig.update_layout(
        height=CHART_HEIGHTS["history"],
        margin=dict(l=10, r=10, t=30, b=10),
        template="plotly_white",
        legend=dict(orientation="h", y=1.1),
    )
    return fig


def render_realized_pnl_chart(pnl_df: pd.DataFrame) -> None:
    if pnl_df.empty:
        st.info("No closed trades to chart")
        return
    st.plotly_chart(build_realized_pnl_figure(pnl_df), use_container_width=True)
