"""
UI Components for MetaTrader Account Dashboard
Contains reusable Streamlit components and layout elements.
"""

from decimal import Decimal
from typing import Optional, Tuple, Union

import streamlit as st

from .. import config
from ..backend.data_loader import Notification
from ..backend.data_processor import margin_level_status
from ..backend.models import AccountSnapshot

COLORS = config.COLORS
KNOWN_SERVERS = config.KNOWN_SERVERS
DEFAULT_REFRESH_RATE = config.DEFAULT_REFRESH_RATE

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}

Number = Union[Decimal, float, int]


def format_currency(amount: Number, currency: str = "USD") -> str:
    value = float(amount)
    sign = "-" if value < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{sign}{symbol}{abs(value):,.2f}"
    return f"{sign}{abs(value):,.2f} {currency}"


def format_signed_currency(amount: Number, currency: str = "USD") -> str:
    prefix = "+" if float(amount) >= 0 else ""
    return f"{prefix}{format_currency(amount, currency)}"


def format_volume(volume: Number) -> str:
    return f"{float(volume):.2f}"


def get_global_styles() -> str:
    return f"""
    <style>
    @import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;600&display=swap');
    html, body, [class*="css"] {{ font-family: 'Space Grotesk', sans-serif; }}
    .metrics-bar {{ display:flex; gap:12px; flex-wrap:wrap; margin-bottom:20px; }}
    .metrics-card {{ flex:1; min-width:150px; background:{COLORS['surface']}; border:1px solid #e4e4e0; border-radius:6px; padding:12px 15px; }}
    .metrics-label {{ color:{COLORS['text_secondary']}; font-size:0.85rem; }}
    .metrics-value {{ font-size:1.3rem; font-weight:600; }}
    .metrics-sub {{ font-size:0.8rem; }}
    </style>
    """


def _card(label: str, value: str, color: str, sub: str = "", sub_color: Optional[str] = None) -> str:
    sub_html = ""
    if sub:
        sub_html = f'<div class="metrics-sub" style="color:{sub_color or COLORS["text_secondary"]};">{sub}</div>'
    return (
        f'<div class="metrics-card"><div class="metrics-label">{label}</div>'
        f'<div class="metrics-value" style="color:{color};">{value}</div>{sub_html}</div>'
    )


def build_metrics_bar_html(
    balance: str,
    equity: str,
    profit: str,
    margin: str,
    free_margin: str,
    margin_level: str,
    margin_status: str = "Safe",
    profit_positive: bool = True,
) -> str:
    profit_color = COLORS["positive"] if profit_positive else COLORS["negative"]
    status_color = COLORS["positive"] if margin_status == "Safe" else COLORS["negative"]
    cards = [
        _card("Balance", balance, COLORS["text"]),
        _card("Equity", equity, COLORS["text"], profit, profit_color),
        _card("Margin", margin, COLORS["text"], f"Free: {free_margin}"),
        _card("Margin Level", margin_level, COLORS["text"], margin_status, status_color),
    ]
    return f'<div class="metrics-bar">{"".join(cards)}</div>'


def render_metrics_bar(snapshot: AccountSnapshot) -> None:
    currency = snapshot.currency
    html = build_metrics_bar_html(
        balance=format_currency(snapshot.balance, currency),
        equity=format_currency(snapshot.equity, currency),
        profit=format_signed_currency(snapshot.profit, currency),
        margin=format_currency(snapshot.margin, currency),
        free_margin=format_currency(snapshot.free_margin, currency),
        margin_level=f"{float(snapshot.margin_level):.2f}%",
        margin_status=margin_level_status(snapshot),
        profit_positive=snapshot.profit >= 0,
    )
    st.markdown(html, unsafe_allow_html=True)


def render_login_form() -> Tuple[bool, str, str, str]:
    with st.form("login"):
        st.markdown("#### Sign in to your MetaTrader account")
        account_number = st.text_input("Account number", placeholder="e.g. 12345678")
        password = st.text_input("Password", type="password")
        server = st.selectbox("Server", KNOWN_SERVERS, index=None, placeholder="Select your server")
        submitted = st.form_submit_button("Sign in", use_container_width=True)
    return submitted, account_number, password, server or ""


def render_settings_panel() -> Tuple[bool, int, bool, bool]:
    with st.expander("Settings", expanded=False):
        auto_refresh = st.checkbox("Auto-Refresh", value=True)
        refresh_rate = st.slider("Rate (s)", 5, 60, DEFAULT_REFRESH_RATE)
        manual_refresh = st.button("Refresh", use_container_width=True)
        logout = st.button("Log out", use_container_width=True)
    return auto_refresh, refresh_rate, manual_refresh, logout


def render_notification(notification: Notification) -> None:
    icons = {"success": "✅", "info": "ℹ️"}
    icon = icons.get(notification.level, "⚠️")
    st.toast(f"**{notification.title}**: {notification.message}", icon=icon)


def render_error_page(message: str) -> bool:
    st.error(f"Could not load account data: {message}")
    return st.button("Retry", type="primary")
