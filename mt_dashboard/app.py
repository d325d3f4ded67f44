"""
Main Streamlit application for MetaTrader Account Dashboard
"""

import asyncio
import os
import sys
import time

import streamlit as st

try:
    from . import config
    from .logging_utils import setup_logging
    from .backend.api_client import MetaTraderApiClient
    from .backend.data_loader import AccountDataLoader, Errored
    from .backend.data_processor import (
        build_exposure_frame,
        build_history_frame,
        build_positions_frame,
        build_realized_pnl_frame,
        build_summary_frame,
        compute_history_totals,
    )
    from .backend.errors import DashboardError
    from .backend.session_manager import SessionGuard, SessionStore, validate_login_form
    from .frontend.components import (
        get_global_styles,
        render_error_page,
        render_login_form,
        render_metrics_bar,
        render_notification,
        render_settings_panel,
    )
    from .frontend.charts import render_exposure_chart, render_realized_pnl_chart
    from .frontend.tables import (
        render_history_table,
        render_history_totals,
        render_positions_table,
        render_summary_table,
    )
except ImportError:
    sys.path.append(os.path.dirname(os.path.dirname(__file__)))
    from mt_dashboard import config
    from mt_dashboard.logging_utils import setup_logging
    from mt_dashboard.backend.api_client import MetaTraderApiClient
    from mt_dashboard.backend.data_loader import AccountDataLoader, Errored
    from mt_dashboard.backend.data_processor import (
        build_exposure_frame,
        build_history_frame,
        build_positions_frame,
        build_realized_pnl_frame,
        build_summary_frame,
        compute_history_totals,
    )
    from mt_dashboard.backend.errors import DashboardError
    from mt_dashboard.backend.session_manager import SessionGuard, SessionStore, validate_login_form
    from mt_dashboard.frontend.components import (
        get_global_styles,
        render_error_page,
        render_login_form,
        render_metrics_bar,
        render_notification,
        render_settings_panel,
    )
    from mt_dashboard.frontend.charts import render_exposure_chart, render_realized_pnl_chart
    from mt_dashboard.frontend.tables import (
        render_history_table,
        render_history_totals,
        render_positions_table,
        render_summary_table,
    )

LOADER_KEY = "account_loader"
FLASH_KEY = "flash_message"

logger = setup_logging()


def _get_loader(guard: SessionGuard) -> AccountDataLoader:
    loader = st.session_state.get(LOADER_KEY)
    if loader is None or loader.closed:
        loader = AccountDataLoader(guard, MetaTraderApiClient())
        st.session_state[LOADER_KEY] = loader
    return loader


def _tear_down_loader() -> None:
    loader = st.session_state.pop(LOADER_KEY, None)
    if loader is not None:
        loader.close()


def _redirect_to_login(message: str = "") -> None:
    _tear_down_loader()
    if message:
        st.session_state[FLASH_KEY] = message


def render_login_page(guard: SessionGuard) -> None:
    st.title("MetaTrader Hub")
    flash = st.session_state.pop(FLASH_KEY, None)
    if flash:
        st.error(flash)

    submitted, account_number, password, server = render_login_form()
    if not submitted:
        return
    try:
        validate_login_form(account_number, password, server)
        with st.spinner("Signing in..."):
            result = asyncio.run(MetaTraderApiClient().login(account_number.strip(), password, server))
    except DashboardError as exc:
        logger.info("Login failed: %s", exc)
        st.error(exc.message)
        return
    guard.establish(result.token, account_number.strip(), server)
    st.rerun()


def render_dashboard_page(guard: SessionGuard) -> None:
    loader = _get_loader(guard)

    col_head1, col_head2 = st.columns([6, 1])
    with col_head2:
        auto_refresh, refresh_rate, manual_refresh, logout = render_settings_panel()
    if logout:
        guard.clear()
        _redirect_to_login()
        st.rerun()

    if manual_refresh:
        render_notification(asyncio.run(loader.manual_refresh()))
    else:
        asyncio.run(loader.load(loader.data is None))

    # Any endpoint answering 401 has cleared the session by now.
    if guard.current_token() is None:
        _redirect_to_login("Your session has expired. Please log in again.")
        st.rerun()

    with col_head1:
        session = guard.current_session()
        st.title("MetaTrader Dashboard")
        updated = loader.last_updated
        st.caption(
            f"Account {session.account_number if session else ''} @ {session.server if session else ''}"
            f" | Last update: {updated.astimezone().strftime('%H:%M:%S') if updated else 'never'}"
        )

    state = loader.state
    if isinstance(state, Errored) and state.is_hard_error:
        if render_error_page(state.error.message):
            st.rerun()
    elif loader.data is not None:
        _render_account(loader)

    if auto_refresh:
        time.sleep(refresh_rate)
        st.rerun()


def _render_account(loader: AccountDataLoader) -> None:
    snapshot = loader.snapshot
    render_metrics_bar(snapshot)

    summaries = loader.summaries()
    col_main, col_side = st.columns([3, 2])
    with col_main:
        st.markdown("##### Positions Summary")
        render_summary_table(build_summary_frame(summaries))
    with col_side:
        st.markdown("##### Net Exposure")
        render_exposure_chart(build_exposure_frame(summaries))

    st.markdown("---")
    tabs = st.tabs(["Open Positions", "History"])

    with tabs[0]:
        render_positions_table(build_positions_frame(loader.positions))

    with tabs[1]:
        render_history_totals(compute_history_totals(loader.history), snapshot.currency)
        render_realized_pnl_chart(build_realized_pnl_frame(loader.history))
        render_history_table(build_history_frame(loader.history))


def main() -> None:
    st.set_page_config(**config.PAGE_CONFIG)
    st.markdown(get_global_styles(), unsafe_allow_html=True)

    guard = SessionGuard(SessionStore())
    if not guard.require_authenticated_or_redirect(_redirect_to_login):
        render_login_page(guard)
        return
    render_dashboard_page(guard)


if __name__ == "__main__":
    main()
