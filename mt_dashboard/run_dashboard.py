"""Run the Streamlit dashboard, or watch the account headlessly with --watch."""
import argparse
import asyncio
import logging
import os
import subprocess
import sys
from typing import List, Optional

from . import config
from .logging_utils import setup_logging
from .backend.api_client import MetaTraderApiClient
from .backend.data_loader import AccountDataLoader, LoadStatus
from .backend.session_manager import SessionGuard, SessionStore

logger = logging.getLogger(__name__)


def log_summaries(loader: AccountDataLoader) -> None:
    snapshot = loader.snapshot
    if snapshot is None:
        return
    logger.info(
        "equity=%s %s margin_level=%s%% positions=%d",
        snapshot.equity, snapshot.currency, snapshot.margin_level, len(loader.positions),
    )
    for summary in loader.summaries():
        logger.info(
            "  %-10s %-7s %s lots  P&L %s",
            summary.symbol, summary.net_type.value, summary.net_volume, summary.total_profit,
        )


async def watch(loader: AccountDataLoader, interval_seconds: int) -> int:
    stop = asyncio.Event()
    loader.on_redirect = stop.set

    outcome = await loader.mount(interval_seconds * 1000)
    if outcome.status is LoadStatus.REDIRECT:
        logger.error("No valid session; log in through the dashboard first")
        return 1
    if outcome.status is LoadStatus.FAILED:
        logger.error("Initial load failed: %s", outcome.error)
    log_summaries(loader)

    last_seen = loader.last_updated
    try:
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=1)
            except asyncio.TimeoutError:
                pass
            if loader.last_updated != last_seen:
                last_seen = loader.last_updated
                log_summaries(loader)
    finally:
        loader.close()
    logger.error("Session expired; log in again through the dashboard")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="MetaTrader account dashboard")
    parser.add_argument("--watch", action="store_true", help="poll the account and log summaries instead of serving the UI")
    parser.add_argument("--interval", type=int, default=config.DEFAULT_REFRESH_RATE, help="refresh interval in seconds")
    args = parser.parse_args(argv)

    if args.watch:
        setup_logging()
        loader = AccountDataLoader(SessionGuard(SessionStore()), MetaTraderApiClient())
        try:
            return asyncio.run(watch(loader, args.interval))
        except KeyboardInterrupt:
            return 0

    here = os.path.dirname(__file__)
    app_path = os.path.join(here, "app.py")
    return subprocess.call([sys.executable, "-m", "streamlit", "run", app_path])


if __name__ == "__main__":
    raise SystemExit(main())
