"""
Configuration constants for MetaTrader Account Dashboard
"""

import os
from pathlib import Path

BASE_PATH = Path(__file__).parent.parent

API_BASE_URL = os.getenv("MT_DASHBOARD_API_URL", "http://127.0.0.1:8000")
ACCOUNT_INFO_ENDPOINT = "/api/account/info"
POSITIONS_ENDPOINT = "/api/positions"
HISTORY_ENDPOINT = "/api/history/trades"
LOGIN_ENDPOINT = "/api/auth/login"

DEFAULT_REFRESH_RATE = int(os.getenv("MT_DASHBOARD_REFRESH_SECONDS", "5"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("MT_DASHBOARD_REQUEST_TIMEOUT", "10"))
HISTORY_WINDOW_DAYS = 7

SESSION_STORAGE_KEY = "mtAuth"
SESSION_FILE = Path(
    os.getenv("MT_DASHBOARD_SESSION_FILE", str(Path.home() / ".mt_dashboard" / "session.json"))
)

LOG_LEVEL = os.getenv("MT_DASHBOARD_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

MARGIN_LEVEL_SAFE_THRESHOLD = 200

KNOWN_SERVERS = [
    "MetaQuotes-Demo",
    "ICMarkets-Live01",
    "ICMarkets-Live02",
    "FXTM-Real",
    "FXTM-Demo",
    "Exness-Real",
    "Exness-Demo",
]

SIDE_LABELS = {
    "BUY": "Buy",
    "SELL": "Sell",
    "NEUTRAL": "Neutral",
}

PAGE_CONFIG = {
    "page_title": "MetaTrader Dashboard",
    "page_icon": None,
    "layout": "wide",
    "initial_sidebar_state": "collapsed",
}

CHART_HEIGHTS = {
    "exposure": 320,
    "history": 350,
}

COLORS = {
    "positive": "#1f7a6d",
    "negative": "#b42318",
    "neutral": "#9a9a9a",
    "warning": "#b45309",
    "info": "#2563eb",
    "background": "#f7f7f5",
    "surface": "#ffffff",
    "text": "#1a1a1a",
    "text_secondary": "#6b6b6b",
}
