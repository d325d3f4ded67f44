"""Logging setup shared by the Streamlit app and the headless watcher."""

import logging
from typing import Optional

from . import config

_CONFIGURED = False


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    global _CONFIGURED
    root = logging.getLogger()
    if not _CONFIGURED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
        root.addHandler(handler)
        _CONFIGURED = True
    root.setLevel((level or config.LOG_LEVEL).upper())
    return logging.getLogger("mt_dashboard")
