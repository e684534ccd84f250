"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from ..config import get_settings
from .request_id import RequestIdFilter

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls are no-ops."""
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s")
    )
    root = logging.getLogger()
    root.setLevel(resolved_level)
    root.addHandler(handler)
    _LOGGER_INITIALIZED = True
