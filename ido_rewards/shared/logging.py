"""
Logging helpers for the IDO Rewards toolkit.

All modules log through ``get_logger(__name__)`` so that every record lands
under the ``ido_rewards`` hierarchy. The level comes from IDO_LOG_LEVEL and
can be raised at runtime by the CLI (``--verbose``).
"""

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_ROOT_LOGGER = "ido_rewards"


def _resolve_level(level_str: Optional[str]) -> int:
    level_str = (level_str or os.getenv("IDO_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_str, logging.INFO)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger below the package root logger.

    The handler lives on the ``ido_rewards`` root logger only, so child
    loggers propagate to it and records are never printed twice.
    """
    root = logging.getLogger(_ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        root.addHandler(handler)
        root.setLevel(_resolve_level(None))

    if not name or name == _ROOT_LOGGER:
        return root
    if not name.startswith(_ROOT_LOGGER + "."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    """Override the package log level (e.g. "DEBUG")."""
    get_logger().setLevel(_resolve_level(level))
