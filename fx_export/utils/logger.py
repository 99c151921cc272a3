"""Logging utilities for the fx_export package."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "fx_export") -> logging.Logger:
    """Return a module-level logger configured with a simple formatter."""
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _LOGGER = logging.getLogger(name)
    return logging.getLogger(name)


def set_verbose(verbose: bool) -> None:
    """Toggle DEBUG output on the root logger."""

    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)
