"""Logging and on-disk locations.

The TUI owns the terminal, so log records go to a file under the data
directory instead of stderr.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger("glu_code")

APP_NAME = "glu-code"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / APP_NAME


def config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def setup_logging(verbose: bool = False, log_path: Optional[Path] = None) -> Path:
    """Attach a file handler to the app logger and return the log path."""
    path = log_path or data_dir() / f"{APP_NAME}.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for existing in list(LOGGER.handlers):
        LOGGER.removeHandler(existing)
        existing.close()
    LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)
    LOGGER.propagate = False
    return path
