from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config import DATA_DIR

LOG_LEVEL = os.getenv("CALENDAR_COPILOT_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("CALENDAR_COPILOT_LOG_DIR", DATA_DIR / "logs"))

_INITIALIZED = False


def configure_logging(level: Optional[str] = None, *, log_dir: Optional[Path] = None) -> None:
    """Configure application-wide logging with both file and console handlers."""

    global _INITIALIZED
    if _INITIALIZED:
        return

    resolved_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    target_dir = log_dir or LOG_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / "calendar_copilot.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(str(log_path), maxBytes=1_000_000, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(resolved_level)
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured. Output file: %s", log_path)
