from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(log_file: Optional[Path] = None, level: Optional[str] = None) -> None:
    """Log to stdout and, when given, to a startup log file (overwritten each launch)."""
    level_name = (level or os.environ.get("TSWIO_LOG_LEVEL") or "INFO").upper()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
