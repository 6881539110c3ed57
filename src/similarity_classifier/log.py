"""Loguru sink configuration for command-line runs.

Library modules only call ``logger``; sinks are set up here, once, by the
entry point.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_FORMAT = "{time:HH:mm:ss}|{level: <7}|{message}"


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Replace loguru's default sink with a compact stderr sink.

    Args:
        verbose: Log at DEBUG instead of INFO.
        log_file: Also write DEBUG logs to this file, rotated at 30 MB.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(log_file), rotation="30 MB", level="DEBUG")
