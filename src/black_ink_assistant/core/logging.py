"""
Logging Configuration

Process-wide standard-library logging setup. Components obtain their own
dotted loggers (``blackink.<component>``) and never configure handlers
themselves.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once for the current process.

    Parameters
    ----------
    level : Optional[str]
        Log level name. Defaults to settings.log_level.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
