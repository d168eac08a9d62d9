"""
Logging setup and structured logging helpers.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(verbose: bool) -> None:
    """
    Configure root logging on stderr, at DEBUG when ``verbose`` is set.
    """

    if verbose:
        level = logging.DEBUG
    else:
        raw_level = os.getenv("GHSTAT_LOG_LEVEL", "INFO").strip().upper()
        level = getattr(logging, raw_level, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    # urllib3 is chatty at DEBUG and drowns out the task log.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
