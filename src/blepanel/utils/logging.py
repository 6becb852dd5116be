from __future__ import annotations

import logging
import os
from typing import Literal

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

# Radio backends are chatty; only the second verbosity step lets them through.
BACKEND_LOGGERS = ("bleak",)


def resolve_level(level: LogLevel | None = None, verbose: int = 0) -> str:
    if verbose > 0:
        return "DEBUG"
    return (level or os.environ.get("LOGLEVEL", "INFO")).upper()


def setup_logging(level: LogLevel | None = None, verbose: int = 0) -> None:
    """Install coloured console logging.

    ``verbose=1`` turns on blepanel debug output, ``verbose=2`` also shows
    the BLE backend's own debug records. Without either, ``LOGLEVEL`` from
    the environment (default INFO) applies.
    """
    coloredlogs.install(
        level=resolve_level(level, verbose),
        fmt=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    )

    backend_level = logging.DEBUG if verbose > 1 else logging.WARNING
    for name in BACKEND_LOGGERS:
        logging.getLogger(name).setLevel(backend_level)
