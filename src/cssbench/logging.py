"""Logging for cssbench runs.

Progress lines go to the console as bare messages, so the benchmark
report and the run log read as one stream; anything louder than INFO
gets a short level prefix.  An optional log file keeps the full DEBUG
trace, one line per tool invocation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

_LOGGER_NAME = "cssbench"
_FILE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s"
_FILE_DATEFMT = "%H:%M:%S"


class ConsoleFormatter(logging.Formatter):
    """``message`` at INFO and below, ``warning: message`` above."""

    def __init__(self) -> None:
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno <= logging.INFO:
            return message
        return f"{record.levelname.lower()}: {message}"


def setup_logging(
    console_level: int = logging.INFO,
    *,
    log_file: Path | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Install the console (and optional file) handler on the cssbench logger.

    Calling it again replaces the handlers of the previous call.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(console_level)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        trace = logging.FileHandler(log_file, encoding="utf-8")
        trace.setLevel(logging.DEBUG)
        trace.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        logger.addHandler(trace)

    return logger


def get_logger(name: str) -> logging.Logger:
    """``cssbench.<name>``, which propagates to the handlers set up above."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
