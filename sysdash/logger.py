import logging
import sys
import traceback
from pathlib import Path

LOGGER_NAME = "sysdash"


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger with a single console handler.

    Calling this more than once replaces the handler instead of stacking a
    second one, so repeated app construction (tests, reloads) does not
    duplicate every log line.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter())
    logger.addHandler(handler)
    return logger


def write_crash_log(path: str, exc: BaseException) -> Path:
    """Write the full traceback of an uncaught exception to ``path``."""
    target = Path(path)
    target.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return target
