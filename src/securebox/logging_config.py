"""Logger setup for the ``securebox`` driver and sweep script.

Log records go to stderr by default so that stdout carries only the grids and
the ``BOX: ...`` verdict.
"""
import logging
import sys
from typing import IO, Optional, Union

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accept ``logging.INFO`` or a level name such as ``"info"``."""
    if isinstance(level, int):
        return level
    name = str(level).upper()
    if name not in LEVELS:
        raise ValueError(f"Unknown log level '{level}', expected one of {LEVELS}")
    return getattr(logging, name)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach a stream handler (and optionally a file handler) to the package logger.

    Calling it again replaces the handlers from the previous call.
    """
    level = resolve_level(level)
    logger = logging.getLogger("securebox")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(FORMAT, datefmt="%H:%M:%S")
    handlers: list[logging.Handler] = [
        logging.StreamHandler(stream if stream is not None else sys.stderr)
    ]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to %s", log_file or "stream only")
    return logger
