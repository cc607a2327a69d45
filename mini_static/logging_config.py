"""
Logging configuration for scripts and notebooks running analyses.

The library only logs through module loggers under 'mini_static' and ships a
NullHandler, so nothing is printed unless the caller configures logging.
`setup_logging` is a shortcut for the common case: step progress on stdout,
optionally mirrored to a file.

    INFO   one line per load step (load factor, iterations, residuals)
    DEBUG  every Newton iteration and analysis stage transition
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "mini_static"

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_TAG = "_mini_static_handler"


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(level: Optional[int] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach console (and optionally file) output to the package logger.

    Handlers installed by an earlier call are replaced; handlers the caller
    added themselves are left alone. The handlers carry no level of their
    own, so `logger.setLevel` later on controls both outputs.

    Args:
        level: Level for the package logger; None keeps its current level
        log_file: Optional path to also write the log to (overwritten)

    Returns:
        The 'mini_static' logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if level is not None:
        logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT, datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(_tagged(handler))

    return logger
