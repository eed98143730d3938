"""Logging setup for the extraction pipeline."""

import logging
from typing import Union

LOG_FORMAT = "[vpk-extractor] %(levelname)s: %(message)s"


def setup_logging(level: Union[str, int] = "info") -> logging.Logger:
    """Attach a console handler to the package logger and set its level.

    Calling it again replaces the handler instead of stacking a second one.
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric

    logger = logging.getLogger("vpk_toolkit")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_vpk_toolkit", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._vpk_toolkit = True
    logger.addHandler(handler)
    return logger
