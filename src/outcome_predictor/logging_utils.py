from __future__ import annotations

import logging
from typing import Optional

from outcome_predictor.config import LOG_CONFIG, LogConfig


def configure_logging(config: LogConfig = LOG_CONFIG, level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Library modules only create loggers; scripts call this once at startup.
    Calling it again replaces the handler instead of stacking a second one.

    Args:
        config: Level and format defaults.
        level: Overrides config.level (e.g., "DEBUG").
    """
    logger = logging.getLogger("outcome_predictor")
    logger.setLevel((level or config.level).upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_outcome_predictor", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.format))
    handler._outcome_predictor = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
