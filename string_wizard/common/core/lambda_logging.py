"""
Lambda Logging Utilities

A deployed function starts with the Lambda runtime's root logger, which only
passes WARNING and above. Handlers wrapped here log INFO records as JSON lines
like the gateway does, and flush before the execution context freezes.
"""

import functools
import logging
import os
import sys

from .logging_config import CustomJsonFormatter


def _has_json_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h.formatter, CustomJsonFormatter) for h in logger.handlers)


def setup_lambda_logging(log_level: str | None = None) -> None:
    """
    Attach a JSON stdout handler to the root logger unless one is present.

    The root level is only ever lowered to the configured level, never raised.
    """
    logger = logging.getLogger()
    if _has_json_handler(logger):
        return

    level = logging.getLevelName((log_level or os.getenv("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter())
    logger.addHandler(handler)

    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)


def robust_lambda_logger(func):
    """
    Decorator for Lambda entry points: configure logging, flush afterwards.

    Usage:
        @robust_lambda_logger
        def lambda_handler(event, context):
            ...
    """

    @functools.wraps(func)
    def wrapper(event, context=None):
        setup_lambda_logging()
        try:
            return func(event, context)
        finally:
            for h in logging.getLogger().handlers:
                h.flush()

    return wrapper
