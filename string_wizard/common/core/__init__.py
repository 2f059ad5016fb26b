"""
Shared infrastructure package.

Provides configuration, logging and trace helpers used by every component.
"""

from .config import BaseAppConfig
from .logging_config import CustomJsonFormatter, setup_logging
from .trace import TraceId

__all__ = [
    "BaseAppConfig",
    "CustomJsonFormatter",
    "setup_logging",
    "TraceId",
]
