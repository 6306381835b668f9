"""Shared logging configuration.

Loguru-based logging module with:
- Colored console output or JSON lines
- Interception of standard logging records from the importer modules
- Import ID correlation
"""

from loguru import logger

from .config import (
    InterceptHandler,
    configure_stdlib_loggers,
    get_logger,
    setup_logger,
)

__all__ = [
    "logger",
    "setup_logger",
    "get_logger",
    "InterceptHandler",
    "configure_stdlib_loggers",
]
