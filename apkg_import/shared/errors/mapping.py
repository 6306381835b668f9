"""Mapping of infrastructure errors to domain errors.

Centralized exception mapping for the standard-library codecs and stores the
importer sits on (sqlite3, json, zlib, struct). Handlers are registered by the
modules that own the domain errors.
"""

import logging
from collections.abc import Callable
from typing import Any

from .base import AppError

logger = logging.getLogger(__name__)


class ExceptionMapper:
    """Centralized mapping of technical exceptions to domain exceptions."""

    _handlers: dict[type[Exception], Callable[[Exception, str], AppError]] = {}

    @classmethod
    def register(
        cls, *exception_types: type[Exception]
    ) -> Callable[[Callable[[Any, str], AppError]], Callable[[Any, str], AppError]]:
        """Register a handler for exception types.

        Usage:
            @ExceptionMapper.register(sqlite3.Error)
            def _handle_sqlite_error(exc: sqlite3.Error, func_name: str) -> AppError:
                return MalformedCollectionError(message="Collection is not readable")
        """

        def decorator(
            handler: Callable[[Any, str], AppError]
        ) -> Callable[[Any, str], AppError]:
            for exc_type in exception_types:
                cls._handlers[exc_type] = handler
            return handler

        return decorator

    @classmethod
    def map(cls, exc: Exception, func_name: str = "") -> AppError:
        """Map a technical exception to a domain exception.

        Args:
            exc: The technical exception to map
            func_name: Name of the function where exception occurred (for logging)

        Returns:
            Mapped domain exception (AppError subclass)
        """
        # Direct type match
        handler = cls._handlers.get(type(exc))

        # Try inheritance match if no direct match
        if handler is None:
            for exc_type, exc_handler in cls._handlers.items():
                if isinstance(exc, exc_type):
                    handler = exc_handler
                    break

        if handler:
            return handler(exc, func_name)

        # Fallback for unhandled exceptions
        logger.exception(f"CRITICAL: Unhandled exception in {func_name}: {type(exc).__name__}")
        return AppError(
            message=f"Unexpected {type(exc).__name__}: {exc}",
            details={"function": func_name} if func_name else {},
        )
