"""Decorators for error handling.

Function wrappers for protection against technical errors.
"""

from collections.abc import Callable
from functools import wraps
from typing import Never, ParamSpec, TypeVar

from .base import AppError
from .mapping import ExceptionMapper

P = ParamSpec("P")
T = TypeVar("T")


def safe(func: Callable[P, T]) -> Callable[P, T]:
    """Decorator for protection against technical errors.

    Usage:
        @safe
        def decode_collection(conn: sqlite3.Connection) -> Package:
            # Domain errors (AppError) pass through
            # Technical errors (sqlite3.Error, JSONDecodeError, ...) -> domain errors
            ...

    The decorator:
    - Lets AppError subclasses pass through unchanged
    - Maps technical exceptions to domain exceptions via ExceptionMapper
    """

    def _handle_exception(e: Exception, func_name: str) -> Never:
        if isinstance(e, AppError):
            raise
        raise ExceptionMapper.map(e, func_name) from e

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _handle_exception(e, func.__name__)

    return wrapper
