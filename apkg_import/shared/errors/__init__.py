"""Shared errors package.

Centralized error handling and exception management.
"""

from .base import AppError
from .decorators import safe
from .mapping import ExceptionMapper
from .schemas import ErrorDetail

__all__ = [
    # Base
    "AppError",
    # Mapping
    "ExceptionMapper",
    # Decorators
    "safe",
    # Schemas
    "ErrorDetail",
]
