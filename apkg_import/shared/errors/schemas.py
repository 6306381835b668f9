"""Pydantic models for error handling.

Data structures for error details.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    """Strict schema for error details."""

    model_config = ConfigDict(extra="allow")

    path: str | None = None
    entry: str | None = None
    offset: int | None = None
    expected: Any | None = None
    actual: Any | None = None
    available: list[str] | None = None
    table: str | None = None
    column: str | None = None
    reason: str | None = None
