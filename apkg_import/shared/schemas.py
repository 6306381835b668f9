"""Base Pydantic schemas for importer results."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Parsed package data is immutable once built: instances are frozen and
    compare by value. Strings are kept exactly as stored in the source
    collection (no whitespace stripping).
    """

    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        populate_by_name=True,
    )
