"""
Importer error taxonomy.

Every failure of a package operation is raised as one of the classes below;
none of them is collapsed into a generic exception and none is recovered from
internally. Codes are derived from the class names (see AppError).

Library exceptions raised while decoding are translated by the handlers
registered at the bottom of this module (used through the @safe decorator).
"""

import json
import sqlite3
import struct
import zlib

from apkg_import.shared.errors import AppError, ExceptionMapper

__all__ = [
    "ApkgError",
    "PackageFileNotFoundError",
    # Archive
    "ArchiveError",
    "InvalidArchiveError",
    "EntryNotFoundError",
    "TruncatedArchiveError",
    "UnsupportedCompressionError",
    "CorruptEntryError",
    "ChecksumMismatchError",
    # Collection
    "CollectionError",
    "MissingDatabaseError",
    "MalformedCollectionError",
    "UnsupportedCollectionFormatError",
]


class ApkgError(AppError):
    """Anki package import failed."""


class PackageFileNotFoundError(ApkgError):
    """Package file not found."""

    code = "FILE_NOT_FOUND"

    def __init__(self, path: object) -> None:
        super().__init__(
            message=f"File not found: {path}",
            details={"path": str(path)},
        )
        self.path = str(path)


# ==================== Archive ====================


class ArchiveError(ApkgError):
    """Archive container could not be read."""


class InvalidArchiveError(ArchiveError):
    """Not a valid ZIP archive."""


class EntryNotFoundError(ArchiveError):
    """Archive entry not found."""


class TruncatedArchiveError(ArchiveError):
    """Archive is truncated."""


class UnsupportedCompressionError(ArchiveError):
    """Archive entry uses an unsupported compression method."""


class CorruptEntryError(ArchiveError):
    """Archive entry payload could not be decompressed."""


class ChecksumMismatchError(ArchiveError):
    """Archive entry checksum does not match its content."""


# ==================== Collection ====================


class CollectionError(ApkgError):
    """Embedded collection could not be read."""


class MissingDatabaseError(CollectionError):
    """No Anki database found in package."""


class MalformedCollectionError(CollectionError):
    """Anki collection is malformed."""


class UnsupportedCollectionFormatError(CollectionError):
    """Anki collection format is not supported."""


# ==================== Exception mapping ====================


@ExceptionMapper.register(json.JSONDecodeError)
def _handle_json_error(exc: json.JSONDecodeError, func_name: str) -> AppError:
    """JSON: undecodable metadata blob."""
    return MalformedCollectionError(
        message=f"Invalid JSON in collection metadata: {exc.msg}",
        details={"offset": exc.pos, "reason": func_name},
    )


@ExceptionMapper.register(sqlite3.Error)
def _handle_sqlite_error(exc: sqlite3.Error, func_name: str) -> AppError:
    """SQLite: not a database, missing table or column."""
    return MalformedCollectionError(
        message=f"Collection database is not readable: {exc}",
        details={"reason": func_name},
    )


@ExceptionMapper.register(KeyError, TypeError, ValueError, AttributeError)
def _handle_shape_error(exc: Exception, func_name: str) -> AppError:
    """Metadata records missing required keys or holding the wrong types."""
    return MalformedCollectionError(
        message=f"Unexpected collection record shape: {type(exc).__name__}: {exc}",
        details={"reason": func_name},
    )


@ExceptionMapper.register(zlib.error)
def _handle_zlib_error(exc: zlib.error, func_name: str) -> AppError:
    """zlib: invalid deflate stream."""
    return CorruptEntryError(
        message=f"Invalid deflate stream: {exc}",
        details={"reason": func_name},
    )


@ExceptionMapper.register(struct.error)
def _handle_struct_error(exc: struct.error, func_name: str) -> AppError:
    """struct: fixed-size record cut short."""
    return TruncatedArchiveError(
        message=f"Archive record is cut short: {exc}",
        details={"reason": func_name},
    )
