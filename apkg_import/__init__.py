"""Importer for Anki flashcard packages (.apkg).

Reads the ZIP container and its embedded SQLite collection and returns an
immutable Package of decks, note models, notes and cards.
"""

from apkg_import.core.exceptions import (
    ApkgError,
    ArchiveError,
    ChecksumMismatchError,
    CollectionError,
    CorruptEntryError,
    EntryNotFoundError,
    InvalidArchiveError,
    MalformedCollectionError,
    MissingDatabaseError,
    PackageFileNotFoundError,
    TruncatedArchiveError,
    UnsupportedCollectionFormatError,
    UnsupportedCompressionError,
)
from apkg_import.modules.apkg import (
    ApkgImportService,
    Card,
    Deck,
    Model,
    Note,
    Package,
    PackageSummary,
    Template,
    extract_entry,
    list_contents,
    list_entries,
    parse_package,
    read_media_file,
    summarize_package,
)

__version__ = "0.1.0"

__all__ = [
    # Operations
    "parse_package",
    "list_contents",
    "list_entries",
    "extract_entry",
    "read_media_file",
    "summarize_package",
    "ApkgImportService",
    # Data model
    "Package",
    "PackageSummary",
    "Deck",
    "Model",
    "Template",
    "Note",
    "Card",
    # Errors
    "ApkgError",
    "PackageFileNotFoundError",
    "ArchiveError",
    "InvalidArchiveError",
    "EntryNotFoundError",
    "TruncatedArchiveError",
    "UnsupportedCompressionError",
    "CorruptEntryError",
    "ChecksumMismatchError",
    "CollectionError",
    "MissingDatabaseError",
    "MalformedCollectionError",
    "UnsupportedCollectionFormatError",
]
