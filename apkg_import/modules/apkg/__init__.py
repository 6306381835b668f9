"""Anki package (.apkg) import: archive reading and collection decoding."""

from .archive import (
    ArchiveEntry,
    ArchiveReader,
    CompressionMethod,
    extract_entry,
    list_entries,
    read_central_directory,
)
from .collection import (
    decode_package,
    list_contents,
    parse_package,
    read_media_file,
    summarize_package,
)
from .schemas import Card, Deck, Model, Note, Package, PackageSummary, Template
from .service import ApkgImportService

__all__ = [
    "ApkgImportService",
    "ArchiveEntry",
    "ArchiveReader",
    "Card",
    "CompressionMethod",
    "Deck",
    "Model",
    "Note",
    "Package",
    "PackageSummary",
    "Template",
    "decode_package",
    "extract_entry",
    "list_contents",
    "list_entries",
    "parse_package",
    "read_central_directory",
    "read_media_file",
    "summarize_package",
]
