"""Decoder for Anki .apkg packages.

The .apkg format is a ZIP archive containing:
- collection.anki21 / collection.anki2: SQLite database with cards, notes,
  decks and models
- media: JSON mapping of numbered archive entries to original file names
- media files (numbered entries "0", "1", ...)

Database schema (the parts read here):
- col: single metadata row; decks and models are JSON objects keyed by id
- notes: id, guid, mid, mod, tags, flds (0x1f separated), sfld
- cards: id, nid, did, ord, mod, type, queue, due, ivl, factor, reps,
  lapses, left, odue, odid, flags

Packages exported by Anki 2.1.50+ in the new format carry a zstd-compressed
collection.anki21b with a different schema; those are rejected.
"""

import json
import logging
import re
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any

from apkg_import.core.config import get_settings
from apkg_import.core.exceptions import (
    ArchiveError,
    EntryNotFoundError,
    MalformedCollectionError,
    MissingDatabaseError,
    PackageFileNotFoundError,
    UnsupportedCollectionFormatError,
)
from apkg_import.shared.errors import safe
from apkg_import.shared.tempfiles import temporary_file

from .archive import ArchiveReader
from .schemas import Card, Deck, Model, Note, Package, PackageSummary, Template

logger = logging.getLogger(__name__)

# Field separator in notes.flds
FIELD_SEPARATOR = "\x1f"

# Whitespace that separates tags. Unlike str.split(), the control characters
# 0x1c-0x1f (the field separator among them) do not split.
TAG_SEPARATOR = re.compile(
    r"[ \t\n\r\f\v\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+"
)

# Legacy collection entries, newest first
COLLECTION_ENTRIES = ("collection.anki21", "collection.anki2")
ZSTD_COLLECTION_ENTRY = "collection.anki21b"
MEDIA_ENTRY = "media"

NOTES_QUERY = "SELECT id, guid, mid, mod, tags, flds, sfld FROM notes"
CARDS_QUERY = (
    "SELECT id, nid, did, ord, mod, type, queue, due, ivl, factor, reps, lapses, "
    "left, odue, odid, flags FROM cards"
)


def read_package_bytes(path: str | Path) -> bytes:
    """Read the whole package file.

    Raises:
        PackageFileNotFoundError: The path is not a readable regular file.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise PackageFileNotFoundError(file_path)
    try:
        return file_path.read_bytes()
    except OSError as e:
        raise PackageFileNotFoundError(file_path) from e


def find_collection_entry(reader: ArchiveReader) -> str:
    """Name of the entry holding the legacy SQLite collection.

    New-format exports also carry a legacy collection.anki2 that only holds
    a placeholder note, so the zstd entry is checked first.

    Raises:
        UnsupportedCollectionFormatError: The zstd collection is present.
        MissingDatabaseError: No collection entry at all.
    """
    if ZSTD_COLLECTION_ENTRY in reader:
        raise UnsupportedCollectionFormatError(
            message=(
                "collection.anki21b (zstd compressed) is not supported. "
                "Export from Anki with 'Support older Anki versions' enabled."
            ),
            details={"entry": ZSTD_COLLECTION_ENTRY},
        )

    for name in COLLECTION_ENTRIES:
        if name in reader:
            return name

    available = reader.names()
    raise MissingDatabaseError(
        message=f"No Anki database found in package. Available files: {', '.join(available)}",
        details={"expected": list(COLLECTION_ENTRIES), "available": available},
    )


@contextmanager
def open_collection(data: bytes) -> Iterator[sqlite3.Connection]:
    """Open collection bytes as a read-only SQLite database.

    sqlite3 needs a path, so the bytes are staged in a private temporary
    directory. Both the connection and the directory are released when the
    block exits, on success and on error alike.
    """
    importer = get_settings().importer
    with temporary_file(
        data,
        filename="collection.db",
        prefix=importer.temp_prefix,
        directory=importer.temp_dir,
    ) as db_path:
        uri = f"{db_path.as_uri()}?mode=ro"
        with closing(sqlite3.connect(uri, uri=True)) as conn:
            conn.row_factory = sqlite3.Row
            yield conn


def split_fields(packed: str) -> tuple[str, ...]:
    """Split a packed note field string into its values."""
    return tuple(packed.split(FIELD_SEPARATOR))


def split_tags(tags: str | None) -> tuple[str, ...]:
    """Split a space separated tag string, dropping empty tokens."""
    if not tags:
        return ()
    return tuple(tag for tag in TAG_SEPARATOR.split(tags) if tag)


def _decode_json_object(raw: Any, column: str) -> dict[str, Any]:
    """Decode one JSON blob of the col row into a dict."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        value = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedCollectionError(
            message=f"Invalid JSON in col.{column}: {e}",
            details={"table": "col", "column": column},
        ) from e
    if not isinstance(value, dict):
        raise MalformedCollectionError(
            message=f"col.{column} is not a JSON object",
            details={"table": "col", "column": column, "actual": type(value).__name__},
        )
    return value


def _records(blob: dict[str, Any], column: str) -> Iterator[tuple[str, dict[str, Any]]]:
    """Iterate the records of a decks or models blob, which must be objects."""
    for key, record in blob.items():
        if not isinstance(record, dict):
            raise MalformedCollectionError(
                message=f"col.{column} record {key} is not a JSON object",
                details={"table": "col", "column": column, "actual": type(record).__name__},
            )
        yield key, record


def parse_decks(decks_json: dict[str, Any]) -> list[Deck]:
    """Project the decks blob into Deck values.

    Args:
        decks_json: Decks JSON from the col table, keyed by deck id.

    Returns:
        Decks in blob order.
    """
    return [
        Deck(
            id=deck_data.get("id", deck_id),
            name=deck_data["name"],
            description=deck_data.get("desc") or "",
        )
        for deck_id, deck_data in _records(decks_json, "decks")
    ]


def parse_models(models_json: dict[str, Any]) -> list[Model]:
    """Project the models blob into Model values.

    Args:
        models_json: Models JSON from the col table, keyed by model id.

    Returns:
        Models in blob order.
    """
    models = []

    for model_id, model_data in _records(models_json, "models"):
        templates = tuple(
            Template(
                name=template["name"],
                question_format=template["qfmt"],
                answer_format=template["afmt"],
            )
            for template in model_data["tmpls"]
        )
        models.append(
            Model(
                id=model_data.get("id", model_id),
                name=model_data["name"],
                fields=tuple(f["name"] for f in model_data["flds"]),
                templates=templates,
                css=model_data.get("css") or "",
            )
        )

    return models


def parse_metadata(conn: sqlite3.Connection) -> tuple[list[Deck], list[Model]]:
    """Read decks and models from the single col row."""
    row = conn.execute("SELECT decks, models FROM col LIMIT 1").fetchone()
    if row is None:
        raise MalformedCollectionError(
            message="No collection data found in database",
            details={"table": "col"},
        )

    decks = parse_decks(_decode_json_object(row["decks"], "decks"))
    models = parse_models(_decode_json_object(row["models"], "models"))
    return decks, models


def parse_notes(conn: sqlite3.Connection) -> list[Note]:
    """Read all rows of the notes table."""
    return [
        Note(
            id=row["id"],
            guid=row["guid"],
            model_id=row["mid"],
            modified=row["mod"],
            fields=split_fields(row["flds"]),
            tags=split_tags(row["tags"]),
            # sfld has integer affinity, numeric sort fields come back as int
            sort_field=str(row["sfld"]),
        )
        for row in conn.execute(NOTES_QUERY)
    ]


def parse_cards(conn: sqlite3.Connection) -> list[Card]:
    """Read all rows of the cards table."""
    return [
        Card(
            id=row["id"],
            note_id=row["nid"],
            deck_id=row["did"],
            template_ordinal=row["ord"],
            modified=row["mod"],
            type=row["type"],
            queue=row["queue"],
            due=row["due"],
            interval=row["ivl"],
            ease_factor=row["factor"],
            reps=row["reps"],
            lapses=row["lapses"],
            remaining_steps=row["left"],
            original_due=row["odue"],
            original_deck_id=row["odid"],
            flags=row["flags"],
        )
        for row in conn.execute(CARDS_QUERY)
    ]


def parse_media_manifest(reader: ArchiveReader) -> dict[str, str]:
    """Decode the media manifest; packages without one have no media."""
    if MEDIA_ENTRY not in reader:
        return {}

    raw = reader.read(MEDIA_ENTRY)
    try:
        manifest = json.loads(raw) if raw.strip() else {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedCollectionError(
            message=f"Invalid media manifest: {e}",
            details={"entry": MEDIA_ENTRY},
        ) from e
    if not isinstance(manifest, dict):
        raise MalformedCollectionError(
            message="Media manifest is not a JSON object",
            details={"entry": MEDIA_ENTRY, "actual": type(manifest).__name__},
        )
    return {str(number): str(name) for number, name in manifest.items()}


def _media_or_empty(reader: ArchiveReader) -> dict[str, str]:
    """Media manifest for a full parse; an unreadable manifest means no media."""
    try:
        return parse_media_manifest(reader)
    except (ArchiveError, MalformedCollectionError) as e:
        logger.warning("Ignoring media manifest: %s: %s", e.code, e.message)
        return {}


def _reader_for(path: str | Path) -> ArchiveReader:
    data = read_package_bytes(path)
    return ArchiveReader(data, verify_checksums=get_settings().importer.verify_checksums)


def decode_package(reader: ArchiveReader, source: str | Path = "<memory>") -> Package:
    """Decode the collection and media manifest held by ``reader``."""
    collection_entry = find_collection_entry(reader)
    media = _media_or_empty(reader)

    with open_collection(reader.read(collection_entry)) as conn:
        decks, models = parse_metadata(conn)
        notes = parse_notes(conn)
        cards = parse_cards(conn)

    package = Package(decks=decks, models=models, notes=notes, cards=cards, media=media)
    logger.info(
        "Parsed %s from %s: %d decks, %d models, %d notes, %d cards",
        collection_entry,
        source,
        len(package.decks),
        len(package.models),
        len(package.notes),
        len(package.cards),
    )
    return package


@safe
def parse_package(path: str | Path) -> Package:
    """Parse an .apkg file into a Package.

    Args:
        path: Path to the .apkg file.

    Returns:
        Package with decks, models, notes, cards and the media manifest.

    Raises:
        ApkgError: A typed subclass for every failure; nothing partial is
            returned.
    """
    return decode_package(_reader_for(path), source=path)


@safe
def list_contents(path: str | Path) -> list[str]:
    """List the archive entries of an .apkg file.

    Only the central directory is read; the collection is never opened.
    """
    return _reader_for(path).names()


@safe
def read_media_file(path: str | Path, media_name: str) -> bytes:
    """Extract a media file by its original name.

    Args:
        path: Path to the .apkg file.
        media_name: Original file name as listed in the media manifest.

    Returns:
        File content.

    Raises:
        EntryNotFoundError: The manifest does not list ``media_name``.
    """
    reader = _reader_for(path)
    manifest = parse_media_manifest(reader)

    for number, name in manifest.items():
        if name == media_name:
            return reader.read(number)

    raise EntryNotFoundError(
        message=f"Media file not found in package: {media_name}",
        details={"entry": media_name},
    )


@safe
def summarize_package(path: str | Path) -> PackageSummary:
    """Parse a package and count its contents."""
    reader = _reader_for(path)
    package = decode_package(reader, source=path)
    return PackageSummary.from_package(package, reader.names())
