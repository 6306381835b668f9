"""Builders for .apkg test fixtures.

ZIP archives are assembled byte by byte so that tests control every header
field (method, sizes, CRC-32, flags) independently of the zipfile module.
Collections are real SQLite files using the legacy Anki schema.

Usage:
    from apkg_import.tests.factories import ZipEntrySpec, build_zip, build_apkg

    data = build_zip([ZipEntrySpec("a.txt", b"hello")])
    path = build_apkg(tmp_path / "deck.apkg")
"""

import json
import sqlite3
import struct
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import factory

from apkg_import.modules.apkg.archive import CompressionMethod

from .fixtures.sample_data import SAMPLE_CARDS, SAMPLE_DECKS, SAMPLE_MODELS, SAMPLE_NOTES


# ==================== Row factories ====================


class NoteRowFactory(factory.DictFactory):
    """Row of the notes table."""

    id = factory.Sequence(lambda n: 1_000_000_000_001 + n)
    guid = factory.Sequence(lambda n: f"guid{n:04d}")
    mid = 9876543210987
    mod = 1600000000
    tags = ""
    flds = "Front\x1fBack"
    sfld = "Front"


class CardRowFactory(factory.DictFactory):
    """Row of the cards table (a new card by default)."""

    id = factory.Sequence(lambda n: 2_000_000_000_001 + n)
    nid = 1_000_000_000_001
    did = 1
    ord = 0
    mod = 1600000000
    type = 0
    queue = 0
    due = 1
    ivl = 0
    factor = 0
    reps = 0
    lapses = 0
    left = 0
    odue = 0
    odid = 0
    flags = 0


# ==================== ZIP ====================


@dataclass
class ZipEntrySpec:
    """One entry of a hand-built ZIP archive.

    ``crc32`` and ``flags`` override the computed/default header values;
    ``method`` may be any code, payloads are only compressed for DEFLATE.
    """

    name: str
    data: bytes
    method: int = CompressionMethod.DEFLATE
    crc32: int | None = None
    flags: int = 0x0800


def build_zip(entries: list[ZipEntrySpec], comment: bytes = b"") -> bytes:
    """Assemble a ZIP archive from ``entries``."""
    chunks: list[bytes] = []
    central_directory: list[bytes] = []
    offset = 0

    for entry in entries:
        name = entry.name.encode("utf-8" if entry.flags & 0x0800 else "cp437")
        if entry.method == CompressionMethod.DEFLATE:
            compressor = zlib.compressobj(6, zlib.DEFLATED, -zlib.MAX_WBITS)
            payload = compressor.compress(entry.data) + compressor.flush()
        else:
            payload = entry.data
        crc = entry.crc32 if entry.crc32 is not None else zlib.crc32(entry.data) & 0xFFFFFFFF

        local_header = struct.pack(
            "<4sHHHHHIIIHH",
            b"PK\x03\x04",
            20,  # version needed
            entry.flags,
            entry.method,
            0,  # mod time
            0,  # mod date
            crc,
            len(payload),
            len(entry.data),
            len(name),
            0,  # extra field length
        )
        central_record = struct.pack(
            "<4sHHHHHHIIIHHHHHII",
            b"PK\x01\x02",
            20,  # version made by
            20,  # version needed
            entry.flags,
            entry.method,
            0,
            0,
            crc,
            len(payload),
            len(entry.data),
            len(name),
            0,  # extra field length
            0,  # comment length
            0,  # disk number
            0,  # internal attributes
            0,  # external attributes
            offset,
        )

        chunks.extend([local_header, name, payload])
        central_directory.append(central_record + name)
        offset += len(local_header) + len(name) + len(payload)

    cd_bytes = b"".join(central_directory)
    end_record = struct.pack(
        "<4sHHHHIIH",
        b"PK\x05\x06",
        0,
        0,
        len(entries),
        len(entries),
        len(cd_bytes),
        offset,
        len(comment),
    )
    return b"".join(chunks) + cd_bytes + end_record + comment


# ==================== Collection ====================


COLLECTION_SCHEMA = """
    CREATE TABLE col (
        id integer primary key,
        crt integer not null,
        mod integer not null,
        scm integer not null,
        ver integer not null,
        dty integer not null,
        usn integer not null,
        ls integer not null,
        conf text not null,
        models text not null,
        decks text not null,
        dconf text not null,
        tags text not null
    );
    CREATE TABLE notes (
        id integer primary key,
        guid text not null,
        mid integer not null,
        mod integer not null,
        usn integer not null,
        tags text not null,
        flds text not null,
        sfld integer not null,
        csum integer not null,
        flags integer not null,
        data text not null
    );
    CREATE TABLE cards (
        id integer primary key,
        nid integer not null,
        did integer not null,
        ord integer not null,
        mod integer not null,
        usn integer not null,
        type integer not null,
        queue integer not null,
        due integer not null,
        ivl integer not null,
        factor integer not null,
        reps integer not null,
        lapses integer not null,
        left integer not null,
        odue integer not null,
        odid integer not null,
        flags integer not null,
        data text not null
    );
"""


def build_collection(
    path: Path,
    decks: dict[str, Any] | str | None = None,
    models: dict[str, Any] | str | None = None,
    notes: list[dict[str, Any]] | None = None,
    cards: list[dict[str, Any]] | None = None,
    with_col_row: bool = True,
) -> bytes:
    """Create a legacy Anki collection at ``path`` and return its bytes.

    ``decks`` and ``models`` given as strings are stored verbatim, which
    allows writing invalid JSON.
    """
    decks = SAMPLE_DECKS if decks is None else decks
    models = SAMPLE_MODELS if models is None else models
    notes = SAMPLE_NOTES if notes is None else notes
    cards = SAMPLE_CARDS if cards is None else cards

    conn = sqlite3.connect(path)
    try:
        conn.executescript(COLLECTION_SCHEMA)
        if with_col_row:
            conn.execute(
                "INSERT INTO col VALUES (1, 1600000000, 1600000001000, 1600000000000, 11, 0, -1, 0, "
                "'{}', ?, ?, '{}', '{}')",
                (
                    models if isinstance(models, str) else json.dumps(models),
                    decks if isinstance(decks, str) else json.dumps(decks),
                ),
            )
        conn.executemany(
            "INSERT INTO notes VALUES (:id, :guid, :mid, :mod, -1, :tags, :flds, :sfld, 0, 0, '')",
            notes,
        )
        conn.executemany(
            "INSERT INTO cards VALUES (:id, :nid, :did, :ord, :mod, -1, :type, :queue, :due, :ivl, "
            ":factor, :reps, :lapses, :left, :odue, :odid, :flags, '')",
            cards,
        )
        conn.commit()
    finally:
        conn.close()

    return path.read_bytes()


def build_apkg(
    path: Path,
    collection: bytes | None = None,
    collection_name: str = "collection.anki2",
    media: dict[str, str] | None = None,
    media_files: dict[str, bytes] | None = None,
    method: int = CompressionMethod.DEFLATE,
) -> Path:
    """Write an .apkg at ``path``.

    Without ``collection`` a sample collection is built next to ``path``.
    """
    if collection is None:
        collection = build_collection(path.with_suffix(".anki2"))

    entries = [
        ZipEntrySpec(collection_name, collection, method=method),
        ZipEntrySpec("media", json.dumps(media or {}).encode("utf-8"), method=method),
    ]
    for name, data in (media_files or {}).items():
        entries.append(ZipEntrySpec(name, data, method=method))

    path.write_bytes(build_zip(entries))
    return path
