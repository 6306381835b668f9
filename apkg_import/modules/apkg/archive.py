"""Minimal ZIP reader for .apkg packages.

Only what a package export needs is supported: a single-disk archive whose
entries are either stored or raw-deflate compressed. The layout read here:

- end of central directory record (last 22 bytes plus an optional comment):
  entry count, size and offset of the central directory
- central directory: one 46-byte record per entry followed by the entry name,
  extra field and comment; holds method, sizes, CRC-32 and the offset of the
  entry's local header
- local header: 30 bytes followed by name, extra field and the payload

Sizes always come from the central directory. Local headers may leave them
zero when a data descriptor follows the payload (flag bit 3).
"""

import logging
import struct
import zlib
from dataclasses import dataclass
from enum import IntEnum

from apkg_import.core.exceptions import (
    ChecksumMismatchError,
    CorruptEntryError,
    EntryNotFoundError,
    InvalidArchiveError,
    TruncatedArchiveError,
    UnsupportedCompressionError,
)

logger = logging.getLogger(__name__)

END_OF_CENTRAL_DIR_SIG = b"PK\x05\x06"
CENTRAL_DIR_SIG = b"PK\x01\x02"
LOCAL_HEADER_SIG = b"PK\x03\x04"

# signature, disk, cd disk, entries on disk, total entries, cd size, cd offset, comment length
END_OF_CENTRAL_DIR = struct.Struct("<4sHHHHIIH")
# signature, made by, needed, flags, method, time, date, crc32, compressed size,
# uncompressed size, name length, extra length, comment length, disk start,
# internal attributes, external attributes, local header offset
CENTRAL_DIR_RECORD = struct.Struct("<4sHHHHHHIIIHHHHHII")
# signature, needed, flags, method, time, date, crc32, compressed size,
# uncompressed size, name length, extra length
LOCAL_HEADER = struct.Struct("<4sHHHHHIIIHH")

MAX_COMMENT_LENGTH = 0xFFFF

FLAG_ENCRYPTED = 0x0001
FLAG_UTF8 = 0x0800


class CompressionMethod(IntEnum):
    """Compression methods this reader can extract."""

    STORED = 0
    DEFLATE = 8


@dataclass(frozen=True)
class ArchiveEntry:
    """Central directory record of one archive entry.

    Attributes:
        name: Archive-relative path.
        compression_method: Raw method code (0 = stored, 8 = deflate).
        flags: General purpose bit flags.
        crc32: Declared CRC-32 of the uncompressed payload.
        compressed_size: Payload size inside the archive.
        uncompressed_size: Payload size after decompression.
        local_header_offset: Offset of the entry's local header.
    """

    name: str
    compression_method: int
    flags: int
    crc32: int
    compressed_size: int
    uncompressed_size: int
    local_header_offset: int

    @property
    def is_encrypted(self) -> bool:
        return bool(self.flags & FLAG_ENCRYPTED)


def _find_end_of_central_directory(data: bytes) -> int:
    """Return the offset of the end of central directory record."""
    if len(data) < END_OF_CENTRAL_DIR.size:
        raise InvalidArchiveError(
            message="File is too small to be a ZIP archive",
            details={"actual": len(data)},
        )

    # The record is followed only by its comment, so search the tail backwards
    search_start = max(0, len(data) - END_OF_CENTRAL_DIR.size - MAX_COMMENT_LENGTH)
    position = len(data) - END_OF_CENTRAL_DIR.size
    while position >= search_start:
        position = data.rfind(END_OF_CENTRAL_DIR_SIG, search_start, position + 4)
        if position < 0:
            break
        comment_length = struct.unpack_from("<H", data, position + 20)[0]
        if position + END_OF_CENTRAL_DIR.size + comment_length <= len(data):
            return position
        position -= 1

    raise InvalidArchiveError(message="End of central directory signature not found")


def _decode_name(raw: bytes, flags: int) -> str:
    if not flags & FLAG_UTF8:
        return raw.decode("cp437")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidArchiveError(
            message=f"Entry name flagged as UTF-8 is not valid UTF-8: {raw!r}",
            details={"reason": str(e)},
        ) from e


def read_central_directory(data: bytes) -> tuple[ArchiveEntry, ...]:
    """Enumerate archive entries from the central directory.

    Args:
        data: Complete archive bytes.

    Returns:
        Entries in central directory order.

    Raises:
        InvalidArchiveError: No end of central directory record, or a
            directory record with a bad signature.
        TruncatedArchiveError: The directory extends past the end of data.
    """
    eocd_offset = _find_end_of_central_directory(data)
    (
        _sig,
        _disk,
        _cd_disk,
        _entries_on_disk,
        total_entries,
        cd_size,
        cd_offset,
        _comment_length,
    ) = END_OF_CENTRAL_DIR.unpack_from(data, eocd_offset)

    cd_end = cd_offset + cd_size
    if cd_end > eocd_offset:
        raise TruncatedArchiveError(
            message="Central directory extends past the end of the archive",
            details={"offset": cd_offset, "expected": cd_size, "actual": eocd_offset - cd_offset},
        )

    entries: list[ArchiveEntry] = []
    offset = cd_offset
    for _ in range(total_entries):
        if offset + CENTRAL_DIR_RECORD.size > cd_end:
            raise TruncatedArchiveError(
                message="Central directory record is cut short",
                details={"offset": offset},
            )
        (
            sig,
            _made_by,
            _needed,
            flags,
            method,
            _time,
            _date,
            crc32,
            compressed_size,
            uncompressed_size,
            name_length,
            extra_length,
            comment_length,
            _disk_start,
            _internal_attrs,
            _external_attrs,
            local_header_offset,
        ) = CENTRAL_DIR_RECORD.unpack_from(data, offset)
        if sig != CENTRAL_DIR_SIG:
            raise InvalidArchiveError(
                message="Bad central directory record signature",
                details={"offset": offset},
            )

        name_start = offset + CENTRAL_DIR_RECORD.size
        record_end = name_start + name_length + extra_length + comment_length
        if record_end > cd_end:
            raise TruncatedArchiveError(
                message="Central directory record is cut short",
                details={"offset": offset},
            )

        entries.append(
            ArchiveEntry(
                name=_decode_name(data[name_start : name_start + name_length], flags),
                compression_method=method,
                flags=flags,
                crc32=crc32,
                compressed_size=compressed_size,
                uncompressed_size=uncompressed_size,
                local_header_offset=local_header_offset,
            )
        )
        offset = record_end

    logger.debug("Central directory at %d lists %d entries", cd_offset, len(entries))
    return tuple(entries)


def _inflate(payload: bytes, entry: ArchiveEntry) -> bytes:
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        result = decompressor.decompress(payload) + decompressor.flush()
    except zlib.error as e:
        raise CorruptEntryError(
            message=f"Invalid deflate stream in {entry.name}: {e}",
            details={"entry": entry.name},
        ) from e
    if not decompressor.eof:
        raise CorruptEntryError(
            message=f"Deflate stream of {entry.name} ends prematurely",
            details={"entry": entry.name},
        )
    return result


class ArchiveReader:
    """Read entries of an in-memory ZIP archive.

    The central directory is read once, when the reader is created; entries
    are immutable for the lifetime of the reader. Nothing is cached between
    readers.

    Example:
        reader = ArchiveReader(Path("deck.apkg").read_bytes())
        if "media" in reader:
            manifest = json.loads(reader.read("media"))
    """

    def __init__(self, data: bytes, verify_checksums: bool = False) -> None:
        self._data = data
        self._verify_checksums = verify_checksums
        self.entries = read_central_directory(data)

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self.entries)

    def names(self) -> list[str]:
        """Names of all entries, in central directory order."""
        return [entry.name for entry in self.entries]

    def get(self, name: str) -> ArchiveEntry:
        """Return the directory record for ``name``.

        Raises:
            EntryNotFoundError: No entry has this name.
        """
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise EntryNotFoundError(
            message=f"Entry not found in archive: {name}",
            details={"entry": name, "available": self.names()},
        )

    def read(self, name: str) -> bytes:
        """Return the uncompressed payload of the entry ``name``.

        Raises:
            EntryNotFoundError: No entry has this name.
            InvalidArchiveError: The local header signature is wrong.
            TruncatedArchiveError: Header or payload run past the end of data.
            UnsupportedCompressionError: Encrypted entry or method other than
                stored/deflate.
            CorruptEntryError: The deflate stream is invalid.
            ChecksumMismatchError: Checksum verification is on and fails.
        """
        entry = self.get(name)
        payload = self._payload(entry)

        if entry.is_encrypted:
            raise UnsupportedCompressionError(
                message=f"Encrypted entries are not supported: {name}",
                details={"entry": name},
            )

        try:
            method = CompressionMethod(entry.compression_method)
        except ValueError:
            raise UnsupportedCompressionError(
                message=(
                    f"Unsupported compression method {entry.compression_method} "
                    f"for entry {name}"
                ),
                details={"entry": name, "actual": entry.compression_method},
            ) from None

        if method is CompressionMethod.STORED:
            content = payload
        else:
            content = _inflate(payload, entry)

        if self._verify_checksums:
            self._check(entry, content)

        logger.debug(
            "Extracted %s (%s, %d -> %d bytes)",
            name,
            method.name.lower(),
            len(payload),
            len(content),
        )
        return content

    def _payload(self, entry: ArchiveEntry) -> bytes:
        """Slice the raw (possibly compressed) bytes of ``entry``."""
        offset = entry.local_header_offset
        if offset + LOCAL_HEADER.size > len(self._data):
            raise TruncatedArchiveError(
                message=f"Local header of {entry.name} is past the end of the archive",
                details={"entry": entry.name, "offset": offset},
            )

        sig, *_fields, name_length, extra_length = LOCAL_HEADER.unpack_from(self._data, offset)
        if sig != LOCAL_HEADER_SIG:
            raise InvalidArchiveError(
                message=f"Bad local header signature for {entry.name}",
                details={"entry": entry.name, "offset": offset},
            )

        start = offset + LOCAL_HEADER.size + name_length + extra_length
        end = start + entry.compressed_size
        if end > len(self._data):
            raise TruncatedArchiveError(
                message=(
                    f"Entry {entry.name} declares {entry.compressed_size} bytes "
                    f"but only {max(len(self._data) - start, 0)} remain"
                ),
                details={
                    "entry": entry.name,
                    "expected": entry.compressed_size,
                    "actual": max(len(self._data) - start, 0),
                },
            )
        return self._data[start:end]

    @staticmethod
    def _check(entry: ArchiveEntry, content: bytes) -> None:
        if len(content) != entry.uncompressed_size:
            raise ChecksumMismatchError(
                message=f"Size mismatch for {entry.name}",
                details={"entry": entry.name, "expected": entry.uncompressed_size, "actual": len(content)},
            )
        actual = zlib.crc32(content) & 0xFFFFFFFF
        if actual != entry.crc32:
            raise ChecksumMismatchError(
                message=f"CRC-32 mismatch for {entry.name}",
                details={"entry": entry.name, "expected": entry.crc32, "actual": actual},
            )


def list_entries(data: bytes) -> list[str]:
    """Names of all entries in the archive ``data``.

    Only the central directory is read; entry payloads are never touched.
    """
    return ArchiveReader(data).names()


def extract_entry(data: bytes, name: str) -> bytes:
    """Uncompressed content of the entry ``name`` in the archive ``data``."""
    return ArchiveReader(data).read(name)
