"""
Scoped temporary files.

Some consumers (sqlite3 opening a collection, for one) need a real filesystem
path for data that only exists in memory. ``temporary_file`` writes the bytes
into a private directory and removes the directory when the block exits,
whether it exits normally or through an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from tempfile import TemporaryDirectory

logger = logging.getLogger(__name__)


@contextmanager
def temporary_file(
    data: bytes,
    filename: str = "data.bin",
    prefix: str = "apkg-import-",
    directory: str | Path | None = None,
) -> Iterator[Path]:
    """
    Write ``data`` to a file inside a fresh private directory.

    Parameters
    ----------
    data : bytes
        Content of the file.
    filename : str
        Name of the file inside the private directory.
    prefix : str
        Prefix of the private directory name.
    directory : str | Path | None
        Parent of the private directory. None uses the system temp root.

    Yields
    ------
    Path
        Path of the written file. It and its directory are gone after exit.
    """
    with TemporaryDirectory(prefix=prefix, dir=directory) as tmp_dir:
        path = Path(tmp_dir) / filename
        path.write_bytes(data)
        logger.debug("Staged %d bytes at %s", len(data), path)
        yield path
