"""Async facade over the package decoder."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar
from uuid import uuid4

from apkg_import.shared.context import set_import_id

from .collection import list_contents, parse_package, read_media_file, summarize_package
from .schemas import Package, PackageSummary

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApkgImportService:
    """Service for reading .apkg packages from async code.

    Decoding is synchronous and CPU/IO bound, so every call runs in a worker
    thread and the event loop stays free. The service holds no state; calls
    are independent and may run concurrently, on the same file too.

    Example:
        service = ApkgImportService()
        package = await service.parse(Path("deck.apkg"))
        for note in package.notes:
            print(note.fields)
    """

    async def parse(self, file_path: str | Path) -> Package:
        """Parse an .apkg file.

        Args:
            file_path: Path to the .apkg file.

        Returns:
            Fully populated Package.

        Raises:
            ApkgError: If the file cannot be parsed.
        """
        return await self._run(parse_package, file_path)

    async def list_contents(self, file_path: str | Path) -> list[str]:
        """List archive entries without decoding the collection."""
        return await self._run(list_contents, file_path)

    async def read_media_file(self, file_path: str | Path, media_name: str) -> bytes:
        """Extract a media file by its original name."""
        return await self._run(read_media_file, file_path, media_name)

    async def summarize(self, file_path: str | Path) -> PackageSummary:
        """Parse a package and count its contents."""
        return await self._run(summarize_package, file_path)

    async def _run(self, func: Callable[..., T], *args: object) -> T:
        import_id = uuid4().hex

        def call() -> T:
            set_import_id(import_id)
            return func(*args)

        logger.debug("Import %s: %s%r", import_id, func.__name__, args)
        try:
            return await asyncio.to_thread(call)
        except Exception:
            logger.warning("Import %s: %s failed", import_id, func.__name__)
            raise
