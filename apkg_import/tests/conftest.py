"""Pytest configuration and fixtures for importer tests."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from apkg_import.core.config import get_settings
from apkg_import.modules.apkg import Package, parse_package

from .factories import build_apkg, build_collection


# ==================== Settings Fixtures ====================


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Re-read settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def staging_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Stage extracted collections in a directory the test can inspect."""
    staging = tmp_path / "staging"
    staging.mkdir()
    monkeypatch.setenv("APKG_TEMP_DIR", str(staging))
    get_settings.cache_clear()
    return staging


# ==================== Package Fixtures ====================


@pytest.fixture
def collection_bytes(tmp_path: Path) -> bytes:
    """Sample collection: 2 decks, 1 model, 3 notes, 3 cards."""
    return build_collection(tmp_path / "sample.anki2")


@pytest.fixture
def apkg_path(tmp_path: Path, collection_bytes: bytes) -> Path:
    """Sample .apkg with deflate-compressed entries and one media file."""
    return build_apkg(
        tmp_path / "test.apkg",
        collection=collection_bytes,
        media={"0": "hello.mp3"},
        media_files={"0": b"ID3 fake audio"},
    )


@pytest.fixture
def sample_package(apkg_path: Path) -> Package:
    """The parsed sample package."""
    return parse_package(apkg_path)


# ==================== Logging Fixtures ====================


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Undo setup_logger() so sinks never outlive the test that added them."""
    root_handlers = logging.root.handlers[:]
    root_level = logging.root.level
    yield
    logger.remove()
    logging.root.handlers = root_handlers
    logging.root.setLevel(root_level)
    package_logger = logging.getLogger("apkg_import")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
