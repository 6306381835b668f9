"""
Shared module - cross-cutting concerns and utilities.

This module provides shared functionality used across the importer:
- Context variables for import IDs
- Logging utilities with Loguru
"""

from .context import get_import_id, import_id_var, set_import_id
from .logging import get_logger, logger, setup_logger

__all__ = [
    # Context
    "get_import_id",
    "import_id_var",
    "set_import_id",
    # Logging
    "logger",
    "setup_logger",
    "get_logger",
]
