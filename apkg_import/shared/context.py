"""
Context variables for correlating log lines and errors of one import.

The async facade assigns a fresh import ID per call; anything logged or
raised while that call runs can read it from here.
"""

from contextvars import ContextVar

import_id_var: ContextVar[str] = ContextVar("import_id", default="")


def get_import_id() -> str:
    """Get current import ID from context.

    Returns:
        Import ID string or empty string if not set.
    """
    return import_id_var.get()


def set_import_id(import_id: str) -> None:
    """Set import ID in context.

    Args:
        import_id: Import ID to set.
    """
    import_id_var.set(import_id)
