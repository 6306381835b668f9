"""Base exception class for application errors.

Core exception logic with auto-generation of error codes and messages.
"""

import logging
import re
from typing import Any

from pydantic import ValidationError

from apkg_import.shared.context import import_id_var

from .schemas import ErrorDetail

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for all application errors.

    Features:
    - Auto-generates code from class name (e.g., InvalidArchiveError -> INVALID_ARCHIVE)
    - Auto-generates default_message from docstring
    - Validates details via Pydantic
    - Includes import_id from context for log correlation
    """

    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal error"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | ErrorDetail | None = None,
        code: str | None = None,
    ) -> None:
        self.message = message or self.default_message

        if details is not None:
            if isinstance(details, ErrorDetail):
                self.details = details.model_dump(exclude_none=True)
            else:
                try:
                    validated = ErrorDetail(**details)
                    self.details = validated.model_dump(exclude_none=True)
                except ValidationError as e:
                    logger.warning(f"Invalid details in {self.__class__.__name__}: {e}")
                    # Allow arbitrary details if validation fails
                    self.details = details
        else:
            self.details = {}

        if code is not None:
            self.code = code

        super().__init__(self.message)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Auto-generate code and default_message for subclasses."""
        super().__init_subclass__(**kwargs)

        # Auto-generate error code from class name
        if "code" not in cls.__dict__:
            name = cls.__name__
            for suffix in ("Exception", "Error"):
                if name.endswith(suffix):
                    name = name[: -len(suffix)]
                    break
            cls.code = re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()

        # Auto-generate default message from docstring
        if "default_message" not in cls.__dict__ and cls.__doc__:
            cls.default_message = cls.__doc__.strip().split("\n")[0]

    @property
    def import_id(self) -> str:
        """Get current import_id from context."""
        return import_id_var.get()

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception to a plain dictionary."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "import_id": self.import_id,
        }
