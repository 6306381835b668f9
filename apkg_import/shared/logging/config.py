"""Logger configuration.

Loguru-based logging configuration for the importer:
- Loguru for application output (pretty format, colors, structured data)
- Intercept handler so records emitted through the standard logging module
  by the importer modules end up in the same sinks
- Import ID correlation from the context variable set by the async facade
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

from apkg_import.shared.context import import_id_var

if TYPE_CHECKING:
    from apkg_import.core.config import Settings

# Default import ID when no import is running
NO_IMPORT = "-"


def _get_settings() -> Settings:
    """Get settings lazily to avoid circular imports."""
    from apkg_import.core.config import get_settings

    return get_settings()


class InterceptHandler(logging.Handler):
    """Handler for intercepting standard logging and redirecting to Loguru.

    The importer modules log through the standard logging module so that a
    host application can route them however it likes. When this package owns
    the process (the CLI script), they are intercepted here and rendered by
    Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Forward a single standard logging record to Loguru.

        Args:
            record: Log record from standard logging
        """
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        frame = logging.currentframe()
        depth = 2

        if frame:
            while frame.f_code.co_filename == logging.__file__:
                if frame.f_back:
                    frame = frame.f_back
                    depth += 1
                else:
                    break

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _import_id_patcher(record: dict[str, Any]) -> None:
    """Attach the current import ID to every record."""
    record["extra"]["import_id"] = import_id_var.get() or NO_IMPORT


def _create_json_sink(service_name: str) -> Any:
    """Create a JSON sink for stdout logging.

    Args:
        service_name: Name of the service for log entries

    Returns:
        Sink function for Loguru
    """

    def json_sink(message: Any) -> None:
        """Write JSON formatted log to stdout."""
        record = message.record
        log_entry: dict[str, Any] = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "message": record["message"],
            "module": record["extra"].get("name", record["name"]),
            "function": record["function"],
            "line": record["line"],
            "service": service_name,
        }

        for key, value in record["extra"].items():
            if key != "name":
                log_entry[key] = value

        if record["exception"]:
            exc = record["exception"]
            log_entry["exception"] = {
                "type": exc.type.__name__ if exc.type else None,
                "value": str(exc.value) if exc.value else None,
            }

        sys.stdout.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")
        sys.stdout.flush()

    return json_sink


def setup_logger() -> None:
    """Configure Loguru logger.

    Sets up:
    - Console handler with colored output, or JSON lines when LOG_FORMAT=json
    - Import ID correlation
    - Interception of standard logging records
    """
    settings = _get_settings()

    # Remove default handler
    logger.remove()
    logger.configure(patcher=_import_id_patcher)

    is_json = settings.logging.format.lower() == "json"

    if is_json:
        logger.add(
            _create_json_sink(settings.app.name),
            level=settings.logging.level.upper(),
            backtrace=True,
            diagnose=False,
        )
    else:
        dev_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level> | "
            "<dim>import_id={extra[import_id]}</dim>"
        )
        logger.add(
            sys.stderr,
            format=dev_format,
            level=settings.logging.level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=settings.app.debug,
        )

    configure_stdlib_loggers(settings.logging.level.upper())

    logger.debug(
        "Logger configured",
        log_level=settings.logging.level,
        log_format="json" if is_json else "console",
    )


def configure_stdlib_loggers(level: str = "INFO") -> None:
    """Route the importer's standard logging records into Loguru.

    Args:
        level: Minimum level for the apkg_import logger hierarchy
    """
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.WARNING)

    package_logger = logging.getLogger("apkg_import")
    package_logger.handlers.clear()
    package_logger.addHandler(InterceptHandler())
    package_logger.propagate = False
    package_logger.setLevel(level)


def get_logger(name: str):
    """Get a logger with the specified name.

    Args:
        name: Logger name (usually __name__ of the module)

    Returns:
        Configured Loguru logger with bound name
    """
    return logger.bind(name=name)
