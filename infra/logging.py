"""
Centralized Logging
-------------------
Structured logging with call_id propagation for per-call traceability.

Design:
- Every dispatched call gets a unique call_id (its CallRecord id)
- call_id propagates through: executor -> registry -> clearance gate -> handler
- Supports both console (Rich) and file (JSON lines) output
- Clear severity discipline: INFO=state, WARNING=denied/recoverable, ERROR=failure

Usage:
    from infra.logging import get_logger, CallContext

    logger = get_logger("functions.executor")

    with CallContext(record.id) as call_id:
        logger.info("Dispatching call")
"""

import contextvars
import json
import logging
import logging.handlers
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER = "sidekick"

# Context variable for call_id - thread-safe and async-safe
_call_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "call_id", default=None
)


def generate_call_id() -> str:
    """Generate a unique call ID."""
    return str(uuid.uuid4())


def get_call_id() -> Optional[str]:
    """Get the current call ID from context."""
    return _call_id_var.get()


class CallContext:
    """
    Context manager for call scoping.

    Usage:
        with CallContext() as call_id:
            # All logs within this block will have call_id
            logger.info("Processing...")
    """

    def __init__(self, call_id: Optional[str] = None):
        self._call_id = call_id or generate_call_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _call_id_var.set(self._call_id)
        return self._call_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _call_id_var.reset(self._token)
            self._token = None


class CallIdFilter(logging.Filter):
    """Logging filter that adds call_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "call_id", None) is None:
            record.call_id = get_call_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("tool_name", "clearance", "status", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "call_id": getattr(record, "call_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class CallIdConsoleFormatter(logging.Formatter):
    """Prefixes console messages with the short call id."""

    def format(self, record: logging.LogRecord) -> str:
        call_id = getattr(record, "call_id", "-")
        message = super().format(record)
        if call_id and call_id != "-":
            return f"[{call_id[:8]}] {message}"
        return message


_logging_initialized = False
_log_file_path: Optional[Path] = None

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 3


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = False,
) -> None:
    """
    Configure the engine's logging.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable console output
        file: Enable JSON-lines file output
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized:
        return

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    call_filter = CallIdFilter()

    if console:
        console_handler = RichHandler(show_path=False, rich_tracebacks=True)
        console_handler.setLevel(level)
        console_handler.setFormatter(CallIdConsoleFormatter("%(name)s: %(message)s"))
        console_handler.addFilter(call_filter)
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        log_path.mkdir(parents=True, exist_ok=True)
        _log_file_path = log_path / "functions.log"

        file_handler = logging.handlers.RotatingFileHandler(
            str(_log_file_path),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(call_filter)
        root_logger.addHandler(file_handler)

    _logging_initialized = True


def configure_logging_from_settings(settings, console: bool = True) -> None:
    """
    configure_logging() driven by FunctionSettings.

    log_level is a level name ("DEBUG", "info", ...); file output is on
    only when log_dir is set.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.log_level}")

    configure_logging(
        level=level,
        log_dir=settings.log_dir,
        console=console,
        file=settings.log_dir is not None,
    )


def reset_logging() -> None:
    """Drop configured handlers so configure_logging() can run again."""
    global _logging_initialized, _log_file_path

    root_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _logging_initialized = False
    _log_file_path = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the engine's namespace.

    Args:
        name: Logger name (prefixed with 'sidekick.' if not already)
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    logger = logging.getLogger(name)
    if not any(isinstance(f, CallIdFilter) for f in logger.filters):
        logger.addFilter(CallIdFilter())
    return logger
