# Infrastructure module - Logging and configuration

from .config import FunctionSettings, DuplicatePolicy, load_settings
from .logging import (
    get_logger, configure_logging, configure_logging_from_settings, reset_logging,
    CallContext, get_call_id, generate_call_id
)

__all__ = [
    # Config
    "FunctionSettings",
    "DuplicatePolicy",
    "load_settings",
    # Logging
    "get_logger",
    "configure_logging",
    "configure_logging_from_settings",
    "reset_logging",
    "CallContext",
    "get_call_id",
    "generate_call_id",
]
