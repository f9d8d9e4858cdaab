"""
Error Handling Module
---------------------
Typed errors for the function-calling engine.

Every failure on the dispatch path is raised as one of these and
propagated to the caller. Nothing here is process-fatal; the agent loop
decides how a failure is reported to the user and to the model.
"""

from enum import Enum, auto
from typing import Any, Dict, Optional, Sequence


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    MALFORMED_ENVELOPE = auto()  # Model emitted an unreadable call
    TOOL_NOT_FOUND = auto()      # Model named a tool we don't have
    ARGUMENT_DECODE = auto()     # Arguments don't fit the tool's shape
    PERMISSION_DENIED = auto()   # User refused / auth failed / cancelled
    HANDLER_FAILURE = auto()     # The tool itself failed
    REGISTRY = auto()            # Host wiring mistake
    LIFECYCLE = auto()           # Illegal call record transition


class FunctionCallError(Exception):
    """Base class for all function-calling errors."""

    category: ErrorCategory = ErrorCategory.HANDLER_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def user_message(self) -> str:
        """Message suitable for the model or the user."""
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.category.name}: {self.message})"


class MalformedEnvelope(FunctionCallError):
    """Neither accepted wire key held a readable call."""

    category = ErrorCategory.MALFORMED_ENVELOPE

    def __init__(self, attempted_keys: Sequence[str], reason: str = ""):
        self.attempted_keys = tuple(attempted_keys)
        self.reason = reason
        keys = ", ".join(repr(k) for k in self.attempted_keys)
        message = f"Malformed function call: none of {keys} held a valid call"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, {"attempted_keys": list(self.attempted_keys)})


class ToolNotFound(FunctionCallError):
    """The envelope named a tool that is not registered."""

    category = ErrorCategory.TOOL_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"The function called is not available: {name}",
            {"tool": name},
        )


class ArgumentDecodeError(FunctionCallError):
    """Arguments did not satisfy the tool's declared shape."""

    category = ErrorCategory.ARGUMENT_DECODE

    def __init__(self, tool_name: str, field: str, reason: str):
        self.tool_name = tool_name
        self.field = field
        self.reason = reason
        super().__init__(
            f"Invalid arguments for {tool_name}: field '{field}': {reason}",
            {"tool": tool_name, "field": field},
        )


class PermissionDenied(FunctionCallError):
    """Authorization was refused, failed, timed out or was cancelled."""

    category = ErrorCategory.PERMISSION_DENIED

    USER_MESSAGE = "The user denied your request to use this tool."

    def __init__(self, tool_name: str, reason: str = "denied"):
        self.tool_name = tool_name
        self.reason = reason
        super().__init__(
            f"Permission denied for {tool_name}: {reason}",
            {"tool": tool_name, "reason": reason},
        )

    @property
    def user_message(self) -> str:
        return self.USER_MESSAGE


class HandlerError(FunctionCallError):
    """
    Domain failure raised by a tool handler.

    Handlers may raise this or any other exception; the registry passes
    either through untouched.
    """

    category = ErrorCategory.HANDLER_FAILURE


class DuplicateTool(FunctionCallError):
    """A tool with the same name is already registered."""

    category = ErrorCategory.REGISTRY

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool already registered: {name}", {"tool": name})


class RegistrySealed(FunctionCallError):
    """Registration attempted after the registry was sealed."""

    category = ErrorCategory.REGISTRY

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Cannot register {name}: registry is sealed",
            {"tool": name},
        )


class InvalidTransition(FunctionCallError, ValueError):
    """A call record was moved out of a terminal state."""

    category = ErrorCategory.LIFECYCLE


# Convenience functions

def describe_failure(error: BaseException) -> str:
    """
    Short diagnostic for a failed call record.

    Engine errors use their user-facing message; anything a handler raised
    is reported by type and text.
    """
    if isinstance(error, FunctionCallError):
        return error.user_message
    text = str(error)
    return f"{type(error).__name__}: {text}" if text else type(error).__name__
