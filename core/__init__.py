# Core module - Error taxonomy shared by the engine and its hosts

from .errors import (
    ErrorCategory, FunctionCallError,
    MalformedEnvelope, ToolNotFound, ArgumentDecodeError,
    PermissionDenied, HandlerError,
    DuplicateTool, RegistrySealed, InvalidTransition,
    describe_failure,
)

__all__ = [
    "ErrorCategory", "FunctionCallError",
    "MalformedEnvelope", "ToolNotFound", "ArgumentDecodeError",
    "PermissionDenied", "HandlerError",
    "DuplicateTool", "RegistrySealed", "InvalidTransition",
    "describe_failure",
]
