# Functions module - Tool registry, schemas, clearance and dispatch
# Each tool: name, ordered parameters, clearance tier, typed handler
# The registry is the firewall between the model and the host

from .parameters import Datatype, ParameterSpec, build_arguments_model
from .schema import SchemaEncoder
from .clearance import (
    Clearance, ClearanceGate, ClearanceDecision, DecisionStatus,
    Authorizer, AuthenticationUnavailable
)
from .authorizers import DenyAllAuthorizer, CallbackAuthorizer, ConsoleAuthorizer
from .spec import ToolHandle, ToolSpec, render_result
from .envelope import CallEnvelope, CANDIDATE_KEYS, CANONICAL_KEY
from .records import CallRecord, CallStatus, VALID_TRANSITIONS
from .registry import ToolRegistry
from .executor import CallExecutor

__all__ = [
    "Datatype",
    "ParameterSpec",
    "build_arguments_model",
    "SchemaEncoder",
    "Clearance",
    "ClearanceGate",
    "ClearanceDecision",
    "DecisionStatus",
    "Authorizer",
    "AuthenticationUnavailable",
    "DenyAllAuthorizer",
    "CallbackAuthorizer",
    "ConsoleAuthorizer",
    "ToolHandle",
    "ToolSpec",
    "render_result",
    "CallEnvelope",
    "CANDIDATE_KEYS",
    "CANONICAL_KEY",
    "CallRecord",
    "CallStatus",
    "VALID_TRANSITIONS",
    "ToolRegistry",
    "CallExecutor",
]
