"""
Call Envelope
-------------
The wire-level call the model emits: a tool name plus raw arguments.

Decoding is liberal: the call may sit under "function_call" or "function",
tried in that order. Encoding is canonical: always "function_call".
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union
import json

from core.errors import MalformedEnvelope

CANDIDATE_KEYS: Tuple[str, ...] = ("function_call", "function")
CANONICAL_KEY = CANDIDATE_KEYS[0]


def _read_call(inner: Any) -> Tuple[Optional["CallEnvelope"], str]:
    """Decode the inner {name, arguments} shape. Returns (envelope, why-not)."""
    if not isinstance(inner, dict):
        return None, "call is not an object"

    name = inner.get("name")
    if not isinstance(name, str) or not name:
        return None, "missing or empty 'name'"

    arguments = inner.get("arguments", {})
    if isinstance(arguments, str):
        # OpenAI-style: arguments as a JSON-encoded string
        try:
            arguments = json.loads(arguments) if arguments.strip() else {}
        except json.JSONDecodeError as e:
            return None, f"'arguments' string is not JSON: {e.msg}"

    if arguments is None:
        arguments = {}

    return CallEnvelope(name=name, arguments=arguments), ""


@dataclass(frozen=True)
class CallEnvelope:
    """A single function call request."""
    name: str
    arguments: Any = field(default_factory=dict)

    @classmethod
    def parse(cls, raw: Union[bytes, str, Dict[str, Any]]) -> "CallEnvelope":
        """
        Decode a call from the model.

        Tries each candidate key in order; raises MalformedEnvelope carrying
        the attempted keys when none holds a readable call.
        """
        if isinstance(raw, dict):
            data = raw
        else:
            try:
                data = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedEnvelope(CANDIDATE_KEYS, f"not JSON: {e}") from None

        if not isinstance(data, dict):
            raise MalformedEnvelope(CANDIDATE_KEYS, "top level is not an object")

        reasons = []
        for key in CANDIDATE_KEYS:
            if key not in data:
                reasons.append(f"{key}: absent")
                continue
            envelope, why = _read_call(data[key])
            if envelope is not None:
                return envelope
            reasons.append(f"{key}: {why}")

        raise MalformedEnvelope(CANDIDATE_KEYS, "; ".join(reasons))

    def to_dict(self) -> Dict[str, Any]:
        """Canonical form, always under "function_call"."""
        return {CANONICAL_KEY: {"name": self.name, "arguments": self.arguments}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def arguments_json(self) -> bytes:
        """Arguments as UTF-8 JSON, ready for ToolHandle.invoke."""
        return json.dumps(self.arguments, ensure_ascii=False).encode("utf-8")

    def __repr__(self) -> str:
        return f"CallEnvelope(name={self.name}, arguments={self.arguments!r})"
