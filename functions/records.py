"""
Call Records
------------
Audit/status record of one dispatch.

Lifecycle: EXECUTING -> SUCCEEDED | FAILED. Terminal states are final.
All transitions are logged and reported to listeners.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set
import logging
import uuid

from core.errors import InvalidTransition


class CallStatus(str, Enum):
    """Status of a function call."""
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


VALID_TRANSITIONS: Dict[CallStatus, Set[CallStatus]] = {
    CallStatus.EXECUTING: {CallStatus.SUCCEEDED, CallStatus.FAILED},
    CallStatus.SUCCEEDED: set(),
    CallStatus.FAILED: set(),
}

_logger = logging.getLogger("sidekick.functions.records")


@dataclass
class CallRecord:
    """
    Record of one function call.

    Created EXECUTING the moment a call is accepted. `result` holds the
    rendered output on success, or a short diagnostic on failure.
    """
    name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: CallStatus = CallStatus.EXECUTING
    time_called: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    result: Optional[str] = None
    _listeners: List[Callable[["CallRecord"], None]] = field(
        default_factory=list, repr=False, compare=False
    )

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self.status]

    def add_listener(self, callback: Callable[["CallRecord"], None]) -> None:
        """Register a callback run after every transition."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["CallRecord"], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def succeed(self, result: str) -> None:
        self._transition(CallStatus.SUCCEEDED, result)

    def fail(self, diagnostic: Optional[str] = None) -> None:
        self._transition(CallStatus.FAILED, diagnostic)

    def _transition(self, to_status: CallStatus, result: Optional[str]) -> None:
        if to_status not in VALID_TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"Invalid transition for call {self.id}: "
                f"{self.status.value} -> {to_status.value}"
            )

        old_status = self.status
        self.status = to_status
        self.result = result

        _logger.info(
            f"Call {self.name} ({self.id}): {old_status.value} -> {to_status.value}",
            extra={"tool_name": self.name, "status": to_status.value},
        )

        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                _logger.warning(f"Listener error: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "timeCalled": self.time_called.isoformat(),
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallRecord":
        """Deserialize from storage."""
        return cls(
            id=data["id"],
            name=data["name"],
            status=CallStatus(data.get("status") or CallStatus.EXECUTING),
            time_called=datetime.fromisoformat(data["timeCalled"]),
            result=data.get("result"),
        )
