"""
Clearance Gate
--------------
Three-tier authorization evaluated once per call, before the handler runs.

Rules:
- regular: always authorized, no user interaction
- sensitive: authorized only on an explicit yes from the authorizer
- dangerous: authorized only on successful strong (owner) authentication
- Refusal, failure, timeout, cancellation or an unavailable mechanism
  all end in PermissionDenied
- All decisions logged
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable
import asyncio
import inspect
import logging

from core.errors import PermissionDenied


class Clearance(str, Enum):
    """Authorization tier of a tool."""
    REGULAR = "regular"
    SENSITIVE = "sensitive"
    DANGEROUS = "dangerous"


class AuthenticationUnavailable(Exception):
    """The strong authentication mechanism cannot be used on this host."""


@runtime_checkable
class Authorizer(Protocol):
    """
    Host-provided capability that talks to the user.

    Methods may be plain or async; plain methods must not block for long
    since they run on the event loop.
    """

    def confirm(self, message: str) -> Any: ...

    def strong_authenticate(self, message: str) -> Any: ...


class DecisionStatus(Enum):
    """Outcome of a clearance evaluation."""
    AUTHORIZED = auto()
    DENIED = auto()
    TIMED_OUT = auto()
    CANCELLED = auto()
    UNAVAILABLE = auto()
    FAILED = auto()


@dataclass
class ClearanceDecision:
    """Result of one clearance evaluation."""
    status: DecisionStatus
    tool_name: str
    clearance: Clearance
    reason: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def allowed(self) -> bool:
        return self.status == DecisionStatus.AUTHORIZED


class _AuthorizationCancelled(Exception):
    pass


class ClearanceGate:
    """
    The single choke point for tool execution authorization.

    The wait on the authorizer can be bounded by `timeout_seconds` and
    abandoned early through a caller-owned asyncio.Event.
    """

    REQUEST_TEMPLATE = (
        "{assistant} wants to run the function `{name}` to complete your "
        "request with the parameters below.\n\n"
        "{arguments}\n\n"
        "Do you wish to permit this?"
    )

    def __init__(
        self,
        authorizer: Optional[Authorizer] = None,
        assistant_name: str = "Sidekick",
        timeout_seconds: Optional[float] = None,
    ):
        if authorizer is None:
            from .authorizers import DenyAllAuthorizer
            authorizer = DenyAllAuthorizer()
        self.authorizer = authorizer
        self.assistant_name = assistant_name
        self.timeout_seconds = timeout_seconds
        self._logger = logging.getLogger("sidekick.functions.clearance")

    @classmethod
    def from_settings(cls, settings, authorizer: Optional[Authorizer] = None) -> "ClearanceGate":
        """Build a gate from FunctionSettings."""
        return cls(
            authorizer=authorizer,
            assistant_name=settings.assistant_name,
            timeout_seconds=settings.authorization_timeout_seconds,
        )

    def format_request(self, tool_name: str, rendered_arguments: str) -> str:
        """Confirmation text naming the tool and showing its arguments."""
        return self.REQUEST_TEMPLATE.format(
            assistant=self.assistant_name,
            name=tool_name,
            arguments=rendered_arguments,
        )

    async def authorize(
        self,
        tool_name: str,
        clearance: Clearance,
        rendered_arguments: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ClearanceDecision:
        """
        Evaluate clearance for one call.

        Returns the AUTHORIZED decision, or raises PermissionDenied.
        """
        clearance = Clearance(clearance)

        if clearance == Clearance.REGULAR:
            decision = ClearanceDecision(
                status=DecisionStatus.AUTHORIZED,
                tool_name=tool_name,
                clearance=clearance,
                reason="Regular clearance",
            )
            self._log_decision(decision)
            return decision

        if clearance == Clearance.SENSITIVE:
            ask = self.authorizer.confirm
            refused = "User declined confirmation"
        else:
            ask = self.authorizer.strong_authenticate
            refused = "Authentication failed"

        message = self.format_request(tool_name, rendered_arguments)

        try:
            if cancel_event is not None and cancel_event.is_set():
                raise _AuthorizationCancelled()
            approved = await self._wait(self._ask(ask, message), cancel_event)
        except asyncio.TimeoutError:
            status, reason = DecisionStatus.TIMED_OUT, "timed out"
        except _AuthorizationCancelled:
            status, reason = DecisionStatus.CANCELLED, "cancelled"
        except AuthenticationUnavailable as e:
            status, reason = DecisionStatus.UNAVAILABLE, f"authentication unavailable: {e}"
        except Exception as e:
            self._logger.error(f"Authorizer error for {tool_name}: {e}")
            status, reason = DecisionStatus.FAILED, f"authorizer error: {e}"
        else:
            if approved is True:
                status, reason = DecisionStatus.AUTHORIZED, "Authorized by user"
            else:
                status, reason = DecisionStatus.DENIED, refused

        decision = ClearanceDecision(
            status=status,
            tool_name=tool_name,
            clearance=clearance,
            reason=reason,
        )
        self._log_decision(decision)

        if not decision.allowed:
            raise PermissionDenied(tool_name, reason)
        return decision

    @staticmethod
    async def _ask(method: Callable[[str], Any], message: str) -> Any:
        result = method(message)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _wait(
        self,
        request: Awaitable[Any],
        cancel_event: Optional[asyncio.Event],
    ) -> Any:
        """Race the authorizer against the timeout and the cancel event."""
        ask_task = asyncio.ensure_future(request)
        waiters = {ask_task}
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()

        if cancel_task is not None and cancel_task in done:
            raise _AuthorizationCancelled()
        if ask_task in done:
            return ask_task.result()
        raise asyncio.TimeoutError()

    def _log_decision(self, decision: ClearanceDecision) -> None:
        """Log a clearance decision for audit."""
        level = logging.INFO if decision.allowed else logging.WARNING

        self._logger.log(
            level,
            f"Clearance decision: {decision.status.name} | "
            f"tool={decision.tool_name} | "
            f"clearance={decision.clearance.value} | "
            f"reason={decision.reason}",
            extra={"tool_name": decision.tool_name, "clearance": decision.clearance.value},
        )
