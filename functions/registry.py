"""
Tool Registry
-------------
Name-keyed table of tools; resolves and dispatches incoming calls.

This registry is the firewall between the model and the host. Every call
goes through lookup -> argument decode -> clearance -> handler.

Populate it at startup and seal() it before the first dispatch; lookups
are then read-only and safe from concurrent dispatches.
"""

from typing import Any, Dict, List, Optional
import asyncio
import json
import logging

from core.errors import DuplicateTool, RegistrySealed, ToolNotFound
from infra.config import DuplicatePolicy
from .clearance import Clearance, ClearanceGate
from .envelope import CallEnvelope
from .schema import SchemaEncoder
from .spec import ToolHandle


class ToolRegistry:
    """Registry for all callable tools."""

    def __init__(
        self,
        gate: Optional[ClearanceGate] = None,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.REJECT,
        encoder: Optional[SchemaEncoder] = None,
    ):
        self._tools: Dict[str, ToolHandle] = {}
        self._sealed = False
        self.gate = gate or ClearanceGate()
        self.duplicate_policy = DuplicatePolicy(duplicate_policy)
        self.encoder = encoder or SchemaEncoder()
        self._logger = logging.getLogger("sidekick.functions.registry")

    @classmethod
    def from_settings(cls, settings, authorizer=None) -> "ToolRegistry":
        """Build a registry and its gate from FunctionSettings."""
        return cls(
            gate=ClearanceGate.from_settings(settings, authorizer),
            duplicate_policy=settings.duplicate_policy,
        )

    # Registration

    def register(self, tool: ToolHandle) -> None:
        """Register a tool under its name."""
        if self._sealed:
            raise RegistrySealed(tool.name)

        if tool.name in self._tools:
            if self.duplicate_policy == DuplicatePolicy.REJECT:
                raise DuplicateTool(tool.name)
            self._logger.warning(f"Overwriting existing tool: {tool.name}")

        self._tools[tool.name] = tool
        self._logger.info(f"Registered tool: {tool.name} ({tool.clearance.value})")

    def seal(self) -> None:
        """Close registration. Idempotent."""
        if not self._sealed:
            self._sealed = True
            self._logger.info(f"Registry sealed with {len(self._tools)} tools")

    @property
    def sealed(self) -> bool:
        return self._sealed

    # Lookup

    def get(self, name: str) -> Optional[ToolHandle]:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[ToolHandle]:
        """All registered tools, in registration order."""
        return list(self._tools.values())

    def list_by_clearance(self, clearance: Clearance) -> List[ToolHandle]:
        """Tools at one clearance tier."""
        clearance = Clearance(clearance)
        return [t for t in self._tools.values() if t.clearance == clearance]

    # Schemas

    def describe(self) -> List[Dict[str, Any]]:
        """Function schemas for every tool, for the model's system prompt."""
        return [self.encoder.encode(tool) for tool in self._tools.values()]

    def describe_text(self) -> str:
        """All schemas as pretty JSON, separated by blank lines."""
        return "\n\n".join(
            json.dumps(schema, indent=self.encoder.indent, ensure_ascii=False)
            for schema in self.describe()
        )

    # Dispatch

    async def dispatch(
        self,
        envelope: CallEnvelope,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Resolve and run one call.

        Raises ToolNotFound, ArgumentDecodeError or PermissionDenied; any
        exception from the handler itself propagates unchanged.
        """
        tool = self._tools.get(envelope.name)
        if tool is None:
            self._logger.warning(f"Unknown tool requested: {envelope.name}")
            raise ToolNotFound(envelope.name)

        return await tool.invoke(
            envelope.arguments_json(),
            self.gate,
            cancel_event=cancel_event,
        )

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
