"""
Call Executor
-------------
Host-side driver that turns model output into call records.

The registry raises typed errors; the executor is where those errors
become a FAILED record with a model-facing message. A record never stays
EXECUTING once execute() returns or raises.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import asyncio
import logging
import time

from core.errors import FunctionCallError, describe_failure
from infra.config import FunctionSettings
from infra.logging import CallContext
from .envelope import CallEnvelope
from .records import CallRecord
from .registry import ToolRegistry

RawCall = Union[bytes, str, Dict[str, Any], CallEnvelope]


class CallExecutor:
    """
    Runs function calls against a registry.

    Rules:
    - Malformed envelopes are rejected before any record exists
    - Every accepted call gets exactly one terminal transition
    - All executions logged with the record id as call_id
    """

    def __init__(
        self,
        registry: ToolRegistry,
        settings: Optional[FunctionSettings] = None,
        on_record: Optional[Callable[[CallRecord], None]] = None,
    ):
        self.registry = registry
        self.settings = settings or FunctionSettings()
        self.on_record = on_record
        self._logger = logging.getLogger("sidekick.functions.executor")

    def system_prompt_section(self) -> str:
        """Tool schemas for the system prompt, or "" when functions are off."""
        if not self.settings.use_functions:
            return ""
        return self.registry.describe_text()

    async def execute(
        self,
        call: RawCall,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CallRecord:
        """
        Execute one call and return its terminal record.

        Raises MalformedEnvelope if the call cannot be read.
        """
        envelope = call if isinstance(call, CallEnvelope) else CallEnvelope.parse(call)
        record = CallRecord(name=envelope.name)
        if self.on_record is not None:
            try:
                self.on_record(record)
            except Exception as e:
                self._logger.warning(f"on_record callback error: {e}")

        with CallContext(record.id):
            start = time.monotonic()
            self._logger.info(f"Dispatching {envelope.name}", extra={"tool_name": envelope.name})
            try:
                output = await self.registry.dispatch(envelope, cancel_event=cancel_event)
            except asyncio.CancelledError:
                record.fail("Cancelled")
                raise
            except FunctionCallError as e:
                self._logger.warning(f"Call to {envelope.name} failed: {e.message}")
                record.fail(describe_failure(e))
            except Exception as e:
                self._logger.error(f"Handler error in {envelope.name}: {e}")
                record.fail(describe_failure(e))
            else:
                record.succeed(output)

            duration_ms = (time.monotonic() - start) * 1000
            self._logger.debug(
                f"Finished {envelope.name} in {duration_ms:.1f}ms",
                extra={"tool_name": envelope.name, "duration_ms": duration_ms},
            )

        return record

    async def execute_many(
        self,
        calls: Iterable[RawCall],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[CallRecord]:
        """
        Execute calls concurrently; records come back in input order.

        Every call is parsed first, so a malformed one raises before any
        handler runs.
        """
        envelopes = [
            call if isinstance(call, CallEnvelope) else CallEnvelope.parse(call)
            for call in calls
        ]
        return list(await asyncio.gather(
            *(self.execute(envelope, cancel_event=cancel_event) for envelope in envelopes)
        ))
