"""
Tool Specification
------------------
A named, described, clearance-tagged callable.

ToolSpec is generic over its argument model and result type. The registry
only ever sees the non-generic ToolHandle interface, so heterogeneous tools
share one table and one dispatch path: raw JSON bytes go in, text comes out.
"""

from abc import ABC, abstractmethod
from typing import (
    Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence,
    Type, TypeVar, Union
)
import asyncio
import inspect
import json
import logging

from pydantic import BaseModel, ValidationError

from core.errors import ArgumentDecodeError
from .clearance import Clearance, ClearanceGate
from .parameters import ParameterSpec, build_arguments_model, check_unique_labels
from .schema import SchemaEncoder

ArgsT = TypeVar("ArgsT", bound=BaseModel)
ResultT = TypeVar("ResultT")

Handler = Callable[[ArgsT], Union[ResultT, Awaitable[ResultT]]]

_default_encoder = SchemaEncoder()


def render_result(value: Any) -> str:
    """Deterministic text form of a handler result."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)
    return str(value)


class ToolHandle(ABC):
    """Non-generic view of a tool, as held by the registry."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def clearance(self) -> Clearance: ...

    @property
    @abstractmethod
    def params(self) -> List[ParameterSpec]: ...

    def describe(self) -> Dict[str, Any]:
        """Function schema for this tool."""
        return _default_encoder.encode(self)

    @abstractmethod
    def decode(self, raw_arguments: Union[bytes, str]) -> BaseModel:
        """Raw JSON to the tool's argument model. Raises ArgumentDecodeError."""

    @abstractmethod
    def summarize(self, args: BaseModel) -> str:
        """Decoded arguments as text for the confirmation prompt."""

    @abstractmethod
    async def invoke(
        self,
        raw_arguments: Union[bytes, str],
        gate: ClearanceGate,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Decode, authorize, run and render. Raises on any failure."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name}, clearance={self.clearance.value})"


class ToolSpec(ToolHandle, Generic[ArgsT, ResultT]):
    """
    Tool definition with typed arguments and a handler.

    Each tool defines:
    - Name and description
    - Ordered parameter list (advertised in the schema)
    - Argument model (derived from the parameters when not given)
    - Clearance tier
    - Handler (plain function or coroutine function)
    """

    def __init__(
        self,
        name: str,
        description: str,
        params: Sequence[ParameterSpec],
        handler: Handler,
        clearance: Clearance = Clearance.REGULAR,
        arguments: Optional[Type[ArgsT]] = None,
        renderer: Callable[[ResultT], str] = render_result,
    ):
        if not name:
            raise ValueError("Tool name must not be empty")
        check_unique_labels(params)

        self._name = name
        self._description = description
        self._params = tuple(params)
        self._clearance = Clearance(clearance)
        self.handler = handler
        self.renderer = renderer
        self.arguments: Type[BaseModel] = arguments or build_arguments_model(name, self._params)
        self._logger = logging.getLogger("sidekick.functions.spec")

        if arguments is not None:
            self._check_model_covers_params(arguments)

    def _check_model_covers_params(self, model: Type[BaseModel]) -> None:
        known = set(model.model_fields)
        known.update(f.alias for f in model.model_fields.values() if f.alias)
        missing = [p.label for p in self._params if p.is_required and p.label not in known]
        if missing:
            raise ValueError(
                f"Argument model {model.__name__} for {self._name} "
                f"lacks required parameters: {missing}"
            )

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def clearance(self) -> Clearance:
        return self._clearance

    @property
    def params(self) -> List[ParameterSpec]:
        return list(self._params)

    def decode(self, raw_arguments: Union[bytes, str]) -> ArgsT:
        """Decode raw JSON into the argument model, strictly."""
        try:
            return self.arguments.model_validate_json(raw_arguments, strict=True)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "<root>"
            raise ArgumentDecodeError(self._name, field, first["msg"]) from None

    def summarize(self, args: ArgsT) -> str:
        """Human-readable rendering of decoded arguments for confirmation."""
        return json.dumps(args.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)

    async def run(self, args: ArgsT) -> ResultT:
        """Run the handler; plain functions go to a worker thread."""
        if inspect.iscoroutinefunction(self.handler):
            return await self.handler(args)

        result = await asyncio.to_thread(self.handler, args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def invoke(
        self,
        raw_arguments: Union[bytes, str],
        gate: ClearanceGate,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        args = self.decode(raw_arguments)
        await gate.authorize(
            self._name,
            self._clearance,
            self.summarize(args),
            cancel_event=cancel_event,
        )

        self._logger.debug(f"Running handler for {self._name}")
        result = await self.run(args)
        return self.renderer(result)
