"""
Schema Encoder
--------------
Renders a tool into the function schema injected into the model's system
prompt.

Property order follows the tool author's parameter order. Python dicts keep
insertion order and json.dumps emits keys in that order as long as
sort_keys stays off, so no key mangling is needed.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Sequence
import json

from .parameters import ParameterSpec

if TYPE_CHECKING:
    from .spec import ToolHandle


class SchemaEncoder:
    """Builds `{"type": "function", "function": {...}}` objects."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def input_schema(self, params: Sequence[ParameterSpec]) -> Dict[str, Any]:
        """Object schema for a parameter list."""
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for param in params:
            properties[param.label] = param.to_property()
            if param.is_required:
                required.append(param.label)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }

    def encode(self, tool: "ToolHandle") -> Dict[str, Any]:
        """Function schema for one tool."""
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": self.input_schema(tool.params),
            },
        }

    def encode_json(self, tool: "ToolHandle") -> str:
        """Function schema as pretty JSON text, properties in declared order."""
        return json.dumps(self.encode(tool), indent=self.indent, ensure_ascii=False)
