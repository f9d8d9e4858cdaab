"""
Function Parameters
-------------------
Named, typed arguments a tool accepts, and the pydantic model derived from
them when a tool author does not supply one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, create_model


class Datatype(str, Enum):
    """Supported parameter types, as advertised to the model."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING_ARRAY = "string[]"
    INTEGER_ARRAY = "integer[]"
    FLOAT_ARRAY = "float[]"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Datatype"]:
        # Accept stringArray / integerArray / floatArray
        if isinstance(value, str) and value.endswith("Array"):
            return cls._value2member_map_.get(f"{value[:-len('Array')]}[]")
        return None

    @property
    def python_type(self) -> Any:
        return _PYTHON_TYPES[self]


_PYTHON_TYPES: Dict[Datatype, Any] = {
    Datatype.STRING: str,
    Datatype.INTEGER: int,
    Datatype.FLOAT: float,
    Datatype.BOOLEAN: bool,
    Datatype.STRING_ARRAY: List[str],
    Datatype.INTEGER_ARRAY: List[int],
    Datatype.FLOAT_ARRAY: List[float],
}


@dataclass(frozen=True)
class ParameterSpec:
    """Definition of one tool parameter."""
    label: str
    description: str
    datatype: Datatype
    is_required: bool = True

    def __post_init__(self) -> None:
        if not self.label:
            raise ValueError("Parameter label must not be empty")
        if not isinstance(self.datatype, Datatype):
            object.__setattr__(self, "datatype", Datatype(self.datatype))

    def to_property(self) -> Dict[str, Any]:
        """Schema property for this parameter."""
        return {
            "type": self.datatype.value,
            "description": self.description,
            "isRequired": self.is_required,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterSpec":
        """Build from a config mapping (YAML / JSON)."""
        return cls(
            label=data["label"],
            description=data.get("description", ""),
            datatype=Datatype(data.get("datatype", "string")),
            is_required=data.get("isRequired", data.get("is_required", True)),
        )


def check_unique_labels(params: Sequence[ParameterSpec]) -> None:
    """Raise ValueError if two parameters share a label."""
    seen = set()
    for param in params:
        if param.label in seen:
            raise ValueError(f"Duplicate parameter label: {param.label}")
        seen.add(param.label)


def _is_reserved(label: str) -> bool:
    """Labels pydantic would treat as private, config or a model attribute."""
    return label.startswith("_") or label.startswith("model_") or hasattr(BaseModel, label)


def build_arguments_model(
    tool_name: str,
    params: Sequence[ParameterSpec],
) -> Type[BaseModel]:
    """
    Derive a strict pydantic model from a parameter list.

    Required parameters become required fields; optional parameters
    default to None. Unknown fields are rejected.

    Labels pydantic reserves (leading underscore, `model_` prefix, BaseModel
    attributes) get a positional field name with the label as alias, so the
    wire key is still the label. Read those with
    `args.model_dump(by_alias=True)[label]`.
    """
    check_unique_labels(params)
    labels = {param.label for param in params}

    fields: Dict[str, Any] = {}
    for index, param in enumerate(params):
        py_type = param.datatype.python_type
        if param.is_required:
            annotation, default = py_type, ...
        else:
            annotation, default = Optional[py_type], None

        if _is_reserved(param.label):
            name = f"p{index}"
            while name in labels:
                name += "_"
            fields[name] = (annotation, Field(default, alias=param.label))
        else:
            fields[param.label] = (annotation, default)

    model_name = "".join(part.capitalize() for part in tool_name.split("_")) + "Arguments"
    return create_model(
        model_name,
        __config__=ConfigDict(extra="forbid", strict=True),
        **fields,
    )
