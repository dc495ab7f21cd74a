#!/usr/bin/env python3

"""Tool descriptors and their input contracts.

A :class:`ToolCommand` names a tool, describes it, and declares the
parameters it accepts.  Descriptors are assembled with
:class:`ToolCommandBuilder` and are immutable once built::

    COMMAND = (
        ToolCommandBuilder()
        .set_name("create-commit")
        .set_description("Creates a Git commit with the specified message.")
        .add_string_option("message", min_length=1)
        .add_boolean_option("addAll", default=False)
        .build()
    )
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "ArgumentError",
    "Parameter",
    "ParameterKind",
    "ToolCommand",
    "ToolCommandBuilder",
]


class ArgumentError(ValueError):
    """Raised when tool arguments do not satisfy the input contract."""


class ParameterKind(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"

    def accepts(self, value: Any) -> bool:
        if self is ParameterKind.STRING:
            return isinstance(value, str)
        return isinstance(value, bool)


@dataclass(frozen=True)
class Parameter:
    name: str
    kind: ParameterKind
    required: bool = True
    default: Any = None
    description: str = ""
    min_length: Optional[int] = None
    min_length_message: Optional[str] = None

    def check(self, value: Any) -> Any:
        """Validate a single supplied value and return it.

        Raises:
            ArgumentError: If the value has the wrong kind or violates a constraint
        """
        if not self.kind.accepts(value):
            raise ArgumentError(
                f"Invalid value for parameter '{self.name}': "
                f"expected {self.kind.value}, got {type(value).__name__}"
            )
        if self.min_length is not None and len(value) < self.min_length:
            raise ArgumentError(
                self.min_length_message
                or f"Parameter '{self.name}' must be at least {self.min_length} character(s) long"
            )
        return value

    def json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.kind.value}
        if self.description:
            schema["description"] = self.description
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if not self.required and self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class ToolCommand:
    name: str
    description: str
    parameters: Mapping[str, Parameter]

    def validate(self, raw_args: Any) -> Dict[str, Any]:
        """Check raw arguments against the input contract.

        Parameters are checked in declaration order.  Fields the contract
        does not name are dropped, and optional fields that are absent (or
        null) get their declared default.

        Args:
            raw_args: The arguments as received from the caller

        Returns:
            The normalized keyword arguments for the handler

        Raises:
            ArgumentError: If a required field is missing, has the wrong kind,
                or violates its constraint
        """
        if raw_args is None:
            raw_args = {}
        if not isinstance(raw_args, Mapping):
            raise ArgumentError(
                f"Arguments for tool '{self.name}' must be an object, "
                f"got {type(raw_args).__name__}"
            )

        normalized: Dict[str, Any] = {}
        for name, parameter in self.parameters.items():
            value = raw_args.get(name)
            if value is None:
                if parameter.required:
                    raise ArgumentError(f"Missing required parameter '{name}'")
                normalized[name] = parameter.default
                continue
            normalized[name] = parameter.check(value)
        return normalized

    def input_schema(self) -> Dict[str, Any]:
        """Render the input contract as a JSON Schema object."""
        return {
            "type": "object",
            "properties": {
                name: parameter.json_schema()
                for name, parameter in self.parameters.items()
            },
            "required": [
                name for name, parameter in self.parameters.items() if parameter.required
            ],
        }


class ToolCommandBuilder:
    """Fluent builder for :class:`ToolCommand`."""

    def __init__(self) -> None:
        self._name = ""
        self._description = ""
        self._parameters: Dict[str, Parameter] = {}

    def set_name(self, name: str) -> "ToolCommandBuilder":
        self._name = name
        return self

    def set_description(self, description: str) -> "ToolCommandBuilder":
        self._description = description
        return self

    def add_string_option(
        self,
        name: str,
        *,
        required: bool = True,
        description: str = "",
        min_length: Optional[int] = None,
        min_length_message: Optional[str] = None,
    ) -> "ToolCommandBuilder":
        return self._add(
            Parameter(
                name=name,
                kind=ParameterKind.STRING,
                required=required,
                description=description,
                min_length=min_length,
                min_length_message=min_length_message,
            )
        )

    def add_boolean_option(
        self,
        name: str,
        *,
        default: Optional[bool] = None,
        description: str = "",
    ) -> "ToolCommandBuilder":
        # A boolean with a default is always optional
        return self._add(
            Parameter(
                name=name,
                kind=ParameterKind.BOOLEAN,
                required=False,
                default=default,
                description=description,
            )
        )

    def _add(self, parameter: Parameter) -> "ToolCommandBuilder":
        if parameter.name in self._parameters:
            raise ValueError(f"Parameter '{parameter.name}' is declared twice")
        self._parameters[parameter.name] = parameter
        return self

    def build(self) -> ToolCommand:
        if not self._name:
            raise ValueError("A tool command needs a name")
        return ToolCommand(
            name=self._name,
            description=self._description,
            parameters=MappingProxyType(dict(self._parameters)),
        )
