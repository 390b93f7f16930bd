"""Tool and resource descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from rustmcp.utils.exceptions import ConfigurationError

ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """A named, schema-checked operation clients can invoke."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler
    legacy_result_type: str = ""
    _validator: Draft202012Validator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            Draft202012Validator.check_schema(self.input_schema)
        except SchemaError as e:
            raise ConfigurationError(f"Tool '{self.name}' has an invalid input schema: {e.message}", self.name) from e
        object.__setattr__(self, "_validator", Draft202012Validator(self.input_schema))
        if not self.legacy_result_type:
            object.__setattr__(self, "legacy_result_type", f"{self.name}.result")

    def validate_params(self, params: Any) -> list[str]:
        """Validate tool parameters against the input schema. Returns error list (empty if valid)."""
        errors = sorted(self._validator.iter_errors(params), key=lambda e: [str(p) for p in e.path])
        return [f"{'.'.join(str(p) for p in e.path) if e.path else 'root'}: {e.message}" for e in errors]

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    """Static reference material served by ``resources/list`` and ``resources/read``."""

    name: str
    description: str
    uri: str
    kind: str = "reference"
    data: dict[str, Any] = field(default_factory=dict)

    def to_summary(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "uri": self.uri}

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.kind,
            "uri": self.uri,
            "data": self.data,
        }
