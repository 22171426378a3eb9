"""
lopext Hook Schema

One HookSchema exists per (extension, hook slot) pair. It declares the named
fields the slot accepts, validates a raw parameter mapping against them and
parses it into typed values.

A schema without fields accepts only an absent (None) parameter set. Any
value, including an empty mapping, is reported as an error.
"""

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional

from ..exceptions import ConfigurationError
from .types import FieldType

SCHEMA_ERROR_KEY = "_schema"

CrossFieldValidator = Callable[[Mapping], None]


@dataclass(frozen=True)
class SchemaField:
    """A named field: its type plus the label and hint shown to users."""
    type: FieldType
    label: str = ""
    hint: str = ""
    required: bool = False


class HookSchema:
    """
    Field declarations for a single hook slot.

    Args:
        fields: Field name -> SchemaField
        validate: Optional cross-field validator; raises ValueError on failure
        hint: Human-readable description of the slot's parameters
    """

    def __init__(
        self,
        fields: Optional[Mapping] = None,
        validate: Optional[CrossFieldValidator] = None,
        hint: str = "",
    ):
        fields = dict(fields or {})
        for name, field in fields.items():
            if not isinstance(name, str) or not name:
                raise ConfigurationError(f"Field names must be non-empty strings, got {name!r}")
            if not isinstance(field, SchemaField) or not isinstance(field.type, FieldType):
                raise ConfigurationError(f"Field '{name}' must be a SchemaField with a FieldType")
        if validate is not None and not callable(validate):
            raise ConfigurationError("Schema validator must be callable")
        self.fields = MappingProxyType(fields)
        self.hint = hint
        self._cross_validate = validate

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def validate(self, params: Any) -> Optional[Dict[str, str]]:
        """
        Validate raw parameters.

        Returns:
            None when valid, else field name -> first error message. Cross-field
            failures are reported under the "_schema" key.
        """
        if self.is_empty:
            if params is None:
                return None
            return {SCHEMA_ERROR_KEY: "This hook does not accept any parameters"}

        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            return {SCHEMA_ERROR_KEY: "Parameters must be a mapping"}

        errors: Dict[str, str] = {}
        for name, field in self.fields.items():
            value = params.get(name)
            if value is None:
                if field.required:
                    errors[name] = f"{field.label or name} is required"
                continue
            try:
                field.type.validate(value)
            except ValueError as e:
                errors[name] = str(e)

        if not errors and self._cross_validate is not None:
            try:
                self._cross_validate(params)
            except ValueError as e:
                errors[SCHEMA_ERROR_KEY] = str(e)

        return errors or None

    async def parse(self, params: Optional[Mapping], context: Any = None) -> Dict[str, Any]:
        """Parse every present field. Absent fields are omitted, never defaulted."""
        parsed: Dict[str, Any] = {}
        if not params:
            return parsed
        for name, field in self.fields.items():
            value = params.get(name)
            if value is None:
                continue
            result = field.type.parse(value, context)
            if inspect.isawaitable(result):
                result = await result
            parsed[name] = result
        return parsed

    def describe(self) -> Dict[str, Any]:
        """Labels and hints for building an input form."""
        return {
            "hint": self.hint,
            "fields": {
                name: {
                    "type": field.type.name,
                    "label": field.label,
                    "hint": field.hint,
                    "required": field.required,
                }
                for name, field in self.fields.items()
            },
        }

    def __repr__(self) -> str:
        return f"HookSchema(fields={list(self.fields)})"
