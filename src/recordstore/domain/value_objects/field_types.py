"""Schema value objects: declared field types and per-table schemas.

A schema is permissive, not exclusive: it constrains the fields it declares
and lets every other field through unchecked.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping

from recordstore.domain.exceptions import SchemaDefinitionError


class FieldType(Enum):
    """Primitive types a schema can declare for a field.

    Matching follows JavaScript `typeof` semantics, which is what stored
    snapshots were written against:
        - STRING accepts str
        - NUMBER accepts int and float, never bool
        - BOOLEAN accepts bool
        - ARRAY accepts list and tuple
        - OBJECT accepts mappings and sequences (`typeof [] === "object"`)
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"

    def accepts(self, value: Any) -> bool:
        """Check whether a non-null value has this primitive type."""
        if self is FieldType.STRING:
            return isinstance(value, str)
        if self is FieldType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self is FieldType.BOOLEAN:
            return isinstance(value, bool)
        if self is FieldType.ARRAY:
            return isinstance(value, (list, tuple))
        return isinstance(value, (dict, list, tuple))


def type_name_of(value: Any) -> str:
    """Name a value's type the way `typeof` would, for error messages."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (dict, list, tuple)):
        return "object"
    return type(value).__name__


@dataclass(frozen=True)
class FieldSpec:
    """Declared type and required-ness of one schema field."""

    type: FieldType
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "required": self.required}


@dataclass(frozen=True)
class Schema:
    """Immutable, ordered set of field declarations for a table.

    Example:
        >>> schema = Schema.from_dict({"name": {"type": "string", "required": True}})
        >>> schema.get("name").required
        True
    """

    fields: tuple[tuple[str, FieldSpec], ...] = ()

    def __iter__(self) -> Iterator[tuple[str, FieldSpec]]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, field_name: str) -> FieldSpec | None:
        for name, spec in self.fields:
            if name == field_name:
                return spec
        return None

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Plain mapping form, as stored in snapshots."""
        return {name: spec.to_dict() for name, spec in self.fields}

    @classmethod
    def from_dict(cls, definition: Mapping[str, Any]) -> Schema:
        """Build a schema from its plain mapping form.

        Args:
            definition: `{field: {"type": <type name>, "required": <bool>}}`

        Raises:
            SchemaDefinitionError: If the definition is not well formed or
                names a type outside FieldType.
        """
        if not isinstance(definition, Mapping):
            raise SchemaDefinitionError("Schema must be a mapping of field definitions")

        fields: list[tuple[str, FieldSpec]] = []
        for name, spec in definition.items():
            if not isinstance(name, str):
                raise SchemaDefinitionError(f"Schema field name must be a string, got {name!r}")
            if not isinstance(spec, Mapping):
                raise SchemaDefinitionError(f"Schema entry for '{name}' must be a mapping")

            type_name = spec.get("type")
            try:
                field_type = FieldType(type_name)
            except ValueError as e:
                raise SchemaDefinitionError(
                    f"Schema field '{name}' has unknown type {type_name!r}"
                ) from e

            required = spec.get("required", False)
            if required is None:
                required = False
            if not isinstance(required, bool):
                raise SchemaDefinitionError(f"Schema field '{name}' has non-boolean 'required'")

            fields.append((name, FieldSpec(type=field_type, required=required)))

        return cls(fields=tuple(fields))
