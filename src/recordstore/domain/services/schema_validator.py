"""Schema validation for candidate records.

For each declared field:
    1. If required and absent or null, the record is rejected.
    2. If present and non-null, its primitive type must match the
       declared FieldType.

Fields the schema does not declare are passed through unchecked, and a
table without a schema accepts any record shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from recordstore.domain.exceptions import SchemaValidationError
from recordstore.domain.value_objects import FieldType, Schema, type_name_of


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking a record against a schema."""

    valid: bool
    field_name: str | None = None
    error: str | None = None


VALID = ValidationResult(valid=True)


def check_record(schema: Schema | None, record: Mapping[str, Any]) -> ValidationResult:
    """Check a record against a schema without raising.

    Args:
        schema: The table schema, or None for schemaless tables.
        record: The candidate record.

    Returns:
        VALID, or a ValidationResult naming the first offending field.
    """
    if schema is None:
        return VALID

    for name, spec in schema:
        value = record.get(name)

        if value is None:
            if spec.required:
                return ValidationResult(
                    valid=False,
                    field_name=name,
                    error=f"Required field '{name}' is missing",
                )
            continue

        if spec.type.accepts(value):
            continue

        if spec.type is FieldType.ARRAY:
            error = f"Field '{name}' should be an array"
        else:
            error = (
                f"Field '{name}' should be of type '{spec.type.value}', "
                f"got '{type_name_of(value)}'"
            )
        return ValidationResult(valid=False, field_name=name, error=error)

    return VALID


def validate_record(schema: Schema | None, record: Mapping[str, Any]) -> None:
    """Validate a record against a schema.

    Raises:
        SchemaValidationError: On the first violation found.
    """
    result = check_record(schema, record)
    if not result.valid:
        raise SchemaValidationError(result.field_name or "", result.error or "invalid record")
