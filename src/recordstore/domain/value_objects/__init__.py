"""Value objects for the record store domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - RecordId, new_record_id, utc_now, format_timestamp
        - ID_FIELD, CREATED_AT_FIELD, UPDATED_AT_FIELD, SYSTEM_FIELDS, PROTECTED_FIELDS

    Schema:
        - FieldType, FieldSpec, Schema

    Filters:
        - OperatorKind, LiteralValue, OperatorTerm, OperatorSet, FieldCondition
        - Filter, MATCH_ALL, SortKey, FindOptions, DEFAULT_FIND_OPTIONS

    JSON Values:
        - MISSING, MAX_NESTING_DEPTH, copy_json_value, canonical_key, strict_equals
        - is_number, coerce_to_string, encode_bucket_key

    Transaction Types:
        - TransactionState
"""

from recordstore.domain.value_objects.field_types import (
    FieldSpec,
    FieldType,
    Schema,
    type_name_of,
)
from recordstore.domain.value_objects.filters import (
    DEFAULT_FIND_OPTIONS,
    MATCH_ALL,
    FieldCondition,
    Filter,
    FindOptions,
    LiteralValue,
    OperatorKind,
    OperatorSet,
    OperatorTerm,
    Predicate,
    SortKey,
)
from recordstore.domain.value_objects.identifiers import (
    CREATED_AT_FIELD,
    ID_FIELD,
    PROTECTED_FIELDS,
    SYSTEM_FIELDS,
    UPDATED_AT_FIELD,
    RecordId,
    format_timestamp,
    new_record_id,
    utc_now,
)
from recordstore.domain.value_objects.json_values import (
    MAX_NESTING_DEPTH,
    MISSING,
    canonical_key,
    coerce_to_string,
    copy_json_value,
    encode_bucket_key,
    is_number,
    strict_equals,
)
from recordstore.domain.value_objects.transaction_types import TransactionState

__all__ = [
    # Identifiers
    "RecordId",
    "new_record_id",
    "utc_now",
    "format_timestamp",
    "ID_FIELD",
    "CREATED_AT_FIELD",
    "UPDATED_AT_FIELD",
    "SYSTEM_FIELDS",
    "PROTECTED_FIELDS",
    # Schema
    "FieldType",
    "FieldSpec",
    "Schema",
    "type_name_of",
    # Filters
    "OperatorKind",
    "LiteralValue",
    "OperatorTerm",
    "OperatorSet",
    "Predicate",
    "FieldCondition",
    "Filter",
    "MATCH_ALL",
    "SortKey",
    "FindOptions",
    "DEFAULT_FIND_OPTIONS",
    # JSON values
    "MISSING",
    "MAX_NESTING_DEPTH",
    "copy_json_value",
    "canonical_key",
    "strict_equals",
    "is_number",
    "coerce_to_string",
    "encode_bucket_key",
    # Transaction types
    "TransactionState",
]
