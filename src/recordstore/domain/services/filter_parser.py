"""Parsing of the plain filter and find-option forms callers pass in.

Filters arrive as mappings of field name to either a literal value or an
operator object (a mapping whose keys all start with "$"):

    {"status": "active", "age": {"$gte": 18, "$lt": 65}, "name": {"$regex": "^j", "$options": "i"}}

They are turned into the closed `Filter` variant once, up front, so the
matcher never has to inspect value shapes and malformed queries fail
before any record is looked at.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from recordstore.domain.exceptions import InvalidQueryError, InvalidRecordError
from recordstore.domain.value_objects import (
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
    copy_json_value,
)

OPTIONS_KEY = "$options"

_OPERATORS = {kind.value: kind for kind in OperatorKind}

# g, u and y change nothing for a single test() and are accepted for
# compatibility with stored queries.
_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
    "y": 0,
}

_ASCENDING = {1, "asc", "ascending"}
_DESCENDING = {-1, "desc", "descending"}


def parse_filter(raw: Mapping[str, Any] | Filter | None) -> Filter:
    """Build a Filter from its plain mapping form.

    Args:
        raw: Mapping of field -> literal or operator object. None or an
            empty mapping matches every record. An already-built Filter is
            returned as is.

    Raises:
        InvalidQueryError: If the filter is malformed.
    """
    if raw is None:
        return MATCH_ALL
    if isinstance(raw, Filter):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidQueryError("Filter must be a mapping of field conditions")

    conditions = []
    for field_name, value in raw.items():
        if not isinstance(field_name, str):
            raise InvalidQueryError(f"Filter field name must be a string, got {field_name!r}")
        conditions.append(FieldCondition(field_name, _parse_predicate(field_name, value)))
    return Filter(tuple(conditions))


def _parse_predicate(field_name: str, value: Any) -> Predicate:
    if not isinstance(value, Mapping):
        return LiteralValue(_json_operand(field_name, value))

    operator_keys = [k for k in value if isinstance(k, str) and k.startswith("$")]
    if not operator_keys:
        # An empty mapping is an operator object with no operators.
        return LiteralValue(_json_operand(field_name, value)) if value else OperatorSet()
    if len(operator_keys) != len(value):
        raise InvalidQueryError(
            f"Filter on '{field_name}' mixes operators with plain fields"
        )

    if OPTIONS_KEY in value and OperatorKind.REGEX.value not in value:
        raise InvalidQueryError(f"'$options' on '{field_name}' requires '$regex'")

    terms = []
    for key, operand in value.items():
        if key == OPTIONS_KEY:
            continue
        kind = _OPERATORS.get(key)
        if kind is None:
            raise InvalidQueryError(f"Unknown query operator '{key}' on field '{field_name}'")

        if kind in (OperatorKind.IN, OperatorKind.NIN):
            if not isinstance(operand, (list, tuple)):
                raise InvalidQueryError(f"'{key}' on '{field_name}' requires a list")
            operand = tuple(_json_operand(field_name, item) for item in operand)
        elif kind is OperatorKind.REGEX:
            operand = _compile_regex(field_name, operand, value.get(OPTIONS_KEY))
        else:
            operand = _json_operand(field_name, operand)

        terms.append(OperatorTerm(kind=kind, operand=operand))

    return OperatorSet(tuple(terms))


def _json_operand(field_name: str, value: Any) -> Any:
    try:
        return copy_json_value(value, f"filter value for '{field_name}'")
    except InvalidRecordError as e:
        raise InvalidQueryError(str(e)) from e


def _compile_regex(field_name: str, pattern: Any, options: Any) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        if options:
            raise InvalidQueryError(f"'$options' on '{field_name}' cannot modify a compiled pattern")
        return pattern
    if not isinstance(pattern, str):
        raise InvalidQueryError(f"'$regex' on '{field_name}' requires a string pattern")

    flags = 0
    for letter in options or "":
        if letter not in _REGEX_FLAGS:
            raise InvalidQueryError(f"Unknown regex option '{letter}' on '{field_name}'")
        flags |= _REGEX_FLAGS[letter]

    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise InvalidQueryError(f"Invalid regex on '{field_name}': {e}") from e


def parse_find_options(
    sort: Mapping[str, Any] | None = None,
    skip: int | None = 0,
    limit: int | None = None,
) -> FindOptions:
    """Validate sort/skip/limit arguments into FindOptions.

    Args:
        sort: Ordered mapping of field -> direction (1/"asc" or -1/"desc").
        skip: Number of matching records to skip, after sorting.
        limit: Maximum number of records to return. None or 0 means
            unlimited.

    Raises:
        InvalidQueryError: On an unknown direction or negative skip/limit.
    """
    if sort is None and not skip and not limit:
        return DEFAULT_FIND_OPTIONS

    keys: list[SortKey] = []
    if sort is not None:
        if not isinstance(sort, Mapping):
            raise InvalidQueryError("Sort must be a mapping of field -> direction")
        for field_name, direction in sort.items():
            if isinstance(direction, bool) or not isinstance(direction, (int, str)):
                raise InvalidQueryError(f"Invalid sort direction for '{field_name}'")
            if isinstance(direction, str):
                direction = direction.lower()
            if direction in _ASCENDING:
                keys.append(SortKey(field_name, descending=False))
            elif direction in _DESCENDING:
                keys.append(SortKey(field_name, descending=True))
            else:
                raise InvalidQueryError(f"Invalid sort direction {direction!r} for '{field_name}'")

    return FindOptions(
        sort=tuple(keys),
        skip=_non_negative("skip", skip) or 0,
        limit=_non_negative("limit", limit) or None,
    )


def _non_negative(name: str, value: int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQueryError(f"'{name}' must be an integer")
    if value < 0:
        raise InvalidQueryError(f"'{name}' must not be negative")
    return value
