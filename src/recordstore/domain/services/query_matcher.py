"""Query matching and result assembly.

Evaluation order for a find:
    1. Selection - index-assisted when at least one plain-literal condition
       targets an indexed field, otherwise a full scan in insertion order.
       Index candidates are always re-checked against the whole filter, so
       operator terms and non-indexed literals still apply.
    2. Optional stable multi-key sort; values that cannot be ordered
       against each other tie and keep their relative order.
    3. Skip, then limit.

Comparisons never raise: comparing values of incompatible types fails the
predicate (or ties, when sorting).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Mapping, Sequence

from recordstore.domain.services.index_manager import IndexManager
from recordstore.domain.value_objects import (
    ID_FIELD,
    MISSING,
    Filter,
    FindOptions,
    LiteralValue,
    OperatorKind,
    OperatorTerm,
    Predicate,
    SortKey,
    coerce_to_string,
    is_number,
    strict_equals,
)

Record = Mapping[str, Any]


def matches(record: Record, flt: Filter) -> bool:
    """Check whether a record satisfies every condition of a filter."""
    for condition in flt.conditions:
        value = record.get(condition.field, MISSING)
        if not _satisfies(value, condition.predicate):
            return False
    return True


def _satisfies(value: Any, predicate: Predicate) -> bool:
    if isinstance(predicate, LiteralValue):
        return strict_equals(value, predicate.value)
    return all(_apply(term, value) for term in predicate.terms)


def _apply(term: OperatorTerm, value: Any) -> bool:
    kind = term.kind

    if kind.is_ordering():
        order = compare_values(value, term.operand)
        if order is None:
            return False
        if kind is OperatorKind.GT:
            return order > 0
        if kind is OperatorKind.GTE:
            return order >= 0
        if kind is OperatorKind.LT:
            return order < 0
        return order <= 0

    if kind is OperatorKind.NE:
        return not strict_equals(value, term.operand)
    if kind is OperatorKind.IN:
        return any(strict_equals(value, item) for item in term.operand)
    if kind is OperatorKind.NIN:
        return not any(strict_equals(value, item) for item in term.operand)

    text = coerce_to_string(value) if value is not MISSING else None
    if text is None:
        return False
    return term.operand.search(text) is not None


def compare_values(left: Any, right: Any) -> int | None:
    """Three-way compare two numbers or two strings.

    Returns:
        -1, 0 or 1, or None if the values cannot be ordered.
    """
    comparable = (is_number(left) and is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if not comparable:
        return None
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


@dataclass
class Selection:
    """Records matched by a filter, and how they were found."""

    records: list[Record] = field(default_factory=list)
    index_fields: list[str] = field(default_factory=list)

    @property
    def used_index(self) -> bool:
        return bool(self.index_fields)


def select(
    records: Sequence[Record],
    flt: Filter,
    indexes: IndexManager | None = None,
) -> Selection:
    """Find every record matching a filter, in table insertion order.

    Args:
        records: The table's records in insertion order.
        flt: The parsed filter.
        indexes: The table's indexes, used for plain-literal conditions.
    """
    indexed = []
    if indexes is not None:
        indexed = [(f, v) for f, v in flt.literal_conditions() if indexes.has_index(f)]

    if indexed:
        ids = indexes.candidates(indexed) or set()
        candidates: Sequence[Record] = [r for r in records if r[ID_FIELD] in ids] if ids else []
    else:
        candidates = records

    if flt.is_empty():
        matched = list(candidates)
    else:
        matched = [r for r in candidates if matches(r, flt)]

    return Selection(records=matched, index_fields=[f for f, _ in indexed])


def _sort_comparator(keys: Sequence[SortKey]) -> Callable[[Record, Record], int]:
    def compare(a: Record, b: Record) -> int:
        for key in keys:
            order = compare_values(a.get(key.field, MISSING), b.get(key.field, MISSING))
            if order:
                return -order if key.descending else order
        return 0

    return compare


def order_and_page(records: Sequence[Record], options: FindOptions) -> list[Record]:
    """Apply sort, then skip, then limit."""
    result = list(records)
    if options.sort:
        result.sort(key=cmp_to_key(_sort_comparator(options.sort)))
    if options.skip:
        result = result[options.skip:]
    if options.limit is not None:
        result = result[: options.limit]
    return result
