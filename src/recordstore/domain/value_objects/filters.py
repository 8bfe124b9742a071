"""Query filter value objects.

A filter is a tagged variant per field: either a literal value compared for
equality, or a set of operator terms. The operator set is closed; parsing
from the plain mapping form lives in `domain.services.filter_parser`.

    {"age": {"$gt": 25, "$lt": 60}, "active": True}

becomes

    Filter((
        FieldCondition("age", OperatorSet((OperatorTerm(GT, 25), OperatorTerm(LT, 60)))),
        FieldCondition("active", LiteralValue(True)),
    ))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class OperatorKind(Enum):
    """Operators understood by the query matcher."""

    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    NE = "$ne"
    IN = "$in"
    NIN = "$nin"
    REGEX = "$regex"

    def is_ordering(self) -> bool:
        """Check if this operator compares by ordering."""
        return self in (OperatorKind.GT, OperatorKind.GTE, OperatorKind.LT, OperatorKind.LTE)


@dataclass(frozen=True)
class LiteralValue:
    """Plain equality predicate."""

    value: Any


@dataclass(frozen=True)
class OperatorTerm:
    """One operator applied to a field.

    For REGEX the operand is a compiled pattern; for IN/NIN it is a tuple.
    """

    kind: OperatorKind
    operand: Any


@dataclass(frozen=True)
class OperatorSet:
    """All operator terms for one field; implicitly AND-ed."""

    terms: tuple[OperatorTerm, ...] = ()


Predicate = Union[LiteralValue, OperatorSet]


@dataclass(frozen=True)
class FieldCondition:
    """A predicate bound to a field name."""

    field: str
    predicate: Predicate


@dataclass(frozen=True)
class Filter:
    """Conjunction of field conditions. An empty filter matches everything."""

    conditions: tuple[FieldCondition, ...] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not self.conditions

    def literal_conditions(self) -> list[tuple[str, Any]]:
        """(field, value) pairs for every plain-literal condition."""
        return [
            (c.field, c.predicate.value)
            for c in self.conditions
            if isinstance(c.predicate, LiteralValue)
        ]


MATCH_ALL = Filter()


@dataclass(frozen=True)
class SortKey:
    """One key of a multi-key sort."""

    field: str
    descending: bool = False


@dataclass(frozen=True)
class FindOptions:
    """Result assembly options applied after filtering: sort, skip, limit.

    A limit of None means unlimited.
    """

    sort: tuple[SortKey, ...] = ()
    skip: int = 0
    limit: int | None = None


DEFAULT_FIND_OPTIONS = FindOptions()
