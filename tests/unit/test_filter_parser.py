"""Unit tests for filter and find-option parsing."""

from __future__ import annotations

import re
from datetime import datetime

import pytest

from recordstore.domain.exceptions import InvalidQueryError
from recordstore.domain.services import parse_filter, parse_find_options
from recordstore.domain.value_objects import (
    DEFAULT_FIND_OPTIONS,
    MATCH_ALL,
    LiteralValue,
    OperatorKind,
    OperatorSet,
    SortKey,
)


@pytest.mark.unit
class TestParseFilter:
    """Tests for building Filter variants from mappings."""

    def test_none_matches_all(self) -> None:
        """None and {} both match every record."""
        assert parse_filter(None) is MATCH_ALL
        assert parse_filter({}).is_empty()

    def test_literal_values(self) -> None:
        """Plain values become literal conditions."""
        flt = parse_filter({"status": "active", "tags": ["a", "b"]})

        assert [c.field for c in flt.conditions] == ["status", "tags"]
        assert flt.conditions[0].predicate == LiteralValue("active")
        assert flt.literal_conditions() == [("status", "active"), ("tags", ["a", "b"])]

    def test_plain_mapping_is_a_literal(self) -> None:
        """A mapping without operator keys is compared as a value."""
        flt = parse_filter({"address": {"city": "Oslo"}})

        assert flt.conditions[0].predicate == LiteralValue({"city": "Oslo"})

    def test_operators(self) -> None:
        """Operator objects become ordered operator terms."""
        flt = parse_filter({"age": {"$gte": 18, "$lt": 65}})

        predicate = flt.conditions[0].predicate
        assert isinstance(predicate, OperatorSet)
        assert [t.kind for t in predicate.terms] == [OperatorKind.GTE, OperatorKind.LT]
        assert [t.operand for t in predicate.terms] == [18, 65]
        assert flt.literal_conditions() == []

    def test_empty_operator_object(self) -> None:
        """An empty mapping is an operator set with no terms."""
        flt = parse_filter({"age": {}})

        assert flt.conditions[0].predicate == OperatorSet()

    def test_in_requires_list(self) -> None:
        """$in and $nin take a list operand."""
        with pytest.raises(InvalidQueryError):
            parse_filter({"role": {"$in": "admin"}})

        flt = parse_filter({"role": {"$nin": ["admin", "owner"]}})
        assert flt.conditions[0].predicate.terms[0].operand == ("admin", "owner")

    def test_unknown_operator(self) -> None:
        """Unknown operators are rejected by name."""
        with pytest.raises(InvalidQueryError) as exc_info:
            parse_filter({"age": {"$between": [1, 2]}})

        assert "$between" in str(exc_info.value)

    def test_mixed_operator_and_plain_keys(self) -> None:
        """Operator and plain keys cannot be mixed."""
        with pytest.raises(InvalidQueryError):
            parse_filter({"age": {"$gt": 1, "max": 5}})

    def test_regex_with_options(self) -> None:
        """$options letters map to regex flags."""
        flt = parse_filter({"name": {"$regex": "^j", "$options": "ig"}})

        terms = flt.conditions[0].predicate.terms
        assert len(terms) == 1
        assert terms[0].kind is OperatorKind.REGEX
        assert terms[0].operand.flags & re.IGNORECASE

    def test_options_without_regex(self) -> None:
        """$options needs a $regex."""
        with pytest.raises(InvalidQueryError):
            parse_filter({"name": {"$options": "i"}})

    def test_invalid_regex(self) -> None:
        """Uncompilable patterns are rejected."""
        with pytest.raises(InvalidQueryError):
            parse_filter({"name": {"$regex": "("}})

    def test_unknown_regex_option(self) -> None:
        """Unknown regex options are rejected."""
        with pytest.raises(InvalidQueryError):
            parse_filter({"name": {"$regex": "a", "$options": "x"}})

    def test_non_mapping_filter(self) -> None:
        """A filter must be a mapping."""
        with pytest.raises(InvalidQueryError):
            parse_filter(["age", 1])

    def test_non_json_operands_rejected(self) -> None:
        """Literals and operands must be JSON-like values."""
        for raw in (
            {"age": datetime(2024, 1, 1)},
            {"age": {"$ne": {1, 2}}},
            {"name": {"$in": ["ann", b"x"]}},
            {"age": {"$gt": object()}},
            {"address": {"city": object()}},
        ):
            with pytest.raises(InvalidQueryError):
                parse_filter(raw)

    def test_operands_are_copied(self) -> None:
        """Parsed operands do not share state with the caller's filter."""
        tags = ["a"]
        flt = parse_filter({"tags": tags, "role": {"$in": [("x", "y")]}})
        tags.append("b")

        assert flt.conditions[0].predicate == LiteralValue(["a"])
        assert flt.conditions[1].predicate.terms[0].operand == (["x", "y"],)


@pytest.mark.unit
class TestParseFindOptions:
    """Tests for sort/skip/limit validation."""

    def test_defaults(self) -> None:
        """No options yields the shared defaults."""
        assert parse_find_options() is DEFAULT_FIND_OPTIONS

    def test_sort_directions(self) -> None:
        """Numeric and named directions are accepted."""
        options = parse_find_options({"age": 1, "name": -1, "city": "desc", "zip": "asc"})

        assert options.sort == (
            SortKey("age"),
            SortKey("name", descending=True),
            SortKey("city", descending=True),
            SortKey("zip"),
        )

    def test_invalid_direction(self) -> None:
        """Other directions, booleans included, are rejected."""
        with pytest.raises(InvalidQueryError):
            parse_find_options({"age": 2})
        with pytest.raises(InvalidQueryError):
            parse_find_options({"age": True})

    def test_skip_and_limit(self) -> None:
        """Skip and limit are kept as given."""
        options = parse_find_options(skip=2, limit=5)

        assert options.skip == 2
        assert options.limit == 5

    def test_zero_limit_is_unlimited(self) -> None:
        """A zero limit means no limit."""
        assert parse_find_options(limit=0).limit is None

    def test_negative_values_rejected(self) -> None:
        """Negative skip or limit is rejected."""
        with pytest.raises(InvalidQueryError):
            parse_find_options(skip=-1)
        with pytest.raises(InvalidQueryError):
            parse_find_options(limit=-3)

    def test_non_integer_rejected(self) -> None:
        """Limit must be an integer."""
        with pytest.raises(InvalidQueryError):
            parse_find_options(limit="10")
