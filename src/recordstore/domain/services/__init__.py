"""Domain services for business logic.

Services implement the logic that doesn't naturally fit within a single
entity: schema checks, index maintenance, filter parsing and matching.
"""

from recordstore.domain.services.filter_parser import parse_filter, parse_find_options
from recordstore.domain.services.index_manager import FieldIndex, IndexManager
from recordstore.domain.services.query_matcher import (
    Selection,
    compare_values,
    matches,
    order_and_page,
    select,
)
from recordstore.domain.services.schema_validator import (
    ValidationResult,
    check_record,
    validate_record,
)

__all__ = [
    "FieldIndex",
    "IndexManager",
    "Selection",
    "ValidationResult",
    "check_record",
    "compare_values",
    "matches",
    "order_and_page",
    "parse_filter",
    "parse_find_options",
    "select",
    "validate_record",
]
