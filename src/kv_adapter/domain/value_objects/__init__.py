"""Value objects for the collection adapter domain."""

from kv_adapter.domain.value_objects.criteria import (
    And,
    Criterion,
    Equals,
    Like,
    MatchAll,
    Not,
    Or,
    parse_criteria,
)
from kv_adapter.domain.value_objects.query_options import QueryOptions, SortKey, parse_order
from kv_adapter.domain.value_objects.record import (
    AUTO_INCREMENT_FLAG,
    TIMESTAMP_ATTRIBUTES,
    Record,
    Schema,
    fold_keys,
    is_auto_increment,
)

__all__ = [
    # Criteria
    "Criterion",
    "MatchAll",
    "Equals",
    "Like",
    "And",
    "Or",
    "Not",
    "parse_criteria",
    # Query options
    "QueryOptions",
    "SortKey",
    "parse_order",
    # Records
    "Record",
    "Schema",
    "AUTO_INCREMENT_FLAG",
    "TIMESTAMP_ATTRIBUTES",
    "fold_keys",
    "is_auto_increment",
]
