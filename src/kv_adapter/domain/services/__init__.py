"""Domain services.

Services hold the adapter's logic: matching rows against criteria,
handing out auto-increment values and keeping schema definitions.
"""

from kv_adapter.domain.services.auto_increment import (
    AutoIncrementCounters,
    apply_auto_increment,
)
from kv_adapter.domain.services.criteria_evaluator import (
    CriteriaEvaluator,
    contains,
    strictly_equal,
)
from kv_adapter.domain.services.schema_registry import SchemaRegistry, timestamp_attributes

__all__ = [
    "AutoIncrementCounters",
    "CriteriaEvaluator",
    "SchemaRegistry",
    "apply_auto_increment",
    "contains",
    "strictly_equal",
    "timestamp_attributes",
]
