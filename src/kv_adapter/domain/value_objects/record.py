"""Record and schema shapes stored by the adapter.

Records are plain dicts keyed by attribute name. The evaluator gives defined
semantics to str, int, float, bool, datetime and None values; nested lists
and dicts are stored as given and only take part in ``like`` containment
checks.
"""

from __future__ import annotations

from typing import Any, Mapping

Record = dict[str, Any]
"""A single row: attribute name -> value, in insertion order."""

Schema = dict[str, Any]
"""Attribute name -> descriptor (mapping or scalar type name)."""

AUTO_INCREMENT_FLAG = "autoIncrement"
TIMESTAMP_ATTRIBUTES = ("createdAt", "updatedAt")


def is_auto_increment(descriptor: Any) -> bool:
    """Return True if a schema descriptor asks for a generated value."""
    return isinstance(descriptor, Mapping) and bool(descriptor.get(AUTO_INCREMENT_FLAG))


def fold_keys(record: Mapping[str, Any]) -> dict[str, Any]:
    """Lower-case attribute names. Later keys win on collision."""
    return {key.lower(): value for key, value in record.items()}
