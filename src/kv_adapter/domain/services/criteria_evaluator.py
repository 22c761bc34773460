"""Criteria evaluator.

Decides whether a record satisfies a criteria tree. Evaluation is a
recursive descent over the typed nodes built by ``parse_criteria``:

    MatchAll      -> True
    Equals(a, v)  -> record has a present value for a, strictly equal to v
    Like(pairs)   -> every attribute has a present value containing its substring
    And(ops)      -> all operands match (vacuously True when empty)
    Or(ops)       -> any operand matches (False when empty)
    Not(op)       -> operand does not match

Presence:
    By default a stored value counts as present only when it is truthy, so
    rows holding 0, "", False or None never match an equality or like test
    on that attribute, not even their own value. ``match_falsy_values=True``
    switches to a membership check (``attribute in record``).

Case folding:
    Unless ``case_sensitive`` is set, attribute names are lower-cased on both
    the criteria side and the record side before lookup.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from kv_adapter.domain.errors import InvalidCriteriaError
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
from kv_adapter.domain.value_objects.record import Record, fold_keys

_MISSING = object()


class CriteriaEvaluator:
    """Pure predicate evaluator over criteria trees."""

    def __init__(self, case_sensitive: bool = False, match_falsy_values: bool = False) -> None:
        """Initialize the evaluator.

        Args:
            case_sensitive: Compare attribute names exactly as written.
            match_falsy_values: Treat any stored value, falsy or not, as present.
        """
        self._case_sensitive = case_sensitive
        self._match_falsy_values = match_falsy_values

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def matches(
        self,
        record: Mapping[str, Any],
        criteria: Mapping[str, Any] | Criterion | None,
    ) -> bool:
        """Return True if the record satisfies the criteria.

        Args:
            record: The row to test.
            criteria: Raw where mapping, parsed tree, or None (match all).
        """
        node = parse_criteria(criteria)
        return self._evaluate(node, self._prepare(record))

    def matching_indices(
        self,
        rows: Iterable[Mapping[str, Any]],
        criteria: Mapping[str, Any] | Criterion | None,
    ) -> list[int]:
        """Return the positions of matching rows, in row order."""
        node = parse_criteria(criteria)
        return [
            index
            for index, row in enumerate(rows)
            if self._evaluate(node, self._prepare(row))
        ]

    def filter(
        self,
        rows: Iterable[Record],
        criteria: Mapping[str, Any] | Criterion | None,
    ) -> list[Record]:
        """Return the matching rows, in row order."""
        node = parse_criteria(criteria)
        return [row for row in rows if self._evaluate(node, self._prepare(row))]

    def resolve(self, record: Mapping[str, Any], attribute: str) -> Any:
        """Look up an attribute using this evaluator's case rule. None if absent."""
        value = self._lookup(self._prepare(record), attribute)
        return None if value is _MISSING else value

    # --- Internal -------------------------------------------------------------------

    def _prepare(self, record: Mapping[str, Any]) -> Mapping[str, Any]:
        return record if self._case_sensitive else fold_keys(record)

    def _lookup(self, record: Mapping[str, Any], attribute: str) -> Any:
        if not isinstance(attribute, str):
            raise InvalidCriteriaError(f"Attribute names must be strings, got {attribute!r}")
        key = attribute if self._case_sensitive else attribute.lower()
        return record.get(key, _MISSING)

    def _present(self, value: Any) -> bool:
        if value is _MISSING:
            return False
        return True if self._match_falsy_values else bool(value)

    def _evaluate(self, node: Criterion, record: Mapping[str, Any]) -> bool:
        if isinstance(node, MatchAll):
            return True
        if isinstance(node, Equals):
            value = self._lookup(record, node.attribute)
            return self._present(value) and strictly_equal(value, node.value)
        if isinstance(node, Like):
            for attribute, pattern in node.patterns:
                value = self._lookup(record, attribute)
                if not self._present(value) or not contains(value, pattern):
                    return False
            return True
        if isinstance(node, And):
            return all(self._evaluate(op, record) for op in node.operands)
        if isinstance(node, Or):
            return any(self._evaluate(op, record) for op in node.operands)
        if isinstance(node, Not):
            return not self._evaluate(node.operand, record)
        raise TypeError(f"Unknown criteria node: {type(node).__name__}")


def strictly_equal(left: Any, right: Any) -> bool:
    """Equality without coercion across value kinds.

    Numbers compare by value (``1 == 1.0``), but booleans only equal booleans
    and strings only equal strings.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right


def contains(value: Any, pattern: Any) -> bool:
    """Substring containment for strings, membership for lists."""
    if isinstance(value, str):
        return isinstance(pattern, str) and pattern in value
    if isinstance(value, (list, tuple)):
        return pattern in value
    return False
