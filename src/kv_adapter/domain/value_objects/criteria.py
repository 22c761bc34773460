"""Typed criteria tree for where clauses.

Callers hand the adapter a raw mapping such as::

    {"or": [{"name": "Ann"}, {"like": {"email": "@example.org"}}], "age": 30}

``parse_criteria`` turns it into a tree of small immutable nodes that the
evaluator walks by type. Reserved keys (``or``, ``and``, ``not``, ``like``)
are recognised case-insensitively; every other key is an attribute equality
test. Sibling keys are combined with AND.

A raw mapping cannot express equality on an attribute literally called
``or``. Build the node directly for that case::

    Equals("or", "yes")

Parsed nodes may be mixed into raw mappings, and ``parse_criteria`` returns
an already-built node unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from kv_adapter.domain.errors import InvalidCriteriaError

OR = "or"
AND = "and"
NOT = "not"
LIKE = "like"


class Criterion(ABC):
    """Base class for criteria nodes."""

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass(frozen=True)
class MatchAll(Criterion):
    """Matches every record (empty or missing where clause)."""

    def __str__(self) -> str:
        return "TRUE"


@dataclass(frozen=True)
class Equals(Criterion):
    """attribute == value."""

    attribute: str
    value: Any

    def __str__(self) -> str:
        return f"{self.attribute} = {self.value!r}"


@dataclass(frozen=True)
class Like(Criterion):
    """Every attribute contains its substring."""

    patterns: tuple[tuple[str, Any], ...]

    def __str__(self) -> str:
        parts = [f"{attr} LIKE '%{pattern}%'" for attr, pattern in self.patterns]
        return f"({' AND '.join(parts)})" if parts else "TRUE"


@dataclass(frozen=True)
class And(Criterion):
    """All operands match. No operands matches everything."""

    operands: tuple[Criterion, ...]

    def __str__(self) -> str:
        return f"({' AND '.join(str(o) for o in self.operands)})"


@dataclass(frozen=True)
class Or(Criterion):
    """Any operand matches. No operands matches nothing."""

    operands: tuple[Criterion, ...]

    def __str__(self) -> str:
        return f"({' OR '.join(str(o) for o in self.operands)})"


@dataclass(frozen=True)
class Not(Criterion):
    """Operand does not match."""

    operand: Criterion

    def __str__(self) -> str:
        return f"NOT ({self.operand})"


def parse_criteria(raw: Mapping[str, Any] | Criterion | None) -> Criterion:
    """Build a criteria tree from a raw where mapping.

    Args:
        raw: Where mapping, an already-built node, or None.

    Returns:
        The root node. ``MatchAll`` for None or an empty mapping.

    Raises:
        InvalidCriteriaError: If an operator is given a value of the wrong shape.
    """
    if raw is None:
        return MatchAll()
    if isinstance(raw, Criterion):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidCriteriaError(
            f"Criteria must be a mapping, got {type(raw).__name__}"
        )
    if not raw:
        return MatchAll()

    nodes = [_parse_entry(key, value) for key, value in raw.items()]
    if len(nodes) == 1:
        return nodes[0]
    return And(tuple(nodes))


def _parse_entry(key: Any, value: Any) -> Criterion:
    if not isinstance(key, str):
        raise InvalidCriteriaError(f"Attribute names must be strings, got {key!r}")
    word = key.lower()
    if word == OR:
        return Or(_parse_sequence(key, value))
    if word == AND:
        return And(_parse_sequence(key, value))
    if word == NOT:
        if not isinstance(value, (Mapping, Criterion)):
            raise InvalidCriteriaError(f"'{key}' expects a criteria mapping")
        return Not(parse_criteria(value))
    if word == LIKE:
        if not isinstance(value, Mapping):
            raise InvalidCriteriaError(f"'{key}' expects an attribute -> substring mapping")
        for attribute in value:
            if not isinstance(attribute, str):
                raise InvalidCriteriaError(
                    f"Attribute names must be strings, got {attribute!r}"
                )
        return Like(tuple(value.items()))
    return Equals(key, value)


def _parse_sequence(key: str, value: Any) -> tuple[Criterion, ...]:
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise InvalidCriteriaError(f"'{key}' expects a list of criteria")
    return tuple(parse_criteria(item) for item in value)
