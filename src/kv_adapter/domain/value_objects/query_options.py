"""Query options accepted by find, update and destroy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from kv_adapter.domain.errors import InvalidQueryOptionsError
from kv_adapter.domain.value_objects.criteria import Criterion, parse_criteria

_ASCENDING = {"asc", "ascending", "1"}
_DESCENDING = {"desc", "descending", "-1"}
_KNOWN_OPTIONS = frozenset({"where", "limit", "skip", "order"})


@dataclass(frozen=True)
class SortKey:
    """One ordering term."""

    attribute: str
    descending: bool = False

    def __str__(self) -> str:
        return f"{self.attribute} {'DESC' if self.descending else 'ASC'}"


@dataclass(frozen=True)
class QueryOptions:
    """Parsed ``{where, limit, skip, order}`` options.

    Attributes:
        where: Criteria tree selecting rows.
        limit: Maximum number of rows selected, None for no limit.
        skip: Number of selected rows to pass over first.
        order: Sort terms applied before skip/limit.
    """

    where: Criterion = field(default_factory=lambda: parse_criteria(None))
    limit: int | None = None
    skip: int = 0
    order: tuple[SortKey, ...] = ()

    @property
    def is_windowed(self) -> bool:
        """True if skip/limit/order narrow or reorder the matching rows."""
        return bool(self.order) or self.skip > 0 or self.limit is not None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | QueryOptions | None) -> QueryOptions:
        """Parse a raw options mapping.

        Raises:
            InvalidQueryOptionsError: On unknown keys or malformed values.
            InvalidCriteriaError: If ``where`` cannot be parsed.
        """
        if options is None:
            return cls()
        if isinstance(options, QueryOptions):
            return options
        if not isinstance(options, Mapping):
            raise InvalidQueryOptionsError(
                f"Query options must be a mapping, got {type(options).__name__}"
            )

        unknown = set(options) - _KNOWN_OPTIONS
        if unknown:
            raise InvalidQueryOptionsError(f"Unsupported query options: {sorted(unknown)}")

        return cls(
            where=parse_criteria(options.get("where")),
            limit=_non_negative(options.get("limit"), "limit"),
            skip=_non_negative(options.get("skip"), "skip") or 0,
            order=parse_order(options.get("order")),
        )


def parse_order(raw: Any) -> tuple[SortKey, ...]:
    """Parse an order clause.

    Accepts ``"name"``, ``"name desc, age asc"``, a list of such strings, or
    a mapping of attribute to direction (``1``/``-1``/``"asc"``/``"desc"``).
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(_parse_term(term) for term in raw.split(",") if term.strip())
    if isinstance(raw, Mapping):
        return tuple(
            SortKey(attribute, _is_descending(direction, attribute))
            for attribute, direction in raw.items()
        )
    if isinstance(raw, (list, tuple)):
        keys: list[SortKey] = []
        for item in raw:
            keys.extend(parse_order(item))
        return tuple(keys)
    raise InvalidQueryOptionsError(f"Cannot interpret order clause {raw!r}")


def _parse_term(term: str) -> SortKey:
    parts = term.split()
    if len(parts) == 1:
        return SortKey(parts[0])
    if len(parts) == 2:
        return SortKey(parts[0], _is_descending(parts[1], parts[0]))
    raise InvalidQueryOptionsError(f"Cannot interpret order term {term!r}")


def _is_descending(direction: Any, attribute: str) -> bool:
    if isinstance(direction, bool):
        raise InvalidQueryOptionsError(f"Invalid sort direction for {attribute}: {direction!r}")
    token = str(direction).strip().lower()
    if token in _ASCENDING:
        return False
    if token in _DESCENDING:
        return True
    raise InvalidQueryOptionsError(f"Invalid sort direction for {attribute}: {direction!r}")


def _non_negative(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQueryOptionsError(f"{name} must be a non-negative integer, got {value!r}")
    return value
