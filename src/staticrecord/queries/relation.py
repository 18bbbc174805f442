"""
Chainable, read-only view over a snapshot of a model's records.

Every step returns a new `Relation`; nothing here writes to the store.
"""

from __future__ import annotations

import re
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Iterable,
    Iterator,
    List,
    Mapping,
    Sequence,
    Tuple,
)

from ..errors import RecordNotFound

if TYPE_CHECKING:
    from ..core.record import Record

Predicate = Callable[["Record"], bool]


# helpers
def _normalize(value: Any) -> Any:
    return value if value is None else str(value)


def matches_value(value: Any, comparison: Any) -> bool:
    """One condition: any-of for collections, containment for ranges, search for
    compiled regexes, stringified equality otherwise."""
    if isinstance(comparison, (list, tuple, set, frozenset)):
        return any(matches_value(value, c) for c in comparison)
    if isinstance(comparison, range):
        return value in comparison
    if isinstance(comparison, re.Pattern):
        return value is not None and comparison.search(str(value)) is not None
    return _normalize(value) == _normalize(comparison)


def _predicate(conditions: Any, kwargs: Mapping[str, Any]) -> Predicate:
    if callable(conditions):
        if kwargs:
            raise TypeError("where() takes either a predicate or conditions, not both")
        return conditions

    merged = dict(conditions or {})
    merged.update(kwargs)
    pairs = [(str(k), v) for k, v in merged.items()]

    def predicate(record: "Record") -> bool:
        return all(matches_value(record.read_attribute(k), v) for k, v in pairs)

    return predicate


def _parse_order(arg: str) -> Tuple[str, bool]:
    """`"name"`, `"-name"` or `"name desc"` -> (field, descending)."""
    arg = arg.strip()
    if arg.startswith("-"):
        return arg[1:], True
    parts = arg.split()
    if len(parts) == 2 and parts[1].lower() in ("asc", "desc"):
        return parts[0], parts[1].lower() == "desc"
    return arg, False


def _sort_key(field: str) -> Callable[["Record"], Any]:
    def key(record: "Record") -> Any:
        value = record._read_field(field)
        return (1, 0) if value is None else (0, value)  # None sorts last

    return key


class Relation:
    """A point-in-time list of records plus the predicates that produced it."""

    def __init__(
        self,
        model: type,
        records: Iterable["Record"],
        predicates: Sequence[Predicate] = (),
    ):
        self.model = model
        self.predicates: List[Predicate] = list(predicates)
        self._records: List["Record"] = list(records)

    def _spawn(self, records: Iterable["Record"], *extra: Predicate) -> "Relation":
        return Relation(self.model, records, [*self.predicates, *extra])

    # ------------------------------------------------------------------ #
    # filtering
    # ------------------------------------------------------------------ #
    def where(self, conditions: Any = None, /, **kwargs: Any) -> "Relation":
        """Records matching every condition (a mapping, keywords, or a callable)."""
        predicate = _predicate(conditions, kwargs)
        return self._spawn([r for r in self._records if predicate(r)], predicate)

    def where_not(self, conditions: Any = None, /, **kwargs: Any) -> "Relation":
        predicate = _predicate(conditions, kwargs)

        def negated(record: "Record") -> bool:
            return not predicate(record)

        return self._spawn([r for r in self._records if negated(r)], negated)

    def where_in_place(self, conditions: Any = None, /, **kwargs: Any) -> "Relation":
        """Like `where` but narrows this relation instead of spawning one."""
        predicate = _predicate(conditions, kwargs)
        self._records = [r for r in self._records if predicate(r)]
        self.predicates.append(predicate)
        return self

    def all(self) -> "Relation":
        return self._spawn(self._records)

    def order(self, *fields: str, **directions: str) -> "Relation":
        """Stable multi-key sort: `order("name", "-population", code="desc")`."""
        keys = [_parse_order(f) for f in fields]
        keys += [(name, str(d).lower() == "desc") for name, d in directions.items()]

        records = list(self._records)
        for field, descending in reversed(keys):
            records.sort(key=_sort_key(field), reverse=descending)
        return self._spawn(records)

    # ------------------------------------------------------------------ #
    # lookups
    # ------------------------------------------------------------------ #
    def _lookup(self, rec_id: Any) -> "Record | None":
        key = str(rec_id)
        return next((r for r in self._records if str(r.id) == key), None)

    def find(self, rec_id: Any) -> Any:
        """Record with id `rec_id` (or a list, for a list of ids)."""
        if isinstance(rec_id, (list, tuple)):
            return [self.find(i) for i in rec_id]
        record = self._lookup(rec_id)
        if record is None:
            pk = self.model.primary_key
            raise RecordNotFound(
                f"Couldn't find {self.model.__name__} with {pk.upper()}={rec_id}",
                self.model,
                pk,
                rec_id,
            )
        return record

    def find_by_id(self, rec_id: Any) -> "Record | None":
        return self._lookup(rec_id)

    def find_by(self, conditions: Any = None, /, **kwargs: Any) -> "Record | None":
        return self.where(conditions, **kwargs).first()

    def find_by_or_raise(self, conditions: Any = None, /, **kwargs: Any) -> "Record":
        record = self.find_by(conditions, **kwargs)
        if record is None:
            criteria = dict(conditions or {}) if not callable(conditions) else {}
            criteria.update(kwargs)
            raise RecordNotFound(
                f"Couldn't find {self.model.__name__}",
                self.model,
                self.model.primary_key,
                criteria,
            )
        return record

    # ------------------------------------------------------------------ #
    # terminals
    # ------------------------------------------------------------------ #
    def pluck(self, *fields: str) -> List[Any]:
        if len(fields) == 1:
            (field,) = fields
            return [r._read_field(field) for r in self._records]
        return [tuple(r._read_field(f) for f in fields) for r in self._records]

    def ids(self) -> List[Any]:
        return self.pluck(self.model.primary_key)

    def pick(self, *fields: str) -> Any:
        if not self._records:
            return None
        return self._spawn(self._records[:1]).pluck(*fields)[0]

    def first(self, n: int | None = None) -> Any:
        if n is not None:
            return self._records[:n]
        return self._records[0] if self._records else None

    def last(self, n: int | None = None) -> Any:
        if n is not None:
            return self._records[-n:] if n > 0 else []
        return self._records[-1] if self._records else None

    def count(self) -> int:
        return len(self._records)

    def exists(self) -> bool:
        return bool(self._records)

    def to_list(self) -> List["Record"]:
        return list(self._records)

    # python protocol
    def __iter__(self) -> Iterator["Record"]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __getitem__(self, item):
        return self._records[item]

    def __contains__(self, record: object) -> bool:
        return record in self._records

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Relation):
            return self.model is other.model and self._records == other._records
        if isinstance(other, list):
            return self._records == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<Relation {self.model.__name__} {self._records!r}>"
