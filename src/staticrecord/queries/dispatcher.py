"""
Dynamic finder dispatch.

    Country.find_by_name("US")                 -> first match or None
    Country.find_by_name_and_code_or_raise(..) -> first match or RecordNotFound
    Country.find_all_by_continent("Europe")    -> every match, store order

Names are parsed into a `FinderSpec`; a name resolves only when every field is
declared on the model (or is the primary key). Values are compared as strings,
with None reading as "".
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Callable, List, Tuple

from pydantic import BaseModel

from ..errors import RecordNotFound

if TYPE_CHECKING:
    from ..core.schema import Schema
    from ..persistence.store import RecordStore

FINDER_PATTERN = re.compile(r"^find_(all_)?by_(.+?)(_or_raise)?$")
FIELD_SEPARATOR = "_and_"


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


class FinderSpec(BaseModel):
    name: str
    all: bool = False
    bang: bool = False
    fields: Tuple[str, ...]
    model_config = {"frozen": True}


def parse_finder(name: str) -> FinderSpec | None:
    """Decompose `name`; None if it is not a finder name at all."""
    match = FINDER_PATTERN.match(name)
    if match is None:
        return None
    all_, fields, bang = match.groups()
    if all_ and bang:
        return None
    return FinderSpec(
        name=name,
        all=bool(all_),
        bang=bool(bang),
        fields=tuple(fields.split(FIELD_SEPARATOR)),
    )


class FinderDispatcher:
    """Resolves finder names against a schema and runs them against a store."""

    def __init__(self, schema: "Schema", store: "RecordStore", primary_key: str = "id"):
        self.schema = schema
        self.store = store
        self.primary_key = primary_key

    def resolve(self, name: str) -> FinderSpec | None:
        spec = parse_finder(name)
        if spec is None:
            return None
        if all(self.schema.knows(f) or f == self.primary_key for f in spec.fields):
            return spec
        return None

    def can_resolve(self, name: str) -> bool:
        return self.resolve(name) is not None

    def run(self, spec: FinderSpec, *args: Any) -> Any:
        pairs = list(zip(spec.fields, args))
        matches: List[Any] = [
            record
            for record in self.store.records
            if all(_stringify(record._read_field(f)) == _stringify(v) for f, v in pairs)
        ]

        if spec.all:
            return matches
        if matches:
            return matches[0]
        if spec.bang:
            model = self.store.owner
            criteria = ", ".join(f"{f} = {v}" for f, v in pairs)
            raise RecordNotFound(
                f"Couldn't find {model.__name__} with {criteria}",
                model,
                self.primary_key,
                dict(pairs),
            )
        return None

    def bind(self, name: str) -> Callable[..., Any]:
        """A callable standing in for the finder method `name`."""
        spec = self.resolve(name)
        if spec is None:
            raise AttributeError(name)

        def finder(*args: Any) -> Any:
            return self.run(spec, *args)

        finder.__name__ = finder.__qualname__ = name
        return finder

    def finder_names(self) -> List[str]:
        """Single-field finder names, for `dir()` and host reflection."""
        names: List[str] = []
        for field in [self.primary_key, *self.schema.field_names]:
            names += [f"find_by_{field}", f"find_by_{field}_or_raise", f"find_all_by_{field}"]
        return names
