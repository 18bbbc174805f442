"""
Record kernel – an ActiveRecord-shaped model over an in-memory table.

* Subclassing `Record` creates a per-class context (schema, store, finders).
* A class-body `data = [...]` is loaded right after the class is created.
* `find_by_<field>...` names are resolved lazily by the metaclass.
"""

from __future__ import annotations

import inspect
from types import FunctionType, MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Mapping, Sequence

from ..persistence.store import NO_CRITERIA
from ..queries.relation import Relation
from ..runtime import ModelCompat
from .schema import _MISSING, FieldAttribute

if TYPE_CHECKING:
    from ..bootstrap import RecordContext


def _is_model_base(bases) -> bool:
    return not any(isinstance(b, RecordMeta) for b in bases)


# metaclass that wires the per-type context
class RecordMeta(type):
    """Attach a `RecordContext` and load class-body `data` at creation time."""

    def __new__(mcls, name: str, bases, ns, **kw):
        rows = None
        if not _is_model_base(bases) and isinstance(ns.get("data"), (list, tuple)):
            rows = ns.pop("data")

        cls = super().__new__(mcls, name, bases, ns)  # create class first
        if _is_model_base(bases):  # skip abstract base
            return cls

        # late import – avoids circular dep
        from ..bootstrap import init_context

        init_context(cls, **kw)
        if rows is not None:
            cls.load(rows)
        return cls

    def __init__(cls, name: str, bases, ns, **kw):
        super().__init__(name, bases, ns)

    def __getattr__(cls, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        ctx = vars(cls).get("_context")
        if ctx is not None:
            if name in ctx.schema.scopes:
                return cls._scope(name)
            if ctx.finders.can_resolve(name):
                return ctx.finders.bind(name)
        raise AttributeError(f"type object {cls.__name__!r} has no attribute {name!r}")

    def __dir__(cls) -> List[str]:
        names = set(super().__dir__())
        ctx = vars(cls).get("_context")
        if ctx is not None:
            names.update(ctx.schema.scopes)
            names.update(ctx.finders.finder_names())
        return sorted(names)


class RecordErrors:
    """Always empty – records are always valid."""

    def __getitem__(self, key: str) -> List[str]:
        return []

    def full_messages(self) -> List[str]:
        return []

    def __bool__(self) -> bool:
        return False


# Record base
class Record(ModelCompat, metaclass=RecordMeta):
    """Base class – one instance per row of a static lookup table."""

    primary_key: ClassVar[str] = "id"
    _context: ClassVar["RecordContext"]

    def __init__(self, attributes: Mapping[str, Any] | None = None, /, **kwargs: Any):
        object.__setattr__(self, "_attributes", {})
        data = dict(attributes or {})
        data.update(kwargs)
        for key, value in data.items():
            setattr(self, str(key), value)

    # route writes through generated setters
    def __setattr__(self, name: str, value: Any):
        if name.startswith("_"):
            return object.__setattr__(self, name, value)

        attr = inspect.getattr_static(type(self), name, None)
        read_only = isinstance(attr, property) and attr.fset is None
        if hasattr(attr, "__set__") and not read_only:
            return object.__setattr__(self, name, value)
        if self._context.schema.knows(name):
            self._attributes[name] = value
            return None
        raise AttributeError(f"unknown attribute {name!r} for {type(self).__name__}")

    # ------------------------------------------------------------------ #
    # attributes
    # ------------------------------------------------------------------ #
    @property
    def attributes(self) -> Mapping[str, Any]:
        """Defaults overlaid by explicit values, as a read-only snapshot."""
        merged = dict(self._context.schema.defaults)
        merged.update(self._attributes)
        return MappingProxyType(merged)

    def __getitem__(self, key: str) -> Any:
        return self.attributes.get(str(key))

    def __setitem__(self, key: str, value: Any) -> None:
        if str(key) == self.primary_key:
            self.id = value
        else:
            self._attributes[str(key)] = value

    def read_attribute(self, key: str) -> Any:
        return self.attributes.get(str(key))

    def _read_field(self, name: str) -> Any:
        """Value through the field's getter, hand-written or generated."""
        attr = inspect.getattr_static(type(self), name, None)
        if isinstance(attr, (FieldAttribute, property)):
            return getattr(self, name)
        if isinstance(attr, FunctionType):
            return getattr(self, name)()
        value = self._attributes.get(name)
        return self._context.schema.default_for(name) if value is None else value

    @property
    def id(self) -> Any:
        value = self._attributes.get(self.primary_key)
        return None if value is None or value is False else value

    @id.setter
    def id(self, value: Any) -> None:
        self._context.store.rekey(self, value)
        self._attributes[self.primary_key] = value

    def to_param(self) -> str | None:
        return str(self.id) if self.id is not None else None

    # ------------------------------------------------------------------ #
    # persistence state
    # ------------------------------------------------------------------ #
    def is_new_record(self) -> bool:
        return self not in self._context.store.records

    def is_persisted(self) -> bool:
        return self.id is not None and self.id in [r.id for r in self._context.store.records]

    def is_destroyed(self) -> bool:
        return False

    def is_readonly(self) -> bool:
        return True

    def is_marked_for_destruction(self) -> bool:
        return False

    def is_valid(self) -> bool:
        return True

    @property
    def errors(self) -> RecordErrors:
        return RecordErrors()

    def save(self) -> bool:
        """Insert unless a record with this id is already stored."""
        cls = type(self)
        if not cls.exists(self):
            cls.insert(self)
        return True

    save_or_raise = save

    def cache_key(self) -> str:
        cls = type(self)
        if self.is_new_record():
            return f"{cls.model_cache_key()}/new"
        config = self._context.config
        timestamp = self[config.timestamp_attribute]
        if timestamp is not None and timestamp is not False:
            if hasattr(timestamp, "strftime"):
                timestamp = timestamp.strftime(config.timestamp_format)
            return f"{cls.model_cache_key()}/{self.id}-{timestamp}"
        return f"{cls.model_cache_key()}/{self.id}"

    # identity
    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        fields = " ".join(f"{k}={v!r}" for k, v in self.attributes.items())
        return f"<{type(self).__name__} {fields}>"

    # ------------------------------------------------------------------ #
    # schema DSL
    # ------------------------------------------------------------------ #
    @classmethod
    def field(cls, name: str, default: Any = _MISSING) -> None:
        cls._context.schema.declare_field(name, default)

    @classmethod
    def fields(cls, *names: str, default: Any = _MISSING) -> None:
        cls._context.schema.declare_fields(*names, default=default)

    @classmethod
    def field_names(cls) -> List[str]:
        return cls._context.schema.field_names

    @classmethod
    def column_names(cls) -> List[str]:
        """Primary key first, then declared fields (CSV-style headers)."""
        return [cls.primary_key, *(n for n in cls.field_names() if n != cls.primary_key)]

    @classmethod
    def scope(cls, name: str, body) -> None:
        """Register `body(relation, *args)` as `Model.<name>(*args)`."""
        cls._context.schema.define_scope(name, body)

    @classmethod
    def _scope(cls, name: str):
        body = cls._context.schema.scopes[name]

        def run_scope(*args: Any, **kwargs: Any) -> Any:
            return body(cls.all(), *args, **kwargs)

        run_scope.__name__ = run_scope.__qualname__ = name
        return run_scope

    @classmethod
    def responds_to(cls, name: str) -> bool:
        return hasattr(cls, name)

    # ------------------------------------------------------------------ #
    # bulk data
    # ------------------------------------------------------------------ #
    @classmethod
    def load(cls, rows: Sequence[Mapping[str, Any]] | None) -> None:
        cls._context.store.load(rows)

    @classmethod
    def data(cls) -> List[Dict[str, Any]] | None:
        return cls._context.store.data

    @classmethod
    def reload(cls) -> None:
        cls._context.store.reload()

    @classmethod
    def clear(cls) -> None:
        cls._context.store.clear()

    delete_all = clear

    @classmethod
    def insert(cls, record: "Record") -> "Record":
        return cls._context.store.insert(record)

    @classmethod
    def next_id(cls) -> Any:
        return cls._context.store.next_id()

    @classmethod
    def exists(cls, criteria: Any = NO_CRITERIA) -> bool:
        return cls._context.store.exists(criteria)

    @classmethod
    def create(cls, attributes: Mapping[str, Any] | None = None, /, **kwargs: Any):
        record = cls(attributes, **kwargs)
        record.save()
        cls._context.store.mark_dirty()
        return record

    add = create

    @classmethod
    def create_or_raise(cls, attributes: Mapping[str, Any] | None = None, /, **kwargs: Any):
        record = cls(attributes, **kwargs)
        record.save_or_raise()
        return record

    # ------------------------------------------------------------------ #
    # queries
    # ------------------------------------------------------------------ #
    @classmethod
    def all(cls, conditions: Mapping[str, Any] | None = None) -> Relation:
        relation = Relation(cls, cls._context.store.records)
        if conditions:
            relation.where_in_place(conditions)
        return relation

    @classmethod
    def where(cls, conditions: Any = None, /, **kwargs: Any) -> Relation:
        return cls.all().where(conditions, **kwargs)

    @classmethod
    def where_not(cls, conditions: Any = None, /, **kwargs: Any) -> Relation:
        return cls.all().where_not(conditions, **kwargs)

    @classmethod
    def find(cls, rec_id: Any):
        return cls.all().find(rec_id)

    @classmethod
    def find_by(cls, conditions: Any = None, /, **kwargs: Any):
        return cls.all().find_by(conditions, **kwargs)

    @classmethod
    def find_by_or_raise(cls, conditions: Any = None, /, **kwargs: Any):
        return cls.all().find_by_or_raise(conditions, **kwargs)

    @classmethod
    def find_by_id(cls, rec_id: Any):
        return cls.all().find_by_id(rec_id)

    @classmethod
    def count(cls) -> int:
        return cls.all().count()

    @classmethod
    def pluck(cls, *fields: str) -> List[Any]:
        return cls.all().pluck(*fields)

    @classmethod
    def ids(cls) -> List[Any]:
        return cls.all().ids()

    @classmethod
    def pick(cls, *fields: str) -> Any:
        return cls.all().pick(*fields)

    @classmethod
    def first(cls, n: int | None = None):
        return cls.all().first(n)

    @classmethod
    def last(cls, n: int | None = None):
        return cls.all().last(n)

    @classmethod
    def order(cls, *fields: str, **directions: str) -> Relation:
        return cls.all().order(*fields, **directions)
