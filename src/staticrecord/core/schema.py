"""
Field / scope registry that lives on every Record subclass.

* One `FieldSpec` per declared name, kept in declaration order.
* Declaring a field installs a `FieldAttribute` (getter + setter) and a
  `has_<field>()` interrogator on the owner class, unless the class already
  defines something under that name.
"""

from __future__ import annotations

import inspect
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping

import structlog
from pydantic import BaseModel

from ..errors import ReservedFieldError

logger = structlog.get_logger(__name__)

_MISSING = object()


def is_present(value: Any) -> bool:
    """Truthiness in the host framework's sense: 0 is present, "  " is not."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if hasattr(value, "__len__"):
        return len(value) > 0
    return True


class FieldSpec(BaseModel):
    name: str
    default: Any = None
    has_default: bool = False
    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class FieldAttribute:
    """Generated accessor: reads `attributes[name]` falling back to the default."""

    def __init__(self, name: str):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            # class-level access: a scope of the same name wins
            ctx = getattr(owner, "_context", None)
            if ctx is not None and self.name in ctx.schema.scopes:
                return owner._scope(self.name)
            return self
        value = instance._attributes.get(self.name)
        if value is None:
            return type(instance)._context.schema.default_for(self.name)
        return value

    def __set__(self, instance, value) -> None:
        instance._attributes[self.name] = value

    def __repr__(self) -> str:
        return f"<FieldAttribute {self.name!r}>"


def _interrogator(name: str) -> Callable[[Any], bool]:
    def interrogate(self) -> bool:
        return is_present(self._read_field(name))

    interrogate.__name__ = f"has_{name}"
    return interrogate


def defines(owner: type, name: str) -> bool:
    """True if `name` is defined anywhere in `owner`'s MRO except `object`."""
    return any(name in vars(klass) for klass in owner.__mro__[:-1])


class Schema:
    """Declared fields, their defaults, and named scopes for one model class."""

    def __init__(self, owner: type, reserved: Iterable[str] = ("attributes",)):
        self.owner = owner
        self.reserved = frozenset(reserved)
        self.fields: Dict[str, FieldSpec] = {}
        self.scopes: Dict[str, Callable[..., Any]] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # reads
    # ------------------------------------------------------------------ #
    @property
    def field_names(self) -> List[str]:
        return list(self.fields)

    @property
    def defaults(self) -> Dict[str, Any]:
        return {f.name: f.default for f in self.fields.values() if f.has_default}

    def default_for(self, name: str) -> Any:
        spec = self.fields.get(name)
        return spec.default if spec is not None else None

    def knows(self, name: str) -> bool:
        return name in self.fields

    # ------------------------------------------------------------------ #
    # declarations
    # ------------------------------------------------------------------ #
    def declare_field(self, name: str, default: Any = _MISSING) -> FieldSpec:
        name = str(name)
        if name in self.reserved:
            raise ReservedFieldError(
                f"{name} is a reserved field in staticrecord. Please use another name."
            )

        with self._lock:
            existing = self.fields.get(name)
            if default is not _MISSING:
                spec = FieldSpec(name=name, default=default, has_default=True)
            elif existing is not None:
                spec = existing
            else:
                spec = FieldSpec(name=name)
            self.fields[name] = spec

            if existing is None:
                self._generate_accessors(name)
        return spec

    def declare_fields(self, *names: str, default: Any = _MISSING) -> List[FieldSpec]:
        return [self.declare_field(name, default) for name in names]

    def auto_detect_fields(self, rows: Iterable[Mapping[str, Any]] | None) -> List[str]:
        """Declare every key seen across `rows` (except `id`), first-seen order."""
        seen: Dict[str, None] = {}
        for row in rows or ():
            for key in row:
                if str(key) != "id":
                    seen.setdefault(str(key), None)
        for key in seen:
            self.declare_field(key)
        return list(seen)

    def define_scope(self, name: str, body: Callable[..., Any]) -> None:
        if not callable(body):
            raise TypeError("body needs to be callable")
        taken = inspect.getattr_static(self.owner, name, None)
        if taken is not None and not isinstance(taken, FieldAttribute):
            raise ValueError(
                f"{self.owner.__name__}.{name} already exists; pick another scope name"
            )
        with self._lock:
            self.scopes[name] = body

    # ------------------------------------------------------------------ #
    # accessor generation
    # ------------------------------------------------------------------ #
    def _generate_accessors(self, name: str) -> None:
        owner = self.owner
        if defines(owner, name):
            logger.debug("accessor_skipped", model=owner.__name__, field=name)
        else:
            setattr(owner, name, FieldAttribute(name))

        interrogator = f"has_{name}"
        if not defines(owner, interrogator):
            setattr(owner, interrogator, _interrogator(name))
