"""
Per-type wiring. Every concrete Record subclass gets its own `RecordContext`
(schema + store + finder dispatcher + config) at class-creation time, so there
is no state shared between model classes and tests can reset a single type.
"""

from __future__ import annotations

from typing import Any

from .config import RecordConfig
from .core.schema import Schema
from .persistence.store import RecordStore
from .queries.dispatcher import FinderDispatcher


class RecordContext:
    """Everything a model class owns."""

    def __init__(self, model: type, config: RecordConfig):
        self.model = model
        self.config = config
        self.schema = Schema(model, reserved=config.reserved_fields)
        self.store = RecordStore(model, self.schema)
        self.finders = FinderDispatcher(self.schema, self.store, model.primary_key)

    def __repr__(self) -> str:
        return (
            f"<RecordContext {self.model.__name__} fields={self.schema.field_names} "
            f"records={len(self.store)}>"
        )


def _parent_context(model: type) -> RecordContext | None:
    for klass in model.__mro__[1:]:
        ctx = vars(klass).get("_context")
        if ctx is not None:
            return ctx
    return None


def init_context(model: type, **config: Any) -> RecordContext:
    """
    Build the context for `model` and attach it as `model._context`.
    Config keywords are layered over the nearest parent model's config; field
    declarations and scopes are inherited, records are not.
    """
    parent = _parent_context(model)
    base = parent.config if parent is not None else RecordConfig()
    ctx = RecordContext(model, base.merged(**config))
    if parent is not None:
        ctx.schema.fields.update(parent.schema.fields)
        ctx.schema.scopes.update(parent.schema.scopes)
    model._context = ctx  # type: ignore[attr-defined]
    return ctx


def reset_context(model: type) -> RecordContext:
    """Drop every record, field and scope of `model`, keeping its config.

    Accessors already installed on the class stay in place.
    """
    old = vars(model).get("_context")
    config = old.config if old is not None else RecordConfig()
    ctx = RecordContext(model, config)
    model._context = ctx  # type: ignore[attr-defined]
    return ctx
