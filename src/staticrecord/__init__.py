"""
Public surface for staticrecord.
Subclass `Record`, hand it rows (class-body `data = [...]` or `Model.load(rows)`)
and query it with the usual `where` / `find_by` / `pluck` calls.
"""

from .core.record import Record
from .config import RecordConfig
from .errors import IdError, RecordNotFound, ReservedFieldError, StaticRecordError
from .queries.relation import Relation
from .runtime import Rollback
from .bootstrap import reset_context

__all__ = [
    "Record",
    "RecordConfig",
    "Relation",
    "Rollback",
    "reset_context",
    "StaticRecordError",
    "RecordNotFound",
    "IdError",
    "ReservedFieldError",
]
