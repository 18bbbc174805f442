"""
Exceptions raised by staticrecord. None of them are swallowed internally;
`Model.transaction()` re-raises every one of them unchanged.
"""

from __future__ import annotations

from typing import Any


class StaticRecordError(Exception):
    """Base class for all staticrecord errors."""


class RecordNotFound(StaticRecordError, LookupError):
    """Raised by single-id lookups and bang finders on a miss."""

    def __init__(
        self,
        message: str | None = None,
        model: type | None = None,
        primary_key: str | None = None,
        id: Any = None,
    ):
        self.model = model
        self.primary_key = primary_key
        self.id = id
        super().__init__(message)


class IdError(StaticRecordError):
    """Duplicate (or unassignable) id on insert."""


class ReservedFieldError(StaticRecordError):
    pass
