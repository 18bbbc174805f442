"""
Per-type configuration, passed as class keywords:

    class Country(Record, timestamp_attribute="modified_at"):
        ...

Keywords are merged over the parent's config and validated by pydantic.
"""

from __future__ import annotations

from typing import Any, FrozenSet

from pydantic import BaseModel, field_validator


class RecordConfig(BaseModel):
    timestamp_attribute: str = "updated_at"
    timestamp_format: str = "%Y%m%d%H%M%S"  # the host's `:number` format
    cache_key: str | None = None  # default: tableized class name
    reserved_fields: FrozenSet[str] = frozenset({"attributes"})

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("reserved_fields", mode="before")
    @classmethod
    def _coerce_reserved(cls, value: Any) -> Any:
        if isinstance(value, str):
            return frozenset({value})
        return value

    def merged(self, **overrides: Any) -> "RecordConfig":
        """Return a validated copy with `overrides` applied."""
        if not overrides:
            return self
        data = self.model_dump()
        data.update(overrides)
        return RecordConfig.model_validate(data)
