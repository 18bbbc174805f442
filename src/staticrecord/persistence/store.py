"""
In-memory record sequence for one model class.
Owns id assignment, the id index, uniqueness checks and bulk (re)loading.
"""

from __future__ import annotations

import numbers
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence

import structlog

from ..errors import IdError

if TYPE_CHECKING:
    from ..core.record import Record
    from ..core.schema import Schema

logger = structlog.get_logger(__name__)

NO_CRITERIA = object()  # `exists()` with no argument


def _index_key(rec_id: Any) -> str:
    return str(rec_id)


class RecordStore:
    """Ordered records plus an ``str(id) -> position`` index."""

    def __init__(self, owner: type, schema: "Schema"):
        self.owner = owner
        self.schema = schema
        self.dirty = False
        self._records: List["Record"] = []
        self._index: Dict[str, int] = {}
        self._data: List[Dict[str, Any]] | None = None
        self._lock = threading.RLock()

    # ---- reads ---------------------------------------------------------
    @property
    def records(self) -> List["Record"]:
        """Point-in-time copy of the sequence."""
        with self._lock:
            return list(self._records)

    @property
    def data(self) -> List[Dict[str, Any]] | None:
        """The raw payload handed to the last `load()`."""
        if self._data is None:
            return None
        return [dict(row) for row in self._data]

    def __len__(self) -> int:
        return len(self._records)

    def lookup(self, rec_id: Any) -> "Record | None":
        """Index lookup by stringified id."""
        with self._lock:
            pos = self._index.get(_index_key(rec_id))
            return self._records[pos] if pos is not None else None

    def contains(self, record: "Record") -> bool:
        with self._lock:
            return any(r is record for r in self._records)

    def next_id(self) -> Any:
        """1 when empty, max numeric id + 1, otherwise None."""
        with self._lock:
            ids = [r.id for r in self._records]
        if not ids:
            return 1
        if all(isinstance(i, numbers.Number) and not isinstance(i, bool) for i in ids):
            return max(ids) + 1
        return None

    def exists(self, criteria: Any = NO_CRITERIA) -> bool:
        if criteria is NO_CRITERIA:
            return len(self._records) > 0
        if hasattr(criteria, "id"):
            with self._lock:
                return _index_key(criteria.id) in self._index
        if criteria is None or criteria is False:
            return False
        if isinstance(criteria, Mapping):
            from ..queries.relation import Relation

            return Relation(self.owner, self.records).where(criteria).exists()
        return self.lookup(criteria) is not None

    # ---- writes --------------------------------------------------------
    def load(self, rows: Sequence[Mapping[str, Any]] | None) -> None:
        """Replace every record with one built from each row, in order."""
        with self._lock:
            self._reset()
            self._data = [dict(row) for row in rows] if rows is not None else None
            if rows is None:
                return
            self.mark_dirty()
            self.schema.auto_detect_fields(self._data)
            for row in self._data:
                self.insert(self.owner(dict(row)))
        logger.debug("records_loaded", model=self.owner.__name__, count=len(self._records))

    def insert(self, record: "Record") -> "Record":
        with self._lock:
            if record.id is None:
                record.id = self.next_id()
                if record.id is None:
                    raise IdError(
                        f"Cannot assign an id to {record!r}: existing ids are not "
                        "numeric, pass an explicit id"
                    )
            if self.dirty:
                self._validate_unique_id(record)
            self.mark_dirty()

            self._index[_index_key(record.id)] = len(self._records)
            self._records.append(record)
        return record

    def rekey(self, record: "Record", new_id: Any) -> None:
        """Move a stored record's index entry to `new_id`."""
        with self._lock:
            pos = self._index.get(_index_key(record.id))
            if pos is None or self._records[pos] is not record:
                return
            owner = self._index.get(_index_key(new_id))
            if owner is not None and owner != pos:
                logger.warning("duplicate_id", model=self.owner.__name__, id=new_id)
                raise IdError(f"Duplicate ID found for record {record.attributes!r}")
            self._index.pop(_index_key(record.id), None)
            self._index[_index_key(new_id)] = pos

    def clear(self) -> None:
        with self._lock:
            self.mark_dirty()
            self._reset()
        logger.debug("records_cleared", model=self.owner.__name__)

    def reload(self) -> None:
        with self._lock:
            self._index.clear()
            self.load(self._data)
            self.mark_clean()

    def mark_dirty(self) -> None:
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    # ---- internal util -------------------------------------------------
    def _reset(self) -> None:
        self._index.clear()
        self._records = []

    def _validate_unique_id(self, record: "Record") -> None:
        if _index_key(record.id) in self._index:
            logger.warning("duplicate_id", model=self.owner.__name__, id=record.id)
            raise IdError(f"Duplicate ID found for record {record.attributes!r}")
