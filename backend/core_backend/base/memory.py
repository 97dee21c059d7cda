"""
Shared plumbing for the in-process repository implementations.

Each in-memory repository keeps its records in insertion-ordered dicts named in
``state_fields``. Records are immutable, so a shallow copy of those dicts is a
complete snapshot; the unit of work in ``core_backend.repositories`` uses that
to roll back a failed operation.
"""
import copy
import threading
from typing import Dict, Optional, Tuple

from .records import Record


class InMemoryRepository:
    # attribute name -> (record class, key attribute); key None means a single record
    state_fields: Dict[str, Tuple[type, Optional[str]]] = {}

    def __init__(self, lock=None):
        self._lock = lock or threading.RLock()

    def snapshot(self) -> dict:
        return {name: copy.copy(getattr(self, name)) for name in self.state_fields}

    def restore(self, snapshot: dict) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

    def export_state(self) -> dict:
        with self._lock:
            data = {}
            for name, (_record_cls, key) in self.state_fields.items():
                value = getattr(self, name)
                if key is None:
                    data[name.lstrip("_")] = value.to_dict()
                else:
                    data[name.lstrip("_")] = [record.to_dict() for record in value.values()]
            return data

    def import_state(self, data: dict) -> None:
        with self._lock:
            for name, (record_cls, key) in self.state_fields.items():
                raw = data.get(name.lstrip("_"))
                if raw is None:
                    continue
                if key is None:
                    setattr(self, name, record_cls.from_dict(raw))
                else:
                    records = [record_cls.from_dict(item) for item in raw]
                    setattr(self, name, {getattr(r, key): r for r in records})


def matches(record: Record, **filters) -> bool:
    """True when every non-None filter equals the record attribute."""
    return all(
        getattr(record, field) == value
        for field, value in filters.items()
        if value is not None
    )
