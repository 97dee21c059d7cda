"""
Immutable domain records shared by every repository implementation.

Records are frozen dataclasses. Repositories hand them out and take them back;
a change is always expressed as ``dataclasses.replace(record, ...)`` so a
caller can never mutate state owned by a store.

``to_dict`` / ``from_dict`` give a plain-JSON form used by the write-behind
snapshot.
"""
import dataclasses
import enum
import typing
import uuid
from datetime import datetime
from decimal import Decimal

from django.utils.dateparse import parse_datetime


def new_id(prefix: str) -> str:
    """Generate a string identifier such as ``order-3f2a9c1d5e7b``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _encode(value):
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return [_encode(v) for v in value]
    return value


def _decode(hint, value):
    if value is None:
        return None

    origin = typing.get_origin(hint)
    if origin is typing.Union:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        return _decode(args[0], value)
    if origin is tuple:
        inner = typing.get_args(hint)[0]
        return tuple(_decode(inner, v) for v in value)

    if isinstance(hint, type):
        if issubclass(hint, Record):
            return hint.from_dict(value)
        if issubclass(hint, enum.Enum):
            return hint(value)
        if issubclass(hint, Decimal):
            return Decimal(str(value))
        if issubclass(hint, datetime):
            return value if isinstance(value, datetime) else parse_datetime(value)
        if hint in (int, str, bool):
            return hint(value)
    return value


@dataclasses.dataclass(frozen=True)
class Record:
    """Base class for frozen domain records."""

    def to_dict(self) -> dict:
        return {f.name: _encode(getattr(self, f.name)) for f in dataclasses.fields(self)}

    @classmethod
    def from_dict(cls, data: dict):
        hints = typing.get_type_hints(cls)
        kwargs = {}
        for f in dataclasses.fields(cls):
            if f.name in data:
                kwargs[f.name] = _decode(hints[f.name], data[f.name])
        return cls(**kwargs)
