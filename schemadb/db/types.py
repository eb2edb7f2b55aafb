# =============================================================================
# File:        schemadb/db/types.py
# Purpose:     Type registry: declared types, zero values, best-effort casting
#              and the Temporal value used for date comparisons
# Created:     2025-08-14
# Updated:     2025-08-19
# =============================================================================

from __future__ import annotations

import copy
from datetime import date, datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Any, Dict, Optional


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TEMPORAL = "temporal"
    LIST = "list"


_ALIASES = {
    "text": FieldType.TEXT,
    "string": FieldType.TEXT,
    "str": FieldType.TEXT,
    "number": FieldType.NUMBER,
    "int": FieldType.NUMBER,
    "float": FieldType.NUMBER,
    "boolean": FieldType.BOOLEAN,
    "bool": FieldType.BOOLEAN,
    "temporal": FieldType.TEMPORAL,
    "date": FieldType.TEMPORAL,
    "datetime": FieldType.TEMPORAL,
    "list": FieldType.LIST,
    "array": FieldType.LIST,
}

_TYPE_DEFAULTS = {
    FieldType.TEXT: "",
    FieldType.NUMBER: 0,
    FieldType.BOOLEAN: False,
    FieldType.LIST: [],
    FieldType.TEMPORAL: "",
}

_TRUE_STRINGS = ("true", "1", "yes", "y", "on")
_FALSE_STRINGS = ("false", "0", "no", "n", "off", "")


@total_ordering
class Temporal:
    """Immutable point in time (timezone aware, naive input is read as UTC)."""

    __slots__ = ("_dt",)

    def __init__(self, value: datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        self._dt = value

    @classmethod
    def parse(cls, raw: Any) -> "Temporal":
        """Strict parse; raises TypeError/ValueError when raw is not a point in time."""
        if isinstance(raw, Temporal):
            return raw
        if isinstance(raw, datetime):
            return cls(raw)
        if isinstance(raw, date):
            return cls(datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc))
        if isinstance(raw, bool):
            raise TypeError("boolean is not a point in time")
        if isinstance(raw, (int, float)):
            # epoch milliseconds
            return cls(datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc))
        if isinstance(raw, str):
            text = raw.strip()
            if not text:
                raise ValueError("empty temporal string")
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            return cls(datetime.fromisoformat(text))
        raise TypeError(f"cannot read {type(raw).__name__} as a point in time")

    @property
    def as_datetime(self) -> datetime:
        return self._dt

    def isoformat(self) -> str:
        return self._dt.isoformat()

    def is_before(self, other: Any) -> bool:
        other = to_temporal(other)
        return isinstance(other, Temporal) and self._dt < other._dt

    def is_after(self, other: Any) -> bool:
        other = to_temporal(other)
        return isinstance(other, Temporal) and self._dt > other._dt

    def is_same(self, other: Any) -> bool:
        other = to_temporal(other)
        return isinstance(other, Temporal) and self._dt == other._dt

    def __eq__(self, other):
        if isinstance(other, (Temporal, datetime)):
            return self.is_same(other)
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, (Temporal, datetime)):
            return self.is_before(other)
        return NotImplemented

    def __hash__(self):
        return hash(self._dt)

    def __repr__(self):
        return f"Temporal({self.isoformat()!r})"

    def __str__(self):
        return self.isoformat()


def to_temporal(value: Any) -> Any:
    """Best-effort Temporal conversion; returns the input unchanged on failure."""
    try:
        return Temporal.parse(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return value


def is_temporal(value: Any) -> bool:
    return isinstance(value, (Temporal, datetime, date))


def resolve_type(decl: Any) -> Optional[FieldType]:
    """Maps a declaration (FieldType, name or Python type) to a registered FieldType."""
    if isinstance(decl, FieldType):
        return decl
    if isinstance(decl, str):
        return _ALIASES.get(decl.strip().lower())
    if isinstance(decl, type):
        if issubclass(decl, bool):
            return FieldType.BOOLEAN
        if decl in (int, float):
            return FieldType.NUMBER
        if decl is str:
            return FieldType.TEXT
        if decl is list:
            return FieldType.LIST
        if decl in (datetime, date, Temporal):
            return FieldType.TEMPORAL
    return None


def detect_type(value: Any) -> Optional[FieldType]:
    if value is None:
        return None
    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldType.NUMBER
    if isinstance(value, str):
        return FieldType.TEXT
    if isinstance(value, (list, tuple)):
        return FieldType.LIST
    if is_temporal(value):
        return FieldType.TEMPORAL
    return None


# ---------- casters (strict, may raise) ----------

def _to_text(value):
    if isinstance(value, str):
        return value
    if is_temporal(value):
        return to_temporal(value).isoformat()
    return str(value)


def _to_number(value):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    raise TypeError(f"cannot read {type(value).__name__} as a number")


def _to_boolean(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"cannot read {value!r} as a boolean")
    raise TypeError(f"cannot read {type(value).__name__} as a boolean")


def _to_list(value):
    if isinstance(value, list):
        return value
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    if isinstance(value, dict):
        raise TypeError("cannot read a mapping as a list")
    return [value]


_CASTERS = {
    FieldType.TEXT: _to_text,
    FieldType.NUMBER: _to_number,
    FieldType.BOOLEAN: _to_boolean,
    FieldType.TEMPORAL: Temporal.parse,
    FieldType.LIST: _to_list,
}


def cast(ftype: FieldType, value: Any) -> Any:
    """
    Best-effort coercion of a stored value into its declared type.
    Never raises: on failure the raw value is returned unchanged.
    """
    if value is None:
        return None
    caster = _CASTERS.get(resolve_type(ftype))
    if caster is None:
        return value
    try:
        return caster(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return value


def type_default(ftype: FieldType, overrides: Optional[Dict[Any, Any]] = None) -> Any:
    ftype = resolve_type(ftype)
    if overrides:
        for key, val in overrides.items():
            if resolve_type(key) is ftype:
                return copy.deepcopy(val)
    return copy.deepcopy(_TYPE_DEFAULTS.get(ftype, ""))


def to_storable(value: Any) -> Any:
    """JSON-safe form of a typed value (temporals become ISO strings)."""
    if isinstance(value, Temporal):
        return value.isoformat()
    if isinstance(value, (datetime, date)):
        return Temporal.parse(value).isoformat()
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_storable(v) for k, v in value.items()}
    return value
