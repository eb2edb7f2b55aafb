# =============================================================================
# File:        schemadb/db/query.py
# Purpose:     QuerySpec + error taxonomy of the document layer
# Created:     2025-08-12
# Updated:     2025-08-19
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# ---------- Exceptions ----------
class DBError(Exception):
    """Base error of the document layer."""
    pass


class SchemaError(DBError):
    """Malformed schema (no fields, unknown type, bad option). Raised at construction."""
    pass


class DuplicateSchemaError(DBError):
    """A model name (or a schema instance) was registered twice."""
    pass


class NotFoundError(DBError):
    """The query matched no record where one was expected."""
    pass


class EnvironmentGuardError(DBError):
    """Destructive operation attempted outside the development environment."""
    pass


class StoreError(DBError):
    """A store write failed for a reason other than I/O (e.g. an unserializable value)."""

    def __init__(self, original: Exception):
        super().__init__(f"{type(original).__name__}: {original}")
        self.original = original


@dataclass(frozen=True)
class FieldError:
    field: str
    kind: str       # type | required | min | max | match | unique
    message: str


class ValidationError(DBError):
    """One or more field constraints failed. errors = {field: [FieldError, ...]}"""

    def __init__(self, errors: Dict[str, List[FieldError]]):
        super().__init__("Validation failed: " + ", ".join(
            f"{f}/{e.kind}" for f, errs in errors.items() for e in errs
        ))
        self.errors = errors

    def kinds(self, field_name: str) -> List[str]:
        return [e.kind for e in self.errors.get(field_name, [])]


# ---------- QuerySpec ----------
@dataclass
class QuerySpec:
    where: Optional[Dict[str, Any]] = field(default_factory=dict)
    include_deleted: bool = False
    order_by: List[Tuple[str, str]] = field(default_factory=list)  # [("age","asc"), ("name","desc")]
    limit: Optional[int] = None
    offset: Optional[int] = None
    select: Optional[List[str]] = None  # None = every field

    def add_where(self, **filters) -> "QuerySpec":
        if self.where is None:
            self.where = {}
        self.where.update(filters)
        return self

    def add_order(self, key: str, direction: str = "asc") -> "QuerySpec":
        self.order_by.append((key, direction))
        return self

    def set_limit(self, n: int) -> "QuerySpec":
        self.limit = int(n)
        return self

    def set_offset(self, n: int) -> "QuerySpec":
        self.offset = int(n)
        return self

    def set_select(self, *cols: str) -> "QuerySpec":
        self.select = list(cols) if cols else None
        return self

    def set_include_deleted(self, val: bool = True) -> "QuerySpec":
        self.include_deleted = bool(val)
        return self
