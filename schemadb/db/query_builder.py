# =============================================================================
# File:        schemadb/db/query_builder.py
# Purpose:     Thin fluent QueryBuilder over QuerySpec, bound to one Model
# Created:     2025-08-12
# Updated:     2025-08-19
# =============================================================================

from __future__ import annotations
from typing import Any, Mapping, Optional

from schemadb.db.query import QuerySpec


class QueryBuilder:
    """
        users.query().where({"$or": [{"age": {"$lt": 18}}, {"age": {"$gt": 65}}]}) \\
                     .order_by("age", "desc").limit(10).get()
    """

    def __init__(self, model):
        self._model = model
        self._q = QuerySpec(where={})

    def where(self, predicate: Optional[Mapping[str, Any]] = None, **filters) -> "QueryBuilder":
        if predicate:
            self._q.add_where(**dict(predicate))
        if filters:
            self._q.add_where(**filters)
        return self

    def order_by(self, key: str, direction: str = "asc") -> "QueryBuilder":
        self._q.add_order(key, direction)
        return self

    def limit(self, n: int) -> "QueryBuilder":
        self._q.set_limit(n)
        return self

    def offset(self, n: int) -> "QueryBuilder":
        self._q.set_offset(n)
        return self

    def select(self, *cols: str) -> "QueryBuilder":
        self._q.set_select(*cols)
        return self

    def with_deleted(self) -> "QueryBuilder":
        self._q.set_include_deleted(True)
        return self

    @property
    def spec(self) -> QuerySpec:
        return self._q

    def get(self, callback=None):
        return self._model.find(self._q, callback)

    def first(self):
        """First match as a ModelInstance, or None."""
        rows = self._model.find(QuerySpec(**{**self._q.__dict__, "limit": 1, "select": None}))
        return self._model._wrap(rows[0]) if rows else None

    def count(self) -> int:
        return len(self._model.find(QuerySpec(**{**self._q.__dict__, "select": None})))
