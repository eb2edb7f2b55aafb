# =============================================================================
# File:        schemadb/db/filter.py
# Purpose:     Predicate evaluator (MongoDB style operators and combinators)
#              and the full-scan row lookup used by every Model operation
# Created:     2025-08-15
# Updated:     2025-08-19
# =============================================================================

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from schemadb.db.base_store import BaseStore
from schemadb.db.query import QuerySpec
from schemadb.db.schema import Equality, Schema
from schemadb.db.types import Temporal, is_temporal, to_temporal

COMBINATORS = ("$or", "$nor", "$and")


# ---------- equality strategies ----------

def _loose_equals(a: Any, b: Any) -> bool:
    if a == b:
        return True
    if a is None or b is None:
        return (a is None and b == "") or (b is None and a == "")
    # numeric text equals the number it spells
    if isinstance(a, str) and isinstance(b, (int, float)):
        a, b = b, a
    if isinstance(a, (int, float)) and isinstance(b, str):
        try:
            return float(b.strip()) == float(a)
        except ValueError:
            return False
    return False


def _strict_equals(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        # int and float are the same runtime kind, bool is not
        numbers = (int, float)
        if not (isinstance(a, numbers) and isinstance(b, numbers)
                and not isinstance(a, bool) and not isinstance(b, bool)):
            return False
    return a == b


_EQUALS: Dict[Equality, Callable[[Any, Any], bool]] = {
    Equality.DEFAULT: _loose_equals,
    Equality.STRICT: _strict_equals,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _orderable(actual: Any, operand: Any):
    """
    Pair of comparable values for the ordering operators, or None.
    Text compares by length; booleans and lists never order.
    """
    if actual is None or isinstance(actual, (bool, list, tuple)):
        return None
    if is_temporal(actual):
        other = to_temporal(operand)
        if isinstance(other, Temporal):
            return to_temporal(actual), other
        return None
    if _is_number(actual):
        return (actual, operand) if _is_number(operand) else None
    if isinstance(actual, str):
        if _is_number(operand):
            return len(actual), operand
        if isinstance(operand, str):
            return len(actual), len(operand)
    return None


class Evaluator:
    """
    Decides whether one typed row matches a predicate document.
    The equality strategy comes from the schema's equality option.
    """

    def __init__(self, equality: Equality = Equality.DEFAULT):
        self.equality = equality
        self._equals = _EQUALS[equality]
        self.operators: Dict[str, Callable[[Any, Any], bool]] = {
            "$eq": self.op_eq,
            "$ne": self.op_ne,
            "$lt": self.op_lt,
            "$gt": self.op_gt,
            "$lte": self.op_lte,
            "$gte": self.op_gte,
            "$in": self.op_in,
            "$nin": self.op_nin,
            "$like": self.op_like,
        }

    # ---------- operators ----------
    def op_eq(self, actual: Any, operand: Any) -> bool:
        if is_temporal(actual):
            return to_temporal(actual).is_same(operand)
        if is_temporal(operand) and isinstance(actual, str):
            return to_temporal(operand).is_same(actual)
        return self._equals(actual, operand)

    def op_ne(self, actual: Any, operand: Any) -> bool:
        return not self.op_eq(actual, operand)

    def op_lt(self, actual: Any, operand: Any) -> bool:
        pair = _orderable(actual, operand)
        return pair is not None and pair[0] < pair[1]

    def op_gt(self, actual: Any, operand: Any) -> bool:
        pair = _orderable(actual, operand)
        return pair is not None and pair[0] > pair[1]

    def op_lte(self, actual: Any, operand: Any) -> bool:
        pair = _orderable(actual, operand)
        return pair is not None and pair[0] <= pair[1]

    def op_gte(self, actual: Any, operand: Any) -> bool:
        pair = _orderable(actual, operand)
        return pair is not None and pair[0] >= pair[1]

    def op_in(self, actual: Any, operand: Any) -> bool:
        if not isinstance(operand, (list, tuple, set, frozenset)):
            return False
        if is_temporal(actual):
            moment = to_temporal(actual)
            return any(moment.is_same(item) for item in operand)
        return any(self._equals(actual, item) for item in operand)

    def op_nin(self, actual: Any, operand: Any) -> bool:
        return not self.op_in(actual, operand)

    def op_like(self, actual: Any, operand: Any) -> bool:
        if not isinstance(actual, str) or operand is None:
            return False
        return str(operand).lower() in actual.lower()

    # ---------- recursion ----------
    def matches(self, row: Mapping[str, Any], predicate: Any) -> bool:
        return self.evaluate(predicate, row)

    def evaluate(self, node: Any, value: Any, combinator: Optional[str] = None) -> bool:
        if callable(node):
            return bool(node(value))

        if isinstance(node, list):
            if combinator == "$or":
                return any(self.evaluate(p, value) for p in node)
            if combinator == "$nor":
                return not any(self.evaluate(p, value) for p in node)
            return all(self.evaluate(p, value) for p in node)

        if isinstance(node, Mapping):
            if len(node) == 1:
                (key, operand), = node.items()
                if key in self.operators:
                    return self.operators[key](value, operand)
            for key, sub in node.items():
                if key in self.operators:
                    ok = self.operators[key](value, sub)
                elif key in COMBINATORS:
                    ok = self.evaluate(sub, value, key)
                else:
                    ok = self.evaluate(sub, _lookup(value, key))
                if not ok:
                    return False
            return True

        return self.op_eq(value, node)


def _lookup(value: Any, key: str) -> Any:
    """Field value under key; dotted keys descend into nested mappings."""
    if not isinstance(value, Mapping):
        return None
    if key in value:
        return value[key]
    if "." in key:
        head, rest = key.split(".", 1)
        return _lookup(value.get(head), rest)
    return None


def references_field(predicate: Any, name: str) -> bool:
    """True when the predicate mentions the field anywhere (at any depth)."""
    if isinstance(predicate, Mapping):
        for key, sub in predicate.items():
            if key == name or (isinstance(key, str) and key.split(".", 1)[0] == name):
                return True
            if references_field(sub, name):
                return True
    elif isinstance(predicate, list):
        return any(references_field(p, name) for p in predicate)
    return False


def model_suffix(model_name: str) -> str:
    return f"-{model_name}"


def scan(store: BaseStore, schema: Schema, model_name: str, spec: QuerySpec) -> List[Dict[str, Any]]:
    """
    Full scan of the store: rows of this model, cast through the schema,
    soft-deleted rows dropped unless asked for, then filtered, ordered and sliced.
    """
    predicate = spec.where
    if predicate is None:
        return []

    evaluator = Evaluator(schema.equality)
    deleted = schema.deleted_field
    skip_deleted = bool(deleted) and not spec.include_deleted and not references_field(predicate, deleted)
    suffix = model_suffix(model_name)
    out: List[Dict[str, Any]] = []

    def visit(key: str, value: Any):
        if not key.endswith(suffix) or not isinstance(value, Mapping):
            return
        row = schema.cast_record(value)
        if skip_deleted and row.get(deleted):
            return
        if evaluator.matches(row, predicate):
            out.append(row)

    store.for_each(visit)
    return _order_slice(out, spec)


def _sort_key(value: Any):
    # None first, then numbers, temporals, text; mixed kinds never compare directly
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if is_temporal(value):
        return (3, to_temporal(value).as_datetime)
    return (4, str(value))


def _order_slice(rows: List[Dict[str, Any]], spec: QuerySpec) -> List[Dict[str, Any]]:
    for field_name, direction in reversed(spec.order_by or []):
        rows.sort(key=lambda r: _sort_key(r.get(field_name)), reverse=str(direction).lower() == "desc")

    off = spec.offset or 0
    if spec.limit is not None:
        rows = rows[off: off + spec.limit]
    else:
        rows = rows[off:]

    if spec.select:
        cols = list(spec.select)
        if "id" not in cols:
            cols.insert(0, "id")
        rows = [{k: r.get(k) for k in cols} for r in rows]
    return rows
