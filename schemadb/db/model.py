# =============================================================================
# File:        schemadb/db/model.py
# Purpose:     Model facade: CRUD over the key/value store with schema
#              defaults, validation, casting, timestamps and lifecycle hooks
# Created:     2025-08-08
# Updated:     2025-08-19
# =============================================================================

from __future__ import annotations

import json
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from schemadb.config.env import EnvLoader
from schemadb.db.base_store import BaseStore
from schemadb.db.filter import Evaluator, model_suffix, scan
from schemadb.db.query import (
    DBError, EnvironmentGuardError, FieldError, NotFoundError, QuerySpec, StoreError,
    ValidationError,
)
from schemadb.db.schema import Schema, call_virtual
from schemadb.db.types import Temporal, cast, to_storable
from schemadb.helpers.core_helper import new_id, now_utc
from schemadb.managers.event_manager import (
    EventManager, MODEL_DROPPED, RECORD_CREATED, RECORD_DESTROYED, RECORD_UPDATED,
)
from schemadb.managers.log_manager import LogManager
from schemadb.managers.validator_manager import ValidatorManager

# callback(err, result): invoked exactly once when given
Callback = Optional[Callable[[Optional[Exception], Any], None]]
Query = Union[None, str, Mapping[str, Any], QuerySpec]


def _settle(callback: Callback, fn: Callable, *args, **kwargs):
    """
    Without a callback: return the result or raise.
    With a callback: deliver (err, None) or (None, result) exactly once;
    only document-layer and store I/O errors travel through the callback.
    """
    if callback is None:
        return fn(*args, **kwargs)
    try:
        result = fn(*args, **kwargs)
    except (DBError, OSError) as e:
        callback(e, None)
        return None
    callback(None, result)
    return result


class ModelInstance(dict):
    """
    A record materialized with its Model. The Model reference is bookkeeping:
    it is neither persisted nor serialized. Virtuals read as attributes.
    """
    __slots__ = ("_model",)

    def __init__(self, model: "Model", record: Mapping[str, Any]):
        super().__init__(record)
        self._model = model

    @property
    def id(self) -> Optional[str]:
        return self.get("id")

    @property
    def model(self) -> "Model":
        return self._model

    @property
    def schema(self) -> Schema:
        return self._model.schema

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        model = self._model
        virtual = model.schema.virtuals.get(name)
        if virtual is not None:
            return call_virtual(virtual, self)
        if name in model.schema or name in self:
            return self.get(name)
        raise AttributeError(f"{model.name} has no field or virtual {name!r}")

    def to_object(self) -> Dict[str, Any]:
        return dict(self)

    def serialize(self) -> str:
        return json.dumps(to_storable(self.to_object()), ensure_ascii=False)

    # --- instance shortcuts back into the Model ---
    def patch(self, changes: Mapping[str, Any], callback: Callback = None):
        return self._model.update(changes, self.id, callback)

    def destroy(self, callback: Callback = None):
        return self._model.destroy(self.id, callback)

    def reload(self, callback: Callback = None):
        return self._model.find_one(self.id, callback, include_deleted=True)

    def __repr__(self):
        return f"<{self._model.name} {dict.__repr__(self)}>"


class Model:
    """
    Bound to one Schema and one store. Records live under "<id>-<name>".

        users = db.model("user", Schema({"name": {"type": "text", "required": True}}))
        ann = users.create({"name": "Ann"})
        users.find({"name": {"$like": "an"}})
        users.update({"name": "Anna"}, ann.id)
    """

    def __init__(self, name: str, schema: Schema, store: BaseStore):
        schema.bind(name)
        self.name = name
        self.schema = schema
        self.store = store
        self._log = LogManager.scoped(f"Model:{name}")

    def __repr__(self):
        return f"Model({self.name!r})"

    # --------------------------------------------------------------------- #
    # Keys / specs
    # --------------------------------------------------------------------- #

    def key_for(self, record_id: Any) -> str:
        return f"{record_id}-{self.name}"

    @staticmethod
    def _spec(query: Query, include_deleted: bool = False) -> QuerySpec:
        if isinstance(query, QuerySpec):
            if include_deleted and not query.include_deleted:
                query = QuerySpec(**{**query.__dict__, "include_deleted": True})
            return query
        if isinstance(query, str):
            query = {"id": query}
        return QuerySpec(where=query, include_deleted=include_deleted)

    def _rows(self, query: Query, include_deleted: bool = False) -> List[Dict[str, Any]]:
        return scan(self.store, self.schema, self.name, self._spec(query, include_deleted))

    def _wrap(self, record: Mapping[str, Any]) -> ModelInstance:
        return ModelInstance(self, record)

    # --------------------------------------------------------------------- #
    # Store glue
    # --------------------------------------------------------------------- #

    def _await(self, op: Callable, *args) -> None:
        """Runs a store write and blocks until its on_done confirms it."""
        done = threading.Event()
        outcome: Dict[str, Optional[Exception]] = {"err": None}

        def on_done(err: Optional[Exception]):
            outcome["err"] = err
            done.set()

        op(*args, on_done)
        done.wait()
        err = outcome["err"]
        if isinstance(err, (DBError, OSError)):
            raise err
        if err is not None:
            raise StoreError(err) from err

    def _write(self, record: Mapping[str, Any]) -> None:
        self._await(self.store.set, self.key_for(record["id"]), to_storable(dict(record)))

    def _remove(self, key: str) -> None:
        self._await(self.store.remove, key)

    def _keys(self) -> List[str]:
        suffix = model_suffix(self.name)
        keys: List[str] = []
        self.store.for_each(lambda key, _val: keys.append(key) if key.endswith(suffix) else None)
        return keys

    # --------------------------------------------------------------------- #
    # Validation glue
    # --------------------------------------------------------------------- #

    def _unique_check(self, exclude_id: Optional[str]):
        """
        unique_check(field, value) -> True when no OTHER live row of this model
        holds an equal value ($eq semantics of the schema's equality mode).
        """
        evaluator = Evaluator(self.schema.equality)
        suffix = model_suffix(self.name)
        deleted = self.schema.deleted_field

        def check(field_name: str, value: Any) -> bool:
            ftype = self.schema[field_name].type
            target = cast(ftype, value)
            clash = {"found": False}

            def visit(key: str, row: Any):
                if not key.endswith(suffix) or not isinstance(row, Mapping):
                    return None
                if exclude_id is not None and row.get("id") == exclude_id:
                    return None
                if deleted and row.get(deleted):
                    return None
                other = row.get(field_name)
                if other is not None and evaluator.op_eq(cast(ftype, other), target):
                    clash["found"] = True
                    return False
                return None

            self.store.for_each(visit)
            return not clash["found"]

        return check

    def _validate(self, candidate: Dict[str, Any], exclude_id: Optional[str] = None) -> None:
        errors = ValidatorManager.validate(
            self.schema, candidate,
            unique_check=self._unique_check(exclude_id),
            label=f":{self.name}",
        )
        if errors:
            raise ValidationError(errors)

    # --------------------------------------------------------------------- #
    # Read
    # --------------------------------------------------------------------- #

    def find(self, query: Query, callback: Callback = None, *, include_deleted: bool = False):
        """Matching rows as plain typed dicts. A None query matches nothing."""
        return _settle(callback, self._rows, query, include_deleted)

    def all(self, callback: Callback = None, *, include_deleted: bool = False):
        return _settle(callback, self._rows, {}, include_deleted)

    def _find_one(self, query: Query, include_deleted: bool = False) -> ModelInstance:
        rows = self._rows(query, include_deleted)
        if not rows:
            raise NotFoundError(f"No {self.name} record matches {query!r}")
        return self._wrap(rows[0])

    def find_one(self, query: Query, callback: Callback = None, *, include_deleted: bool = False):
        """First match as a ModelInstance; a string query is read as an id."""
        return _settle(callback, self._find_one, query, include_deleted)

    def count(self, query: Query = None, callback: Callback = None, *, include_deleted: bool = False):
        return _settle(callback, lambda: len(self._rows({} if query is None else query, include_deleted)))

    def exists(self, query: Query, callback: Callback = None):
        return _settle(callback, lambda: bool(self._rows(query)))

    def query(self):
        from schemadb.db.query_builder import QueryBuilder
        return QueryBuilder(self)

    # --------------------------------------------------------------------- #
    # Write
    # --------------------------------------------------------------------- #

    def _stamp(self, record: Dict[str, Any], *, created: bool) -> None:
        now = Temporal(now_utc())
        if created and self.schema.created_field:
            record[self.schema.created_field] = now
        if self.schema.modified_field:
            record[self.schema.modified_field] = now

    def _create(self, obj: Mapping[str, Any]) -> ModelInstance:
        if not isinstance(obj, Mapping):
            raise TypeError(f"create() expects a mapping, got {type(obj).__name__}")

        candidate = self.schema.strip_unknown(obj)
        stamped = {"id", self.schema.created_field, self.schema.modified_field}
        zero_filled: Dict[str, Any] = {}
        for name in self.schema:
            if name not in candidate and name not in stamped:
                candidate[name] = self.schema.default_for(name)
                fdef = self.schema[name]
                if not fdef.required and not fdef.has_default:
                    zero_filled[name] = candidate[name]

        if self.schema.options.uuid:
            candidate["id"] = new_id()
        elif candidate.get("id") in (None, ""):
            raise ValidationError({"id": [FieldError("id", "required", "id is required")]})
        else:
            candidate["id"] = str(candidate["id"])

        self._stamp(candidate, created=True)
        self.schema.run_hook("before_create", candidate)
        # omitted optional fields holding their zero value were never supplied
        self._validate({
            k: v for k, v in candidate.items()
            if k not in zero_filled or v != zero_filled[k]
        })

        record = self.schema.cast_record(candidate)
        self._write(record)
        instance = self._wrap(record)

        self.schema.run_hook("after_create", instance)
        self._log("info", f"created id={instance.id}")
        EventManager.emit(RECORD_CREATED, {"model": self.name, "id": instance.id})
        return instance

    def create(self, obj: Mapping[str, Any], callback: Callback = None):
        return _settle(callback, self._create, obj)

    def _update(self, obj: Mapping[str, Any], query: Query) -> ModelInstance:
        if not isinstance(obj, Mapping):
            raise TypeError(f"update() expects a mapping, got {type(obj).__name__}")

        rows = self._rows(query)
        target = rows[0] if rows else None

        partial = self.schema.strip_unknown(obj)
        for frozen in ("id", self.schema.created_field, self.schema.modified_field):
            partial.pop(frozen, None)

        self._validate(partial, exclude_id=target["id"] if target else None)
        if target is None:
            raise NotFoundError(f"No {self.name} record matches {query!r}")

        merged = dict(target)
        merged.update(partial)
        self._stamp(merged, created=False)
        self.schema.run_hook("before_update", merged)

        record = self.schema.cast_record(merged)
        self._write(record)
        instance = self._wrap(record)

        self.schema.run_hook("after_update", instance)
        self._log("info", f"updated id={instance.id} fields={sorted(partial)}")
        EventManager.emit(RECORD_UPDATED, {"model": self.name, "id": instance.id})
        return instance

    def update(self, obj: Mapping[str, Any], query: Query, callback: Callback = None):
        """Validates the partial, merges it over the first match and persists it."""
        return _settle(callback, self._update, obj, query)

    def _update_or_create(self, obj: Mapping[str, Any], query: Query) -> ModelInstance:
        if self._rows(query):
            return self._update(obj, query)
        return self._create(obj)

    def update_or_create(self, obj: Mapping[str, Any], query: Query, callback: Callback = None):
        return _settle(callback, self._update_or_create, obj, query)

    upsert = update_or_create

    def _destroy(self, query: Query) -> ModelInstance:
        rows = self._rows(query)
        if not rows:
            raise NotFoundError(f"No {self.name} record matches {query!r}")

        instance = self._wrap(rows[0])
        self.schema.run_hook("before_destroy", instance)

        if self.schema.soft_delete:
            record = dict(rows[0])
            record[self.schema.deleted_field] = Temporal(now_utc())
            self._write(record)
            instance = self._wrap(record)
            self._log("info", f"soft-deleted id={instance.id}")
        else:
            self._remove(self.key_for(instance.id))
            self._log("info", f"removed id={instance.id}")

        self.schema.run_hook("after_destroy", instance)
        EventManager.emit(RECORD_DESTROYED, {
            "model": self.name, "id": instance.id, "soft": self.schema.soft_delete,
        })
        return instance

    def destroy(self, query: Query, callback: Callback = None):
        return _settle(callback, self._destroy, query)

    def _destroy_all(self) -> int:
        if not EnvLoader.is_development():
            self._log("warning", "destroy_all refused: APP_ENV is not development")
            raise EnvironmentGuardError("destroy_all() requires APP_ENV=development.")
        keys = self._keys()
        for key in keys:
            self._remove(key)
        self._log("warning", f"destroy_all removed {len(keys)} rows")
        EventManager.emit(MODEL_DROPPED, {"model": self.name, "count": len(keys)})
        return len(keys)

    def destroy_all(self, callback: Callback = None):
        """Physically removes every row of this model. Development only."""
        return _settle(callback, self._destroy_all)
