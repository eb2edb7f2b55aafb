# =============================================================================
# File:        schemadb/db/schema.py
# Purpose:     Schema: typed field definitions, global options, virtuals and
#              lifecycle hook slots
# Created:     2025-08-14
# Updated:     2025-08-19
# =============================================================================

from __future__ import annotations

import copy
import inspect
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Pattern, Tuple

from schemadb.db import types
from schemadb.db.query import DuplicateSchemaError, SchemaError
from schemadb.db.types import FieldType

LIFECYCLE_SLOTS = (
    "before_create",   # receives the candidate dict, before validation
    "after_create",    # receives the ModelInstance
    "before_update",   # receives the merged dict
    "after_update",
    "before_destroy",  # receives the ModelInstance about to be destroyed
    "after_destroy",
)

CONSTRAINT_KEYS = ("type", "default", "required", "min", "max", "match", "unique")

_MISSING = object()


class Equality(str, Enum):
    DEFAULT = "default"   # loose equality
    STRICT = "strict"     # same type and value


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    type: FieldType
    default: Any = _MISSING
    required: bool = False
    min: Optional[float] = None
    max: Optional[float] = None
    match: Optional[Tuple[Pattern, Optional[str]]] = None
    unique: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    def constraints(self) -> List[str]:
        """Configured constraints in validation order."""
        out = ["type"]
        if self.required:
            out.append("required")
        if self.min is not None:
            out.append("min")
        if self.max is not None:
            out.append("max")
        if self.match is not None:
            out.append("match")
        if self.unique:
            out.append("unique")
        return out


@dataclass(frozen=True)
class TimestampOptions:
    created: Optional[str] = "created"
    modified: Optional[str] = "modified"
    deleted: Optional[str] = "deleted"   # when set, destroy() stamps instead of removing


@dataclass(frozen=True)
class SchemaOptions:
    uuid: bool = True
    equality: Equality = Equality.DEFAULT
    timestamps: Optional[TimestampOptions] = field(default_factory=TimestampOptions)
    type_defs: Mapping[Any, Any] = field(default_factory=dict)
    force: bool = True   # strip fields the schema does not declare


def _merge_options(options: Optional[Mapping[str, Any]]) -> SchemaOptions:
    opts = dict(options or {})
    unknown = set(opts) - {"uuid", "equality", "timestamps", "type_defs", "force"}
    if unknown:
        raise SchemaError(f"Unknown schema options: {sorted(unknown)}")

    equality = opts.get("equality", Equality.DEFAULT)
    try:
        if not isinstance(equality, Equality):
            equality = Equality(str(equality).lower())
    except ValueError:
        raise SchemaError(f"equality must be 'default' or 'strict', got {opts.get('equality')!r}")

    ts = opts.get("timestamps", True)
    if ts is False or ts is None:
        timestamps = None
    elif ts is True:
        timestamps = TimestampOptions()
    elif isinstance(ts, TimestampOptions):
        timestamps = ts
    elif isinstance(ts, Mapping):
        bad = set(ts) - {"created", "modified", "deleted"}
        if bad:
            raise SchemaError(f"Unknown timestamp names: {sorted(bad)}")
        timestamps = TimestampOptions(**dict(ts))
    else:
        raise SchemaError("timestamps must be a mapping, True or False")

    type_defs = opts.get("type_defs") or {}
    for key in type_defs:
        if types.resolve_type(key) is None:
            raise SchemaError(f"type_defs references unknown type {key!r}")

    return SchemaOptions(
        uuid=bool(opts.get("uuid", True)),
        equality=equality,
        timestamps=timestamps,
        type_defs=dict(type_defs),
        force=bool(opts.get("force", True)),
    )


def _compile_match(name: str, rule: Any) -> Tuple[Pattern, Optional[str]]:
    message = None
    if isinstance(rule, (tuple, list)):
        if len(rule) != 2:
            raise SchemaError(f"{name}: match must be a pattern or (pattern, message)")
        rule, message = rule
    if isinstance(rule, str):
        try:
            rule = re.compile(rule)
        except re.error as e:
            raise SchemaError(f"{name}: invalid match pattern: {e}")
    if not isinstance(rule, re.Pattern):
        raise SchemaError(f"{name}: match must be a pattern or (pattern, message)")
    return rule, message


def call_virtual(fn: Callable, instance: Any) -> Any:
    """Virtuals are either zero-argument callables or take the instance."""
    try:
        params = [
            p for p in inspect.signature(fn).parameters.values()
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
        ]
    except (TypeError, ValueError):
        return fn(instance)
    return fn(instance) if params else fn()


class Schema:
    """
    Declares the shape of one model.

        Schema({
            "name":  {"type": "text", "required": True, "max": 40},
            "age":   int,
            "tags":  list,
            "label": lambda self: f"{self['name']} ({self['age']})",   # virtual
        }, {"equality": "strict"})

    Fields are fixed after construction; lifecycle hooks may still be attached with hook().
    """

    def __init__(self, fields: Mapping[str, Any], options: Optional[Mapping[str, Any]] = None,
                 lifecycles: Optional[Mapping[str, Callable]] = None):
        if not fields or not isinstance(fields, Mapping):
            raise SchemaError("Schema cannot be defined without fields.")

        self._options = _merge_options(options)
        self._fields: Dict[str, FieldDefinition] = {}
        self._virtuals: Dict[str, Callable] = {}
        self._lifecycles: Dict[str, Callable] = {}
        self._model_name: Optional[str] = None

        if self._options.uuid:
            self._fields["id"] = FieldDefinition("id", FieldType.TEXT)

        for name, decl in fields.items():
            if name == "id" and self._options.uuid:
                continue
            self._add(str(name), decl)

        ts = self._options.timestamps
        if ts:
            for name in (ts.created, ts.modified):
                if name:
                    self._fields[name] = FieldDefinition(name, FieldType.TEMPORAL, required=True)
            if ts.deleted:
                self._fields[ts.deleted] = FieldDefinition(ts.deleted, FieldType.TEMPORAL, default=None)

        for name, fn in (lifecycles or {}).items():
            self.hook(name, fn)

    # ---------- construction ----------
    def _add(self, name: str, decl: Any) -> None:
        if name in LIFECYCLE_SLOTS:
            if not callable(decl):
                raise SchemaError(f"Lifecycle {name} must be callable.")
            self._lifecycles[name] = decl
            return

        if isinstance(decl, Mapping):
            self._fields[name] = self._definition(name, decl)
            return

        ftype = types.resolve_type(decl)
        if ftype is not None:
            self._fields[name] = FieldDefinition(name, ftype)
        elif isinstance(decl, (type, str)):
            raise SchemaError(f"The type {getattr(decl, '__name__', decl)!s} of {name} is not valid.")
        elif callable(decl):
            self._virtuals[name] = decl
        else:
            raise SchemaError(f"{name}: expected a type, a field mapping or a virtual callable.")

    def _definition(self, name: str, attrs: Mapping[str, Any]) -> FieldDefinition:
        unknown = set(attrs) - set(CONSTRAINT_KEYS)
        if unknown:
            raise SchemaError(f"{name}: unknown field attributes {sorted(unknown)}")
        ftype = self.validate(attrs)

        for bound in ("min", "max"):
            val = attrs.get(bound)
            if val is not None and (isinstance(val, bool) or not isinstance(val, (int, float))):
                raise SchemaError(f"{name}: {bound} must be a number")

        match = attrs.get("match")
        return FieldDefinition(
            name=name,
            type=ftype,
            default=attrs.get("default", _MISSING),
            required=bool(attrs.get("required", False)),
            min=attrs.get("min"),
            max=attrs.get("max"),
            match=_compile_match(name, match) if match is not None else None,
            unique=bool(attrs.get("unique", False)),
        )

    def validate(self, attrs: Mapping[str, Any]) -> FieldType:
        """Checks a field declaration's type against the registry."""
        if "type" not in attrs:
            raise SchemaError("Field declaration requires a type.")
        ftype = types.resolve_type(attrs["type"])
        if ftype is None:
            decl = attrs["type"]
            raise SchemaError(f"The type {getattr(decl, '__name__', decl)!s} is not valid.")
        return ftype

    # ---------- model binding ----------
    def bind(self, model_name: str) -> None:
        if self._model_name is not None and self._model_name != model_name:
            raise DuplicateSchemaError(
                f"Schema is already bound to model {self._model_name!r}; create a new Schema for {model_name!r}."
            )
        self._model_name = model_name

    def unbind(self) -> None:
        self._model_name = None

    # ---------- lifecycles ----------
    def hook(self, name: str, fn: Callable) -> None:
        if name not in LIFECYCLE_SLOTS:
            raise SchemaError(f"Unknown lifecycle {name!r}; expected one of {LIFECYCLE_SLOTS}")
        if not callable(fn):
            raise SchemaError(f"Lifecycle {name} must be callable.")
        self._lifecycles[name] = fn

    def run_hook(self, name: str, payload: Any) -> None:
        fn = self._lifecycles.get(name)
        if fn is not None:
            fn(payload)

    # ---------- accessors ----------
    @property
    def options(self) -> SchemaOptions:
        return self._options

    @property
    def fields(self) -> Mapping[str, FieldDefinition]:
        return MappingProxyType(self._fields)

    @property
    def virtuals(self) -> Mapping[str, Callable]:
        return MappingProxyType(self._virtuals)

    @property
    def lifecycles(self) -> Mapping[str, Callable]:
        return MappingProxyType(self._lifecycles)

    @property
    def equality(self) -> Equality:
        return self._options.equality

    @property
    def created_field(self) -> Optional[str]:
        ts = self._options.timestamps
        return ts.created if ts else None

    @property
    def modified_field(self) -> Optional[str]:
        ts = self._options.timestamps
        return ts.modified if ts else None

    @property
    def deleted_field(self) -> Optional[str]:
        ts = self._options.timestamps
        return ts.deleted if ts else None

    @property
    def soft_delete(self) -> bool:
        return self.deleted_field is not None

    def field(self, name: str) -> Optional[FieldDefinition]:
        return self._fields.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __getitem__(self, name: str) -> FieldDefinition:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __repr__(self):
        return f"Schema({list(self._fields)!r}, model={self._model_name!r})"

    # ---------- typing ----------
    def cast(self, ftype: Any, value: Any) -> Any:
        return types.cast(ftype, value)

    def cast_record(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, val in row.items():
            fdef = self._fields.get(key)
            out[key] = types.cast(fdef.type, val) if fdef else val
        return out

    def type_default(self, ftype: Any) -> Any:
        return types.type_default(ftype, self._options.type_defs)

    def default_for(self, name: str) -> Any:
        fdef = self._fields[name]
        if fdef.has_default:
            if callable(fdef.default):
                return fdef.default()
            return copy.deepcopy(fdef.default)
        return self.type_default(fdef.type)

    def strip_unknown(self, obj: Mapping[str, Any]) -> Dict[str, Any]:
        """With force on, drops everything the schema does not declare (id is always kept)."""
        if not self._options.force:
            return dict(obj)
        return {k: v for k, v in obj.items() if k in self._fields or k == "id"}
