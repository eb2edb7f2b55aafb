# =============================================================================
# File:        schemadb/db/manager/registry.py
# Purpose:     Model registry: one Schema per model name
# Created:     2025-08-09
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

from schemadb.db.model import Model
from schemadb.db.query import DuplicateSchemaError
from schemadb.db.schema import Schema

from .helpers import _log, _requires_connection

# '-' separates the id from the model name in store keys
_MODEL_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class DbRegistryMixin:
    _models: Dict[str, Model]

    @_requires_connection
    def model(self, name: str, schema: Schema) -> Model:
        if not isinstance(schema, Schema):
            raise TypeError("Model creation requires a valid Schema and name.")
        if not name or not _MODEL_NAME.match(name):
            raise ValueError(f"Invalid model name {name!r} (letters, digits, '_' and '.' only).")
        if name in self._models:
            raise DuplicateSchemaError(f"Cannot create duplicate Schema {name}")

        model = Model(name, schema, self._store)
        self._models[name] = model
        _log("info", f"model registered -> {name} fields={list(schema.fields)}")
        return model

    def get_model(self, name: str) -> Optional[Model]:
        return self._models.get(name)

    @property
    def models(self) -> Mapping[str, Model]:
        return dict(self._models)

    @property
    def schemas(self) -> Mapping[str, Schema]:
        return {name: m.schema for name, m in self._models.items()}
