# =============================================================================
# File:        schemadb/db/manager/config.py
# Purpose:     Connecting the store (explicit path, injected store or .env)
# Created:     2025-08-09
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

from typing import Any, Dict, Optional

from schemadb.config.env import EnvLoader
from schemadb.db.base_store import BaseStore
from schemadb.db.kv_store import KVStore
from schemadb.managers.error_manager import ErrorManager

from .helpers import _log

MEMORY = ":memory:"


class DbConfigMixin:
    _store: Optional[BaseStore]
    _config: Dict[str, Any]

    @classmethod
    def from_env(cls, reload_env: bool = False):
        """Db connected to DB_PATH from .env (or ':memory:')."""
        EnvLoader.load(force=reload_env)
        return cls().connect()

    def connect(self, path: Optional[str] = None, *, store: Optional[BaseStore] = None):
        if self.connected:
            self.close()

        if store is not None:
            source = "injected"
        else:
            source = "explicit"
            if path is None:
                path = (EnvLoader.get("DB_PATH") or MEMORY).strip()
                source = "env"
            store = KVStore(None if path == MEMORY else path)
        try:
            store.load()
        except OSError as e:
            ErrorManager.create(e)
            raise

        self._store = store
        self._config = {
            "store": store.__class__.__name__,
            "path": getattr(store, "path", None) or MEMORY,
            "source": source,
        }
        _log("info", f"connect -> {self._config}")
        return self

    def close(self) -> None:
        if self._store is None:
            return
        try:
            self._store.close()
        finally:
            for model in self._models.values():
                model.schema.unbind()
            self._models = {}
            self._store = None
            _log("info", f"close -> {self._config}")
            self._config = {"store": None, "path": None, "source": None}

    # ---------- state ----------
    @property
    def connected(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> Optional[BaseStore]:
        return self._store

    def active_config(self) -> Dict[str, Any]:
        return dict(self._config)

    def __enter__(self):
        if not self.connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
