# =============================================================================
# File:        schemadb/db/manager/db_manager.py
# Purpose:     Thin facade class joining the mixins into Db
# Created:     2025-08-09
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

from typing import Optional

from schemadb.db.base_store import BaseStore

from .config import DbConfigMixin
from .maintenance import DbMaintenanceMixin
from .registry import DbRegistryMixin


class Db(DbConfigMixin, DbRegistryMixin, DbMaintenanceMixin):
    """
    Explicit registry of models over one store (no module level singleton).
    - connect(path | store=...), from_env(), close(), active_config()
    - model(name, schema), get_model(), models, schemas
    - drop(), compact()
    """

    def __init__(self, store: Optional[BaseStore] = None):
        self._store = None
        self._models = {}
        self._config = {"store": None, "path": None, "source": None}
        if store is not None:
            self.connect(store=store)
