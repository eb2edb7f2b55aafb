# =============================================================================
# File:        schemadb/db/manager/maintenance.py
# Purpose:     Store maintenance: drop (development only) and compaction
# Created:     2025-08-09
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

from schemadb.config.env import EnvLoader
from schemadb.db.query import EnvironmentGuardError

from .helpers import _log, _requires_connection


class DbMaintenanceMixin:

    @_requires_connection
    def drop(self) -> int:
        """Removes every row of every model. Refused unless APP_ENV=development."""
        if not EnvLoader.is_development():
            _log("warning", "drop refused: APP_ENV is not development")
            raise EnvironmentGuardError("drop() requires APP_ENV=development.")

        count = self._store.size()
        if hasattr(self._store, "clear"):
            self._store.clear()
        else:
            keys = []
            self._store.for_each(lambda key, _val: keys.append(key))
            for key in keys:
                self._store.remove(key)
        _log("warning", f"drop -> removed {count} rows")
        return count

    @_requires_connection
    def compact(self) -> None:
        if hasattr(self._store, "compact"):
            self._store.compact()
            _log("info", "compact -> done")
