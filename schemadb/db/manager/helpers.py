# =============================================================================
# File:        schemadb/db/manager/helpers.py
# Purpose:     Shared helpers for the Db submodules
# Created:     2025-08-09
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations

from functools import wraps

from schemadb.managers.log_manager import LogManager


_log = LogManager.scoped("Db")


def _requires_connection(fn):
    """Decorator making sure the Db is connected before the method runs (lazy connect from .env)."""
    @wraps(fn)
    def wrapper(self, *a, **kw):
        if not self.connected:
            self.connect()
        return fn(self, *a, **kw)
    return wrapper
