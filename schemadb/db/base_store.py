# =============================================================================
# File:        schemadb/db/base_store.py
# Purpose:     Single interface for key/value stores under the document layer
# Created:     2025-08-07
# Updated:     2025-08-19
# =============================================================================
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

# on_done(err): err is None when the write is confirmed
OnDone = Optional[Callable[[Optional[Exception]], None]]


class BaseStore(ABC):
    """Every store must implement the same API."""

    # --- Lifecycle ---
    @abstractmethod
    def load(self) -> "BaseStore":
        """Reads persisted state; emits the load event when done."""

    def close(self) -> None:
        """Optional: flush and release resources; emits the close event."""
        return None

    # --- Reads (synchronous) ---
    @abstractmethod
    def get(self, key: str) -> Any:
        """Value stored under key, or None."""

    @abstractmethod
    def for_each(self, fn: Callable[[str, Any], Any]) -> None:
        """Calls fn(key, value) for every row; returning False from fn stops the scan."""

    @abstractmethod
    def size(self) -> int:
        """Number of live keys."""

    # --- Writes (confirmed through on_done) ---
    @abstractmethod
    def set(self, key: str, value: Any, on_done: OnDone = None) -> None:
        """Stores value under key; on_done fires after the write is durable."""

    @abstractmethod
    def remove(self, key: str, on_done: OnDone = None) -> None:
        """Removes key; on_done fires after the removal is durable."""
