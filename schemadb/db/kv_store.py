# ========================================================================
# File:       schemadb/db/kv_store.py
# Purpose:    Append-only key/value store (one JSON line per write),
#             replayed into memory on load; in-memory only without a path
# Created:    2025-08-07
# Updated:    2025-08-19
# ========================================================================

from __future__ import annotations
import os, json, threading
from typing import Any, Callable, Dict, List, Optional

from schemadb.db.base_store import BaseStore, OnDone
from schemadb.helpers.core_helper import atomic_write
from schemadb.managers.error_manager import ErrorManager
from schemadb.managers.event_manager import EventManager, STORE_CLOSED, STORE_LOADED
from schemadb.managers.log_manager import LogManager

_LOCK = threading.RLock()
_log = LogManager.scoped("KVStore")


class StoreClosedError(OSError):
    """Write attempted after close()."""
    pass


def _encode(key: str, value: Any = None, *, removed: bool = False) -> str:
    row = {"key": key} if removed else {"key": key, "val": value}
    return json.dumps(row, ensure_ascii=False)


class KVStore(BaseStore):
    """
    Log format (one object per line):
        {"key": "<id>-user", "val": {...}}   -> set
        {"key": "<id>-user"}                 -> remove
    Replay keeps the last line per key. compact() rewrites only live rows.
    """

    def __init__(self, path: Optional[str] = None, *,
                 on_load: Optional[Callable[["KVStore"], None]] = None,
                 on_close: Optional[Callable[["KVStore"], None]] = None):
        self.path = os.path.abspath(path) if path else None
        self._docs: Dict[str, Any] = {}
        self._on_load = on_load
        self._on_close = on_close
        self._loaded = False
        self._closed = False
        self._redundant = 0   # superseded lines in the log, reclaimed by compact()

    # -------- lifecycle ------------------------------------------------------
    def load(self) -> "KVStore":
        with _LOCK:
            self._docs = {}
            self._redundant = 0
            if self.path:
                if os.path.isdir(self.path):
                    raise IsADirectoryError(f"Store path '{self.path}' is a directory, expected a file.")
                os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
                if os.path.exists(self.path):
                    self._replay()
            self._loaded = True
            self._closed = False

        _log.info(f"loaded path={self.path or ':memory:'} size={self.size()}")
        EventManager.emit(STORE_LOADED, {"path": self.path, "size": self.size()})
        if self._on_load:
            self._on_load(self)
        return self

    def _replay(self) -> None:
        with open(self.path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    row = json.loads(line)
                except json.JSONDecodeError:
                    # torn tail after a crash; the remaining lines are still valid
                    _log.warning(f"skipping malformed line {lineno} in {self.path}")
                    continue
                if not isinstance(row, dict) or "key" not in row:
                    continue
                key = row["key"]
                if key in self._docs:
                    self._redundant += 1
                if "val" in row:
                    self._docs[key] = row["val"]
                elif self._docs.pop(key, None) is not None:
                    self._redundant += 1

    def close(self) -> None:
        with _LOCK:
            if self._closed:
                return
            self._closed = True
        _log.info(f"closed path={self.path or ':memory:'}")
        EventManager.emit(STORE_CLOSED, {"path": self.path})
        if self._on_close:
            self._on_close(self)

    @property
    def closed(self) -> bool:
        return self._closed

    # -------- reads ----------------------------------------------------------
    def get(self, key: str) -> Any:
        with _LOCK:
            val = self._docs.get(key)
        return json.loads(json.dumps(val)) if val is not None else None

    def for_each(self, fn: Callable[[str, Any], Any]) -> None:
        with _LOCK:
            snapshot = list(self._docs.items())
        for key, val in snapshot:
            if fn(key, json.loads(json.dumps(val))) is False:
                break

    def keys(self) -> List[str]:
        with _LOCK:
            return list(self._docs.keys())

    def size(self) -> int:
        with _LOCK:
            return len(self._docs)

    @property
    def redundant(self) -> int:
        return self._redundant

    # -------- writes ---------------------------------------------------------
    def _ensure_writable(self) -> None:
        if self._closed:
            raise StoreClosedError("I/O operation on closed store.")

    def _append(self, line: str) -> None:
        if not self.path:
            return
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()
            os.fsync(f.fileno())

    @staticmethod
    def _done(on_done: OnDone, err: Optional[Exception]) -> None:
        if on_done is not None:
            on_done(err)
        elif err is not None:
            raise err

    def set(self, key: str, value: Any, on_done: OnDone = None) -> None:
        err = None
        with _LOCK:
            try:
                self._ensure_writable()
                line = _encode(key, value)
                self._append(line)
                if key in self._docs:
                    self._redundant += 1
                self._docs[key] = json.loads(line)["val"]
            except (OSError, TypeError, ValueError) as e:
                ErrorManager.create(e)
                err = e
        self._done(on_done, err)

    def remove(self, key: str, on_done: OnDone = None) -> None:
        err = None
        with _LOCK:
            try:
                self._ensure_writable()
                if key in self._docs:
                    self._append(_encode(key, removed=True))
                    del self._docs[key]
                    self._redundant += 2
            except OSError as e:
                ErrorManager.create(e)
                err = e
        self._done(on_done, err)

    def clear(self, on_done: OnDone = None) -> None:
        """Drops every row and truncates the log."""
        err = None
        with _LOCK:
            try:
                self._ensure_writable()
                if self.path:
                    atomic_write(self.path, "")
                self._docs = {}
                self._redundant = 0
            except OSError as e:
                ErrorManager.create(e)
                err = e
        self._done(on_done, err)

    def compact(self, on_done: OnDone = None) -> None:
        """Rewrites the log atomically with one line per live key."""
        err = None
        with _LOCK:
            try:
                self._ensure_writable()
                if self.path:
                    text = "".join(_encode(k, v) + "\n" for k, v in self._docs.items())
                    atomic_write(self.path, text)
                dropped = self._redundant
                self._redundant = 0
            except OSError as e:
                ErrorManager.create(e)
                err = e
        if err is None:
            _log.info(f"compacted path={self.path or ':memory:'} dropped_lines={dropped}")
        self._done(on_done, err)
