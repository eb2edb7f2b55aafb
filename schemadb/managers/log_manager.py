# ============================================================================
# File:       schemadb/managers/log_manager.py
# Purpose:    LogManager class: in-memory ring of entries over LogHandler,
#             plus component scoped loggers ([Model:user], [KVStore], [Db])
# Created:    2025-08-07
# Updated:    2025-08-19
# ============================================================================

from typing import List, Optional, Tuple

from schemadb.handlers.log_handler import LEVELS, LogHandler

Entry = Tuple[str, str]   # (LEVEL, message)


class LogManager:
    _log_entries: List[Entry] = []
    _max_entries = 1000

    @classmethod
    def initialize(cls, max_entries: int = 1000):
        cls._log_entries = []
        cls._max_entries = max_entries

    @classmethod
    def create(cls, level: str, message: str):
        """
        Central log entry point. Keeps the entry in memory and delegates to LogHandler;
        unknown levels go straight to LogHandler._write.
        """
        level_upper = (level or "").upper()

        cls._log_entries.append((level_upper, message))
        if len(cls._log_entries) > cls._max_entries:
            del cls._log_entries[: len(cls._log_entries) - cls._max_entries]

        method = getattr(LogHandler, level_upper.lower(), None) if level_upper in LEVELS else None
        if callable(method):
            method(message)
            return

        LogHandler._write(level_upper, message)

    @classmethod
    def read(cls, last_only: bool = False, *, level: Optional[str] = None,
             component: Optional[str] = None):
        """Entries, optionally narrowed to one level and/or one component prefix."""
        entries = cls._log_entries
        if level:
            entries = [e for e in entries if e[0] == level.upper()]
        if component:
            prefix = f"[{component}]"
            entries = [e for e in entries if e[1].startswith(prefix)]
        if last_only:
            return entries[-1] if entries else None
        return list(entries)

    @classmethod
    def delete(cls, index: int = None):
        if index is None:
            cls._log_entries.clear()
        elif 0 <= index < len(cls._log_entries):
            cls._log_entries.pop(index)

    @classmethod
    def scoped(cls, component: str) -> "ScopedLog":
        return ScopedLog(component)

    # === Shortcut methods ===

    @classmethod
    def debug(cls, message: str):
        cls.create("DEBUG", message)

    @classmethod
    def info(cls, message: str):
        cls.create("INFO", message)

    @classmethod
    def warning(cls, message: str):
        cls.create("WARNING", message)

    @classmethod
    def success(cls, message: str):
        cls.create("SUCCESS", message)

    @classmethod
    def error(cls, message: str):
        cls.create("ERROR", message)

    @classmethod
    def critical(cls, message: str):
        cls.create("CRITICAL", message)


class ScopedLog:
    """Prefixes every message with [component]; log("info", msg) or log.info(msg)."""

    def __init__(self, component: str):
        self.component = component

    def __call__(self, level: str, message: str):
        LogManager.create(level, f"[{self.component}] {message}")

    def debug(self, message: str):
        self("DEBUG", message)

    def info(self, message: str):
        self("INFO", message)

    def warning(self, message: str):
        self("WARNING", message)

    def error(self, message: str):
        self("ERROR", message)
