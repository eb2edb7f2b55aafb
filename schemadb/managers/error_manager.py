# ========================================================================
# File:       schemadb/managers/error_manager.py
# Purpose:    Bounded error registry: console echo (DEBUG) and error log
# Created:    2025-08-07
# Updated:    2025-08-19
# ========================================================================

from schemadb.config.env import EnvLoader
from schemadb.handlers.error_handler import ErrorHandler
from schemadb.managers.log_manager import LogManager


class ErrorManager:
    _errors = []
    _max_errors = 1000
    _dev_mode = None

    @classmethod
    def initialize(cls, dev_mode: bool = None, max_errors: int = 1000):
        cls._errors = []
        cls._max_errors = max_errors
        cls._dev_mode = dev_mode

    @classmethod
    def dev_mode(cls) -> bool:
        if cls._dev_mode is None:
            return EnvLoader.get_bool("DEBUG", False)
        return cls._dev_mode

    @classmethod
    def create(cls, error: Exception):
        cls._errors.append(error)
        if len(cls._errors) > cls._max_errors:
            del cls._errors[: len(cls._errors) - cls._max_errors]
        formatted = ErrorHandler.format_error(error)
        trace = ErrorHandler.get_traceback(error)

        ErrorHandler.display(error, dev_mode=cls.dev_mode())

        LogManager.create("error", f"{formatted}\n{trace}".rstrip())

    @classmethod
    def read(cls, last_only: bool = True):
        if last_only:
            return cls._errors[-1] if cls._errors else None
        return cls._errors

    @classmethod
    def delete(cls, index: int = None):
        if index is None:
            cls._errors.clear()
        elif 0 <= index < len(cls._errors):
            cls._errors.pop(index)
