# ========================================================================
# File:       schemadb/handlers/error_handler.py
# Purpose:    Formats store and document-layer errors for ErrorManager
# Created:    2025-08-07
# Updated:    2025-08-19
# ========================================================================

import traceback


class ErrorHandler:
    @staticmethod
    def format_error(error: Exception) -> str:
        name = type(error).__name__
        # store I/O errors carry the log file they failed on
        if isinstance(error, OSError) and error.filename:
            return f"{name}: {error.strerror or error} [{error.filename}]"
        return f"{name}: {error}"

    @staticmethod
    def get_traceback(error: Exception) -> str:
        if error.__traceback__ is None:
            return ""
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))

    @staticmethod
    def display(error: Exception, dev_mode: bool = True):
        """Echoes the error to the console in dev mode (DEBUG); logging is ErrorManager's job."""
        if dev_mode:
            print(f"[ERROR]: {ErrorHandler.format_error(error)}\n{ErrorHandler.get_traceback(error)}".rstrip())
