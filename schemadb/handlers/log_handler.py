# ============================================================================
# File:       schemadb/handlers/log_handler.py
# Purpose:    Writing log lines per level (DEBUG, INFO, ERROR, ...)
# Created:    2025-08-07
# Updated:    2025-08-19 (LOG_LEVEL threshold, lazy path)
# ============================================================================

import os
from datetime import datetime
from schemadb.config.env import EnvLoader

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class LogHandler:

    @staticmethod
    def log_file_path() -> str:
        return EnvLoader.get("LOG_FILE_PATH")

    @staticmethod
    def threshold() -> int:
        level = (EnvLoader.get("LOG_LEVEL") or "info").upper()
        return LEVELS.get(level, LEVELS["INFO"])

    @staticmethod
    def _ensure_log_dir(path: str):
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        except OSError as e:
            print(f"[LogHandler] cannot create log directory: {e}")

    @staticmethod
    def _write(level, message):
        level = level.upper()
        if LEVELS.get(level, LEVELS["INFO"]) < LogHandler.threshold():
            return
        path = LogHandler.log_file_path()
        try:
            LogHandler._ensure_log_dir(path)
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            log_entry = f"[{level}] {timestamp} - {message}\n"
            with open(path, "a", encoding="utf-8") as f:
                f.write(log_entry)
        except OSError as e:
            print(f"[LogHandler] logging failed: {e}")

    @staticmethod
    def debug(message):
        LogHandler._write("DEBUG", message)

    @staticmethod
    def info(message):
        LogHandler._write("INFO", message)

    @staticmethod
    def warning(message):
        LogHandler._write("WARNING", message)

    @staticmethod
    def success(message):
        LogHandler._write("SUCCESS", message)

    @staticmethod
    def error(message):
        LogHandler._write("ERROR", message)

    @staticmethod
    def critical(message):
        LogHandler._write("CRITICAL", message)
