# ========================================================================
# File:       schemadb/config/env.py
# Purpose:    Loading the .env file and access to configuration variables
# Created:    2025-08-07
# Updated:    2025-08-19 (cwd lookup, is_development guard)
# ========================================================================

import os
from pathlib import Path
from dotenv import load_dotenv


class EnvLoader:
    """
    Simple loader that:
    - finds .env in the working directory or the project root,
    - loads it only once (idempotent),
    - relies on os.environ for overrides (e.g. in tests).
    """
    _loaded = False
    _loaded_path: Path | None = None

    DEFAULTS = {
        "APP_ENV": "production",
        "DB_PATH": "data/db/schemadb.db",
        "LOG_FILE_PATH": "data/logs/schemadb.log",
        "LOG_LEVEL": "info",
    }

    @staticmethod
    def _find_env_path() -> Path | None:
        here = Path(__file__).resolve()
        candidates = [
            Path.cwd() / ".env",
            here.parents[2] / ".env" if len(here.parents) >= 3 else None,  # <repo>/.env
            here.parents[1] / ".env" if len(here.parents) >= 2 else None,  # <repo>/schemadb/.env
        ]
        for p in candidates:
            if p and p.exists():
                return p
        return None

    @classmethod
    def load(cls, force: bool = False) -> None:
        if cls._loaded and not force:
            return
        env_path = cls._find_env_path()
        if env_path:
            load_dotenv(dotenv_path=env_path, override=False)  # never overwrite what is already set
            cls._loaded_path = env_path
        else:
            cls._loaded_path = None
        cls._loaded = True

    @classmethod
    def get(cls, key: str, default=None):
        if not cls._loaded:
            cls.load()
        if default is None:
            default = cls.DEFAULTS.get(key)
        return os.getenv(key, default)

    @classmethod
    def get_bool(cls, key: str, default: bool = False) -> bool:
        val = cls.get(key, None)
        if val is None:
            return default
        return str(val).strip().lower() in ("1", "true", "yes", "y", "on")

    @classmethod
    def is_development(cls) -> bool:
        """Destructive operations (drop, destroy_all) are allowed only here."""
        return (cls.get("APP_ENV") or "").strip().lower() == "development"

    @classmethod
    def debug_info(cls) -> dict:
        return {
            "loaded": cls._loaded,
            "env_path": str(cls._loaded_path) if cls._loaded_path else None,
            "app_env": cls.get("APP_ENV"),
        }
