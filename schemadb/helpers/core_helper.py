# ========================================================================
# File:       schemadb/helpers/core_helper.py
# Purpose:    Atomic I/O, UTC timestamps and id generation
# Created:    2025-08-07
# Updated:    2025-08-19
# ========================================================================

from __future__ import annotations
import os, tempfile, threading, time, uuid
from datetime import datetime, timezone


def fsync_dir(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path)) or "."
    try:
        fd = os.open(d, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        # some filesystems (network mounts, Windows) do not support directory fsync
        pass


def atomic_write(path: str, data: str | bytes, *, text: bool = True, encoding: str = "utf-8") -> None:
    """
    Atomic write: temp file -> fsync -> os.replace -> fsync dir.
    """
    folder = os.path.dirname(path) or "."
    os.makedirs(folder, exist_ok=True)
    mode = "w" if text else "wb"

    with tempfile.NamedTemporaryFile(mode=mode, delete=False, dir=folder,
                                     encoding=encoding if text else None) as tf:
        tmp = tf.name
        if text:
            tf.write(data if isinstance(data, str) else data.decode(encoding))
        else:
            tf.write(data if isinstance(data, (bytes, bytearray)) else bytes(data))
        tf.flush()
        os.fsync(tf.fileno())

    os.replace(tmp, path)
    fsync_dir(path)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


_ID_LOCK = threading.Lock()
_last_ns = 0


def new_id() -> str:
    """
    Time-ordered unique id: 16 hex chars of nanoseconds + 16 random hex chars.
    Contains no '-' so it can prefix '<id>-<model>' store keys.
    """
    global _last_ns
    with _ID_LOCK:
        ns = max(time.time_ns(), _last_ns + 1)
        _last_ns = ns
    return f"{ns:016x}{uuid.uuid4().hex[:16]}"
