"""Key/value JSON store.

Each key is one JSON document under {data_dir}/store/{key}.json. Keys may
contain ':' (e.g. "materials:teacher123"); they are mapped to safe file names.
Values that cannot be read or parsed are treated as missing.
Read-modify-write cycles go through update_list, which holds a process-wide
lock so concurrent saves from request threads do not drop each other.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from sparkskool.config.app_config import get_data_dir

logger = structlog.get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

# Reentrant: an update callback may read through the same store.
_write_lock = threading.RLock()


class LocalStore:
    """Persistent key/value store of JSON documents."""

    def __init__(self, data_dir: Path | None = None):
        if data_dir is None:
            data_dir = get_data_dir()
        self.root = data_dir / "store"

    def _path(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", key)
        return self.root / f"{safe}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Load the value stored under key, or default."""
        path = self._path(key)
        if not path.exists():
            return default

        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("store_read_failed", key=key, error=str(e))
            return default

    def get_list(self, key: str) -> list[Any]:
        """Load a list value; anything that is not a list reads as []."""
        value = self.get(key, [])
        if not isinstance(value, list):
            logger.warning("store_value_not_list", key=key)
            return []
        return value

    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing the file atomically."""
        path = self._path(key)
        with _write_lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def update_list(self, key: str, fn: Callable[[list[Any]], list[Any]]) -> list[Any]:
        """Apply fn to the list under key and store the result atomically.

        The read, fn and write all run under one lock, so two callers
        updating the same key never lose each other's changes.

        Returns:
            The list that was stored
        """
        with _write_lock:
            value = fn(self.get_list(key))
            self.set(key, value)
            return value

    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was deleted."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def keys(self) -> list[str]:
        """List stored file stems (sanitized keys)."""
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))
