"""Local persistence for SparkSkool records."""

from sparkskool.storage.local_store import LocalStore

__all__ = ["LocalStore"]
