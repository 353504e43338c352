# abeca_core/keystore/__init__.py
from __future__ import annotations

from .provider import KeyStore
from .providers.memory_provider import InMemoryKeyStore
from .providers.sqlite_provider import SQLiteKeyStore
from . import opts
import os


def load_key_store(config: dict | None = None, engine=None) -> KeyStore:
    """
    Factory resolver for selecting the runtime key store backend.

    For now:
        - sqlite (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("ABECA_KEYSTORE_PROVIDER", "sqlite")

    if provider == "memory":
        return InMemoryKeyStore(engine=engine)

    if provider == "sqlite":
        db_path = config.get("sqlite_path") or os.getenv("ABECA_KEYSTORE_PATH", "db/keystore.db")
        return SQLiteKeyStore(db_path, engine=engine)

    raise ValueError(f"Unknown keystore provider: {provider}")


__all__ = [
    "KeyStore",
    "InMemoryKeyStore",
    "SQLiteKeyStore",
    "load_key_store",
    "opts",
]
