"""
Storage factory - switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the record store (in-memory vs DB)
so the rest of the app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- BREVLY_STORAGE_BACKEND: "memory" (default) or "postgres"
- BREVLY_DB_DSN:          DSN string if backend=="postgres"
"""

import logging
import os
from typing import Optional

# In-memory storage always available/lightweight
from brevly.storage.base import BaseStorage
from brevly.storage.storage import Storage

log = logging.getLogger("brevly.storage")


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a BaseStorage implementation based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default) or "postgres". If omitted, reads BREVLY_STORAGE_BACKEND.
    kwargs : dict
        Extra args passed to the backend constructor. For postgres, use dsn="...".

    Raises
    ------
    ValueError
        Unknown backend, or postgres selected without a DSN.
    """
    be = (backend or os.getenv("BREVLY_STORAGE_BACKEND", "memory")).strip().lower()
    log.debug("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("BREVLY_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env BREVLY_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from brevly.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {be!r}")
