from __future__ import annotations

import threading

from .database import Database
from .models import Channel, ChannelMetadata

_db_instance: Database | None = None
_db_lock = threading.Lock()


def _get_db() -> Database:
    global _db_instance
    if _db_instance is None:
        with _db_lock:
            if _db_instance is None:
                _db_instance = Database()
    return _db_instance


class _DatabaseProxy:
    """Open the default store on first use instead of at import time."""

    def __getattr__(self, item):
        return getattr(_get_db(), item)


db = _DatabaseProxy()

__all__ = [
    "db",
    "Database",
    "Channel",
    "ChannelMetadata",
]
