# data/store.py
from __future__ import annotations
from typing import Any, Dict, Protocol

from clinic_scheduler.config import Settings
from clinic_scheduler.models.mutation import Mutation


class Store(Protocol):
    """
    저장소 계약.
    fetch_all() → {"users": [...], "constraints": [...], "schedule": {...}, "holidays": [...]}
    apply(mutation) → 실패하면 StoreError
    """
    def fetch_all(self) -> Dict[str, Any]: ...

    def apply(self, mutation: Mutation) -> None: ...


def open_store(settings: Settings) -> Store:
    if settings.store == "remote":
        from clinic_scheduler.data.remote import RemoteStore
        return RemoteStore(settings.api_url, timeout=settings.request_timeout)
    from clinic_scheduler.data.repo import SqliteStore
    return SqliteStore(settings.db_path, lock_timeout=settings.lock_timeout)
