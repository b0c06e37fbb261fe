from __future__ import annotations

from loguru import logger

from inboxthread.application.ports.thread_store import ThreadStore
from inboxthread.infrastructure.settings import Settings, get_settings


# Singleton instance
_store: ThreadStore | None = None


def create_thread_store(settings: Settings) -> ThreadStore:
    """Build the store named by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        from inboxthread.infrastructure.stores.memory_thread_store import InMemoryThreadStore

        logger.info("Using in-memory thread store")
        return InMemoryThreadStore()

    from inboxthread.infrastructure.sqlite.client import SQLiteThreadStore

    return SQLiteThreadStore(db_path=settings.sqlite_db_path)


def get_thread_store() -> ThreadStore:
    """Get or create the process-wide thread store."""
    global _store
    if _store is None:
        _store = create_thread_store(get_settings())
    return _store
