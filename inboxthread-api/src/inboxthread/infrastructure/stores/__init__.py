"""Store implementations."""

from inboxthread.infrastructure.stores.factory import create_thread_store, get_thread_store
from inboxthread.infrastructure.stores.memory_thread_store import InMemoryThreadStore

__all__ = [
    "InMemoryThreadStore",
    "create_thread_store",
    "get_thread_store",
]
