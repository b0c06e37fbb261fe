from inboxthread.application.ports.thread_store import ThreadNotFoundError, ThreadSession, ThreadStore

__all__ = [
    "ThreadNotFoundError",
    "ThreadSession",
    "ThreadStore",
]
