"""SQLite infrastructure for thread and message storage."""

from inboxthread.infrastructure.sqlite.client import SQLiteThreadStore

__all__ = [
    "SQLiteThreadStore",
]
