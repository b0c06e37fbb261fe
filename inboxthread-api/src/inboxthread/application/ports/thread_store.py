from __future__ import annotations
from datetime import datetime
from typing import ContextManager, Optional, Protocol

from inboxthread.domain.entities.parsed_email import ParsedEmail
from inboxthread.domain.entities.thread import StoredMessage, ThreadRecord


class ThreadNotFoundError(LookupError):
    """Raised when a store operation names a thread that does not exist."""


class ThreadSession(Protocol):
    """Reads and writes issued inside one atomic unit against the store.

    Thread ids returned by lookups are always canonical: a thread that has
    been merged is reported as the thread it was merged into.
    """

    def find_message(self, message_key: str) -> Optional[StoredMessage]: ...
    def thread_for_message(self, message_id: str) -> Optional[str]: ...
    def thread_for_key(self, thread_key: str) -> Optional[str]: ...
    def threads_referencing(self, message_id: str) -> set[str]: ...
    def get_thread(self, thread_id: str) -> Optional[ThreadRecord]: ...
    def create_thread(
        self, thread_id: str, thread_key: str, subject: str, created_at: datetime
    ) -> ThreadRecord: ...
    def add_message(self, thread_id: str, message_key: str, email: ParsedEmail) -> StoredMessage: ...
    def merge_threads(self, source_id: str, target_id: str) -> int: ...


class ThreadStore(Protocol):
    def session(self) -> ContextManager[ThreadSession]: ...
    def get_thread(self, thread_id: str) -> Optional[ThreadRecord]: ...
    def list_messages(self, thread_id: str) -> list[StoredMessage]: ...
