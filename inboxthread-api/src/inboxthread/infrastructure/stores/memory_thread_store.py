"""In-process thread store, used by tests and the ``memory`` backend."""

from __future__ import annotations

import bisect
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator, Optional

from loguru import logger

from inboxthread.application.ports.thread_store import ThreadNotFoundError, ThreadSession, ThreadStore
from inboxthread.domain.entities.parsed_email import ParsedEmail
from inboxthread.domain.entities.thread import StoredMessage, ThreadRecord


def _order(message: StoredMessage) -> tuple:
    return (message.date, message.message_key)


class InMemoryThreadStore(ThreadStore):
    """Thread store kept in dictionaries, guarded by one re-entrant lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._threads: dict[str, ThreadRecord] = {}
        self._messages: dict[str, StoredMessage] = {}
        # thread_id -> messages sorted by date
        self._by_thread: dict[str, list[StoredMessage]] = {}
        # referenced message id -> keys of messages that referenced it
        self._referrers: dict[str, set[str]] = {}

    @contextmanager
    def session(self) -> Iterator[ThreadSession]:
        with self._lock:
            yield _InMemorySession(self)

    def get_thread(self, thread_id: str) -> Optional[ThreadRecord]:
        with self._lock:
            return _InMemorySession(self).get_thread(thread_id)

    def list_messages(self, thread_id: str) -> list[StoredMessage]:
        with self._lock:
            canonical = _InMemorySession(self).canonical_id(thread_id)
            return list(self._by_thread.get(canonical, [])) if canonical else []


class _InMemorySession(ThreadSession):
    def __init__(self, store: InMemoryThreadStore):
        self.s = store

    def canonical_id(self, thread_id: str) -> Optional[str]:
        record = self.s._threads.get(thread_id)
        while record is not None and record.merged_into is not None:
            record = self.s._threads.get(record.merged_into)
        return record.thread_id if record else None

    def find_message(self, message_key: str) -> Optional[StoredMessage]:
        return self.s._messages.get(message_key)

    def thread_for_message(self, message_id: str) -> Optional[str]:
        stored = self.s._messages.get(message_id)
        return self.canonical_id(stored.thread_id) if stored else None

    def thread_for_key(self, thread_key: str) -> Optional[str]:
        matches = [t for t in self.s._threads.values() if t.thread_key == thread_key]
        if not matches:
            return None
        oldest = min(matches, key=lambda t: (t.created_at, t.thread_id))
        return self.canonical_id(oldest.thread_id)

    def threads_referencing(self, message_id: str) -> set[str]:
        out: set[str] = set()
        for key in self.s._referrers.get(message_id, ()):
            thread_id = self.canonical_id(self.s._messages[key].thread_id)
            if thread_id:
                out.add(thread_id)
        return out

    def get_thread(self, thread_id: str) -> Optional[ThreadRecord]:
        canonical = self.canonical_id(thread_id)
        return self.s._threads[canonical] if canonical else None

    def create_thread(self, thread_id: str, thread_key: str, subject: str, created_at: datetime) -> ThreadRecord:
        existing = self.s._threads.get(thread_id)
        if existing is not None:
            return existing
        record = ThreadRecord(thread_id=thread_id, thread_key=thread_key, subject=subject, created_at=created_at)
        self.s._threads[thread_id] = record
        self.s._by_thread[thread_id] = []
        return record

    def add_message(self, thread_id: str, message_key: str, email: ParsedEmail) -> StoredMessage:
        existing = self.s._messages.get(message_key)
        if existing is not None:
            return existing

        canonical = self.canonical_id(thread_id)
        if canonical is None:
            raise ThreadNotFoundError(thread_id)

        stored = StoredMessage(message_key=message_key, thread_id=canonical, email=email)
        self.s._messages[message_key] = stored
        bisect.insort(self.s._by_thread[canonical], stored, key=_order)
        for ref in email.reference_chain:
            self.s._referrers.setdefault(ref, set()).add(message_key)
        return stored

    def merge_threads(self, source_id: str, target_id: str) -> int:
        source = self.s._threads.get(source_id)
        target = self.s._threads.get(target_id)
        if source is None:
            raise ThreadNotFoundError(source_id)
        if target is None:
            raise ThreadNotFoundError(target_id)
        if source_id == target_id:
            return 0

        moved = [replace(m, thread_id=target_id) for m in self.s._by_thread.pop(source_id, [])]
        for m in moved:
            self.s._messages[m.message_key] = m
            bisect.insort(self.s._by_thread[target_id], m, key=_order)

        # keep every pointer one hop from its root
        for tid, record in list(self.s._threads.items()):
            if tid == source_id or record.merged_into == source_id:
                self.s._threads[tid] = replace(record, merged_into=target_id)

        logger.debug(f"Moved {len(moved)} messages from {source_id} to {target_id}")
        return len(moved)
