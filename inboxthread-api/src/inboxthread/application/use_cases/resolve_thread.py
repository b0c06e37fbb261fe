"""Assign parsed messages to conversation threads."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from inboxthread.application.ports.thread_store import ThreadSession, ThreadStore
from inboxthread.domain.entities.parsed_email import ParsedEmail
from inboxthread.domain.entities.thread import ResolutionRule, ThreadRecord, ThreadResolution


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def message_key_for(email: ParsedEmail) -> str:
    """Storage key for a message: its Message-Id, or a stable digest when it has none."""
    if email.message_id:
        return email.message_id
    basis = "\x1f".join(
        (email.thread_key, email.date.isoformat(), email.sender.address, email.subject, email.text)
    )
    return f"generated-{hashlib.sha256(basis.encode('utf-8')).hexdigest()[:32]}"


class ThreadResolver:
    """Decide which thread a new message belongs to and record it there.

    Rules, first match wins:
    1. ``in_reply_to`` names a stored message -> that message's thread
    2. newest-to-oldest walk of ``references`` -> first stored message's thread
    3. a thread already carrying the message's ``thread_key``
    4. a new thread identified by the message key

    Header lineage is a union-find over thread ids. Once a message is placed,
    every thread it links (its own resolvable ancestors, plus threads whose
    messages referenced it before it arrived) is merged into the oldest of
    them, so a forward reference never leaves two permanent threads.

    The whole read-then-write sequence runs inside one store session. The
    resolver itself keeps no state between calls.
    """

    def __init__(self, store: ThreadStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self.store = store
        self.clock = clock

    def resolve(self, email: ParsedEmail) -> ThreadResolution:
        message_key = message_key_for(email)

        with self.store.session() as tx:
            existing = tx.find_message(message_key)
            if existing is not None:
                logger.info(f"Duplicate delivery of {message_key}, already in thread {existing.thread_id}")
                return ThreadResolution(
                    thread_id=existing.thread_id,
                    message_key=message_key,
                    rule=ResolutionRule.DUPLICATE,
                )

            target, rule = self._match(tx, email)
            linked = self._linked_threads(tx, email, message_key)
            if target is not None:
                linked.add(target)

            if not linked:
                record = tx.create_thread(
                    thread_id=message_key,
                    thread_key=email.thread_key,
                    subject=email.normalized_subject,
                    created_at=self.clock(),
                )
                tx.add_message(record.thread_id, message_key, email)
                logger.info(f"Created thread {record.thread_id} for {message_key}")
                return ThreadResolution(
                    thread_id=record.thread_id,
                    message_key=message_key,
                    rule=ResolutionRule.NEW_THREAD,
                    is_new_thread=True,
                )

            if rule is None:
                rule = ResolutionRule.FORWARD_REFERENCE

            canonical, merged = self._merge(tx, linked)
            tx.add_message(canonical.thread_id, message_key, email)
            logger.debug(f"Placed {message_key} in thread {canonical.thread_id} via {rule.value}")
            return ThreadResolution(
                thread_id=canonical.thread_id,
                message_key=message_key,
                rule=rule,
                merged_thread_ids=merged,
            )

    def _match(self, tx: ThreadSession, email: ParsedEmail) -> tuple[Optional[str], Optional[ResolutionRule]]:
        if email.in_reply_to:
            thread_id = tx.thread_for_message(email.in_reply_to)
            if thread_id:
                return thread_id, ResolutionRule.IN_REPLY_TO

        for ref in reversed(email.references):
            thread_id = tx.thread_for_message(ref)
            if thread_id:
                return thread_id, ResolutionRule.REFERENCES

        thread_id = tx.thread_for_key(email.thread_key)
        if thread_id:
            return thread_id, ResolutionRule.THREAD_KEY

        # missing ancestors are not an error, the next rule just applies
        return None, None

    def _linked_threads(self, tx: ThreadSession, email: ParsedEmail, message_key: str) -> set[str]:
        linked: set[str] = set()
        for ref in email.reference_chain:
            thread_id = tx.thread_for_message(ref)
            if thread_id:
                linked.add(thread_id)
        linked |= tx.threads_referencing(message_key)
        return linked

    def _merge(self, tx: ThreadSession, thread_ids: set[str]) -> tuple[ThreadRecord, tuple[str, ...]]:
        records = [r for r in (tx.get_thread(t) for t in thread_ids) if r is not None]
        records.sort(key=lambda r: (r.created_at, r.thread_id))
        canonical = records[0]

        merged: list[str] = []
        for record in records[1:]:
            if record.thread_id == canonical.thread_id:
                continue
            moved = tx.merge_threads(record.thread_id, canonical.thread_id)
            merged.append(record.thread_id)
            logger.warning(
                f"Merged thread {record.thread_id} into {canonical.thread_id} ({moved} messages re-keyed)"
            )
        return canonical, tuple(merged)
