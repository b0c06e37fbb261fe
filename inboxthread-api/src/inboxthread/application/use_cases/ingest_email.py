"""Ingest inbound webhook emails into conversation threads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger

from inboxthread.application.ports.thread_store import ThreadStore
from inboxthread.application.use_cases.resolve_thread import ThreadResolver, message_key_for
from inboxthread.domain.entities.thread import ResolutionRule
from inboxthread.domain.models import IngestResult
from inboxthread.infrastructure.email.providers.webhook.mapper import parse_email_from_webhook


class IngestEmailUseCase:
    """Turn one webhook payload into a threaded, stored message.

    Flow:
    1. Normalize the payload into a ``ParsedEmail``
    2. Skip automated replies (when configured)
    3. Resolve the thread (joins, creates or merges threads)
    4. Report where the message went
    """

    def __init__(
        self,
        store: ThreadStore,
        resolver: Optional[ThreadResolver] = None,
        skip_auto_replies: bool = True,
    ) -> None:
        """Initialize the ingestion use case.

        Args:
            store: Thread store the resolver reads and writes
            resolver: Optional pre-built resolver (defaults to one over ``store``)
            skip_auto_replies: If True, out-of-office style messages are
                               acknowledged but not threaded
        """
        self.store = store
        self.resolver = resolver or ThreadResolver(store)
        self.skip_auto_replies = skip_auto_replies

    def ingest(self, payload: Mapping[str, Any], received_at: Optional[datetime] = None) -> IngestResult:
        email = parse_email_from_webhook(payload, received_at=received_at)
        subject = email.subject[:50]

        if self.skip_auto_replies and email.is_auto_reply:
            logger.info(f"Skipping auto-reply: {subject}")
            return IngestResult(
                status="skipped",
                message_key=message_key_for(email),
                reason="auto-reply",
            )

        resolution = self.resolver.resolve(email)
        if resolution.rule is ResolutionRule.DUPLICATE:
            return IngestResult(
                status="duplicate",
                thread_id=resolution.thread_id,
                message_key=resolution.message_key,
                rule=resolution.rule,
                reason="already ingested",
            )

        logger.info(f"Ingested: {subject} -> thread {resolution.thread_id} ({resolution.rule.value})")
        return IngestResult(
            status="processed",
            thread_id=resolution.thread_id,
            message_key=resolution.message_key,
            is_new_thread=resolution.is_new_thread,
            rule=resolution.rule,
            merged_thread_ids=list(resolution.merged_thread_ids),
        )
