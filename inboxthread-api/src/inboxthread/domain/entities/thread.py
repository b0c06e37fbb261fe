from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from inboxthread.domain.entities.parsed_email import ParsedEmail


class ResolutionRule(str, Enum):
    """Which rule placed a message in its thread."""

    IN_REPLY_TO = "in_reply_to"
    REFERENCES = "references"
    THREAD_KEY = "thread_key"
    FORWARD_REFERENCE = "forward_reference"
    NEW_THREAD = "new_thread"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ThreadRecord:
    thread_id: str
    thread_key: str
    subject: str
    created_at: datetime
    # set once the thread has been folded into an older one
    merged_into: Optional[str] = None

    @property
    def is_canonical(self) -> bool:
        return self.merged_into is None


@dataclass(frozen=True)
class StoredMessage:
    # message_id when present, synthesized otherwise
    message_key: str
    thread_id: str
    email: ParsedEmail

    @property
    def date(self) -> datetime:
        return self.email.date


@dataclass(frozen=True)
class ThreadResolution:
    thread_id: str
    message_key: str
    rule: ResolutionRule
    is_new_thread: bool = False
    merged_thread_ids: tuple[str, ...] = ()
