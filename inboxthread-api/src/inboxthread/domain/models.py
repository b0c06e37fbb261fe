"""Pydantic models exchanged across the service boundary."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from inboxthread.domain.entities.thread import ResolutionRule, StoredMessage, ThreadRecord


class IngestResult(BaseModel):
    """Outcome of ingesting one webhook delivery."""

    status: Literal["processed", "duplicate", "skipped"]
    thread_id: str | None = None
    message_key: str | None = None
    is_new_thread: bool = False
    rule: ResolutionRule | None = None
    merged_thread_ids: list[str] = Field(default_factory=list)
    reason: str | None = None


class AddressView(BaseModel):
    """An address as shown to API clients."""

    name: str = ""
    address: str


class ThreadMessageView(BaseModel):
    """A message inside a thread listing."""

    message_key: str
    message_id: str | None = None
    in_reply_to: str | None = None
    references: list[str] = Field(default_factory=list)
    sender: AddressView
    to: list[AddressView] = Field(default_factory=list)
    cc: list[AddressView] = Field(default_factory=list)
    bcc: list[AddressView] = Field(default_factory=list)
    subject: str
    date: datetime
    text: str
    is_auto_reply: bool = False

    @classmethod
    def from_stored(cls, stored: StoredMessage) -> "ThreadMessageView":
        email = stored.email
        return cls(
            message_key=stored.message_key,
            message_id=email.message_id,
            in_reply_to=email.in_reply_to,
            references=list(email.references),
            sender=AddressView(name=email.sender.name, address=email.sender.raw_address or email.sender.address),
            to=[AddressView(name=a.name, address=a.raw_address or a.address) for a in email.to],
            cc=[AddressView(name=a.name, address=a.raw_address or a.address) for a in email.cc],
            bcc=[AddressView(name=a.name, address=a.raw_address or a.address) for a in email.bcc],
            subject=email.subject,
            date=email.date,
            text=email.text,
            is_auto_reply=email.is_auto_reply,
        )


class ThreadView(BaseModel):
    """A conversation thread with its messages in date order."""

    thread_id: str
    thread_key: str
    subject: str
    created_at: datetime
    messages: list[ThreadMessageView] = Field(default_factory=list)

    @classmethod
    def build(cls, record: ThreadRecord, messages: list[StoredMessage]) -> "ThreadView":
        return cls(
            thread_id=record.thread_id,
            thread_key=record.thread_key,
            subject=record.subject,
            created_at=record.created_at,
            messages=[ThreadMessageView.from_stored(m) for m in messages],
        )
