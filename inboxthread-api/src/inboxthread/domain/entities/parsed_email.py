from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from inboxthread.domain.entities.email_address import EmailAddress


@dataclass(frozen=True)
class ParsedEmail:
    """Canonical record of one inbound message, built once per webhook delivery."""

    message_id: Optional[str]
    in_reply_to: Optional[str]
    references: tuple[str, ...]
    sender: EmailAddress
    to: tuple[EmailAddress, ...]
    cc: tuple[EmailAddress, ...]
    bcc: tuple[EmailAddress, ...]
    subject: str
    normalized_subject: str
    date: datetime
    text: str
    is_auto_reply: bool
    thread_key: str
    raw_headers: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # freeze whatever mapping the caller handed us
        object.__setattr__(self, "raw_headers", MappingProxyType(dict(self.raw_headers)))

    @property
    def participants(self) -> tuple[EmailAddress, ...]:
        """Sender plus direct recipients; cc and bcc stay out of thread keys."""
        return (self.sender, *self.to)

    @property
    def reference_chain(self) -> tuple[str, ...]:
        """Ancestor ids oldest-first, ending with ``in_reply_to`` exactly once."""
        chain = self.references
        if self.in_reply_to and (not chain or chain[-1] != self.in_reply_to):
            chain = tuple(ref for ref in chain if ref != self.in_reply_to) + (self.in_reply_to,)
        return chain

    def to_dict(self) -> dict[str, Any]:
        return {
            "message_id": self.message_id,
            "in_reply_to": self.in_reply_to,
            "references": list(self.references),
            "from": _address_to_dict(self.sender),
            "to": [_address_to_dict(a) for a in self.to],
            "cc": [_address_to_dict(a) for a in self.cc],
            "bcc": [_address_to_dict(a) for a in self.bcc],
            "subject": self.subject,
            "normalized_subject": self.normalized_subject,
            "date": self.date.isoformat(),
            "text": self.text,
            "is_auto_reply": self.is_auto_reply,
            "thread_key": self.thread_key,
            "raw_headers": dict(self.raw_headers),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParsedEmail:
        return cls(
            message_id=data.get("message_id"),
            in_reply_to=data.get("in_reply_to"),
            references=tuple(data.get("references") or ()),
            sender=_address_from_dict(data["from"]),
            to=tuple(_address_from_dict(a) for a in data.get("to") or ()),
            cc=tuple(_address_from_dict(a) for a in data.get("cc") or ()),
            bcc=tuple(_address_from_dict(a) for a in data.get("bcc") or ()),
            subject=data.get("subject", ""),
            normalized_subject=data.get("normalized_subject", ""),
            date=datetime.fromisoformat(data["date"]),
            text=data.get("text", ""),
            is_auto_reply=bool(data.get("is_auto_reply", False)),
            thread_key=data.get("thread_key", ""),
            raw_headers=data.get("raw_headers") or {},
        )


def _address_to_dict(addr: EmailAddress) -> dict[str, str]:
    return {"name": addr.name, "address": addr.address, "raw_address": addr.raw_address}


def _address_from_dict(data: Mapping[str, str]) -> EmailAddress:
    return EmailAddress(
        address=data["address"],
        name=data.get("name", ""),
        raw_address=data.get("raw_address", ""),
    )
