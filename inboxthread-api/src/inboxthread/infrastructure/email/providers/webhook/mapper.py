from __future__ import annotations
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

from loguru import logger

from inboxthread.domain.entities.email_address import EmailAddress
from inboxthread.domain.entities.parsed_email import ParsedEmail
from inboxthread.infrastructure.email.addresses import parse_email_address, parse_email_addresses
from inboxthread.infrastructure.email.headers import parse_in_reply_to, parse_message_id, parse_references
from inboxthread.infrastructure.email.html import extract_text_from_html
from inboxthread.infrastructure.email.subject import is_auto_reply, normalize_subject
from inboxthread.infrastructure.email.thread_key import build_thread_key


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(value: Any, default: datetime) -> datetime:
    """ISO-8601 first, RFC 2822 second, ``default`` when neither parses."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return default

    raw = value.strip()
    try:
        # fromisoformat only learned "Z" in 3.11
        return _as_utc(datetime.fromisoformat(raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw))
    except ValueError:
        pass
    try:
        return _as_utc(parsedate_to_datetime(raw))
    except (TypeError, ValueError, IndexError):
        logger.debug(f"Unparsable date {raw!r}, using ingestion time")
        return default


def _headers(value: Any) -> dict[str, str]:
    # {"Name": "Value"} or Postmark-style [{"Name": ..., "Value": ...}]
    if isinstance(value, Mapping):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    if isinstance(value, list):
        out: dict[str, str] = {}
        for entry in value:
            if isinstance(entry, Mapping) and entry.get("Name"):
                out[str(entry["Name"])] = "" if entry.get("Value") is None else str(entry.get("Value"))
        return out
    return {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_email_from_webhook(payload: Mapping[str, Any], received_at: Optional[datetime] = None) -> ParsedEmail:
    """Map a loosely typed webhook payload onto a ``ParsedEmail``.

    Every field is optional on the way in; missing or malformed values turn
    into empty strings, empty tuples or None. ``received_at`` is the fallback
    date (defaults to now).
    """
    if not isinstance(payload, Mapping):
        payload = {}
    fallback_date = _as_utc(received_at) if received_at else datetime.now(timezone.utc)

    sender = parse_email_address(_text(payload.get("from")))
    to = tuple(parse_email_addresses(payload.get("to")))
    cc = tuple(parse_email_addresses(payload.get("cc")))
    bcc = tuple(parse_email_addresses(payload.get("bcc")))

    subject = _text(payload.get("subject"))
    normalized_subject = normalize_subject(subject)

    text = _text(payload.get("text"))
    if not text.strip():
        text = extract_text_from_html(payload.get("html"))

    headers = _headers(payload.get("headers"))
    participants: tuple[EmailAddress, ...] = (sender, *to)

    return ParsedEmail(
        message_id=parse_message_id(payload.get("message_id")),
        in_reply_to=parse_in_reply_to(payload.get("in_reply_to")),
        references=tuple(parse_references(payload.get("references"))),
        sender=sender,
        to=to,
        cc=cc,
        bcc=bcc,
        subject=subject,
        normalized_subject=normalized_subject,
        date=parse_date(payload.get("date"), fallback_date),
        text=text,
        is_auto_reply=is_auto_reply(normalized_subject, headers),
        thread_key=build_thread_key(normalized_subject, participants),
        raw_headers=headers,
    )
