"""Header, subject and body parsing for inbound email."""

from inboxthread.infrastructure.email.addresses import (
    extract_domain,
    parse_email_address,
    parse_email_addresses,
)
from inboxthread.infrastructure.email.headers import (
    parse_in_reply_to,
    parse_message_id,
    parse_references,
)
from inboxthread.infrastructure.email.html import extract_text_from_html
from inboxthread.infrastructure.email.subject import is_auto_reply, normalize_subject, parse_subject
from inboxthread.infrastructure.email.thread_key import build_thread_key

__all__ = [
    "extract_domain",
    "parse_email_address",
    "parse_email_addresses",
    "parse_in_reply_to",
    "parse_message_id",
    "parse_references",
    "extract_text_from_html",
    "is_auto_reply",
    "normalize_subject",
    "parse_subject",
    "build_thread_key",
]
