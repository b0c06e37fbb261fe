"""Domain models and entities."""

from inboxthread.domain.entities.email_address import EmailAddress
from inboxthread.domain.entities.parsed_email import ParsedEmail
from inboxthread.domain.entities.thread import (
    ResolutionRule,
    StoredMessage,
    ThreadRecord,
    ThreadResolution,
)
from inboxthread.domain.models import (
    AddressView,
    IngestResult,
    ThreadMessageView,
    ThreadView,
)

__all__ = [
    "EmailAddress",
    "ParsedEmail",
    "ResolutionRule",
    "StoredMessage",
    "ThreadRecord",
    "ThreadResolution",
    "AddressView",
    "IngestResult",
    "ThreadMessageView",
    "ThreadView",
]
