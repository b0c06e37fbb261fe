from __future__ import annotations

from typing import Iterable, Union

from inboxthread.domain.entities.email_address import EmailAddress
from inboxthread.infrastructure.email.addresses import parse_email_address
from inboxthread.infrastructure.email.subject import normalize_subject

THREAD_KEY_SEPARATOR = "|"


def _canonical(participant: Union[EmailAddress, str]) -> str:
    if isinstance(participant, EmailAddress):
        return participant.address.strip().lower()
    if isinstance(participant, str):
        return parse_email_address(participant).address.strip().lower()
    return ""


def build_thread_key(subject: str, participants: Iterable[Union[EmailAddress, str]]) -> str:
    """Deterministic grouping key from the normalized subject and participant set.

    The key does not depend on participant order, duplicates, address casing
    or Re:/Fwd: decoration, so an original message and its replies share it
    before any reference chain exists.
    """
    normalized = normalize_subject(subject).lower()
    addresses = sorted({a for a in (_canonical(p) for p in participants) if a})
    return f"{normalized}{THREAD_KEY_SEPARATOR}{','.join(addresses)}"
