"""Address header parsing.

Lenient by contract: whatever arrives in ``from`` / ``to`` / ``cc`` comes out
as ``EmailAddress`` values, never as an exception. Malformed input degrades to
an address field holding the trimmed original text.
"""

from __future__ import annotations

import re
from typing import Sequence, Union

from inboxthread.domain.entities.email_address import EmailAddress, extract_domain

__all__ = [
    "extract_domain",
    "parse_email_address",
    "parse_email_addresses",
    "split_address_list",
]

# "Display Name" <addr>
_QUOTED_NAME_RE = re.compile(r'^"(?P<name>[^"]*)"\s*<(?P<addr>[^<>]*)>$')
# Display Name <addr>  /  <addr>
_NAMED_RE = re.compile(r"^(?P<name>[^<>]*?)\s*<(?P<addr>[^<>]*)>$")

_STRIP_CHARS = " \t\r\n\"'<>"


def _clean(value: str) -> str:
    return value.strip().strip(_STRIP_CHARS).strip()


def _address(name: str, addr: str) -> EmailAddress:
    addr = _clean(addr)
    return EmailAddress(address=addr.lower(), name=_clean(name), raw_address=addr)


def parse_email_address(value: str) -> EmailAddress:
    """Parse one address token into an ``EmailAddress``.

    Recognized forms, in priority order::

        "Display Name" <addr>
        Display Name <addr>
        <addr>
        addr
        Display Name addr

    Without any ``@`` in the token the whole trimmed input becomes the
    address and the name is empty.
    """
    trimmed = value.strip() if isinstance(value, str) else ""
    if "@" not in trimmed:
        return EmailAddress(address=trimmed, raw_address=trimmed)

    match = _QUOTED_NAME_RE.match(trimmed) or _NAMED_RE.match(trimmed)
    if match and "@" in match.group("addr"):
        return _address(match.group("name"), match.group("addr"))

    # last token holding an "@" is the address, anything before it the name
    tokens = trimmed.split()
    i = max(n for n, token in enumerate(tokens) if "@" in token)
    return _address(" ".join(tokens[:i]), tokens[i])


def split_address_list(value: str) -> list[str]:
    """Split a header value on commas that sit outside quotes and angle brackets."""
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    in_brackets = False
    escaped = False

    for ch in value:
        if escaped:
            current.append(ch)
            escaped = False
            continue
        if ch == "\\" and in_quotes:
            current.append(ch)
            escaped = True
            continue
        if ch == '"' and not in_brackets:
            in_quotes = not in_quotes
        elif ch == "<" and not in_quotes:
            in_brackets = True
        elif ch == ">" and not in_quotes:
            in_brackets = False
        elif ch == "," and not in_quotes and not in_brackets:
            tokens.append("".join(current))
            current = []
            continue
        current.append(ch)

    tokens.append("".join(current))
    return [t.strip() for t in tokens if t.strip()]


def parse_email_addresses(value: Union[str, Sequence[str], None]) -> list[EmailAddress]:
    """Parse an address header (delimited string or list of strings).

    Order is preserved and duplicates are kept; list entries may themselves
    hold several comma separated addresses.
    """
    if isinstance(value, str):
        chunks = [value]
    elif isinstance(value, (list, tuple)):
        chunks = [v for v in value if isinstance(v, str)]
    else:
        # not a header value
        return []

    out: list[EmailAddress] = []
    for chunk in chunks:
        out.extend(parse_email_address(token) for token in split_address_list(chunk))
    return out

