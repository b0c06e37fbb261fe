from __future__ import annotations

import re
from typing import Optional, Sequence, Union

# whitespace, commas, or the seam in "<a@x><b@x>"
_REFERENCE_SPLIT_RE = re.compile(r"[\s,]+|(?<=>)(?=<)")


def _strip_brackets(value: str) -> str:
    value = value.strip()
    if value.startswith("<"):
        value = value[1:]
    if value.endswith(">"):
        value = value[:-1]
    return value.strip()


def parse_message_id(value: Optional[str]) -> Optional[str]:
    """Normalize a Message-Id value: one layer of ``<>`` removed, trimmed.

    Returns None for missing or blank input.
    """
    if not isinstance(value, str):
        return None
    return _strip_brackets(value) or None


def parse_in_reply_to(value: Optional[str]) -> Optional[str]:
    """Normalize an In-Reply-To value the same way as a Message-Id.

    Some clients put more than one id here; the last one is the direct parent.
    """
    if not isinstance(value, str):
        return None
    ids = parse_references(value)
    return ids[-1] if ids else None


def parse_references(value: Union[str, Sequence[str], None]) -> list[str]:
    """Split a References header into ids, oldest first, duplicates dropped."""
    if isinstance(value, str):
        chunks = [value]
    elif isinstance(value, (list, tuple)):
        chunks = [v for v in value if isinstance(v, str)]
    else:
        # not a header value
        return []

    seen: set[str] = set()
    out: list[str] = []
    for chunk in chunks:
        for token in _REFERENCE_SPLIT_RE.split(chunk):
            ref = _strip_brackets(token)
            if ref and ref not in seen:
                seen.add(ref)
                out.append(ref)
    return out
