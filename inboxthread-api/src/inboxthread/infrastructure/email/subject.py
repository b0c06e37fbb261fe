"""Subject normalization and auto-reply detection.

Both are heuristics tuned on observed traffic; the prefix pattern and the
keyword list are module constants so they can be adjusted in one place.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

# Re: / Fwd: / Fw:, optionally with a counter as in "Re[2]:" or "Re: [2]"
_PREFIX_RE = re.compile(
    r"^\s*(?:re|fwd|fw)\s*(?:\[\d+\]\s*)?:\s*(?:\[\d+\]\s*)?",
    re.IGNORECASE,
)

AUTO_REPLY_SUBJECT_MARKERS = (
    "auto-reply",
    "auto reply",
    "automatic reply",
    "out of office",
    "out-of-office",
    "vacation",
    "away from",
)

AUTO_REPLY_PRECEDENCE = ("auto_reply", "auto-reply")


def normalize_subject(subject: Optional[str]) -> str:
    """Strip reply/forward decoration and collapse whitespace.

    Idempotent: ``normalize_subject(normalize_subject(s)) == normalize_subject(s)``.
    """
    s = subject if isinstance(subject, str) else ""
    while s:
        m = _PREFIX_RE.match(s)
        if not m or m.end() == 0:
            break
        s = s[m.end():]
    return " ".join(s.split())


# alias
parse_subject = normalize_subject


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == wanted:
            return "" if value is None else str(value)
    return None


def is_auto_reply(subject: Optional[str], headers: Optional[Mapping[str, str]] = None) -> bool:
    """True when the subject or headers look like an automated response."""
    subject_lower = (subject or "").lower()
    if any(marker in subject_lower for marker in AUTO_REPLY_SUBJECT_MARKERS):
        return True

    headers = headers or {}
    auto_submitted = _header(headers, "Auto-Submitted")
    if auto_submitted is not None and auto_submitted.strip().lower() != "no":
        return True

    if _header(headers, "X-Autoreply") is not None or _header(headers, "X-Autorespond") is not None:
        return True

    precedence = _header(headers, "Precedence")
    if precedence is not None and precedence.strip().lower() in AUTO_REPLY_PRECEDENCE:
        return True

    return False
