"""HMAC verification for relay webhook deliveries."""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Optional

from loguru import logger


def sign_payload(body: bytes, timestamp: str, secret: str) -> str:
    """Hex HMAC-SHA256 of ``"{timestamp}.{body}"``."""
    message = timestamp.encode("utf-8") + b"." + body
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_webhook_signature(
    body: bytes,
    signature: str,
    timestamp: str,
    secret: str,
    tolerance_seconds: int = 300,
    now: Optional[float] = None,
) -> bool:
    """Check signature and freshness of a webhook delivery.

    The signature may carry a ``sha256=`` prefix. Timestamps further than
    ``tolerance_seconds`` from ``now`` are rejected to stop replays.
    """
    try:
        sent_at = int(timestamp)
    except (TypeError, ValueError):
        logger.warning(f"Webhook timestamp is not an integer: {timestamp!r}")
        return False

    current = int(now if now is not None else time.time())
    if abs(current - sent_at) > tolerance_seconds:
        logger.warning(f"Webhook timestamp outside tolerance: {sent_at} vs {current}")
        return False

    provided = signature.strip()
    if provided.startswith("sha256="):
        provided = provided[len("sha256="):]
    expected = sign_payload(body, timestamp, secret)
    return hmac.compare_digest(expected, provided)
