"""Inbound email webhook endpoint for the mail relay."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from loguru import logger
from fastapi.concurrency import run_in_threadpool

from inboxthread.application.ports.thread_store import ThreadStore
from inboxthread.application.use_cases.ingest_email import IngestEmailUseCase
from inboxthread.domain.models import IngestResult
from inboxthread.infrastructure.http.deps import get_ingest_use_case, get_store
from inboxthread.infrastructure.http.signature import verify_webhook_signature
from inboxthread.infrastructure.settings import Settings, get_settings


router = APIRouter(prefix="/webhooks/email", tags=["webhooks"])


# ============================================================================
# Auth
# ============================================================================


def _check_signature(body: bytes, signature: str, timestamp: str, settings: Settings) -> bool:
    """Verify the relay signature; an unset secret is only tolerated in development."""
    if settings.webhook_secret is None or not settings.webhook_secret.get_secret_value():
        if settings.environment == "development":
            logger.warning("WEBHOOK_SECRET not configured, accepting unsigned webhook (development only)")
            return True
        logger.error("WEBHOOK_SECRET is required outside development; rejecting webhook")
        return False

    if not signature or not timestamp:
        logger.warning("Webhook missing signature or timestamp")
        return False

    return verify_webhook_signature(
        body,
        signature,
        timestamp,
        settings.webhook_secret.get_secret_value(),
        tolerance_seconds=settings.webhook_tolerance_seconds,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/inbound", response_model=IngestResult)
async def inbound_email(
    request: Request,
    resend_signature: str = Header(default="", alias="resend-signature"),
    resend_timestamp: str = Header(default="", alias="resend-timestamp"),
    settings: Settings = Depends(get_settings),
    use_case: IngestEmailUseCase = Depends(get_ingest_use_case),
) -> IngestResult:
    """
    Receive one inbound email from the relay.

    Returns 200 with the ingest result, 401 on a bad signature,
    400 when the body is not a JSON object.
    """
    body = await request.body()

    if not _check_signature(body, resend_signature, resend_timestamp, settings):
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Malformed inbound payload: {e}")
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if not isinstance(payload, dict):
        logger.warning(f"Inbound payload is a {type(payload).__name__}, expected an object")
        raise HTTPException(status_code=400, detail="Payload must be a JSON object")

    logger.info(
        f"Inbound email received: from={payload.get('from')!r} subject={str(payload.get('subject', ''))[:50]!r}"
    )
    return await run_in_threadpool(use_case.ingest, payload)


@router.get("/health")
async def inbound_health(store: ThreadStore = Depends(get_store)) -> dict:
    """Health check for the ingestion path."""
    try:
        with store.session() as tx:
            tx.get_thread("__health__")
        return {"status": "healthy", "store": type(store).__name__}
    except Exception as e:
        logger.error(f"Inbound health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
