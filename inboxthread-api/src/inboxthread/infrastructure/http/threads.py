"""Read access to resolved threads."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from inboxthread.application.ports.thread_store import ThreadStore
from inboxthread.domain.models import ThreadView
from inboxthread.infrastructure.http.deps import get_store


router = APIRouter(prefix="/threads", tags=["threads"])


@router.get("/{thread_id:path}", response_model=ThreadView)
async def get_thread(thread_id: str, store: ThreadStore = Depends(get_store)) -> ThreadView:
    """A thread and its messages in date order; merged ids resolve to the surviving thread."""
    record = store.get_thread(thread_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Thread not found")
    return ThreadView.build(record, store.list_messages(record.thread_id))
