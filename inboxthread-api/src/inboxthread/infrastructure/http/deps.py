"""FastAPI dependencies shared by the HTTP routers."""

from __future__ import annotations

from fastapi import Depends

from inboxthread.application.ports.thread_store import ThreadStore
from inboxthread.application.use_cases.ingest_email import IngestEmailUseCase
from inboxthread.infrastructure.settings import Settings, get_settings
from inboxthread.infrastructure.stores.factory import get_thread_store


def get_store() -> ThreadStore:
    return get_thread_store()


def get_ingest_use_case(
    store: ThreadStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> IngestEmailUseCase:
    return IngestEmailUseCase(store=store, skip_auto_replies=settings.skip_auto_replies)
