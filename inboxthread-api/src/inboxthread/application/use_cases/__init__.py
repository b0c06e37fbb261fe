from inboxthread.application.use_cases.ingest_email import IngestEmailUseCase
from inboxthread.application.use_cases.resolve_thread import ThreadResolver, message_key_for

__all__ = [
    "IngestEmailUseCase",
    "ThreadResolver",
    "message_key_for",
]
