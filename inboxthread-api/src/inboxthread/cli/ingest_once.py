"""One-shot ingestion of saved webhook payloads into the thread store."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from inboxthread.application.ports.thread_store import ThreadStore
from inboxthread.application.use_cases.ingest_email import IngestEmailUseCase
from inboxthread.infrastructure import configure_logging, get_settings
from inboxthread.infrastructure.stores import create_thread_store


def load_payloads(path: Path) -> list[dict[str, Any]]:
    """A file holds one payload object or a list of them."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    raise ValueError(f"{path} does not contain a JSON object or list")


def print_thread(store: ThreadStore, thread_id: str) -> int:
    record = store.get_thread(thread_id)
    if record is None:
        print(f"Thread not found: {thread_id}")
        return 1
    print(f"Thread {record.thread_id} [{record.thread_key}] {record.subject}")
    for msg in store.list_messages(record.thread_id):
        print(f"  {msg.date.isoformat()}  {msg.email.sender.display()}  {msg.email.subject}  <{msg.message_key}>")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest saved inbound webhook payloads")
    parser.add_argument("files", nargs="*", type=Path, help="JSON files with one payload or a list of payloads")
    parser.add_argument("--thread", default=None, help="Print a thread (after ingesting any files)")
    parser.add_argument("--keep-auto-replies", action="store_true", help="Thread auto-replies instead of skipping them")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    store = create_thread_store(settings)
    uc = IngestEmailUseCase(
        store=store,
        skip_auto_replies=settings.skip_auto_replies and not args.keep_auto_replies,
    )

    failures = 0
    for path in args.files:
        try:
            payloads = load_payloads(path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path}: {e}")
            failures += 1
            continue

        for payload in payloads:
            result = uc.ingest(payload)
            print(f"{result.status:<9} {result.thread_id or '-'}  {result.message_key or '-'}  {result.rule.value if result.rule else result.reason}")

    if args.thread:
        return print_thread(store, args.thread) or (1 if failures else 0)
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
