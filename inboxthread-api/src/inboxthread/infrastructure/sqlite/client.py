"""SQLite thread store: threads, messages and the reference index."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Iterator, Optional

from loguru import logger

from inboxthread.application.ports.thread_store import ThreadNotFoundError, ThreadSession, ThreadStore
from inboxthread.domain.entities.parsed_email import ParsedEmail
from inboxthread.domain.entities.thread import StoredMessage, ThreadRecord


def _ts(dt: datetime) -> str:
    # fixed width UTC so ORDER BY on text is chronological
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_ts(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)


def _thread_from_row(row: sqlite3.Row) -> ThreadRecord:
    return ThreadRecord(
        thread_id=row["thread_id"],
        thread_key=row["thread_key"],
        subject=row["subject"],
        created_at=_parse_ts(row["created_at"]),
        merged_into=row["merged_into"],
    )


def _message_from_row(row: sqlite3.Row) -> StoredMessage:
    return StoredMessage(
        message_key=row["message_key"],
        thread_id=row["thread_id"],
        email=ParsedEmail.from_dict(json.loads(row["email_json"])),
    )


class SQLiteThreadStore(ThreadStore):
    """Thread store backed by a SQLite file.

    Every ``session()`` runs inside ``BEGIN IMMEDIATE`` so concurrent
    deliveries for the same conversation serialize on the write lock.
    """

    def __init__(self, db_path: str | Path = "data/threads.db"):
        self.db_path = Path(db_path)
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.executescript("""
                PRAGMA journal_mode=WAL;

                CREATE TABLE IF NOT EXISTS threads (
                    thread_id TEXT PRIMARY KEY,
                    thread_key TEXT NOT NULL,
                    subject TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    merged_into TEXT REFERENCES threads(thread_id)
                );

                CREATE INDEX IF NOT EXISTS idx_threads_key
                    ON threads(thread_key, created_at);

                CREATE TABLE IF NOT EXISTS messages (
                    message_key TEXT PRIMARY KEY,
                    thread_id TEXT NOT NULL,
                    message_id TEXT,
                    date TEXT NOT NULL,
                    email_json TEXT NOT NULL,
                    FOREIGN KEY(thread_id) REFERENCES threads(thread_id)
                );

                CREATE INDEX IF NOT EXISTS idx_messages_thread_date
                    ON messages(thread_id, date);

                CREATE TABLE IF NOT EXISTS message_references (
                    message_key TEXT NOT NULL,
                    referenced_id TEXT NOT NULL,
                    PRIMARY KEY(message_key, referenced_id)
                );

                CREATE INDEX IF NOT EXISTS idx_references_target
                    ON message_references(referenced_id);
            """)
            logger.info(f"SQLite thread store initialized at {self.db_path}")

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def session(self) -> Iterator[ThreadSession]:
        with self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            yield _SQLiteSession(conn)

    def get_thread(self, thread_id: str) -> Optional[ThreadRecord]:
        with self._connection() as conn:
            return _SQLiteSession(conn).get_thread(thread_id)

    def list_messages(self, thread_id: str) -> list[StoredMessage]:
        """Messages of the (canonical) thread, oldest first."""
        with self._connection() as conn:
            canonical = _SQLiteSession(conn).canonical_id(thread_id)
            if canonical is None:
                return []
            rows = conn.execute(
                "SELECT * FROM messages WHERE thread_id = ? ORDER BY date, message_key",
                (canonical,),
            ).fetchall()
        return [_message_from_row(row) for row in rows]


class _SQLiteSession(ThreadSession):
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def canonical_id(self, thread_id: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT thread_id, merged_into FROM threads WHERE thread_id = ?", (thread_id,)
        ).fetchone()
        seen = set()
        while row is not None and row["merged_into"] is not None and row["thread_id"] not in seen:
            seen.add(row["thread_id"])
            row = self.conn.execute(
                "SELECT thread_id, merged_into FROM threads WHERE thread_id = ?", (row["merged_into"],)
            ).fetchone()
        return row["thread_id"] if row else None

    def find_message(self, message_key: str) -> Optional[StoredMessage]:
        row = self.conn.execute("SELECT * FROM messages WHERE message_key = ?", (message_key,)).fetchone()
        return _message_from_row(row) if row else None

    def thread_for_message(self, message_id: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT thread_id FROM messages WHERE message_key = ? OR message_id = ? LIMIT 1",
            (message_id, message_id),
        ).fetchone()
        return self.canonical_id(row["thread_id"]) if row else None

    def thread_for_key(self, thread_key: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT thread_id FROM threads WHERE thread_key = ? ORDER BY created_at, thread_id LIMIT 1",
            (thread_key,),
        ).fetchone()
        return self.canonical_id(row["thread_id"]) if row else None

    def threads_referencing(self, message_id: str) -> set[str]:
        rows = self.conn.execute(
            """SELECT DISTINCT m.thread_id FROM message_references r
               JOIN messages m ON m.message_key = r.message_key
               WHERE r.referenced_id = ?""",
            (message_id,),
        ).fetchall()
        out = set()
        for row in rows:
            canonical = self.canonical_id(row["thread_id"])
            if canonical:
                out.add(canonical)
        return out

    def get_thread(self, thread_id: str) -> Optional[ThreadRecord]:
        canonical = self.canonical_id(thread_id)
        if canonical is None:
            return None
        row = self.conn.execute("SELECT * FROM threads WHERE thread_id = ?", (canonical,)).fetchone()
        return _thread_from_row(row)

    def create_thread(self, thread_id: str, thread_key: str, subject: str, created_at: datetime) -> ThreadRecord:
        self.conn.execute(
            """INSERT OR IGNORE INTO threads (thread_id, thread_key, subject, created_at)
               VALUES (?, ?, ?, ?)""",
            (thread_id, thread_key, subject, _ts(created_at)),
        )
        row = self.conn.execute("SELECT * FROM threads WHERE thread_id = ?", (thread_id,)).fetchone()
        return _thread_from_row(row)

    def add_message(self, thread_id: str, message_key: str, email: ParsedEmail) -> StoredMessage:
        existing = self.find_message(message_key)
        if existing is not None:
            return existing

        canonical = self.canonical_id(thread_id)
        if canonical is None:
            raise ThreadNotFoundError(thread_id)

        self.conn.execute(
            """INSERT INTO messages (message_key, thread_id, message_id, date, email_json)
               VALUES (?, ?, ?, ?, ?)""",
            (message_key, canonical, email.message_id, _ts(email.date), json.dumps(email.to_dict())),
        )
        self.conn.executemany(
            "INSERT OR IGNORE INTO message_references (message_key, referenced_id) VALUES (?, ?)",
            [(message_key, ref) for ref in email.reference_chain],
        )
        return StoredMessage(message_key=message_key, thread_id=canonical, email=email)

    def merge_threads(self, source_id: str, target_id: str) -> int:
        for tid in (source_id, target_id):
            if self.conn.execute("SELECT 1 FROM threads WHERE thread_id = ?", (tid,)).fetchone() is None:
                raise ThreadNotFoundError(tid)
        if source_id == target_id:
            return 0

        moved = self.conn.execute(
            "UPDATE messages SET thread_id = ? WHERE thread_id = ?", (target_id, source_id)
        ).rowcount
        self.conn.execute(
            "UPDATE threads SET merged_into = ? WHERE thread_id = ? OR merged_into = ?",
            (target_id, source_id, source_id),
        )
        logger.debug(f"Moved {moved} messages from {source_id} to {target_id}")
        return moved
