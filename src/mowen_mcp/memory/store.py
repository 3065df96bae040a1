# File: mowen_mcp/memory/store.py

"""
Local record of notes created through the server.
Notes are kept in a SQLite table so they can be queried by creation date.
"""

import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

TABLE = "mowen"

_SCHEMA = f"""\
CREATE TABLE IF NOT EXISTS {TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    note_id TEXT NOT NULL,
    content TEXT NOT NULL,
    summary TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_{TABLE}_created_at ON {TABLE}(created_at);
"""

_COLUMNS = "id, note_id, content, summary, created_at"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DateLike = Union[str, date]

@dataclass
class NoteRecord:
    """A note created through this server."""
    id: int
    note_id: str
    content: str
    summary: str
    created_at: str

def _as_date(value: DateLike) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    return value

class NoteStore:
    """
    SQLite-backed store of created notes.

    The connection is opened lazily on first use and shared between
    threads, guarded by a lock.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path).expanduser()
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            conn.executescript(_SCHEMA)
            self._conn = conn
            logger.info(f"Note store ready at {self.db_path}")
        return self._conn

    def _row_to_record(self, row: tuple) -> NoteRecord:
        id_, note_id, content, summary, created_at = row
        return NoteRecord(
            id=id_,
            note_id=note_id,
            content=content,
            summary=summary or "",
            created_at=str(created_at)
        )

    def _query(self, sql: str, params: tuple) -> List[NoteRecord]:
        with self._lock:
            rows = self._connect().execute(sql, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def save_note(self,
                  note_id: str,
                  content: str,
                  summary: str = "",
                  created_at: Optional[datetime] = None) -> int:
        """
        Record a created note.

        Args:
            note_id: Id returned by the API
            content: The block list the note was created from
            summary: Optional summary text
            created_at: Creation time, defaults to now (local time)

        Returns:
            Row id of the new record

        Raises:
            ValueError: If note_id or content is empty
        """
        if not note_id or not content:
            raise ValueError("note_id and content must not be empty")

        timestamp = (created_at or datetime.now()).strftime(TIMESTAMP_FORMAT)
        with self._lock:
            conn = self._connect()
            cursor = conn.execute(
                f"INSERT INTO {TABLE} (note_id, content, summary, created_at) VALUES (?, ?, ?, ?)",
                (note_id, content, summary, timestamp)
            )
            conn.commit()

        logger.info(f"Saved note {note_id} ({len(content)} chars)")
        return cursor.lastrowid

    def search_by_date(self, day: DateLike) -> List[NoteRecord]:
        """Notes created on one calendar day, newest first."""
        return self._query(
            f"SELECT {_COLUMNS} FROM {TABLE} "
            "WHERE DATE(created_at) = DATE(?) ORDER BY created_at DESC, id DESC",
            (_as_date(day),)
        )

    def search_by_date_range(self, start: DateLike, end: DateLike) -> List[NoteRecord]:
        """Notes created between two calendar days, both inclusive, newest first."""
        return self._query(
            f"SELECT {_COLUMNS} FROM {TABLE} "
            "WHERE DATE(created_at) BETWEEN DATE(?) AND DATE(?) "
            "ORDER BY created_at DESC, id DESC",
            (_as_date(start), _as_date(end))
        )

    def get_by_created_at(self, timestamp: str) -> Optional[NoteRecord]:
        """The note created at an exact timestamp, if any."""
        records = self._query(
            f"SELECT {_COLUMNS} FROM {TABLE} WHERE created_at = ?",
            (timestamp,)
        )
        return records[0] if records else None

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                logger.info("Closing note store")
                self._conn.close()
                self._conn = None
