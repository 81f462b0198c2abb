"""Async SQLite store for the local library: books, notes and reading progress."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Optional

import aiosqlite

from aithor.errors import DuplicateKeyError, StorageUnavailableError

from .models import Book, Note, ReadingProgress

log = logging.getLogger(__name__)

# Each entry moves the schema one version forward. Only append; never edit
# an entry that has shipped.
_MIGRATIONS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS books (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        cover TEXT DEFAULT '',
        progress INTEGER DEFAULT 0,
        chapters TEXT,
        metadata TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_books_title ON books(title);
    CREATE INDEX IF NOT EXISTS idx_books_author ON books(author);

    CREATE TABLE IF NOT EXISTS notes (
        id TEXT PRIMARY KEY,
        book_id TEXT NOT NULL,
        text TEXT NOT NULL,
        selected_text TEXT NOT NULL,
        chapter INTEGER NOT NULL,
        timestamp INTEGER NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_notes_book_id ON notes(book_id);
    CREATE INDEX IF NOT EXISTS idx_notes_timestamp ON notes(timestamp);

    CREATE TABLE IF NOT EXISTS progress (
        book_id TEXT PRIMARY KEY,
        chapter_id TEXT NOT NULL,
        position INTEGER DEFAULT 0,
        timestamp INTEGER NOT NULL,
        last_read_at INTEGER NOT NULL
    );
    """,
]

SCHEMA_VERSION = len(_MIGRATIONS)


class LocalStore:
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None
        self._init_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    async def initialize(self) -> None:
        """Open the database and bring the schema up to date.

        Safe to call from every entry point; later calls wait for the first
        one and then return without doing anything.
        """
        async with self._init_lock:
            if self._conn is not None:
                return
            try:
                conn = await aiosqlite.connect(str(self._db_path))
            except sqlite3.Error as e:
                raise StorageUnavailableError(
                    f"Cannot open local store at {self._db_path}: {e}"
                ) from e
            conn.row_factory = aiosqlite.Row
            try:
                await conn.execute("PRAGMA journal_mode=WAL")
                await self._migrate(conn)
            except sqlite3.Error as e:
                await conn.close()
                raise StorageUnavailableError(f"Schema upgrade failed: {e}") from e
            self._conn = conn
            log.debug("Local store ready at %s (schema v%d)", self._db_path, SCHEMA_VERSION)

    async def _migrate(self, conn: aiosqlite.Connection) -> None:
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
        current = row[0] if row else 0
        for version in range(current, SCHEMA_VERSION):
            log.info("Migrating local store to schema v%d", version + 1)
            await conn.executescript(_MIGRATIONS[version])
            await conn.execute(f"PRAGMA user_version = {version + 1}")
            await conn.commit()

    async def schema_version(self) -> int:
        row = await self._fetchone("PRAGMA user_version")
        return row[0] if row else 0

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    # ── Low-level helpers ──────────────────────────────────

    def _require(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageUnavailableError("Local store is not initialized")
        return self._conn

    async def _write(
        self,
        sql: str,
        params: Iterable[Any] = (),
        *,
        collection: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        conn = self._require()
        try:
            await conn.execute(sql, tuple(params))
            await conn.commit()
        except sqlite3.IntegrityError as e:
            await conn.rollback()
            if collection is not None and key is not None and "UNIQUE" in str(e):
                raise DuplicateKeyError(collection, key) from e
            raise StorageUnavailableError(str(e)) from e
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageUnavailableError(str(e)) from e

    async def _fetchone(self, sql: str, params: Iterable[Any] = ()) -> Optional[aiosqlite.Row]:
        conn = self._require()
        try:
            async with conn.execute(sql, tuple(params)) as cursor:
                return await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageUnavailableError(str(e)) from e

    async def _fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        conn = self._require()
        try:
            async with conn.execute(sql, tuple(params)) as cursor:
                return list(await cursor.fetchall())
        except sqlite3.Error as e:
            raise StorageUnavailableError(str(e)) from e

    # ── Books ──────────────────────────────────────────────

    @staticmethod
    def _book_params(book: Book) -> tuple[Any, ...]:
        chapters = book.chapters_to_list()
        metadata = book.metadata_to_dict()
        return (
            book.id,
            book.title,
            book.author,
            book.cover,
            book.progress,
            json.dumps(chapters) if chapters is not None else None,
            json.dumps(metadata) if metadata is not None else None,
        )

    async def add_book(self, book: Book) -> None:
        await self._write(
            """INSERT INTO books
               (id, title, author, cover, progress, chapters, metadata)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            self._book_params(book),
            collection="books",
            key=book.id,
        )

    async def update_book(self, book: Book) -> None:
        await self._write(
            """INSERT OR REPLACE INTO books
               (id, title, author, cover, progress, chapters, metadata)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            self._book_params(book),
        )

    async def delete_book(self, book_id: str) -> None:
        await self._write("DELETE FROM books WHERE id = ?", (book_id,))

    async def get_book(self, book_id: str) -> Optional[Book]:
        row = await self._fetchone("SELECT * FROM books WHERE id = ?", (book_id,))
        return self._row_to_book(row) if row else None

    async def get_books(self) -> list[Book]:
        rows = await self._fetchall("SELECT * FROM books")
        return [self._row_to_book(r) for r in rows]

    @staticmethod
    def _row_to_book(row: aiosqlite.Row) -> Book:
        chapters = json.loads(row["chapters"]) if row["chapters"] else None
        metadata = json.loads(row["metadata"]) if row["metadata"] else None
        return Book(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            cover=row["cover"],
            progress=row["progress"],
            chapters=Book.chapters_from_list(chapters),
            metadata=Book.metadata_from_dict(metadata),
        )

    # ── Notes ──────────────────────────────────────────────

    async def add_note(self, note: Note) -> None:
        await self._write(
            """INSERT INTO notes
               (id, book_id, text, selected_text, chapter, timestamp)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                note.id,
                note.book_id,
                note.text,
                note.selected_text,
                note.chapter,
                note.timestamp,
            ),
            collection="notes",
            key=note.id,
        )

    async def update_note(self, note: Note) -> None:
        await self._write(
            """INSERT OR REPLACE INTO notes
               (id, book_id, text, selected_text, chapter, timestamp)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                note.id,
                note.book_id,
                note.text,
                note.selected_text,
                note.chapter,
                note.timestamp,
            ),
        )

    async def delete_note(self, note_id: str) -> None:
        await self._write("DELETE FROM notes WHERE id = ?", (note_id,))

    async def get_notes(self, book_id: str) -> list[Note]:
        rows = await self._fetchall(
            "SELECT * FROM notes WHERE book_id = ?", (book_id,)
        )
        return [
            Note(
                id=r["id"],
                book_id=r["book_id"],
                text=r["text"],
                selected_text=r["selected_text"],
                chapter=r["chapter"],
                timestamp=r["timestamp"],
            )
            for r in rows
        ]

    # ── Reading Progress ───────────────────────────────────

    async def save_progress(self, progress: ReadingProgress) -> None:
        await self._write(
            """INSERT OR REPLACE INTO progress
               (book_id, chapter_id, position, timestamp, last_read_at)
               VALUES (?, ?, ?, ?, ?)""",
            (
                progress.book_id,
                progress.chapter_id,
                progress.position,
                progress.timestamp,
                progress.last_read_at,
            ),
        )

    async def get_progress(self, book_id: str) -> Optional[ReadingProgress]:
        row = await self._fetchone(
            "SELECT * FROM progress WHERE book_id = ?", (book_id,)
        )
        return self._row_to_progress(row) if row else None

    async def get_all_progress(self) -> list[ReadingProgress]:
        rows = await self._fetchall("SELECT * FROM progress")
        return [self._row_to_progress(r) for r in rows]

    async def clear_progress(self) -> None:
        await self._write("DELETE FROM progress")

    @staticmethod
    def _row_to_progress(row: aiosqlite.Row) -> ReadingProgress:
        return ReadingProgress(
            book_id=row["book_id"],
            chapter_id=row["chapter_id"],
            position=row["position"],
            timestamp=row["timestamp"],
            last_read_at=row["last_read_at"],
        )
