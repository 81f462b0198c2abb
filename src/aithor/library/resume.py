"""Pick the book to reopen when the user asks to continue reading."""

from __future__ import annotations

from typing import Optional

from .models import Book
from .store import LocalStore


async def find_last_read_book(store: LocalStore) -> Optional[Book]:
    """Return the most recently read local book.

    Falls back to the first stored book when nothing has been read yet, and
    returns None for an empty library.
    """
    await store.initialize()
    books = await store.get_books()
    if not books:
        return None

    last_read = {p.book_id: p.last_read_at for p in await store.get_all_progress()}
    best = max(books, key=lambda b: last_read.get(b.id, 0))
    if last_read.get(best.id, 0) > 0:
        return best
    return books[0]
