"""Demo-only translation.

Nothing is translated here. The flow fakes progress on a fixed timer and
then stores a relabelled copy of a local book, so the UI has something to
show until the server offers real translation with real progress.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Optional

from aithor.library.models import Book, BookMetadata, Chapter, now_ms
from aithor.library.store import LocalStore

log = logging.getLogger(__name__)

LANGUAGES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "tr": "Turkish",
}

PROGRESS_STEP = 10
PROGRESS_CAP = 90


def language_name(code: str) -> str:
    return LANGUAGES.get(code, code)


def build_translated_copy(
    book: Book, language_code: str, tone: str = "", created_at: Optional[int] = None
) -> Book:
    """The placeholder book a finished demo translation produces."""
    name = language_name(language_code)
    stamp = created_at if created_at is not None else now_ms()

    chapters: Optional[list[Chapter]] = None
    if book.chapters is not None:
        chapters = [
            Chapter(
                id=f"{ch.id}-translated",
                title=ch.title,
                content=f"<p>Translated content in {name}...</p>{ch.content}",
                order=ch.order,
            )
            for ch in book.chapters
        ]

    description = f"{name} translation"
    if tone:
        description += f" with {tone} tone"
    metadata = replace(book.metadata) if book.metadata else BookMetadata()
    metadata.description = description

    return Book(
        id=f"{book.id}-{language_code}-{stamp}",
        title=f"{book.title} ({name})",
        author=book.author,
        cover=book.cover,
        progress=0,
        chapters=chapters,
        metadata=metadata,
    )


class DemoTranslator:
    def __init__(self, store: LocalStore, tick_interval: float = 0.5) -> None:
        self._store = store
        self._tick_interval = tick_interval

    async def translate(
        self,
        book_id: str,
        language_code: str,
        tone: str = "",
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> Book:
        """Fake a translation of a local book. Calls on_progress(percent)."""
        await self._store.initialize()
        book = await self._store.get_book(book_id)
        if book is None:
            raise LookupError(f"No local book with id {book_id!r}")

        log.info("Demo translation of %s to %s", book_id, language_code)
        percent = 0
        while percent < PROGRESS_CAP:
            await asyncio.sleep(self._tick_interval)
            percent += PROGRESS_STEP
            if on_progress:
                on_progress(percent)

        translated = build_translated_copy(book, language_code, tone)
        await self._store.add_book(translated)
        if on_progress:
            on_progress(100)
        return translated
