"""Data models for the local book library."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Chapter:
    id: str
    title: str
    content: str  # HTML markup
    order: int  # display position, may repeat or skip


@dataclass
class BookMetadata:
    description: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = None


@dataclass
class Book:
    id: str
    title: str
    author: str
    cover: str = ""
    progress: int = 0  # percent, 0 - 100
    chapters: Optional[list[Chapter]] = None
    metadata: Optional[BookMetadata] = None

    def __post_init__(self) -> None:
        if not 0 <= self.progress <= 100:
            raise ValueError(f"progress must be within 0-100, got {self.progress}")

    def sorted_chapters(self) -> list[Chapter]:
        return sorted(self.chapters or [], key=lambda ch: ch.order)

    def chapters_to_list(self) -> Optional[list[dict[str, Any]]]:
        if self.chapters is None:
            return None
        return [asdict(ch) for ch in self.chapters]

    def metadata_to_dict(self) -> Optional[dict[str, Any]]:
        return asdict(self.metadata) if self.metadata is not None else None

    @staticmethod
    def chapters_from_list(raw: Optional[list[dict[str, Any]]]) -> Optional[list[Chapter]]:
        if raw is None:
            return None
        return [Chapter(**item) for item in raw]

    @staticmethod
    def metadata_from_dict(raw: Optional[dict[str, Any]]) -> Optional[BookMetadata]:
        if raw is None:
            return None
        return BookMetadata(**raw)


@dataclass
class Note:
    id: str
    book_id: str
    text: str
    selected_text: str
    chapter: int
    timestamp: int = field(default_factory=now_ms)  # epoch ms


@dataclass
class ReadingProgress:
    book_id: str
    chapter_id: str
    position: int = 0  # offset within the chapter
    timestamp: int = field(default_factory=now_ms)
    last_read_at: int = field(default_factory=now_ms)
