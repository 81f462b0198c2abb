"""Combined views over several endpoints: one book's overview, the user's profile."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from .client import ApiClient
from .models import BookStats, BookStatus, ProcessingStatus, RemoteBook, UserInfo

PROFILE_BOOKS_PAGE_SIZE = 100

_WAITING_LABELS = {
    ProcessingStatus.PENDING: "Pending processing",
    ProcessingStatus.PROCESSING: "Processing... Please wait",
    ProcessingStatus.FAILED: "Processing failed",
}


@dataclass
class BookOverview:
    book: RemoteBook
    status: BookStatus
    stats: Optional[BookStats] = None  # only once processing completed

    @property
    def can_read(self) -> bool:
        return self.status.is_ready

    @property
    def action_label(self) -> str:
        """Text for the read button; explains why it is disabled when it is."""
        if self.can_read:
            return "Start reading"
        return _WAITING_LABELS[self.status.status]

    @property
    def status_line(self) -> str:
        if self.status.status is ProcessingStatus.FAILED:
            return self.status.error_message or "Failed to process book"
        if self.status.status is ProcessingStatus.COMPLETED:
            return "Ready"
        return self.status.progress_message or self.status.status.value.capitalize()


@dataclass
class ProfileSummary:
    user: UserInfo
    total_books: int


async def load_book_overview(api: ApiClient, book_id: int) -> BookOverview:
    """Details and status together; stats only when the book is ready."""
    book, status = await asyncio.gather(
        api.fetch_book_details(book_id), api.fetch_book_status(book_id)
    )
    stats = await api.fetch_book_stats(book_id) if status.is_ready else None
    return BookOverview(book=book, status=status, stats=stats)


async def load_profile(api: ApiClient) -> ProfileSummary:
    user, books = await asyncio.gather(
        api.fetch_current_user(), api.fetch_books(1, PROFILE_BOOKS_PAGE_SIZE)
    )
    return ProfileSummary(user=user, total_books=books.total)
