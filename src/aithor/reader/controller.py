"""Status-gated loading and page navigation for one remote book."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from aithor.errors import AithorError, NotReadyError
from aithor.remote.client import ApiClient
from aithor.remote.models import (
    BookStats,
    BookStatus,
    PageResponse,
    ProcessingStatus,
    RemoteBook,
)

log = logging.getLogger(__name__)


class ReaderState(str, Enum):
    IDLE = "idle"
    LOADING_METADATA = "loading_metadata"
    NOT_READY = "not_ready"
    FAILED = "failed"  # server could not process the book
    ERROR = "error"  # a fetch failed
    LOADING_PAGE = "loading_page"
    READY = "ready"


class ReaderController:
    """Drives details -> status -> stats -> page for a single book view.

    Every load takes a fresh sequence number. A response that arrives after
    a newer load was started, or after ``close()``, is dropped.
    """

    def __init__(self, api: ApiClient, book_id: int) -> None:
        self._api = api
        self.book_id = book_id
        self.state = ReaderState.IDLE
        self.message = ""
        self.error: Optional[AithorError] = None
        self.book: Optional[RemoteBook] = None
        self.status: Optional[BookStatus] = None
        self.stats: Optional[BookStats] = None
        self.page: Optional[PageResponse] = None
        self._target: Optional[int] = None  # page of the newest in-flight load
        self._seq = 0
        self._closed = False
        self._listeners: list[Callable[[ReaderController], None]] = []

    # ── Observers ──────────────────────────────────

    def add_listener(self, callback: Callable[[ReaderController], None]) -> None:
        self._listeners.append(callback)

    def _set_state(self, state: ReaderState, message: str = "") -> None:
        self.state = state
        self.message = message
        log.debug("book %s: %s %s", self.book_id, state.value, message)
        for callback in list(self._listeners):
            callback(self)

    def _fail(self, error: AithorError) -> None:
        self.error = error
        self._set_state(ReaderState.ERROR, str(error) or "Failed to load book")

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._seq

    # ── Properties ─────────────────────────────────

    @property
    def is_ready(self) -> bool:
        return self.status is not None and self.status.is_ready

    @property
    def current_page(self) -> Optional[int]:
        return self.page.page_number if self.page else None

    @property
    def total_pages(self) -> int:
        if self.stats is not None:
            return self.stats.total_pages
        if self.page is not None:
            return self.page.total_pages
        return self.status.total_pages if self.status else 0

    # ── Loading ────────────────────────────────────

    async def load(self) -> None:
        seq = self._next_seq()
        self.book = self.status = self.stats = self.page = None
        self._target = None
        self.error = None
        self._set_state(ReaderState.LOADING_METADATA)

        results = await asyncio.gather(
            self._api.fetch_book_details(self.book_id),
            self._api.fetch_book_status(self.book_id),
            return_exceptions=True,
        )
        if not self._is_current(seq):
            return
        for result in results:
            if isinstance(result, AithorError):
                self._fail(result)
                return
            if isinstance(result, BaseException):
                raise result
        book, status = results
        self.book = book
        self.status = status

        if status.status in (ProcessingStatus.PENDING, ProcessingStatus.PROCESSING):
            self._set_state(
                ReaderState.NOT_READY,
                f"Book is {status.status.value}. "
                f"{status.progress_message or 'Please wait...'}",
            )
            return
        if status.status is ProcessingStatus.FAILED:
            self._set_state(
                ReaderState.FAILED, status.error_message or "Failed to process book"
            )
            return

        try:
            stats = await self._api.fetch_book_stats(self.book_id)
            if not self._is_current(seq):
                return
            self.stats = stats
            page = await self._api.fetch_page_content(self.book_id, 1)
        except AithorError as e:
            if self._is_current(seq):
                self._fail(e)
            return
        if not self._is_current(seq):
            return
        self.page = page
        self._set_state(ReaderState.READY)

    async def _load_page(self, page_number: int) -> None:
        seq = self._next_seq()
        self._target = page_number
        self._set_state(ReaderState.LOADING_PAGE)
        try:
            page = await self._api.fetch_page_content(self.book_id, page_number)
        except AithorError as e:
            if self._is_current(seq):
                self._target = None
                self._fail(e)
            return
        if not self._is_current(seq):
            log.debug("book %s: dropped stale page %s", self.book_id, page_number)
            return
        self._target = None
        self.page = page
        self.error = None
        self._set_state(ReaderState.READY)

    # ── Navigation ─────────────────────────────────

    async def go_to_page(self, page_number: int) -> None:
        if not self.is_ready:
            raise NotReadyError(self.message or "Book is not ready yet", status_code=None)
        total = self.total_pages
        if not 1 <= page_number <= total:
            raise ValueError(f"Page {page_number} is outside 1..{total}")
        await self._load_page(page_number)

    def _position(self) -> Optional[int]:
        """The page being loaded, else the page on screen."""
        return self._target if self._target is not None else self.current_page

    async def next_page(self) -> None:
        position = self._position()
        if position is not None and position < self.total_pages:
            await self._load_page(position + 1)

    async def previous_page(self) -> None:
        position = self._position()
        if position is not None and position > 1:
            await self._load_page(position - 1)

    def close(self) -> None:
        """Detach from the view; results still in flight are ignored."""
        self._closed = True
        self._listeners.clear()
