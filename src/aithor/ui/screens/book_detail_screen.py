from __future__ import annotations

from typing import TYPE_CHECKING

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Static

from aithor.errors import AithorError, UnauthorizedError
from aithor.remote.summaries import BookOverview, load_book_overview
from aithor.ui.screens.reader_screen import ReaderScreen

if TYPE_CHECKING:
    from aithor.app import AithorApp


class BookDetailScreen(Screen):
    """Details, processing status and stats for one remote book."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
        Binding("r", "refresh", "Refresh"),
        Binding("enter", "read", "Read", show=False),
    ]

    def __init__(self, book_id: int, title: str = "") -> None:
        super().__init__()
        self._book_id = book_id
        self._title = title
        self.overview: BookOverview | None = None

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static(f" {self._title or 'Book'}", id="detail-header")
        with VerticalScroll(id="detail-body"):
            yield Static("Loading book...", id="detail-info", markup=False)
            yield Static("", id="detail-status", markup=False)
            yield Static("", id="detail-stats", markup=False)
            with Horizontal(classes="dialog-buttons"):
                yield Button("Loading...", variant="primary", id="detail-read", disabled=True)
        yield Footer()

    def on_mount(self) -> None:
        self._load()

    @work(exclusive=True, group="detail")
    async def _load(self) -> None:
        try:
            overview = await load_book_overview(self.ai.api, self._book_id)
        except UnauthorizedError:
            return
        except AithorError as e:
            self.overview = None
            info = self.query_one("#detail-info", Static)
            info.add_class("failure")
            info.update(f"{e}\n\nPress r to retry or Esc to go back.")
            self.query_one("#detail-read", Button).disabled = True
            return
        self.overview = overview
        self._show_overview(overview)

    def _show_overview(self, overview: BookOverview) -> None:
        book = overview.book
        self.query_one("#detail-header", Static).update(f" {book.title}")

        info = self.query_one("#detail-info", Static)
        info.remove_class("failure")
        info.update(
            "\n".join(
                [
                    book.title,
                    f"by {book.author or 'Unknown'}",
                    "",
                    f"File:      {book.file_name}",
                    f"Format:    {book.file_type.upper()}",
                    f"Size:      {book.size_label}",
                    f"Uploaded:  {book.uploaded_at.strftime('%B %d, %Y')}",
                ]
            )
        )

        status = self.query_one("#detail-status", Static)
        status.set_class(not overview.can_read, "notice")
        status.update(f"Status:    {overview.status_line}")

        stats = overview.stats
        self.query_one("#detail-stats", Static).update(
            ""
            if stats is None
            else (
                f"Pages:     {stats.total_pages}\n"
                f"Words:     {stats.total_words:,}\n"
                f"Chars:     {stats.total_chars:,}\n"
                f"Reading:   {stats.estimated_reading_time}"
            )
        )

        button = self.query_one("#detail-read", Button)
        button.label = overview.action_label
        button.disabled = not overview.can_read
        if overview.can_read:
            button.focus()

    @on(Button.Pressed, "#detail-read")
    def action_read(self) -> None:
        if self.overview is None or not self.overview.can_read:
            return
        self.app.push_screen(ReaderScreen(self._book_id, self.overview.book.title))

    def action_refresh(self) -> None:
        self._load()

    def action_go_back(self) -> None:
        self.app.pop_screen()
