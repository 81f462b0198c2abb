from __future__ import annotations

from typing import TYPE_CHECKING

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Static

from aithor.errors import NotReadyError
from aithor.reader.controller import ReaderController, ReaderState
from aithor.reader.text import render_text

if TYPE_CHECKING:
    from aithor.app import AithorApp


class ReaderScreen(Screen):
    BINDINGS = [
        Binding("escape", "go_back", "Back"),
        Binding("left", "prev_page", "←"),
        Binding("right", "next_page", "→"),
        Binding("space", "next_page", "Next", show=False),
        Binding("home", "first_page", "First"),
        Binding("end", "last_page", "Last"),
        Binding("r", "reload", "Reload"),
    ]

    def __init__(self, book_id: int, title: str = "") -> None:
        super().__init__()
        self._book_id = book_id
        self._title = title
        self._controller: ReaderController | None = None

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static("", id="reader-header")
        with VerticalScroll(id="reader-body"):
            yield Static("Loading book...", id="content-text", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        self._controller = ReaderController(self.ai.api, self._book_id)
        self._controller.add_listener(self._on_state_change)
        self._load()

    def on_unmount(self) -> None:
        if self._controller:
            self._controller.close()

    @work(exclusive=True, group="reader-load")
    async def _load(self) -> None:
        if self._controller:
            await self._controller.load()

    # Page loads are not exclusive; the controller drops stale responses.
    @work(group="reader-nav")
    async def _navigate(self, direction: str) -> None:
        ctl = self._controller
        if ctl is None:
            return
        try:
            if direction == "next":
                await ctl.next_page()
            elif direction == "prev":
                await ctl.previous_page()
            elif direction == "first":
                await ctl.go_to_page(1)
            elif direction == "last":
                await ctl.go_to_page(ctl.total_pages)
        except (NotReadyError, ValueError) as e:
            self.notify(str(e), severity="warning")

    # ── Rendering ──────────────────────────────────

    def _on_state_change(self, ctl: ReaderController) -> None:
        if not self.is_mounted:
            return
        content = self.query_one("#content-text", Static)
        content.remove_class("notice", "failure")

        if ctl.state is ReaderState.LOADING_METADATA:
            content.update("Loading book...")
        elif ctl.state is ReaderState.NOT_READY:
            content.add_class("notice")
            content.update(f"{ctl.message}\n\nPress r to check again.")
        elif ctl.state in (ReaderState.FAILED, ReaderState.ERROR):
            content.add_class("failure")
            content.update(
                f"Unable to Load Book\n\n{ctl.message}\n\n"
                "Press r to retry or Esc to go back to the library."
            )
        elif ctl.state is ReaderState.READY and ctl.page:
            content.update(render_text(ctl.page.page.content))
            self.query_one("#reader-body", VerticalScroll).scroll_home(animate=False)
        self._update_header(ctl)

    def _update_header(self, ctl: ReaderController) -> None:
        title = ctl.book.title if ctl.book else self._title
        parts = [f" {title or 'Book'}"]
        if ctl.current_page is not None:
            parts.append(f"Page {ctl.current_page} of {ctl.total_pages}")
        if ctl.page is not None:
            parts.append(f"{ctl.page.page.word_count} words")
        if ctl.stats is not None:
            parts.append(ctl.stats.estimated_reading_time)
        if ctl.state is ReaderState.LOADING_PAGE:
            parts.append("Loading...")
        header = "  │  ".join(parts)
        self.query_one("#reader-header", Static).update(header)

    # ── Actions ────────────────────────────────────

    def action_next_page(self) -> None:
        self._navigate("next")

    def action_prev_page(self) -> None:
        self._navigate("prev")

    def action_first_page(self) -> None:
        self._navigate("first")

    def action_last_page(self) -> None:
        self._navigate("last")

    def action_reload(self) -> None:
        self._load()

    def action_go_back(self) -> None:
        self.app.pop_screen()
