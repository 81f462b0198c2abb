from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Input, Label, Select, Static

from aithor.errors import AithorError
from aithor.library.models import Book, ReadingProgress, now_ms
from aithor.library.resume import find_last_read_book
from aithor.reader.text import render_text
from aithor.translation.demo import LANGUAGES, language_name

if TYPE_CHECKING:
    from aithor.app import AithorApp


class ConfirmScreen(ModalScreen[bool]):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, question: str) -> None:
        super().__init__()
        self._question = question

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self._question, id="confirm-msg")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Yes (y)", variant="error", id="cd-yes")
                yield Button("Cancel (n)", variant="default", id="cd-no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "cd-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class TranslateScreen(ModalScreen[tuple[str, str] | None]):
    """Pick a target language and an optional tone for the demo translation."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, title: str, language_code: str) -> None:
        super().__init__()
        self._title = title
        self._language_code = language_code if language_code in LANGUAGES else "es"

    def compose(self) -> ComposeResult:
        with Vertical(id="translate-dialog"):
            yield Label(f'Translate "{self._title}" (demo)')
            yield Select(
                [(name, code) for code, name in LANGUAGES.items()],
                value=self._language_code,
                allow_blank=False,
                id="translate-lang",
            )
            yield Input(
                placeholder="Tone (optional): neutral, simpler, formal, casual, poetic...",
                id="translate-tone",
            )
            with Horizontal(classes="dialog-buttons"):
                yield Button("Translate", variant="primary", id="tr-start")
                yield Button("Cancel [Esc]", variant="default", id="tr-cancel")

    @on(Button.Pressed, "#tr-start")
    @on(Input.Submitted, "#translate-tone")
    def on_start(self) -> None:
        code = str(self.query_one("#translate-lang", Select).value)
        tone = self.query_one("#translate-tone", Input).value.strip()
        self.dismiss((code, tone))

    @on(Button.Pressed, "#tr-cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)


class LocalReaderScreen(Screen):
    """Chapter-by-chapter view of a book from the local library."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
        Binding("left", "prev_chapter", "←"),
        Binding("right", "next_chapter", "→"),
    ]

    def __init__(self, book: Book) -> None:
        super().__init__()
        self._book = book
        self._chapters = book.sorted_chapters()
        self._chapter_idx = 0
        self._note_count = 0

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static("", id="reader-header")
        with VerticalScroll(id="reader-body"):
            yield Static("", id="content-text", markup=False)
        yield Footer()

    async def on_mount(self) -> None:
        progress = await self.ai.store.get_progress(self._book.id)
        if progress:
            for i, ch in enumerate(self._chapters):
                if ch.id == progress.chapter_id:
                    self._chapter_idx = i
                    break
        self._note_count = len(await self.ai.store.get_notes(self._book.id))
        self._render_chapter()
        await self._save_progress()

    def _render_chapter(self) -> None:
        content = self.query_one("#content-text", Static)
        total = len(self._chapters)
        if not self._chapters:
            content.update("(This book has no chapters.)")
            header = f" {self._book.title}"
        else:
            chapter = self._chapters[self._chapter_idx]
            content.update(render_text(chapter.content))
            header = "  │  ".join(
                [
                    f" {self._book.title}",
                    f"Ch {self._chapter_idx + 1}/{total}: {chapter.title}",
                    f"{self._book.progress}%",
                    f"Notes {self._note_count}",
                ]
            )
        self.query_one("#reader-header", Static).update(header)
        self.query_one("#reader-body", VerticalScroll).scroll_home(animate=False)

    async def _save_progress(self) -> None:
        if not self._chapters:
            return
        ts = now_ms()
        await self.ai.store.save_progress(
            ReadingProgress(
                book_id=self._book.id,
                chapter_id=self._chapters[self._chapter_idx].id,
                position=0,
                timestamp=ts,
                last_read_at=ts,
            )
        )
        pct = round((self._chapter_idx + 1) * 100 / len(self._chapters))
        if pct > self._book.progress:
            self._book.progress = pct
            await self.ai.store.update_book(self._book)

    async def action_next_chapter(self) -> None:
        if self._chapter_idx < len(self._chapters) - 1:
            self._chapter_idx += 1
            await self._save_progress()
            self._render_chapter()

    async def action_prev_chapter(self) -> None:
        if self._chapter_idx > 0:
            self._chapter_idx -= 1
            await self._save_progress()
            self._render_chapter()

    def action_go_back(self) -> None:
        self.app.pop_screen()


class LocalLibraryScreen(Screen):
    BINDINGS = [
        Binding("escape", "go_back", "Back"),
        Binding("c", "continue_reading", "Continue"),
        Binding("t", "translate", "Translate (demo)"),
        Binding("D", "delete_book", "Delete"),
        Binding("R", "reset_progress", "Reset progress"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._translating = False

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static("", id="local-header")
        yield DataTable(id="local-table")
        yield Footer()

    async def on_mount(self) -> None:
        table = self.query_one("#local-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("Title", "Author", "Progress", "Chapters", "Last Read")
        await self._refresh_books()
        table.focus()

    async def on_screen_resume(self) -> None:
        await self._refresh_books()

    async def _refresh_books(self, status: str = "") -> None:
        store = self.ai.store
        await store.initialize()
        books = await store.get_books()
        last_read = {p.book_id: p.last_read_at for p in await store.get_all_progress()}

        table = self.query_one("#local-table", DataTable)
        table.clear()
        for book in sorted(books, key=lambda b: b.title.lower()):
            ts = last_read.get(book.id)
            table.add_row(
                book.title,
                book.author,
                f"{book.progress}%",
                str(len(book.chapters or [])),
                datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d") if ts else "",
                key=book.id,
            )
        self._set_header(status or f"({len(books)} books)")

    def _set_header(self, text: str) -> None:
        self.query_one("#local-header", Static).update(f" Local Library  {text}")

    def _selected_id(self) -> str | None:
        table = self.query_one("#local-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return str(row_key.value)

    @on(DataTable.RowSelected, "#local-table")
    async def on_row_selected(self, event: DataTable.RowSelected) -> None:
        book = await self.ai.store.get_book(str(event.row_key.value))
        if book:
            self.app.push_screen(LocalReaderScreen(book))

    async def action_continue_reading(self) -> None:
        book = await find_last_read_book(self.ai.store)
        if book is None:
            self.notify("Your local library is empty.")
            return
        self.app.push_screen(LocalReaderScreen(book))

    # ── Demo translation ───────────────────────────

    def action_translate(self) -> None:
        book_id = self._selected_id()
        if book_id is None or self._translating:
            return
        title = str(self.query_one("#local-table", DataTable).get_row(book_id)[0])
        self.app.push_screen(
            TranslateScreen(title, self.ai.config.translate_target_lang),
            callback=lambda choice: self._on_translate_chosen(choice, book_id),
        )

    def _on_translate_chosen(self, choice: tuple[str, str] | None, book_id: str) -> None:
        if choice is None or self._translating:
            return
        self._translating = True
        language_code, tone = choice
        self._do_translate(book_id, language_code, tone)

    @work(exclusive=True, group="translate")
    async def _do_translate(self, book_id: str, language_code: str, tone: str) -> None:
        name = language_name(language_code)
        label = f"{name}, {tone} tone" if tone else name

        def on_progress(percent: int) -> None:
            self._set_header(f"Translating to {label} (demo)... {percent}%")

        try:
            book = await self.ai.translator.translate(
                book_id, language_code, tone, on_progress=on_progress
            )
        except (AithorError, LookupError) as e:
            self.notify(f"Translation failed: {e}", severity="error")
            return
        finally:
            self._translating = False
        await self._refresh_books()
        self.notify(f"Added: {book.title}")

    # ── Delete / reset ─────────────────────────────

    def action_delete_book(self) -> None:
        book_id = self._selected_id()
        if book_id is None:
            return
        title = self.query_one("#local-table", DataTable).get_row(book_id)[0]
        self.app.push_screen(
            ConfirmScreen(f'Delete "{title}" from the local library?'),
            callback=lambda confirmed: self._on_delete_confirmed(confirmed, book_id),
        )

    async def _on_delete_confirmed(self, confirmed: bool | None, book_id: str) -> None:
        if not confirmed:
            return
        await self.ai.store.delete_book(book_id)
        await self._refresh_books()
        self.notify("Book removed")

    def action_reset_progress(self) -> None:
        self.app.push_screen(
            ConfirmScreen("Reset all reading progress? This cannot be undone."),
            callback=self._on_reset_confirmed,
        )

    async def _on_reset_confirmed(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        await self.ai.store.clear_progress()
        await self._refresh_books()
        self.notify("Progress reset")

    def action_go_back(self) -> None:
        self.app.pop_screen()
