from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static

from aithor.errors import AithorError, UnauthorizedError
from aithor.remote.summaries import ProfileSummary, load_profile
from aithor.ui.screens.book_detail_screen import BookDetailScreen
from aithor.ui.screens.local_library_screen import LocalLibraryScreen

if TYPE_CHECKING:
    from aithor.app import AithorApp


class UploadScreen(ModalScreen[bool]):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Vertical(id="upload-dialog"):
            yield Label("Upload a PDF or EPUB (max 50MB)")
            yield Input(placeholder="Path to file", id="upload-path")
            yield Input(placeholder="Title", id="upload-title")
            yield Input(placeholder="Author (optional)", id="upload-author")
            yield Static("", id="upload-error")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Upload", variant="primary", id="up-submit")
                yield Button("Cancel [Esc]", variant="default", id="up-cancel")

    def on_mount(self) -> None:
        self.query_one("#upload-path", Input).focus()

    @on(Input.Changed, "#upload-path")
    def on_path_changed(self, event: Input.Changed) -> None:
        title = self.query_one("#upload-title", Input)
        if not title.value:
            title.placeholder = f"Title ({Path(event.value).stem or 'required'})"

    @on(Button.Pressed, "#up-submit")
    def on_submit(self) -> None:
        path = Path(self.query_one("#upload-path", Input).value.strip()).expanduser()
        title = self.query_one("#upload-title", Input).value.strip() or path.stem
        author = self.query_one("#upload-author", Input).value
        try:
            self.ai.api.validate_upload(path, title)
        except ValueError as e:
            self._show_error(str(e))
            return
        self.query_one("#up-submit", Button).disabled = True
        self.query_one("#upload-error", Static).update("Uploading...")
        self._do_upload(path, title, author)

    @work(exclusive=True)
    async def _do_upload(self, path: Path, title: str, author: str) -> None:
        try:
            book = await self.ai.api.upload_book(path, title, author)
        except UnauthorizedError:
            return
        except (AithorError, ValueError) as e:
            self._show_error(str(e))
            self.query_one("#up-submit", Button).disabled = False
            return
        self.notify(f"Uploaded: {book.title}")
        self.dismiss(True)

    @on(Button.Pressed, "#up-cancel")
    def action_cancel(self) -> None:
        self.dismiss(False)

    def _show_error(self, message: str) -> None:
        self.query_one("#upload-error", Static).update(message)


class ProfileScreen(ModalScreen[bool]):
    """Account details and book count. Dismisses with True to log out."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.summary: ProfileSummary | None = None

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Vertical(id="profile-dialog"):
            yield Label("Profile", id="profile-title")
            yield Static("Loading...", id="profile-info", markup=False)
            with Horizontal(classes="dialog-buttons"):
                yield Button("Logout", variant="error", id="profile-logout")
                yield Button("Close [Esc]", variant="default", id="profile-close")

    def on_mount(self) -> None:
        self._load()

    @work(exclusive=True, group="profile")
    async def _load(self) -> None:
        info = self.query_one("#profile-info", Static)
        try:
            summary = await load_profile(self.ai.api)
        except UnauthorizedError:
            return
        except AithorError as e:
            info.update(str(e))
            return
        self.summary = summary
        user = summary.user
        info.update(
            f"{user.username}\n{user.email}\n"
            f"Member since {user.created_at.strftime('%b %Y')}\n\n"
            f"Total books: {summary.total_books}"
        )

    @on(Button.Pressed, "#profile-logout")
    def on_logout(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#profile-close")
    def action_close(self) -> None:
        self.dismiss(False)


class LibraryScreen(Screen):
    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
        Binding("u", "upload", "Upload"),
        Binding("l", "local_library", "Local"),
        Binding("p", "profile", "Profile"),
        Binding("o", "logout", "Logout"),
        Binding("q", "quit_app", "Quit"),
    ]

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="library-header")
        yield DataTable(id="book-table")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#book-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("Title", "Author", "Type", "Size", "Uploaded")
        self._refresh_books()
        table.focus()

    def on_screen_resume(self) -> None:
        self._refresh_books()
        self.query_one("#book-table", DataTable).focus()

    def _set_header(self, text: str) -> None:
        self.query_one("#library-header", Static).update(f" Aithor Library  {text}")

    @work(exclusive=True, group="library")
    async def _refresh_books(self) -> None:
        self._set_header("(loading...)")
        try:
            result = await self.ai.api.fetch_books(1, self.ai.config.library_page_size)
        except UnauthorizedError:
            return
        except AithorError as e:
            self._set_header(f"- {e} (r to retry)")
            return

        table = self.query_one("#book-table", DataTable)
        table.clear()
        for book in result.books:
            table.add_row(
                book.title,
                book.author or "Unknown",
                book.file_type,
                book.size_label,
                book.uploaded_at.strftime("%Y-%m-%d"),
                key=str(book.id),
            )
        self._set_header(f"({result.total} books)")

    @on(DataTable.RowSelected, "#book-table")
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        book_id = int(str(event.row_key.value))
        title = str(self.query_one("#book-table", DataTable).get_row(event.row_key)[0])
        self.app.push_screen(BookDetailScreen(book_id, title))

    def action_refresh(self) -> None:
        self._refresh_books()

    def action_upload(self) -> None:
        self.app.push_screen(UploadScreen(), callback=self._on_upload_done)

    def _on_upload_done(self, uploaded: bool | None) -> None:
        if uploaded:
            self._refresh_books()

    def action_local_library(self) -> None:
        self.app.push_screen(LocalLibraryScreen())

    def action_profile(self) -> None:
        self.app.push_screen(ProfileScreen(), callback=self._on_profile_closed)

    def _on_profile_closed(self, logout: bool | None) -> None:
        if logout:
            self.action_logout()

    def action_logout(self) -> None:
        self.ai.api.logout()
        self.ai.show_login("Logged out.")

    def action_quit_app(self) -> None:
        self.app.exit()
