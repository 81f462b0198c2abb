from __future__ import annotations

from typing import TYPE_CHECKING

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Input, Label, Static

from aithor.errors import AithorError, AuthenticationFailedError
from aithor.ui.screens.library_screen import LibraryScreen

if TYPE_CHECKING:
    from aithor.app import AithorApp


class LoginScreen(Screen):
    BINDINGS = [
        Binding("escape", "quit_app", "Quit"),
    ]

    def __init__(self, message: str = "") -> None:
        super().__init__()
        self._message = message

    @property
    def ai(self) -> AithorApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Vertical(id="login-dialog"):
            yield Label("Sign in to Aithor", id="login-title")
            yield Input(placeholder="Email", id="login-email")
            yield Input(placeholder="Password", password=True, id="login-password")
            yield Static(self._message, id="login-error")
            yield Button("Login", variant="primary", id="login-submit")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#login-email", Input).focus()

    @on(Input.Submitted, "#login-email")
    def on_email_submitted(self) -> None:
        self.query_one("#login-password", Input).focus()

    @on(Input.Submitted, "#login-password")
    @on(Button.Pressed, "#login-submit")
    def on_submit(self) -> None:
        email = self.query_one("#login-email", Input).value.strip()
        password = self.query_one("#login-password", Input).value
        if not email or not password:
            self._show_error("Please enter your email and password.")
            return
        self.query_one("#login-submit", Button).disabled = True
        self._do_login(email, password)

    @work(exclusive=True)
    async def _do_login(self, email: str, password: str) -> None:
        try:
            await self.ai.api.login(email, password)
        except AuthenticationFailedError as e:
            self._show_error(str(e))
            return
        except AithorError as e:
            self._show_error(f"Login failed: {e}")
            return
        finally:
            self.query_one("#login-submit", Button).disabled = False
        self.app.switch_screen(LibraryScreen())

    def _show_error(self, message: str) -> None:
        self.query_one("#login-error", Static).update(message)

    def action_quit_app(self) -> None:
        self.app.exit()
