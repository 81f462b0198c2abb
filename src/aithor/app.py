"""Aithor - terminal client for a remote e-book processing service."""

from __future__ import annotations

import logging

import httpx
from textual.app import App

from aithor.config import AppConfig, load_config
from aithor.library.samples import seed_library
from aithor.library.store import LocalStore
from aithor.remote.client import ApiClient
from aithor.remote.session import AuthSession
from aithor.translation.demo import DemoTranslator
from aithor.ui.screens.library_screen import LibraryScreen
from aithor.ui.screens.login_screen import LoginScreen
from aithor.ui.themes import APP_CSS

log = logging.getLogger(__name__)


class AithorApp(App):
    """Remote library, paged reader and a local demo library."""

    TITLE = "Aithor"
    CSS = APP_CSS

    def __init__(
        self,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self.store = LocalStore(self.config.db_path)
        self.session = AuthSession(self.config.session_path)
        self.api = ApiClient(
            self.config.api_base_url,
            self.session,
            on_unauthorized=self._on_unauthorized,
            timeout=self.config.request_timeout,
            transport=transport,
        )
        self.translator = DemoTranslator(self.store)

    async def on_mount(self) -> None:
        await self.store.initialize()
        await seed_library(self.store)
        if self.session.is_authenticated:
            self.push_screen(LibraryScreen())
        else:
            self.push_screen(LoginScreen())

    def _on_unauthorized(self) -> None:
        log.warning("Token rejected by server, returning to login")
        self.call_later(self.show_login, "Session expired. Please login again.")

    def show_login(self, message: str = "") -> None:
        while len(self.screen_stack) > 1:
            self.pop_screen()
        self.push_screen(LoginScreen(message))

    async def on_unmount(self) -> None:
        # runs on every exit path; an open aiosqlite connection blocks interpreter exit
        await self.api.close()
        await self.store.close()

    async def action_quit(self) -> None:
        self.exit()


def _setup_logging(config: AppConfig) -> None:
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("aithor")
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def main() -> None:
    config = load_config()
    _setup_logging(config)
    app = AithorApp(config=config)
    app.run()


if __name__ == "__main__":
    main()
