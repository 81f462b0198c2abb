"""Async client for the remote book-processing API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from aithor.errors import (
    AuthenticationFailedError,
    ForbiddenError,
    MalformedResponseError,
    NotAuthenticatedError,
    NotFoundError,
    NotReadyError,
    RequestFailedError,
    UnauthorizedError,
)

from .models import (
    AuthToken,
    BookPage,
    BookStats,
    BookStatus,
    PageListing,
    PageResponse,
    RemoteBook,
    UserInfo,
)
from .session import AuthSession

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

UPLOAD_MAX_BYTES = 50 * 1024 * 1024
UPLOAD_TYPES = {
    ".pdf": "application/pdf",
    ".epub": "application/epub+zip",
}


class ApiClient:
    """One method per endpoint; no retries, no local state besides the session.

    ``on_unauthorized`` runs whenever the server rejects the stored token
    (HTTP 401), after the session has been cleared and before
    ``UnauthorizedError`` is raised.
    """

    def __init__(
        self,
        base_url: str,
        session: AuthSession,
        *,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.on_unauthorized = on_unauthorized

    @property
    def session(self) -> AuthSession:
        return self._session

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Plumbing ───────────────────────────────────────────

    async def _send(
        self, method: str, path: str, *, authenticated: bool = True, **kwargs: Any
    ) -> httpx.Response:
        headers: dict[str, str] = kwargs.pop("headers", {})
        if authenticated:
            auth = self._session.auth_header()
            if not auth:
                raise NotAuthenticatedError()
            headers["Authorization"] = auth

        try:
            return await self._http().request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as e:
            log.error("Request error: %s %s -> %s", method, path, type(e).__name__)
            raise RequestFailedError(
                f"Network error ({type(e).__name__}). Please check your connection."
            ) from e

    def _raise_for_status(
        self,
        resp: httpx.Response,
        fallback: str,
        errors: Optional[dict[int, Exception]] = None,
    ) -> None:
        if resp.is_success:
            return
        code = resp.status_code
        log.error(
            "API error: %s %s -> %s %s",
            resp.request.method,
            resp.request.url.path,
            code,
            resp.text[:200],
        )
        if code == 401:
            self._session.clear()
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise UnauthorizedError()
        if errors and code in errors:
            raise errors[code]
        raise RequestFailedError(fallback, status_code=code)

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Response from {resp.request.url.path} is not JSON"
            ) from e

    def _parse(self, model: type[ModelT], resp: httpx.Response) -> ModelT:
        try:
            return model.model_validate(self._json(resp))
        except ValidationError as e:
            log.error(
                "Malformed %s from %s: %s",
                model.__name__,
                resp.request.url.path,
                e.errors()[:3],
            )
            raise MalformedResponseError(
                f"Unexpected {model.__name__} response from {resp.request.url.path}"
            ) from e

    @staticmethod
    def _detail(resp: httpx.Response) -> Optional[str]:
        try:
            body = resp.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("detail"), str):
            return body["detail"]
        return None

    # ── Auth ───────────────────────────────────────────────

    async def login(self, email: str, password: str) -> AuthToken:
        """Exchange credentials for a token and keep it in the session."""
        resp = await self._send(
            "POST",
            "/auth/login",
            authenticated=False,
            json={"email": email, "password": password},
        )
        if not resp.is_success:
            log.warning("Login rejected: HTTP %s", resp.status_code)
            raise AuthenticationFailedError(self._detail(resp) or "Authentication failed")
        token = self._parse(AuthToken, resp)
        self._session.store(token)
        return token

    def logout(self) -> None:
        self._session.clear()

    async def fetch_current_user(self) -> UserInfo:
        resp = await self._send("GET", "/auth/me")
        self._raise_for_status(resp, "Failed to fetch user info")
        return self._parse(UserInfo, resp)

    # ── Books ──────────────────────────────────────────────

    async def fetch_books(self, page: int = 1, page_size: int = 20) -> BookPage:
        resp = await self._send(
            "GET", "/books", params={"page": page, "page_size": page_size}
        )
        self._raise_for_status(resp, "Failed to fetch books")
        return self._parse(BookPage, resp)

    async def fetch_book_details(self, book_id: int) -> RemoteBook:
        resp = await self._send("GET", f"/books/{book_id}")
        self._raise_for_status(
            resp,
            "Failed to fetch book details",
            {404: NotFoundError("Book not found"), 403: ForbiddenError()},
        )
        return self._parse(RemoteBook, resp)

    async def fetch_book_status(self, book_id: int) -> BookStatus:
        resp = await self._send("GET", f"/books/{book_id}/status")
        self._raise_for_status(resp, "Failed to fetch book status")
        return self._parse(BookStatus, resp)

    async def fetch_book_stats(self, book_id: int) -> BookStats:
        resp = await self._send("GET", f"/books/{book_id}/stats")
        self._raise_for_status(
            resp, "Failed to fetch book stats", {400: NotReadyError()}
        )
        return self._parse(BookStats, resp)

    async def fetch_book_pages(
        self, book_id: int, page: int = 1, page_size: int = 20
    ) -> PageListing:
        resp = await self._send(
            "GET",
            f"/books/{book_id}/pages",
            params={"page": page, "page_size": page_size},
        )
        self._raise_for_status(
            resp, "Failed to fetch book pages", {400: NotReadyError()}
        )
        return self._parse(PageListing, resp)

    async def fetch_page_content(self, book_id: int, page_number: int) -> PageResponse:
        resp = await self._send("GET", f"/books/{book_id}/pages/{page_number}")
        self._raise_for_status(
            resp,
            "Failed to fetch page content",
            {404: NotFoundError("Page not found"), 400: NotReadyError()},
        )
        return self._parse(PageResponse, resp)

    # ── Upload ─────────────────────────────────────────────

    @staticmethod
    def validate_upload(file_path: Path, title: str) -> str:
        """Check an upload locally. Returns the MIME type to send."""
        if not file_path.is_file():
            raise ValueError(f"File not found: {file_path}")
        mime = UPLOAD_TYPES.get(file_path.suffix.lower())
        if mime is None:
            raise ValueError("Please select a PDF or EPUB file.")
        if file_path.stat().st_size > UPLOAD_MAX_BYTES:
            raise ValueError("File size must be less than 50MB.")
        if not title.strip():
            raise ValueError("Please enter a book title.")
        return mime

    async def upload_book(
        self, file_path: Path, title: str, author: Optional[str] = None
    ) -> RemoteBook:
        mime = self.validate_upload(file_path, title)
        data = {"title": title.strip()}
        if author and author.strip():
            data["author"] = author.strip()
        files = {"file": (file_path.name, file_path.read_bytes(), mime)}

        resp = await self._send("POST", "/books/upload", data=data, files=files)
        if resp.status_code != 201:
            self._raise_for_status(
                resp, self._detail(resp) or "Upload failed. Please try again."
            )
            # any other 2xx
            raise RequestFailedError(
                "Upload failed. Please try again.", status_code=resp.status_code
            )
        log.info("Uploaded %s", file_path.name)
        return self._parse(RemoteBook, resp)
