"""Tests for the reader state machine."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from aithor.errors import NotFoundError, NotReadyError, UnauthorizedError
from aithor.reader.controller import ReaderController, ReaderState
from aithor.remote.client import ApiClient
from fakes import FakeServer, book_payload, page_payload, serve_book, status_payload


def _gated_paths(server: FakeServer) -> list[str]:
    return [p for p in server.paths if p.endswith("/stats") or "/pages" in p]


class TestLoad:
    @pytest.mark.asyncio
    async def test_processing_stops_before_gated_calls(
        self, server: FakeServer, api: ApiClient
    ):
        server.json("GET", "/books/1", book_payload(1))
        server.json(
            "GET",
            "/books/1/status",
            status_payload(1, "processing", progress_message="Extracting pages 3/10"),
        )
        ctl = ReaderController(api, 1)
        await ctl.load()

        assert ctl.state is ReaderState.NOT_READY
        assert ctl.message == "Book is processing. Extracting pages 3/10"
        assert ctl.book is not None and ctl.book.title == "Dune"
        assert _gated_paths(server) == []

    @pytest.mark.asyncio
    async def test_pending_without_message(self, server: FakeServer, api: ApiClient):
        server.json("GET", "/books/1", book_payload(1))
        server.json("GET", "/books/1/status", status_payload(1, "pending"))
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.state is ReaderState.NOT_READY
        assert ctl.message == "Book is pending. Please wait..."

    @pytest.mark.asyncio
    async def test_go_to_page_while_not_ready(self, server: FakeServer, api: ApiClient):
        server.json("GET", "/books/1", book_payload(1))
        server.json("GET", "/books/1/status", status_payload(1, "processing"))
        ctl = ReaderController(api, 1)
        await ctl.load()
        before = len(server.requests)

        with pytest.raises(NotReadyError):
            await ctl.go_to_page(1)
        await ctl.next_page()
        assert len(server.requests) == before

    @pytest.mark.asyncio
    async def test_go_to_page_before_load(self, server: FakeServer, api: ApiClient):
        ctl = ReaderController(api, 1)
        with pytest.raises(NotReadyError):
            await ctl.go_to_page(1)
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_failed_status(self, server: FakeServer, api: ApiClient):
        server.json("GET", "/books/1", book_payload(1))
        server.json(
            "GET",
            "/books/1/status",
            status_payload(1, "failed", error_message="Corrupt EPUB"),
        )
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.state is ReaderState.FAILED
        assert ctl.message == "Corrupt EPUB"
        assert _gated_paths(server) == []

    @pytest.mark.asyncio
    async def test_failed_status_default_message(
        self, server: FakeServer, api: ApiClient
    ):
        server.json("GET", "/books/1", book_payload(1))
        server.json("GET", "/books/1/status", status_payload(1, "failed"))
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.message == "Failed to process book"

    @pytest.mark.asyncio
    async def test_completed_loads_first_page(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=5)
        ctl = ReaderController(api, 1)
        await ctl.load()

        assert ctl.state is ReaderState.READY
        assert ctl.current_page == 1
        assert ctl.total_pages == 5
        assert ctl.page is not None
        assert ctl.page.has_previous is False
        assert ctl.page.has_next is True
        assert ctl.page.next_page == 2
        assert server.paths[-2:] == ["/books/1/stats", "/books/1/pages/1"]

    @pytest.mark.asyncio
    async def test_details_error(self, server: FakeServer, api: ApiClient):
        server.json("GET", "/books/1", {"detail": "missing"}, 404)
        server.json("GET", "/books/1/status", status_payload(1))
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.state is ReaderState.ERROR
        assert ctl.message == "Book not found"
        assert isinstance(ctl.error, NotFoundError)
        assert _gated_paths(server) == []

    @pytest.mark.asyncio
    async def test_page_error_during_load(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=3)
        server.json("GET", "/books/1/pages/1", {}, 500)
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.state is ReaderState.ERROR
        assert ctl.message == "Failed to fetch page content"

    @pytest.mark.asyncio
    async def test_unauthorized_surfaces_as_error(
        self, server: FakeServer, api: ApiClient
    ):
        server.json("GET", "/books/1", {}, 401)
        server.json("GET", "/books/1/status", {}, 401)
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.state is ReaderState.ERROR
        assert isinstance(ctl.error, UnauthorizedError)

    @pytest.mark.asyncio
    async def test_reload_after_processing_finishes(
        self, server: FakeServer, api: ApiClient
    ):
        server.json("GET", "/books/1", book_payload(1))
        server.json("GET", "/books/1/status", status_payload(1, "processing"))
        ctl = ReaderController(api, 1)
        await ctl.load()
        assert ctl.state is ReaderState.NOT_READY

        serve_book(server, 1, total_pages=2)
        await ctl.load()
        assert ctl.state is ReaderState.READY
        assert ctl.current_page == 1

    @pytest.mark.asyncio
    async def test_listener_sees_transitions(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=2)
        seen: list[ReaderState] = []
        ctl = ReaderController(api, 1)
        ctl.add_listener(lambda c: seen.append(c.state))
        await ctl.load()
        await ctl.next_page()
        assert seen == [
            ReaderState.LOADING_METADATA,
            ReaderState.READY,
            ReaderState.LOADING_PAGE,
            ReaderState.READY,
        ]


class TestNavigation:
    @pytest.mark.asyncio
    async def test_next_to_last_page(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=5)
        ctl = ReaderController(api, 1)
        await ctl.load()
        for _ in range(4):
            await ctl.next_page()
        assert ctl.current_page == 5
        assert ctl.page is not None
        assert ctl.page.has_next is False
        assert ctl.page.next_page is None

    @pytest.mark.asyncio
    async def test_next_at_end_is_noop(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=2)
        ctl = ReaderController(api, 1)
        await ctl.load()
        await ctl.next_page()
        before = len(server.requests)
        await ctl.next_page()
        assert len(server.requests) == before
        assert ctl.current_page == 2
        assert ctl.state is ReaderState.READY

    @pytest.mark.asyncio
    async def test_previous_at_start_is_noop(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=3)
        ctl = ReaderController(api, 1)
        await ctl.load()
        before = len(server.requests)
        await ctl.previous_page()
        assert len(server.requests) == before
        assert ctl.current_page == 1

    @pytest.mark.asyncio
    async def test_previous(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=3)
        ctl = ReaderController(api, 1)
        await ctl.load()
        await ctl.go_to_page(3)
        await ctl.previous_page()
        assert ctl.current_page == 2

    @pytest.mark.asyncio
    async def test_go_to_page_out_of_range(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=3)
        ctl = ReaderController(api, 1)
        await ctl.load()
        with pytest.raises(ValueError):
            await ctl.go_to_page(4)
        with pytest.raises(ValueError):
            await ctl.go_to_page(0)

    @pytest.mark.asyncio
    async def test_page_error_keeps_last_page(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=3)
        server.json("GET", "/books/1/pages/2", {}, 404)
        ctl = ReaderController(api, 1)
        await ctl.load()
        await ctl.next_page()
        assert ctl.state is ReaderState.ERROR
        assert ctl.message == "Page not found"
        assert ctl.current_page == 1

    @pytest.mark.asyncio
    async def test_stale_page_is_dropped(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=5)
        requested = asyncio.Event()
        release = asyncio.Event()

        async def slow_page_two(request: httpx.Request) -> httpx.Response:
            requested.set()
            await release.wait()
            return httpx.Response(200, json=page_payload(2, 5))

        server.route("GET", "/books/1/pages/2", slow_page_two)
        ctl = ReaderController(api, 1)
        await ctl.load()

        slow = asyncio.create_task(ctl.go_to_page(2))
        await requested.wait()
        await ctl.go_to_page(3)
        assert ctl.current_page == 3

        release.set()
        await slow
        assert ctl.current_page == 3
        assert ctl.state is ReaderState.READY

    @pytest.mark.asyncio
    async def test_close_drops_late_result(self, server: FakeServer, api: ApiClient):
        serve_book(server, 1, total_pages=5)
        requested = asyncio.Event()
        release = asyncio.Event()

        async def slow_page_two(request: httpx.Request) -> httpx.Response:
            requested.set()
            await release.wait()
            return httpx.Response(200, json=page_payload(2, 5))

        server.route("GET", "/books/1/pages/2", slow_page_two)
        ctl = ReaderController(api, 1)
        await ctl.load()
        seen: list[ReaderState] = []
        ctl.add_listener(lambda c: seen.append(c.state))

        pending = asyncio.create_task(ctl.next_page())
        await requested.wait()
        ctl.close()
        release.set()
        await pending
        assert ctl.current_page == 1
        assert seen == [ReaderState.LOADING_PAGE]

    @pytest.mark.asyncio
    async def test_quick_presses_advance_twice(
        self, server: FakeServer, api: ApiClient
    ):
        serve_book(server, 1, total_pages=5)
        requested = asyncio.Event()
        release = asyncio.Event()

        async def slow_page_two(request: httpx.Request) -> httpx.Response:
            requested.set()
            await release.wait()
            return httpx.Response(200, json=page_payload(2, 5))

        server.route("GET", "/books/1/pages/2", slow_page_two)
        ctl = ReaderController(api, 1)
        await ctl.load()

        first = asyncio.create_task(ctl.next_page())
        await requested.wait()
        await ctl.next_page()
        assert ctl.current_page == 3

        release.set()
        await first
        assert ctl.current_page == 3
        assert server.paths[-2:] == ["/books/1/pages/2", "/books/1/pages/3"]

    @pytest.mark.asyncio
    async def test_previous_while_loading_counts_from_target(
        self, server: FakeServer, api: ApiClient
    ):
        serve_book(server, 1, total_pages=5)
        requested = asyncio.Event()
        release = asyncio.Event()

        async def slow_page_four(request: httpx.Request) -> httpx.Response:
            requested.set()
            await release.wait()
            return httpx.Response(200, json=page_payload(4, 5))

        server.route("GET", "/books/1/pages/4", slow_page_four)
        ctl = ReaderController(api, 1)
        await ctl.load()

        pending = asyncio.create_task(ctl.go_to_page(4))
        await requested.wait()
        await ctl.previous_page()
        assert ctl.current_page == 3

        release.set()
        await pending
        assert ctl.current_page == 3
