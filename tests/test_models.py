"""Tests for local records and remote result parsing."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from aithor.library.models import Book, Chapter, Note, ReadingProgress
from aithor.remote.models import (
    AuthToken,
    BookPage,
    BookStatus,
    PageListing,
    PageResponse,
    ProcessingStatus,
    RemoteBook,
    UserInfo,
    navigation_for,
)
from fakes import book_payload, page_payload, status_payload


class TestLocalModels:
    def test_book_defaults(self):
        book = Book(id="1", title="T", author="A")
        assert book.progress == 0
        assert book.cover == ""
        assert book.chapters is None
        assert book.metadata is None

    def test_progress_out_of_range(self):
        with pytest.raises(ValueError):
            Book(id="1", title="T", author="A", progress=101)
        with pytest.raises(ValueError):
            Book(id="1", title="T", author="A", progress=-1)

    def test_sorted_chapters_by_order(self):
        book = Book(
            id="1",
            title="T",
            author="A",
            chapters=[
                Chapter(id="c", title="C", content="", order=7),
                Chapter(id="a", title="A", content="", order=1),
                Chapter(id="b", title="B", content="", order=1),
            ],
        )
        assert [ch.id for ch in book.sorted_chapters()] == ["a", "b", "c"]

    def test_sorted_chapters_empty(self):
        assert Book(id="1", title="T", author="A").sorted_chapters() == []

    def test_note_timestamp_ms(self):
        note = Note(id="n", book_id="1", text="t", selected_text="s", chapter=0)
        assert note.timestamp > 1_000_000_000_000

    def test_progress_defaults(self):
        p = ReadingProgress(book_id="1", chapter_id="ch1")
        assert p.position == 0
        assert p.last_read_at > 0


class TestNavigation:
    @pytest.mark.parametrize("total", [1, 2, 5, 17])
    def test_flags_hold_for_every_page(self, total: int):
        for page in range(1, total + 1):
            nav = navigation_for(page, total)
            assert nav.has_previous == (page > 1)
            assert nav.has_next == (page < total)
            assert nav.previous_page == (page - 1 if page > 1 else None)
            assert nav.next_page == (page + 1 if page < total else None)

    @pytest.mark.parametrize("page,total", [(0, 5), (6, 5), (1, 0)])
    def test_out_of_range(self, page: int, total: int):
        with pytest.raises(ValueError):
            navigation_for(page, total)


class TestRemoteParsing:
    def test_remote_book(self):
        book = RemoteBook.model_validate(book_payload(3))
        assert book.id == 3
        assert book.uploaded_at == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        assert book.size_label == "2.00 MB"

    def test_remote_book_missing_field(self):
        data = book_payload()
        del data["file_name"]
        with pytest.raises(ValidationError):
            RemoteBook.model_validate(data)

    def test_remote_book_string_id_rejected(self):
        with pytest.raises(ValidationError):
            RemoteBook.model_validate(book_payload(book_id="3"))  # type: ignore[arg-type]

    def test_bad_timestamp(self):
        with pytest.raises(ValidationError):
            RemoteBook.model_validate(book_payload(uploaded_at="yesterday"))

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            RemoteBook.model_validate(["not", "a", "dict"])

    def test_book_page(self):
        page = BookPage.model_validate(
            {"books": [book_payload(1), book_payload(2)], "total": 2, "page": 1, "page_size": 20}
        )
        assert [b.id for b in page.books] == [1, 2]
        assert page.total == 2

    def test_status(self):
        status = BookStatus.model_validate(
            status_payload(status="processing", progress_message="Extracting text")
        )
        assert status.status is ProcessingStatus.PROCESSING
        assert status.progress_message == "Extracting text"
        assert status.is_ready is False

    def test_status_null_messages(self):
        data = status_payload()
        data["progress_message"] = None
        status = BookStatus.model_validate(data)
        assert status.progress_message == ""
        assert status.error_message is None

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            BookStatus.model_validate(status_payload(status="queued"))

    def test_page_response(self):
        resp = PageResponse.model_validate(page_payload(1, 5))
        assert resp.page_number == 1
        assert resp.has_previous is False
        assert resp.has_next is True
        assert resp.next_page == 2
        assert resp.previous_page is None

    def test_page_response_inconsistent_flags(self):
        data = page_payload(5, 5)
        data["has_next"] = True
        with pytest.raises(ValidationError):
            PageResponse.model_validate(data)

    def test_page_response_out_of_range(self):
        data = page_payload(3, 5)
        data["total_pages"] = 2
        with pytest.raises(ValidationError):
            PageResponse.model_validate(data)

    def test_page_flag_must_be_bool(self):
        data = page_payload(2, 5)
        data["has_next"] = 1
        with pytest.raises(ValidationError):
            PageResponse.model_validate(data)

    def test_page_listing(self):
        listing = PageListing.model_validate(
            {
                "book_id": 1,
                "total_pages": 40,
                "current_page": 2,
                "page_size": 2,
                "pages": [
                    {"page_number": 3, "word_count": 10, "char_count": 50},
                    {"page_number": 4, "word_count": 12, "char_count": 60},
                ],
            }
        )
        assert [p.page_number for p in listing.pages] == [3, 4]

    def test_token_type_defaults_to_bearer(self):
        assert AuthToken.model_validate({"access_token": "x"}).token_type == "bearer"

    def test_user_info(self):
        user = UserInfo.model_validate(
            {
                "id": 7,
                "email": "reader@example.com",
                "username": "reader",
                "is_active": True,
                "created_at": "2024-01-02T03:04:05",
            }
        )
        assert user.username == "reader"
        assert user.created_at.year == 2024

    def test_bool_is_not_an_int(self):
        with pytest.raises(ValidationError):
            RemoteBook.model_validate(book_payload(file_size=True))

    def test_null_author_and_token_type(self):
        assert RemoteBook.model_validate(book_payload(author=None)).author == ""
        token = AuthToken.model_validate({"access_token": "x", "token_type": None})
        assert token.token_type == "bearer"

    def test_user_flag_must_be_bool(self):
        with pytest.raises(ValidationError):
            UserInfo.model_validate(
                {
                    "id": 7,
                    "email": "reader@example.com",
                    "username": "reader",
                    "is_active": "yes",
                    "created_at": "2024-01-02T03:04:05",
                }
            )
