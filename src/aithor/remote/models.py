"""Typed results for the remote book API.

Every response body is validated into one of these models with
``model_validate``. Missing keys, wrong types or an inconsistent navigation
envelope raise ``pydantic.ValidationError``; the client turns that into
``MalformedResponseError``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    ValidationInfo,
    field_validator,
    model_validator,
)


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AuthToken(BaseModel):
    access_token: str = Field(min_length=1)
    token_type: str = "bearer"

    @field_validator("token_type", mode="before")
    @classmethod
    def default_token_type(cls, v: Optional[str]) -> str:
        return v or "bearer"


class UserInfo(BaseModel):
    id: StrictInt
    email: str
    username: str
    is_active: StrictBool
    created_at: datetime


class RemoteBook(BaseModel):
    """A book owned by the server. Its integer id never mixes with local ids."""

    id: StrictInt
    title: str
    author: str = ""
    file_name: str
    file_size: StrictInt = Field(ge=0)
    file_type: str
    user_id: StrictInt
    uploaded_at: datetime

    @field_validator("author", mode="before")
    @classmethod
    def blank_author(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @property
    def size_label(self) -> str:
        return f"{self.file_size / 1024 / 1024:.2f} MB"


class BookPage(BaseModel):
    books: list[RemoteBook]
    total: StrictInt
    page: StrictInt
    page_size: StrictInt


class BookStatus(BaseModel):
    book_id: StrictInt
    status: ProcessingStatus
    total_pages: StrictInt = 0
    error_message: Optional[str] = None
    progress_message: str = ""

    @field_validator("total_pages", "progress_message", mode="before")
    @classmethod
    def null_to_default(cls, v: object, info: ValidationInfo) -> object:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @property
    def is_ready(self) -> bool:
        return self.status is ProcessingStatus.COMPLETED


class BookStats(BaseModel):
    book_id: StrictInt
    total_pages: StrictInt
    total_words: StrictInt
    total_chars: StrictInt
    estimated_reading_time: str


class PageMetadata(BaseModel):
    page_number: StrictInt
    word_count: StrictInt
    char_count: StrictInt


class PageListing(BaseModel):
    book_id: StrictInt
    total_pages: StrictInt
    current_page: StrictInt
    page_size: StrictInt
    pages: list[PageMetadata] = Field(default_factory=list)


class Navigation(BaseModel):
    has_previous: bool
    has_next: bool
    previous_page: Optional[int] = None
    next_page: Optional[int] = None
    total_pages: int


def navigation_for(page_number: int, total_pages: int) -> Navigation:
    """Expected navigation envelope for a page within a book."""
    if not 1 <= page_number <= total_pages:
        raise ValueError(f"page {page_number} is outside 1..{total_pages}")
    has_previous = page_number > 1
    has_next = page_number < total_pages
    return Navigation(
        has_previous=has_previous,
        has_next=has_next,
        previous_page=page_number - 1 if has_previous else None,
        next_page=page_number + 1 if has_next else None,
        total_pages=total_pages,
    )


class PageContent(BaseModel):
    book_id: StrictInt
    page_number: StrictInt
    content: str
    word_count: StrictInt
    char_count: StrictInt


class PageResponse(BaseModel):
    page: PageContent
    has_previous: StrictBool
    has_next: StrictBool
    previous_page: Optional[StrictInt] = None
    next_page: Optional[StrictInt] = None
    total_pages: StrictInt

    @model_validator(mode="after")
    def check_navigation(self) -> PageResponse:
        expected = navigation_for(self.page.page_number, self.total_pages)
        if self.navigation != expected:
            raise ValueError(
                f"inconsistent navigation for page {self.page.page_number}"
                f" of {self.total_pages}"
            )
        return self

    @property
    def page_number(self) -> int:
        return self.page.page_number

    @property
    def navigation(self) -> Navigation:
        return Navigation(
            has_previous=self.has_previous,
            has_next=self.has_next,
            previous_page=self.previous_page,
            next_page=self.next_page,
            total_pages=self.total_pages,
        )
