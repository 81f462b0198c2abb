"""Public-domain sample books used to seed an empty local library."""

from __future__ import annotations

from .models import Book, BookMetadata, Chapter
from .store import LocalStore

SAMPLE_BOOKS: list[Book] = [
    Book(
        id="1",
        title="Pride and Prejudice",
        author="Jane Austen",
        progress=0,
        chapters=[
            Chapter(
                id="ch1",
                title="Chapter 1",
                content=(
                    "<h1>Chapter 1</h1>"
                    "<p>It is a truth universally acknowledged, that a single man in "
                    "possession of a good fortune, must be in want of a wife.</p>"
                    "<p>However little known the feelings or views of such a man may "
                    "be on his first entering a neighbourhood, this truth is so well "
                    "fixed in the minds of the surrounding families, that he is "
                    "considered the rightful property of some one or other of their "
                    "daughters.</p>"
                ),
                order=1,
            ),
            Chapter(
                id="ch2",
                title="Chapter 2",
                content=(
                    "<h1>Chapter 2</h1>"
                    "<p>Mr. Bennet was among the earliest of those who waited on "
                    "Mr. Bingley. He had always intended to visit him, though to the "
                    "last always assuring his wife that he should not go.</p>"
                ),
                order=2,
            ),
        ],
        metadata=BookMetadata(
            description="A novel of manners set in rural England.",
            publisher="T. Egerton",
            published_date="1813",
        ),
    ),
    Book(
        id="2",
        title="The Adventures of Sherlock Holmes",
        author="Arthur Conan Doyle",
        progress=0,
        chapters=[
            Chapter(
                id="ch1",
                title="A Scandal in Bohemia",
                content=(
                    "<h1>A Scandal in Bohemia</h1>"
                    "<p>To Sherlock Holmes she is always the woman. I have seldom "
                    "heard him mention her under any other name.</p>"
                ),
                order=1,
            ),
        ],
        metadata=BookMetadata(
            description="Twelve stories featuring Sherlock Holmes.",
            publisher="George Newnes",
            published_date="1892",
        ),
    ),
]


async def seed_library(store: LocalStore) -> int:
    """Add the sample books when the library is empty. Returns books added."""
    await store.initialize()
    if await store.get_books():
        return 0
    for book in SAMPLE_BOOKS:
        await store.add_book(book)
    return len(SAMPLE_BOOKS)
