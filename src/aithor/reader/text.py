"""Turn rendered HTML page or chapter content into plain paragraphs."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_BLOCK_TAGS = frozenset(
    ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre"]
)
# lxml wraps bare text in <p>, so look at the source for real block markup
_BLOCK_RE = re.compile(
    r"<\s*(?:%s)\b" % "|".join(sorted(_BLOCK_TAGS)), re.IGNORECASE
)


def html_to_paragraphs(html: str) -> list[str]:
    soup = BeautifulSoup(html, "lxml")

    for tag in soup.find_all(["script", "style"]):
        tag.decompose()

    paragraphs: list[str] = []

    if _BLOCK_RE.search(html):
        for tag in soup.find_all(list(_BLOCK_TAGS)):
            if tag.find(list(_BLOCK_TAGS)):
                continue
            text = re.sub(r"\s+", " ", tag.get_text(separator=" ", strip=True))
            if text:
                paragraphs.append(text)
    else:
        text = soup.get_text(separator="\n")
        for para in re.split(r"\n\s*\n", text):
            cleaned = re.sub(r"\s+", " ", para).strip()
            if cleaned:
                paragraphs.append(cleaned)

    return paragraphs


def render_text(html: str) -> str:
    return "\n\n".join(html_to_paragraphs(html))
