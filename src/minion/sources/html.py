"""HTML to plain text for source material.

Keeps readable text, paragraph breaks at block elements, and nothing else.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

DROP_TAGS = ("script", "style", "noscript", "template", "svg")
BLOCK_TAGS = (
    "p", "div", "br", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr",
    "section", "article", "header", "footer", "ul", "ol", "table",
    "thead", "tbody", "blockquote", "pre", "dd", "dt",
)

_SPACES_RE = re.compile(r"[ \t\f\v\r]+")
_BLANK_LINES_RE = re.compile(r"\n[ \t]*\n\s*")


def extract_text_from_html(html: str) -> str:
    """Extract readable text from an HTML document.

    Script, style and noscript content is dropped, block elements become
    line breaks, entities are decoded and whitespace is collapsed so that
    paragraphs are separated by exactly one blank line.
    """
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(DROP_TAGS):
        tag.decompose()

    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")

    text = soup.get_text().replace("\xa0", " ")
    text = _SPACES_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _BLANK_LINES_RE.sub("\n\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def looks_like_html(content_type: str, body: str) -> bool:
    """True when a response should go through `extract_text_from_html`."""
    if "html" in content_type.lower():
        return True
    head = body.lstrip()[:200].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")
