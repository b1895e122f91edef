"""Assemble source material for LLM prompts.

Sources are either URLs (fetched on demand) or already-extracted documents.
Two shapes come out of here:
- a list of labelled `SourceContent` blocks, one per input, for analyses that
  need to refer back to individual sources by index;
- one merged string for draft generation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from minion.errors import SourceFetchError
from minion.logging import get_logger
from minion.parallel import run_parallel
from minion.sources.fetcher import fetch_url_content

_logger = get_logger("sources.material")

SECTION_SEPARATOR = "\n\n---\n\n"
PER_SOURCE_MAX_LENGTH = 15_000
PER_URL_MATERIAL_LENGTH = 20_000
MATERIAL_MAX_LENGTH = 100_000

UNFETCHABLE_PLACEHOLDER = "[Could not fetch content]"
FETCH_FAILED_PLACEHOLDER = "[Fetch failed]"


@dataclass(frozen=True)
class UrlSource:
    """A source to be fetched from the web."""

    url: str

    @property
    def label(self) -> str:
        return f"URL: {self.url}"


@dataclass(frozen=True)
class DocumentSource:
    """An uploaded document whose text was already extracted."""

    id: str
    filename: str
    content: str

    @property
    def label(self) -> str:
        return f"Document: {self.filename}"


SourceInput = UrlSource | DocumentSource


@dataclass
class SourceContent:
    """Loaded text for one source, keeping its position in the input list."""

    index: int
    label: str
    content: str


def source_from_dict(data: Any) -> SourceInput:
    """Build a source from its JSON form.

    `{"type": "url", "url": ...}` or
    `{"type": "document", "id": ..., "filename": ..., "content": ...}`.

    Raises:
        ValueError: On a non-object entry, an unknown type or missing fields.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Source must be an object, got {type(data).__name__}")
    kind = data.get("type")
    if kind == "url":
        url = data.get("url")
        if not isinstance(url, str) or not url.strip():
            raise ValueError("url source requires a url")
        return UrlSource(url=url.strip())
    if kind == "document":
        content = data.get("content")
        if not isinstance(content, str):
            raise ValueError("document source requires content")
        return DocumentSource(
            id=str(data.get("id", "")),
            filename=str(data.get("filename") or data.get("id") or "document"),
            content=content,
        )
    raise ValueError(f"Unknown source type: {kind!r}")


def _load_one(indexed: tuple[int, SourceInput], max_length: int) -> SourceContent:
    index, source = indexed
    if isinstance(source, DocumentSource):
        return SourceContent(index=index, label=source.label, content=source.content[:max_length])

    try:
        text = fetch_url_content(source.url, max_length=max_length)
    except Exception as e:
        _logger.warning("Failed to fetch %s: %s", source.url, e)
        return SourceContent(index=index, label=source.label, content=FETCH_FAILED_PLACEHOLDER)

    return SourceContent(
        index=index,
        label=source.label,
        content=text if text else UNFETCHABLE_PLACEHOLDER,
    )


def load_source_contents(
    sources: list[SourceInput],
    *,
    max_length: int = PER_SOURCE_MAX_LENGTH,
) -> list[SourceContent]:
    """Load every source, in input order.

    A URL that cannot be fetched still yields an entry (with placeholder
    text) so indices reported by the model line up with the input list.
    """
    return run_parallel(
        lambda item: _load_one(item, max_length),
        list(enumerate(sources)),
    )


def build_source_material(
    source_text: str,
    source_urls: list[str],
    *,
    per_url_length: int = PER_URL_MATERIAL_LENGTH,
    max_length: int = MATERIAL_MAX_LENGTH,
) -> str:
    """Merge pasted text and fetched URLs into one prompt section.

    Pasted text comes first, then one `Source: <url>` block per URL that
    could be loaded. URLs that fail are dropped.

    Raises:
        SourceFetchError: If nothing at all could be loaded.
    """
    sections: list[str] = []
    if source_text.strip():
        sections.append(source_text.strip())

    def _fetch(url: str) -> str | None:
        text = fetch_url_content(url, max_length=per_url_length)
        return f"Source: {url}\n{text}" if text else None

    fetched = run_parallel(_fetch, source_urls)
    sections.extend(section for section in fetched if section is not None)

    if not sections:
        raise SourceFetchError("Unable to load any content from the provided sources.")

    combined = SECTION_SEPARATOR.join(sections).strip()
    return combined[:max_length]
