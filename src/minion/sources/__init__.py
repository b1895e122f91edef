"""Source fetching: SSRF-checked URL retrieval, HTML stripping, prompt material."""

from minion.sources.fetcher import FetchedPage, fetch_url, fetch_url_content
from minion.sources.html import extract_text_from_html
from minion.sources.material import (
    DocumentSource,
    SourceContent,
    SourceInput,
    UrlSource,
    build_source_material,
    load_source_contents,
    source_from_dict,
)
from minion.sources.ssrf import validate_url_for_ssrf

__all__ = [
    "DocumentSource",
    "FetchedPage",
    "SourceContent",
    "SourceInput",
    "UrlSource",
    "build_source_material",
    "extract_text_from_html",
    "fetch_url",
    "fetch_url_content",
    "load_source_contents",
    "source_from_dict",
    "validate_url_for_ssrf",
]
