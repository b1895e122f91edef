"""URL fetching with SSRF protection.

Two flavours:
- `fetch_url` is strict and raises; it backs the `minion fetch` command,
  where the user wants to know exactly why a page could not be read.
- `fetch_url_content` is lenient and returns None on any problem; the
  skill pipelines use it so that one dead link does not sink a whole batch.

Redirects are followed by hand so that every hop passes the SSRF check.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

import requests

from minion.errors import SourceFetchError, SSRFError
from minion.logging import get_logger
from minion.sources.html import extract_text_from_html, looks_like_html
from minion.sources.ssrf import validate_url_for_ssrf

_logger = get_logger("sources.fetcher")

DEFAULT_USER_AGENT = "GRC-Minion/1.0 (Security Questionnaire Assistant)"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,text/plain;q=0.8,*/*;q=0.7"
FETCH_TIMEOUT_SECONDS = 15
MAX_REDIRECTS = 5

FETCH_MAX_LENGTH = 50_000
CONTENT_MAX_LENGTH = 15_000
TRUNCATION_MARKER = "\n\n[Content truncated...]"

_REDIRECT_CODES = (301, 302, 303, 307, 308)


@dataclass
class FetchedPage:
    """Text extracted from a fetched URL."""

    url: str
    content: str
    content_type: str
    truncated: bool = False


def _get(url: str, *, user_agent: str, timeout: float) -> requests.Response:
    """GET a URL, following redirects only to SSRF-safe locations."""
    headers = {"User-Agent": user_agent, "Accept": DEFAULT_ACCEPT}
    current = url
    for _ in range(MAX_REDIRECTS + 1):
        ok, error = validate_url_for_ssrf(current)
        if not ok:
            raise SSRFError(error or "URL validation failed")

        response = requests.get(current, headers=headers, timeout=timeout, allow_redirects=False)
        location = response.headers.get("location") or response.headers.get("Location")
        if response.status_code in _REDIRECT_CODES and location:
            current = urljoin(current, location)
            _logger.debug("Following redirect to %s", current)
            continue
        return response

    raise SourceFetchError(f"Too many redirects fetching {url}")


def fetch_url(
    url: str,
    *,
    max_length: int = FETCH_MAX_LENGTH,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> FetchedPage:
    """Fetch a URL and return its readable text.

    Args:
        url: The URL to fetch.
        max_length: Maximum characters kept before the truncation marker.
        user_agent: User-Agent header value.
        timeout: Request timeout in seconds.

    Returns:
        FetchedPage with extracted text.

    Raises:
        SSRFError: If the URL (or a redirect target) is not allowed.
        SourceFetchError: If the request fails or returns a non-2xx status.
    """
    url = url.strip()
    if not url:
        raise SourceFetchError("URL is required")

    try:
        response = _get(url, user_agent=user_agent, timeout=timeout)
    except requests.RequestException as e:
        raise SourceFetchError(f"Failed to fetch URL: {e}") from e

    if not response.ok:
        raise SourceFetchError(f"Failed to fetch URL: {response.status_code} {response.reason}")

    content_type = response.headers.get("content-type", "")
    content = response.text
    if looks_like_html(content_type, content):
        content = extract_text_from_html(content)

    truncated = len(content) > max_length
    if truncated:
        content = content[:max_length] + TRUNCATION_MARKER

    return FetchedPage(url=url, content=content, content_type=content_type, truncated=truncated)


def fetch_url_content(
    url: str,
    *,
    max_length: int = CONTENT_MAX_LENGTH,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> str | None:
    """Fetch a URL's text for use as source material.

    Returns None (and logs why) when the URL fails the SSRF check, the
    request fails, the status is not OK, or the content is not textual.
    HTML is reduced to text before truncating to `max_length`.
    """
    try:
        response = _get(url.strip(), user_agent=user_agent, timeout=timeout)
    except SSRFError as e:
        _logger.warning("SSRF check failed for %s: %s", url, e)
        return None
    except (requests.RequestException, SourceFetchError) as e:
        _logger.warning("Error fetching %s: %s", url, e)
        return None

    if not response.ok:
        _logger.warning("Failed to fetch %s: %s %s", url, response.status_code, response.reason)
        return None

    content_type = response.headers.get("content-type", "")
    if "text" not in content_type.lower():
        _logger.warning("Skipping non-text content from %s (%s)", url, content_type or "no content-type")
        return None

    text = response.text
    if looks_like_html(content_type, text):
        text = extract_text_from_html(text)
    return text[:max_length]
