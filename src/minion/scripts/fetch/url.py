"""CLI for fetching a URL as plain text.

Usage:
    minion fetch https://example.com/security [--max-length N] [--json]
"""

from __future__ import annotations

import json

import typer

from minion.errors import SourceFetchError
from minion.sources.fetcher import FETCH_MAX_LENGTH, fetch_url


def main(url: str, max_length: int = FETCH_MAX_LENGTH, json_output: bool = False) -> None:
    """Fetch `url` through the SSRF-checked fetcher and print its text.

    Args:
        url: http(s) URL to fetch.
        max_length: Truncate the text to this many characters.
        json_output: Print {"content", "url", "contentType", "truncated"} instead of the text.
    """
    try:
        page = fetch_url(url.strip(), max_length=max_length)
    except SourceFetchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "content": page.content,
                    "url": page.url,
                    "contentType": page.content_type,
                    "truncated": page.truncated,
                },
                indent=2,
            )
        )
    else:
        typer.echo(page.content)
