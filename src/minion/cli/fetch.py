"""URL fetch command (registered directly on the top-level app)."""

from typing import Annotated

import typer

from minion.scripts.fetch.url import main as fetch_main
from minion.sources.fetcher import FETCH_MAX_LENGTH


def fetch(
    url: Annotated[
        str,
        typer.Argument(help="http(s) URL to fetch"),
    ],
    max_length: Annotated[
        int,
        typer.Option("--max-length", "-m", help="Truncate text to this many characters"),
    ] = FETCH_MAX_LENGTH,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Fetch a URL and print its text content."""
    fetch_main(url=url, max_length=max_length, json_output=json_output)
