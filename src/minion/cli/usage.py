"""LLM usage commands."""

from typing import Annotated

import typer

from minion.scripts.usage.summary import main as summary_main

app = typer.Typer(
    name="usage",
    help="LLM usage tracking",
    no_args_is_help=True,
)


@app.command("summary")
def summary(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show per-feature call and token totals."""
    summary_main(json_output=json_output)
