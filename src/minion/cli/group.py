"""Source group commands."""

from pathlib import Path
from typing import Annotated

import typer

from minion.scripts.group.coherence import main as coherence_main

app = typer.Typer(
    name="group",
    help="Source group analysis",
    no_args_is_help=True,
)


@app.command("coherence")
def coherence(
    group_file: Annotated[
        Path,
        typer.Argument(help="JSON file with groupTitle and sources"),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Check a group of sources for contradictions."""
    coherence_main(group_path=group_file, json_output=json_output)
