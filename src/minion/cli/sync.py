"""Git sync commands."""

from typing import Annotated

import typer

from minion.scripts.sync.push import main as push_main
from minion.scripts.sync.status import diff_main, health_main, history_main, logs_main, status_main

app = typer.Typer(
    name="sync",
    help="Git sync status, history and health",
    no_args_is_help=True,
)

EntityType = Annotated[str, typer.Argument(help="skill, customer, template or prompt-block")]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


@app.command("status")
def status() -> None:
    """Show branch, working tree state and skill sync counts."""
    status_main()


@app.command("history")
def history(
    entity_type: EntityType,
    slug: Annotated[str, typer.Argument(help="Entity slug")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum commits")] = 10,
    json_output: JsonOption = False,
) -> None:
    """Show commits touching one entity file."""
    history_main(entity_type=entity_type, slug=slug, limit=limit, json_output=json_output)


@app.command("diff")
def diff(
    entity_type: EntityType,
    slug: Annotated[str, typer.Argument(help="Entity slug")],
    from_commit: Annotated[str, typer.Argument(help="Starting commit, e.g. HEAD~1")],
    to_commit: Annotated[str, typer.Argument(help="Ending commit")] = "HEAD",
) -> None:
    """Show the diff of one entity file between two commits."""
    diff_main(entity_type=entity_type, slug=slug, from_commit=from_commit, to_commit=to_commit)


@app.command("push")
def push(
    remote: Annotated[str, typer.Option("--remote", "-r", help="Remote name")] = "origin",
    branch: Annotated[
        str | None,
        typer.Option("--branch", "-b", help="Branch (default: current)"),
    ] = None,
) -> None:
    """Push content commits to a remote."""
    push_main(remote=remote, branch=branch)


@app.command("logs")
def logs(
    entity_id: Annotated[
        str | None,
        typer.Argument(help="Only logs for this entity id"),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum entries")] = 10,
    failed_only: Annotated[
        bool,
        typer.Option("--failed", help="Only failed syncs"),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Show recent sync log entries."""
    logs_main(entity_id=entity_id, limit=limit, failed_only=failed_only, json_output=json_output)


@app.command("health")
def health(
    entity_type: Annotated[
        str,
        typer.Option("--type", "-t", help="Entity type"),
    ] = "skill",
    json_output: JsonOption = False,
) -> None:
    """Report sync health (exit code 1 when unhealthy)."""
    health_main(entity_type=entity_type, json_output=json_output)
