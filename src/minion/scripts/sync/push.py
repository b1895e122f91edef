"""CLI for pushing content commits.

Usage:
    minion sync push [--remote origin] [--branch main]
"""

from __future__ import annotations

import typer

from minion.errors import GitError
from minion.gitsync.services import SkillGitSyncService


def main(remote: str = "origin", branch: str | None = None) -> None:
    """Push the content repository to a remote."""
    try:
        SkillGitSyncService().push_to_remote(remote, branch)
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.stderr:
            typer.echo(e.stderr, err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Pushed to {remote}")
