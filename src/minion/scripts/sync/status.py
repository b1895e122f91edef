"""CLI for inspecting git sync state.

Usage:
    minion sync status
    minion sync history skill access-control [--limit N] [--json]
    minion sync diff skill access-control HEAD~1 [HEAD]
    minion sync logs [ENTITY_ID] [--limit N] [--json]
    minion sync health [--json]
"""

from __future__ import annotations

import json

import typer

from minion.errors import GitError, MinionError
from minion.gitsync.base import BaseGitSyncService
from minion.gitsync.services import SERVICES, SkillGitSyncService
from minion.gitsync.synclog import SyncLogStore
from minion.skills.store import list_skill_files


def _service(entity_type: str) -> BaseGitSyncService:
    service_cls = SERVICES.get(entity_type)
    if service_cls is None:
        typer.echo(f"Error: unknown entity type {entity_type!r} (expected one of: {', '.join(SERVICES)})", err=True)
        raise typer.Exit(1)
    return service_cls()


def status_main() -> None:
    """Show branch, working tree state and skill sync health."""
    service = SkillGitSyncService()
    try:
        branch = service.get_current_branch()
        clean = service.is_clean()
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    health = SyncLogStore().get_sync_health("skill", total=len(list_skill_files()))
    typer.echo(f"Branch: {branch}")
    typer.echo(f"Working tree: {'clean' if clean else 'uncommitted changes'}")
    typer.echo(
        f"Skills: {health.synced} synced, {health.pending} pending, {health.failed} failed, "
        f"{health.unknown} unknown ({health.total} total)"
    )


def history_main(entity_type: str, slug: str, limit: int = 10, json_output: bool = False) -> None:
    """Show the commits touching one entity file."""
    try:
        commits = _service(entity_type).get_history(slug, limit)
    except MinionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(json.dumps([c.to_dict() for c in commits], indent=2))
        return
    if not commits:
        typer.echo(f"No history for {entity_type} {slug}")
        return
    for c in commits:
        typer.echo(f"{c.sha[:8]} {c.date} {c.author} <{c.email}>  {c.message}")


def diff_main(entity_type: str, slug: str, from_commit: str, to_commit: str = "HEAD") -> None:
    """Show the diff of one entity file between two commits."""
    try:
        typer.echo(_service(entity_type).get_diff(slug, from_commit, to_commit), nl=False)
    except MinionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def logs_main(
    entity_id: str | None = None,
    limit: int = 10,
    failed_only: bool = False,
    json_output: bool = False,
) -> None:
    """Show recent sync log entries."""
    store = SyncLogStore()
    logs = store.get_recent_failures(limit) if failed_only else store.get_sync_logs(entity_id, limit)

    if json_output:
        typer.echo(json.dumps([log.to_dict() for log in logs], indent=2))
        return
    if not logs:
        typer.echo("No sync logs.")
        return
    for log in logs:
        sha = f" {log.git_commit_sha[:8]}" if log.git_commit_sha else ""
        error = f" error={log.error}" if log.error else ""
        typer.echo(
            f"#{log.id} {log.started_at} {log.entity_type}:{log.entity_id} "
            f"{log.operation} {log.status}{sha} by {log.synced_by}{error}"
        )


def health_main(entity_type: str = "skill", json_output: bool = False) -> None:
    """Report sync health; exits 1 when unhealthy."""
    total = len(list_skill_files()) if entity_type == "skill" else None
    health = SyncLogStore().get_sync_health(entity_type, total=total)

    if json_output:
        typer.echo(json.dumps(health.to_dict(), indent=2))
    else:
        counts = ", ".join(f"{k}={v}" for k, v in health.to_dict().items() if k != "healthy")
        typer.echo(f"{'healthy' if health.healthy else 'UNHEALTHY'}: {counts}")
    if not health.healthy:
        raise typer.Exit(1)
