"""SQLite-backed log of git sync operations.

Every save/update/delete that goes to git is recorded as a sync log row
(pending, then success or failed), and the entity's latest sync status is
kept alongside so health can be reported without re-reading the repo.
Default location: <state dir>/sync.db
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, TypeVar

from minion.config import ensure_minion_dirs, get_sync_db_path
from minion.gitsync.base import BaseGitSyncService
from minion.gitsync.git import GitAuthor
from minion.logging import get_logger

_logger = get_logger("gitsync.synclog")

R = TypeVar("R")

OPERATIONS = ("create", "update", "delete", "refresh")
DIRECTIONS = ("db-to-git", "git-to-db")

STATUS_PENDING = "pending"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
STATUS_SYNCED = "synced"

RECENT_FAILURE_WINDOW = timedelta(hours=24)


@dataclass
class SyncLog:
    """One recorded sync operation."""

    id: int
    entity_type: str
    entity_id: str
    operation: str
    direction: str
    status: str
    synced_by: str
    started_at: str
    completed_at: str | None = None
    git_commit_sha: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "operation": self.operation,
            "direction": self.direction,
            "status": self.status,
            "syncedBy": self.synced_by,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "gitCommitSha": self.git_commit_sha,
            "error": self.error,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> SyncLog:
        return cls(**{key: row[key] for key in row.keys()})


@dataclass
class SyncHealth:
    synced: int
    pending: int
    failed: int
    total: int
    unknown: int
    recent_failures: int

    @property
    def healthy(self) -> bool:
        return self.failed == 0 and self.recent_failures == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "synced": self.synced,
            "pending": self.pending,
            "failed": self.failed,
            "total": self.total,
            "unknown": self.unknown,
            "recentFailures": self.recent_failures,
            "healthy": self.healthy,
        }


def _now() -> datetime:
    return datetime.now(UTC)


class SyncLogStore:
    """SQLite-backed sync log.

    Args:
        db_path: Path to the SQLite database. Defaults to `<state>/sync.db`.
    """

    def __init__(self, db_path: Path | str | None = None):
        if db_path is None:
            ensure_minion_dirs()
            db_path = get_sync_db_path()
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        conn = self._get_connection()
        c = conn.cursor()

        c.execute("""
            CREATE TABLE IF NOT EXISTS sync_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                entity_type TEXT NOT NULL,
                entity_id TEXT NOT NULL,
                operation TEXT NOT NULL,
                direction TEXT NOT NULL,
                status TEXT NOT NULL,
                synced_by TEXT NOT NULL,
                started_at TEXT NOT NULL,
                completed_at TEXT,
                git_commit_sha TEXT,
                error TEXT
            )
        """)

        # Latest known sync state per entity
        c.execute("""
            CREATE TABLE IF NOT EXISTS entity_sync_status (
                entity_type TEXT NOT NULL,
                entity_id TEXT NOT NULL,
                sync_status TEXT NOT NULL,
                last_synced_at TEXT,
                git_commit_sha TEXT,
                PRIMARY KEY (entity_type, entity_id)
            )
        """)

        c.execute("CREATE INDEX IF NOT EXISTS idx_sync_logs_entity ON sync_logs(entity_type, entity_id)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_sync_logs_status ON sync_logs(status)")

        conn.commit()
        conn.close()
        _logger.debug("Initialized sync log database at %s", self.db_path)

    def create_sync_log(
        self,
        entity_type: str,
        entity_id: str,
        operation: str,
        direction: str = "db-to-git",
        synced_by: str | None = None,
    ) -> int:
        """Record the start of a sync operation (status pending).

        Returns:
            The log id to pass to `complete_sync_log`.
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown sync operation: {operation}")
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown sync direction: {direction}")

        conn = self._get_connection()
        c = conn.cursor()
        c.execute(
            """
            INSERT INTO sync_logs
            (entity_type, entity_id, operation, direction, status, synced_by, started_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (entity_type, entity_id, operation, direction, STATUS_PENDING, synced_by or "system", _now().isoformat()),
        )
        log_id = c.lastrowid
        c.execute(
            """
            INSERT INTO entity_sync_status (entity_type, entity_id, sync_status)
            VALUES (?, ?, ?)
            ON CONFLICT(entity_type, entity_id) DO UPDATE SET sync_status = excluded.sync_status
            """,
            (entity_type, entity_id, STATUS_PENDING),
        )
        conn.commit()
        conn.close()
        return log_id  # type: ignore[return-value]

    def complete_sync_log(
        self,
        log_id: int,
        status: str,
        git_commit_sha: str | None = None,
        error: str | None = None,
    ) -> None:
        """Mark a sync log finished and update the entity's sync status."""
        if status not in (STATUS_SUCCESS, STATUS_FAILED):
            raise ValueError(f"Sync logs complete as success or failed, not {status!r}")

        now = _now().isoformat()
        conn = self._get_connection()
        c = conn.cursor()
        c.execute(
            "UPDATE sync_logs SET status = ?, completed_at = ?, git_commit_sha = ?, error = ? WHERE id = ?",
            (status, now, git_commit_sha, error, log_id),
        )
        row = c.execute("SELECT entity_type, entity_id, operation FROM sync_logs WHERE id = ?", (log_id,)).fetchone()
        if row is None:
            conn.close()
            raise KeyError(f"Unknown sync log id: {log_id}")

        if status == STATUS_SUCCESS and row["operation"] == "delete":
            c.execute(
                "DELETE FROM entity_sync_status WHERE entity_type = ? AND entity_id = ?",
                (row["entity_type"], row["entity_id"]),
            )
        elif status == STATUS_SUCCESS:
            c.execute(
                """
                INSERT INTO entity_sync_status (entity_type, entity_id, sync_status, last_synced_at, git_commit_sha)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(entity_type, entity_id) DO UPDATE SET
                    sync_status = excluded.sync_status,
                    last_synced_at = excluded.last_synced_at,
                    git_commit_sha = COALESCE(excluded.git_commit_sha, entity_sync_status.git_commit_sha)
                """,
                (row["entity_type"], row["entity_id"], STATUS_SYNCED, now, git_commit_sha),
            )
        else:
            c.execute(
                """
                INSERT INTO entity_sync_status (entity_type, entity_id, sync_status)
                VALUES (?, ?, ?)
                ON CONFLICT(entity_type, entity_id) DO UPDATE SET sync_status = excluded.sync_status
                """,
                (row["entity_type"], row["entity_id"], STATUS_FAILED),
            )
        conn.commit()
        conn.close()

    def get_sync_logs(self, entity_id: str | None = None, limit: int = 10) -> list[SyncLog]:
        """Most recent logs, newest first, optionally for one entity."""
        conn = self._get_connection()
        if entity_id is None:
            rows = conn.execute("SELECT * FROM sync_logs ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM sync_logs WHERE entity_id = ? ORDER BY id DESC LIMIT ?",
                (entity_id, limit),
            ).fetchall()
        conn.close()
        return [SyncLog.from_row(r) for r in rows]

    def get_recent_failures(self, limit: int = 20) -> list[SyncLog]:
        conn = self._get_connection()
        rows = conn.execute(
            "SELECT * FROM sync_logs WHERE status = ? ORDER BY id DESC LIMIT ?",
            (STATUS_FAILED, limit),
        ).fetchall()
        conn.close()
        return [SyncLog.from_row(r) for r in rows]

    def get_entity_status(self, entity_type: str, entity_id: str) -> str | None:
        conn = self._get_connection()
        row = conn.execute(
            "SELECT sync_status FROM entity_sync_status WHERE entity_type = ? AND entity_id = ?",
            (entity_type, entity_id),
        ).fetchone()
        conn.close()
        return row["sync_status"] if row else None

    def get_sync_health(self, entity_type: str = "skill", total: int | None = None) -> SyncHealth:
        """Counts of synced/pending/failed entities plus failures in the last 24 h.

        Args:
            entity_type: Entity type to report on.
            total: Number of entities that exist (e.g. skill files on disk).
                Entities without any recorded status count as unknown.
                Defaults to the number of entities with a recorded status.
        """
        conn = self._get_connection()
        counts = {
            row["sync_status"]: row["n"]
            for row in conn.execute(
                "SELECT sync_status, COUNT(*) AS n FROM entity_sync_status WHERE entity_type = ? GROUP BY sync_status",
                (entity_type,),
            )
        }
        since = (_now() - RECENT_FAILURE_WINDOW).isoformat()
        recent_failures = conn.execute(
            "SELECT COUNT(*) FROM sync_logs WHERE entity_type = ? AND status = ? AND started_at >= ?",
            (entity_type, STATUS_FAILED, since),
        ).fetchone()[0]
        conn.close()

        synced = counts.get(STATUS_SYNCED, 0)
        pending = counts.get(STATUS_PENDING, 0)
        failed = counts.get(STATUS_FAILED, 0)
        if total is None:
            total = sum(counts.values())
        return SyncHealth(
            synced=synced,
            pending=pending,
            failed=failed,
            total=total,
            unknown=max(0, total - synced - pending - failed),
            recent_failures=recent_failures,
        )


def with_sync_logging(
    store: SyncLogStore,
    *,
    entity_type: str,
    entity_id: str,
    operation: str,
    sync_fn: Callable[[int], R],
    direction: str = "db-to-git",
    synced_by: str | None = None,
) -> R:
    """Run `sync_fn(log_id)` inside a sync log entry.

    A string result is recorded as the commit SHA. Exceptions mark the log
    failed and are re-raised.
    """
    log_id = store.create_sync_log(entity_type, entity_id, operation, direction, synced_by)
    try:
        result = sync_fn(log_id)
    except Exception as e:
        store.complete_sync_log(log_id, STATUS_FAILED, error=str(e))
        _logger.warning("Sync %s of %s %s failed: %s", operation, entity_type, entity_id, e)
        raise
    store.complete_sync_log(
        log_id,
        STATUS_SUCCESS,
        git_commit_sha=result if isinstance(result, str) and result else None,
    )
    return result


def sync_entity(
    service: BaseGitSyncService[Any],
    store: SyncLogStore,
    *,
    entity_id: str,
    operation: str,
    commit_message: str,
    author: GitAuthor,
    entity: Any = None,
    slug: str | None = None,
    synced_by: str | None = None,
) -> str | None:
    """Save, update or delete an entity through `service`, logging the sync.

    Operations:
        create: write `entity` under `slug` (default: its generated slug);
            fails if that file already exists.
        update / refresh: write `entity`, renaming from `slug` if needed.
        delete: remove the file under `slug`.

    Returns:
        The commit SHA, or None if nothing changed.
    """
    if operation in ("create", "update", "refresh") and entity is None:
        raise ValueError(f"An entity is required for {operation}")
    if operation == "delete" and not slug:
        raise ValueError("A slug is required for delete")

    def _run(_log_id: int) -> str | None:
        if operation == "create":
            return service.create_and_commit(slug or service.generate_slug(entity), entity, commit_message, author)
        if operation == "delete":
            return service.delete_and_commit(slug, commit_message, author)  # type: ignore[arg-type]
        return service.update_and_commit(slug or service.generate_slug(entity), entity, commit_message, author)

    return with_sync_logging(
        store,
        entity_type=service.entity_type,
        entity_id=entity_id,
        operation=operation,
        sync_fn=_run,
        synced_by=synced_by,
    )
