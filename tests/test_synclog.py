"""Tests for minion.gitsync.synclog module."""

from __future__ import annotations

import shutil
import sqlite3
import subprocess
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from minion.gitsync.git import GitAuthor
from minion.gitsync.services import SkillGitSyncService
from minion.gitsync.synclog import SyncLogStore, sync_entity, with_sync_logging
from minion.skills.models import Skill


@pytest.fixture
def store(tmp_path: Path) -> SyncLogStore:
    return SyncLogStore(tmp_path / "sync.db")


class TestSyncLogStore:
    """Tests for SyncLogStore class."""

    def test_default_path_in_state_dir(self, tmp_path: Path) -> None:
        store = SyncLogStore()

        assert store.db_path == tmp_path / "state" / "sync.db"
        assert store.db_path.exists()

    def test_create_marks_pending(self, store: SyncLogStore) -> None:
        log_id = store.create_sync_log("skill", "s1", "create")

        logs = store.get_sync_logs()
        assert logs[0].id == log_id
        assert logs[0].status == "pending"
        assert logs[0].synced_by == "system"
        assert store.get_entity_status("skill", "s1") == "pending"

    def test_rejects_unknown_operation_and_direction(self, store: SyncLogStore) -> None:
        with pytest.raises(ValueError):
            store.create_sync_log("skill", "s1", "merge")
        with pytest.raises(ValueError):
            store.create_sync_log("skill", "s1", "create", direction="sideways")

    def test_success_marks_synced(self, store: SyncLogStore) -> None:
        log_id = store.create_sync_log("skill", "s1", "update", synced_by="ada")
        store.complete_sync_log(log_id, "success", git_commit_sha="abc123")

        log = store.get_sync_logs("s1")[0]
        assert log.status == "success"
        assert log.git_commit_sha == "abc123"
        assert log.completed_at is not None
        assert store.get_entity_status("skill", "s1") == "synced"

    def test_failure_marks_failed(self, store: SyncLogStore) -> None:
        log_id = store.create_sync_log("skill", "s1", "update")
        store.complete_sync_log(log_id, "failed", error="push rejected")

        assert store.get_entity_status("skill", "s1") == "failed"
        assert store.get_recent_failures()[0].error == "push rejected"

    def test_successful_delete_clears_status(self, store: SyncLogStore) -> None:
        store.complete_sync_log(store.create_sync_log("skill", "s1", "create"), "success")
        store.complete_sync_log(store.create_sync_log("skill", "s1", "delete"), "success")

        assert store.get_entity_status("skill", "s1") is None

    def test_complete_unknown_id(self, store: SyncLogStore) -> None:
        with pytest.raises(KeyError):
            store.complete_sync_log(999, "success")

    def test_complete_rejects_pending(self, store: SyncLogStore) -> None:
        log_id = store.create_sync_log("skill", "s1", "create")
        with pytest.raises(ValueError):
            store.complete_sync_log(log_id, "pending")

    def test_logs_newest_first_and_filtered(self, store: SyncLogStore) -> None:
        for entity in ("a", "b", "a"):
            store.create_sync_log("skill", entity, "update")

        assert [log.entity_id for log in store.get_sync_logs()] == ["a", "b", "a"]
        assert len(store.get_sync_logs("a")) == 2
        assert len(store.get_sync_logs(limit=1)) == 1
        assert store.get_sync_logs()[0].to_dict()["entityType"] == "skill"


class TestSyncHealth:
    """Tests for get_sync_health method."""

    def test_counts(self, store: SyncLogStore) -> None:
        store.complete_sync_log(store.create_sync_log("skill", "a", "create"), "success")
        store.create_sync_log("skill", "b", "create")
        store.complete_sync_log(store.create_sync_log("skill", "c", "update"), "failed", error="x")
        store.create_sync_log("customer", "z", "create")

        health = store.get_sync_health("skill", total=5)

        assert (health.synced, health.pending, health.failed) == (1, 1, 1)
        assert health.unknown == 2
        assert health.recent_failures == 1
        assert health.healthy is False
        assert health.to_dict()["recentFailures"] == 1

    def test_healthy_when_empty(self, store: SyncLogStore) -> None:
        health = store.get_sync_health()

        assert health.total == 0
        assert health.healthy is True

    def test_old_failures_not_recent(self, store: SyncLogStore) -> None:
        log_id = store.create_sync_log("skill", "a", "update")
        store.complete_sync_log(log_id, "failed", error="x")
        old = (datetime.now(UTC) - timedelta(days=2)).isoformat()
        conn = sqlite3.connect(store.db_path)
        conn.execute("UPDATE sync_logs SET started_at = ? WHERE id = ?", (old, log_id))
        conn.commit()
        conn.close()

        assert store.get_sync_health().recent_failures == 0


class TestWithSyncLogging:
    """Tests for with_sync_logging function."""

    def test_records_sha(self, store: SyncLogStore) -> None:
        result = with_sync_logging(
            store, entity_type="skill", entity_id="s1", operation="create", sync_fn=lambda _id: "deadbeef"
        )

        assert result == "deadbeef"
        assert store.get_sync_logs()[0].git_commit_sha == "deadbeef"

    def test_none_result_is_success(self, store: SyncLogStore) -> None:
        with_sync_logging(store, entity_type="skill", entity_id="s1", operation="update", sync_fn=lambda _id: None)

        log = store.get_sync_logs()[0]
        assert log.status == "success"
        assert log.git_commit_sha is None

    def test_failure_recorded_and_reraised(self, store: SyncLogStore) -> None:
        def boom(_id: int) -> str:
            raise RuntimeError("disk full")

        with pytest.raises(RuntimeError, match="disk full"):
            with_sync_logging(store, entity_type="skill", entity_id="s1", operation="update", sync_fn=boom)

        log = store.get_sync_logs()[0]
        assert log.status == "failed"
        assert log.error == "disk full"


class TestSyncEntity:
    """Tests for sync_entity function."""

    AUTHOR = GitAuthor(name="Ada", email="ada@example.com")

    def test_requires_entity(self, store: SyncLogStore) -> None:
        with pytest.raises(ValueError):
            sync_entity(MagicMock(), store, entity_id="s1", operation="create", commit_message="m", author=self.AUTHOR)

    def test_delete_requires_slug(self, store: SyncLogStore) -> None:
        with pytest.raises(ValueError):
            sync_entity(MagicMock(), store, entity_id="s1", operation="delete", commit_message="m", author=self.AUTHOR)

    def test_dispatches_to_service(self, store: SyncLogStore) -> None:
        service = MagicMock()
        service.entity_type = "skill"
        service.generate_slug.return_value = "generated"
        service.create_and_commit.return_value = "sha1"
        entity = object()

        sha = sync_entity(
            service, store, entity_id="s1", operation="create", commit_message="m", author=self.AUTHOR, entity=entity
        )
        sync_entity(
            service,
            store,
            entity_id="s1",
            operation="refresh",
            commit_message="m",
            author=self.AUTHOR,
            entity=entity,
            slug="old",
        )
        sync_entity(service, store, entity_id="s1", operation="delete", commit_message="m", author=self.AUTHOR, slug="x")

        assert sha == "sha1"
        service.create_and_commit.assert_called_once_with("generated", entity, "m", self.AUTHOR)
        service.update_and_commit.assert_called_once_with("old", entity, "m", self.AUTHOR)
        service.delete_and_commit.assert_called_once_with("x", "m", self.AUTHOR)
        assert [log.operation for log in store.get_sync_logs()] == ["delete", "refresh", "create"]

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_end_to_end(self, store: SyncLogStore, isolated_dirs: Path) -> None:
        subprocess.run(["git", "init", "-q"], cwd=isolated_dirs, check=True)
        skill = Skill(id="skill-1", slug="", title="Incident Response", content="- 24h notification")

        sha = sync_entity(
            SkillGitSyncService(),
            store,
            entity_id=skill.id,
            operation="create",
            commit_message="Create skill: Incident Response",
            author=self.AUTHOR,
            entity=skill,
        )

        assert (isolated_dirs / "skills" / "incident-response.md").is_file()
        assert store.get_sync_logs()[0].git_commit_sha == sha
        assert store.get_entity_status("skill", "skill-1") == "synced"
