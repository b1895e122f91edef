"""Git sync layer for the content repository.

Provides:
- git CLI helpers (stage, commit, history, diff, push)
- BaseGitSyncService and services for skills, customers, templates and
  prompt blocks
- SQLite sync log with health reporting
"""

from minion.gitsync.base import BaseGitSyncService
from minion.gitsync.entities import Customer, PromptBlock, Template
from minion.gitsync.git import GitAuthor, GitCommitInfo
from minion.gitsync.services import (
    SERVICES,
    CustomerGitSyncService,
    PromptBlockGitSyncService,
    SkillGitSyncService,
    TemplateGitSyncService,
)
from minion.gitsync.synclog import SyncHealth, SyncLog, SyncLogStore, sync_entity, with_sync_logging

__all__ = [
    "SERVICES",
    "BaseGitSyncService",
    "Customer",
    "CustomerGitSyncService",
    "GitAuthor",
    "GitCommitInfo",
    "PromptBlock",
    "PromptBlockGitSyncService",
    "SkillGitSyncService",
    "SyncHealth",
    "SyncLog",
    "SyncLogStore",
    "Template",
    "TemplateGitSyncService",
    "sync_entity",
    "with_sync_logging",
]
