"""Shared save/update/delete-and-commit logic for git-synced entities.

Subclasses say where an entity lives (`directory`, `file_extension`), how
it is named (`generate_slug`) and how it is written, deleted and renamed.
Everything else (staging, committing, history, diffs, pushing) is here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from minion.config import get_content_dir
from minion.errors import EntityExistsError
from minion.gitsync import git
from minion.gitsync.git import GitAuthor, GitCommitInfo
from minion.logging import get_logger

_logger = get_logger("gitsync.base")

T = TypeVar("T")


class BaseGitSyncService(ABC, Generic[T]):
    """Git sync for one entity type.

    Args:
        repo_dir: Root of the content repository. Defaults to
            MINION_CONTENT_DIR (or cwd).
    """

    entity_type: str = "entity"

    def __init__(self, repo_dir: Path | str | None = None):
        self.repo_dir = Path(repo_dir) if repo_dir is not None else get_content_dir()

    @property
    @abstractmethod
    def directory(self) -> str:
        """Directory relative to the repo root, e.g. "skills"."""

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """File extension without the dot, e.g. "md"."""

    @abstractmethod
    def generate_slug(self, entity: T) -> str: ...

    @abstractmethod
    def read(self, slug: str) -> T:
        """Load the entity stored under `slug`."""

    @abstractmethod
    def write_file(self, slug: str, entity: T) -> None: ...

    @abstractmethod
    def delete_file(self, slug: str) -> None: ...

    @abstractmethod
    def rename_file(self, old_slug: str, new_slug: str) -> None: ...

    def get_file_path(self, slug: str) -> str:
        """Repo-relative path, e.g. "skills/access-control.md"."""
        return f"{self.directory}/{slug}.{self.file_extension}"

    def get_absolute_path(self, slug: str) -> Path:
        return self.repo_dir / self.get_file_path(slug)

    def exists(self, slug: str) -> bool:
        return self.get_absolute_path(slug).is_file()

    def create_and_commit(self, slug: str, entity: T, commit_message: str, author: GitAuthor) -> str | None:
        """Write a new entity and commit it, refusing to replace an existing file.

        Raises:
            EntityExistsError: If `slug` is already taken.
        """
        if self.exists(slug):
            raise EntityExistsError(f"{self.entity_type} already exists: {self.get_file_path(slug)}")
        return self.save_and_commit(slug, entity, commit_message, author)

    def save_and_commit(self, slug: str, entity: T, commit_message: str, author: GitAuthor) -> str | None:
        """Write the entity and commit it.

        Returns:
            The commit SHA, or None if the file did not change.
        """
        self.write_file(slug, entity)
        git.git_add(self.get_file_path(slug), repo_dir=self.repo_dir)
        return git.commit_staged_changes_if_any(commit_message, author, repo_dir=self.repo_dir)

    def update_and_commit(self, old_slug: str, entity: T, commit_message: str, author: GitAuthor) -> str | None:
        """Write an updated entity, renaming its file if the slug changed."""
        new_slug = self.generate_slug(entity)
        if old_slug != new_slug:
            _logger.info("Renaming %s %s -> %s", self.entity_type, old_slug, new_slug)
            self.rename_file(old_slug, new_slug)
            git.git_add(
                [self.get_file_path(old_slug), self.get_file_path(new_slug)],
                repo_dir=self.repo_dir,
            )

        self.write_file(new_slug, entity)
        git.git_add(self.get_file_path(new_slug), repo_dir=self.repo_dir)
        return git.commit_staged_changes_if_any(commit_message, author, repo_dir=self.repo_dir)

    def delete_and_commit(self, slug: str, commit_message: str, author: GitAuthor) -> str | None:
        self.delete_file(slug)
        git.git_remove(self.get_file_path(slug), repo_dir=self.repo_dir)
        return git.commit_staged_changes_if_any(commit_message, author, repo_dir=self.repo_dir)

    def get_history(self, slug: str, limit: int = 10) -> list[GitCommitInfo]:
        return git.get_file_history(self.get_file_path(slug), limit, repo_dir=self.repo_dir)

    def get_diff(self, slug: str, from_commit: str, to_commit: str = "HEAD") -> str:
        return git.get_file_diff(self.get_file_path(slug), from_commit, to_commit, repo_dir=self.repo_dir)

    def is_clean(self) -> bool:
        return git.is_repo_clean(repo_dir=self.repo_dir)

    def get_current_branch(self) -> str:
        return git.get_current_branch(repo_dir=self.repo_dir)

    def push_to_remote(self, remote: str = "origin", branch: str | None = None) -> None:
        git.push_to_remote(remote, branch, repo_dir=self.repo_dir)
