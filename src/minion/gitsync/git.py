"""Thin wrappers around the git CLI for the content repository.

Every helper takes an optional `repo_dir`; the default is the content
directory from `minion.config.get_content_dir()`. Paths are relative to the
repository root (e.g. `skills/access-control.md`).
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from minion.config import get_content_dir
from minion.errors import GitError
from minion.logging import get_logger

_logger = get_logger("gitsync.git")

GIT_TIMEOUT_SECONDS = 30
_LOG_FIELD_SEP = "\x1f"
_LOG_FORMAT = _LOG_FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%s"])


@dataclass
class GitAuthor:
    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass
class GitCommitInfo:
    """One entry of a file's git history."""

    sha: str
    author: str
    email: str
    date: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "sha": self.sha,
            "author": self.author,
            "email": self.email,
            "date": self.date,
            "message": self.message,
        }


def _run_git(
    args: list[str],
    *,
    repo_dir: Path | None = None,
    ok_codes: tuple[int, ...] = (0,),
) -> subprocess.CompletedProcess[str]:
    cwd = repo_dir or get_content_dir()
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as e:
        raise GitError(f"git executable not found: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {GIT_TIMEOUT_SECONDS}s") from e

    if result.returncode not in ok_codes:
        stderr = result.stderr.strip()
        _logger.debug("git %s failed (%d): %s", " ".join(args), result.returncode, stderr)
        raise GitError(f"git {args[0]} failed: {stderr or 'exit code ' + str(result.returncode)}", stderr=stderr)
    return result


def git_add(paths: str | list[str], *, repo_dir: Path | None = None) -> None:
    """Stage files (including deletions of paths that no longer exist)."""
    paths = [paths] if isinstance(paths, str) else list(paths)
    if paths:
        _run_git(["add", "-A", "--", *paths], repo_dir=repo_dir)


def git_remove(path: str, *, repo_dir: Path | None = None) -> None:
    """Stage the removal of a file; untracked paths are ignored."""
    _run_git(["rm", "--cached", "--ignore-unmatch", "-q", "--", path], repo_dir=repo_dir)


def commit_staged_changes_if_any(
    message: str,
    author: GitAuthor,
    *,
    repo_dir: Path | None = None,
) -> str | None:
    """Commit whatever is staged.

    Returns:
        The new commit SHA, or None when nothing was staged.
    """
    staged = _run_git(["diff", "--cached", "--quiet"], repo_dir=repo_dir, ok_codes=(0, 1))
    if staged.returncode == 0:
        _logger.info("Nothing staged; skipping commit %r", message)
        return None

    _run_git(
        [
            "-c",
            f"user.name={author.name}",
            "-c",
            f"user.email={author.email}",
            "commit",
            "-q",
            "-m",
            message,
            f"--author={author}",
        ],
        repo_dir=repo_dir,
    )
    sha = _run_git(["rev-parse", "HEAD"], repo_dir=repo_dir).stdout.strip()
    _logger.info("Committed %s: %s", sha[:8], message)
    return sha


def get_file_history(path: str, limit: int = 10, *, repo_dir: Path | None = None) -> list[GitCommitInfo]:
    """Most recent commits touching `path`, newest first."""
    result = _run_git(
        ["log", f"-n{max(1, limit)}", f"--format={_LOG_FORMAT}", "--", path],
        repo_dir=repo_dir,
    )
    commits = []
    for line in result.stdout.splitlines():
        parts = line.split(_LOG_FIELD_SEP)
        if len(parts) != 5:
            continue
        sha, name, email, date, subject = parts
        commits.append(GitCommitInfo(sha=sha, author=name, email=email, date=date, message=subject))
    return commits


def get_file_diff(
    path: str,
    from_commit: str,
    to_commit: str = "HEAD",
    *,
    repo_dir: Path | None = None,
) -> str:
    """Unified diff of `path` between two commits."""
    return _run_git(["diff", from_commit, to_commit, "--", path], repo_dir=repo_dir).stdout


def is_repo_clean(*, repo_dir: Path | None = None) -> bool:
    return not _run_git(["status", "--porcelain"], repo_dir=repo_dir).stdout.strip()


def get_current_branch(*, repo_dir: Path | None = None) -> str:
    return _run_git(["rev-parse", "--abbrev-ref", "HEAD"], repo_dir=repo_dir).stdout.strip()


def push_to_remote(remote: str = "origin", branch: str | None = None, *, repo_dir: Path | None = None) -> None:
    """Push `branch` (default: the current branch) to `remote`."""
    branch = branch or get_current_branch(repo_dir=repo_dir)
    _run_git(["push", remote, branch], repo_dir=repo_dir)
    _logger.info("Pushed %s to %s", branch, remote)
