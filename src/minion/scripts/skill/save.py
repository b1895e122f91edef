"""Persisting skills from CLI commands, optionally committing to git."""

from __future__ import annotations

from pathlib import Path

from minion.config import get_git_author
from minion.gitsync.git import GitAuthor
from minion.gitsync.services import SkillGitSyncService
from minion.gitsync.synclog import SyncLogStore, sync_entity
from minion.logging import get_logger
from minion.skills.models import Skill
from minion.errors import EntityExistsError
from minion.skills.store import get_skill_slug, rename_skill_file, skill_file_exists, write_skill_file

_logger = get_logger("scripts.skill.save")


def default_author() -> GitAuthor:
    name, email = get_git_author()
    return GitAuthor(name=name, email=email)


def save_skill(
    skill: Skill,
    old_slug: str | None,
    *,
    operation: str,
    commit_message: str,
    commit: bool = False,
    synced_by: str | None = None,
    repo_dir: Path | None = None,
) -> tuple[str, str | None]:
    """Write a skill, renaming its file when the title changed.

    With `commit`, the write goes through the skill git sync service and is
    recorded in the sync log.

    Raises:
        EntityExistsError: If a create (or a rename) would replace another
            skill's file.

    Returns:
        (slug the skill was written under, commit SHA or None).
    """
    new_slug = get_skill_slug(skill.title)
    if commit:
        service = SkillGitSyncService(repo_dir)
        sha = sync_entity(
            service,
            SyncLogStore(),
            entity_id=skill.id,
            operation=operation,
            commit_message=commit_message,
            author=default_author(),
            entity=skill,
            slug=old_slug,
            synced_by=synced_by,
        )
        return new_slug, sha

    skills_dir = (repo_dir / "skills") if repo_dir else None
    if operation == "create" and skill_file_exists(new_slug, skills_dir):
        raise EntityExistsError(f"A skill already exists at {new_slug}.md")
    if old_slug and old_slug != new_slug:
        rename_skill_file(old_slug, new_slug, skills_dir)
    skill.slug = new_slug
    write_skill_file(new_slug, skill, skills_dir)
    _logger.info("Saved skill %s", new_slug)
    return new_slug, None
