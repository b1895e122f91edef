"""Skill files in the content repository.

Skills live in `skills/<slug>.md` as markdown with YAML frontmatter. All
functions take an optional `skills_dir`; the default comes from
`minion.config.get_skills_dir()`.
"""

from __future__ import annotations

from pathlib import Path

from minion.config import get_skills_dir
from minion.errors import EntityExistsError, SkillNotFoundError
from minion.frontmatter import (
    get_slug,
    list_markdown_slugs,
    read_frontmatter_file,
    write_frontmatter_file,
)
from minion.logging import get_logger
from minion.skills.models import Skill, now_iso

_logger = get_logger("skills.store")


def get_skill_slug(title: str) -> str:
    """Slug for a skill title."""
    return get_slug(title)


def get_skill_path(slug: str, skills_dir: Path | None = None) -> Path:
    """Path of a skill file."""
    return (skills_dir or get_skills_dir()) / f"{slug}.md"


def read_skill_file(slug: str, skills_dir: Path | None = None) -> Skill:
    """Read a skill.

    Raises:
        SkillNotFoundError: If `<slug>.md` does not exist.
    """
    path = get_skill_path(slug, skills_dir)
    try:
        data, body = read_frontmatter_file(path)
    except SkillNotFoundError:
        raise SkillNotFoundError(f"Skill file not found: {slug}.md") from None
    return Skill.from_frontmatter(slug, data, body)


def write_skill_file(slug: str, skill: Skill, skills_dir: Path | None = None) -> Path:
    """Write a skill, stamping its `updated` time.

    Returns:
        Path of the written file.
    """
    skill.updated = now_iso()
    path = get_skill_path(slug, skills_dir)
    write_frontmatter_file(path, skill.frontmatter(), skill.content)
    _logger.debug("Wrote skill %s", path)
    return path


def list_skill_files(skills_dir: Path | None = None) -> list[str]:
    """Slugs of all skills (README.md excluded)."""
    return list_markdown_slugs(skills_dir or get_skills_dir())


def load_all_skills(skills_dir: Path | None = None) -> list[Skill]:
    """Read every skill, skipping files that vanish mid-listing."""
    skills = []
    for slug in list_skill_files(skills_dir):
        try:
            skills.append(read_skill_file(slug, skills_dir))
        except SkillNotFoundError:
            continue
    return skills


def skill_file_exists(slug: str, skills_dir: Path | None = None) -> bool:
    return get_skill_path(slug, skills_dir).is_file()


def delete_skill_file(slug: str, skills_dir: Path | None = None) -> None:
    """Delete a skill file.

    Raises:
        SkillNotFoundError: If the file does not exist.
    """
    path = get_skill_path(slug, skills_dir)
    try:
        path.unlink()
    except FileNotFoundError:
        raise SkillNotFoundError(f"Skill file not found: {slug}.md") from None


def rename_skill_file(old_slug: str, new_slug: str, skills_dir: Path | None = None) -> None:
    """Rename a skill file after a title change (no-op for equal slugs).

    Raises:
        SkillNotFoundError: If the old file does not exist.
        EntityExistsError: If another skill already uses `new_slug`.
    """
    if old_slug == new_slug:
        return
    old_path = get_skill_path(old_slug, skills_dir)
    if not old_path.exists():
        raise SkillNotFoundError(f"Skill file not found: {old_slug}.md")
    new_path = get_skill_path(new_slug, skills_dir)
    if new_path.exists():
        raise EntityExistsError(f"A skill already exists at {new_slug}.md")
    old_path.rename(new_path)
