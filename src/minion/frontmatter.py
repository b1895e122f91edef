"""Markdown files with YAML frontmatter.

Every git-synced entity (skills, customers, templates, prompt blocks) is a
markdown body preceded by a `---` delimited YAML header.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from minion.errors import SkillNotFoundError
from minion.io import read_file, write_file
from minion.logging import get_logger

_logger = get_logger("frontmatter")

_FRONTMATTER_RE = re.compile(r"^---\r?\n(.*?)\r?\n---\r?\n?(.*)$", re.DOTALL)
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


def get_slug(name: str) -> str:
    """Generate a filename-safe slug.

    e.g. "Compliance & Certifications" -> "compliance-and-certifications"
    """
    slug = name.lower().replace("&", "and")
    slug = _SLUG_STRIP_RE.sub("-", slug)
    return slug.strip("-")


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split a document into (frontmatter dict, body).

    Documents without a header, or with a header that is not a YAML mapping,
    return an empty dict and the whole text as body.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        _logger.warning("Failed to parse frontmatter: %s", e)
        return {}, content

    if not isinstance(data, dict):
        return {}, content
    return data, match.group(2)


def render_frontmatter(data: dict[str, Any], body: str) -> str:
    """Render frontmatter and body into one markdown document."""
    header = yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    ).strip()
    body = body.strip()
    return f"---\n{header}\n---\n\n{body}\n" if body else f"---\n{header}\n---\n"


def read_frontmatter_file(path: Path) -> tuple[dict[str, Any], str]:
    """Read and parse a frontmatter document.

    Raises:
        SkillNotFoundError: If the file does not exist.
    """
    content = read_file(path)
    if content is None:
        raise SkillNotFoundError(f"File not found: {path.name}")
    return parse_frontmatter(content)


def write_frontmatter_file(path: Path, data: dict[str, Any], body: str) -> None:
    """Atomically write a frontmatter document."""
    write_file(path, render_frontmatter(data, body))


def list_markdown_slugs(directory: Path) -> list[str]:
    """Slugs of all `.md` files in a directory (README.md excluded), sorted."""
    if not directory.is_dir():
        return []
    return sorted(
        p.stem for p in directory.iterdir() if p.is_file() and p.suffix == ".md" and p.name != "README.md"
    )
