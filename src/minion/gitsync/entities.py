"""Non-skill entities stored in the content repository.

Customers, collateral templates and prompt blocks are markdown files with
YAML frontmatter, like skills. Prompt blocks keep one body per context,
separated by `---variant:<context>---` marker lines; the text before the
first marker is the `default` variant.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from minion.errors import EntityExistsError, SkillNotFoundError
from minion.frontmatter import read_frontmatter_file, write_frontmatter_file
from minion.skills.models import Owner, SourceUrl, now_iso

_VARIANT_SPLIT_RE = re.compile(r"^---variant:(\w+)---[ \t]*\n?", re.MULTILINE)

DEFAULT_VARIANT = "default"


@dataclass
class Customer:
    """A customer profile."""

    id: str
    slug: str
    name: str
    content: str
    industry: str | None = None
    website: str | None = None
    region: str | None = None
    tier: str | None = None
    owners: list[Owner] = field(default_factory=list)
    sources: list[SourceUrl] = field(default_factory=list)
    considerations: list[str] = field(default_factory=list)
    created: str = field(default_factory=now_iso)
    updated: str = field(default_factory=now_iso)
    active: bool = True

    def frontmatter(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "industry": self.industry,
            "website": self.website,
            "created": self.created,
            "updated": self.updated,
            "owners": [o.to_dict() for o in self.owners],
            "sources": [s.to_dict() for s in self.sources],
            "considerations": list(self.considerations),
            "active": self.active,
        }
        if self.region:
            data["region"] = self.region
        if self.tier:
            data["tier"] = self.tier
        return data

    @classmethod
    def from_frontmatter(cls, slug: str, data: dict[str, Any], body: str) -> Customer:
        return cls(
            id=str(data.get("id") or slug),
            slug=slug,
            name=str(data.get("name") or slug),
            content=body.strip(),
            industry=data.get("industry"),
            website=data.get("website"),
            region=data.get("region"),
            tier=data.get("tier"),
            owners=[Owner.from_dict(o) for o in data.get("owners") or [] if isinstance(o, dict)],
            sources=[SourceUrl.from_dict(s) for s in data.get("sources") or [] if isinstance(s, dict)],
            considerations=[str(c) for c in data.get("considerations") or []],
            created=str(data.get("created") or now_iso()),
            updated=str(data.get("updated") or now_iso()),
            active=data.get("active") is not False,
        )


@dataclass
class Template:
    """A collateral template with `{{placeholder}}` markers."""

    id: str
    slug: str
    name: str
    content: str
    description: str | None = None
    category: str | None = None
    output_format: str = "markdown"
    placeholder_mappings: list[dict[str, Any]] = field(default_factory=list)
    is_active: bool = True
    sort_order: int = 0
    created: str = field(default_factory=now_iso)
    updated: str = field(default_factory=now_iso)
    created_by: str | None = None
    updated_by: str | None = None

    def frontmatter(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "outputFormat": self.output_format,
            "isActive": self.is_active,
            "sortOrder": self.sort_order,
            "created": self.created,
            "updated": self.updated,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
        }
        if self.placeholder_mappings:
            data["placeholderMappings"] = self.placeholder_mappings
        return data

    @classmethod
    def from_frontmatter(cls, slug: str, data: dict[str, Any], body: str) -> Template:
        return cls(
            id=str(data.get("id") or slug),
            slug=str(data.get("slug") or slug),
            name=str(data.get("name") or slug),
            content=body.strip(),
            description=data.get("description"),
            category=data.get("category"),
            output_format=str(data.get("outputFormat") or "markdown"),
            placeholder_mappings=[m for m in data.get("placeholderMappings") or [] if isinstance(m, dict)],
            is_active=data.get("isActive") is not False,
            sort_order=int(data.get("sortOrder") or 0),
            created=str(data.get("created") or now_iso()),
            updated=str(data.get("updated") or now_iso()),
            created_by=data.get("createdBy"),
            updated_by=data.get("updatedBy"),
        )


@dataclass
class PromptBlock:
    """A reusable prompt section with per-context variants."""

    id: str
    name: str
    description: str = ""
    tier: int = 3
    variants: dict[str, str] = field(default_factory=lambda: {DEFAULT_VARIANT: ""})
    created: str = field(default_factory=now_iso)
    updated: str = field(default_factory=now_iso)
    updated_by: str | None = None

    def frontmatter(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tier": self.tier,
            "created": self.created,
            "updated": self.updated,
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_frontmatter(cls, slug: str, data: dict[str, Any], body: str) -> PromptBlock:
        return cls(
            id=str(data.get("id") or slug),
            name=str(data.get("name") or slug),
            description=str(data.get("description") or ""),
            tier=int(data.get("tier") or 3),
            variants=parse_variants(body),
            created=str(data.get("created") or now_iso()),
            updated=str(data.get("updated") or now_iso()),
            updated_by=data.get("updatedBy"),
        )


def parse_variants(content: str) -> dict[str, str]:
    """Split a block body on variant markers.

    Variants with empty bodies are dropped; `default` is always present.
    """
    parts = _VARIANT_SPLIT_RE.split(content)
    variants = {DEFAULT_VARIANT: parts[0].strip()}
    for i in range(1, len(parts) - 1, 2):
        context, body = parts[i], parts[i + 1].strip()
        if context and body:
            variants[context] = body
    return variants


def serialize_variants(variants: dict[str, str]) -> str:
    """Inverse of parse_variants: default first, then marked variants."""
    parts = []
    if variants.get(DEFAULT_VARIANT):
        parts.append(variants[DEFAULT_VARIANT])
    for context, body in variants.items():
        if context != DEFAULT_VARIANT and body:
            parts.append(f"---variant:{context}---\n\n{body}")
    return "\n\n".join(parts)


def read_customer_file(path: Path) -> Customer:
    data, body = read_frontmatter_file(path)
    return Customer.from_frontmatter(path.stem, data, body)


def write_customer_file(path: Path, customer: Customer) -> None:
    customer.updated = now_iso()
    write_frontmatter_file(path, customer.frontmatter(), customer.content)


def read_template_file(path: Path) -> Template:
    data, body = read_frontmatter_file(path)
    return Template.from_frontmatter(path.stem, data, body)


def write_template_file(path: Path, template: Template) -> None:
    template.updated = now_iso()
    template.slug = template.slug or path.stem
    write_frontmatter_file(path, template.frontmatter(), template.content)


def read_prompt_block_file(path: Path) -> PromptBlock:
    data, body = read_frontmatter_file(path)
    return PromptBlock.from_frontmatter(path.stem, data, body)


def write_prompt_block_file(path: Path, block: PromptBlock) -> None:
    block.updated = now_iso()
    write_frontmatter_file(path, block.frontmatter(), serialize_variants(block.variants))


def delete_entity_file(path: Path) -> None:
    """Delete an entity file.

    Raises:
        SkillNotFoundError: If the file does not exist.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        raise SkillNotFoundError(f"File not found: {path.name}") from None


def rename_entity_file(old_path: Path, new_path: Path) -> None:
    if old_path == new_path:
        return
    if not old_path.exists():
        raise SkillNotFoundError(f"File not found: {old_path.name}")
    if new_path.exists():
        raise EntityExistsError(f"File already exists: {new_path.name}")
    old_path.rename(new_path)
