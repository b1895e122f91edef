"""Skill data types.

A skill is a titled markdown knowledge snippet plus the metadata that
travels with it in the frontmatter of `skills/<slug>.md`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


@dataclass
class Owner:
    """Person responsible for a skill."""

    name: str
    email: str | None = None
    user_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.email:
            data["email"] = self.email
        if self.user_id:
            data["userId"] = self.user_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Owner:
        return cls(name=str(data.get("name", "")), email=data.get("email"), user_id=data.get("userId"))


@dataclass
class SourceUrl:
    """A URL a skill was built from."""

    url: str
    added_at: str = field(default_factory=now_iso)
    last_fetched: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "addedAt": self.added_at}
        if self.last_fetched:
            data["lastFetched"] = self.last_fetched
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceUrl:
        return cls(
            url=str(data.get("url", "")),
            added_at=str(data.get("addedAt") or now_iso()),
            last_fetched=data.get("lastFetched"),
        )


@dataclass
class HistoryEntry:
    """One line of a skill's change history."""

    date: str
    action: str
    summary: str
    user: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"date": self.date, "action": self.action, "summary": self.summary}
        if self.user:
            data["user"] = self.user
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        return cls(
            date=str(data.get("date", "")),
            action=str(data.get("action", "")),
            summary=str(data.get("summary", "")),
            user=data.get("user"),
        )


@dataclass
class Skill:
    """A stored knowledge skill."""

    id: str
    slug: str
    title: str
    content: str
    categories: list[str] = field(default_factory=list)
    owners: list[Owner] = field(default_factory=list)
    sources: list[SourceUrl] = field(default_factory=list)
    created: str = field(default_factory=now_iso)
    updated: str = field(default_factory=now_iso)
    active: bool = True
    history: list[HistoryEntry] = field(default_factory=list)
    last_refreshed_at: str | None = None

    @property
    def source_urls(self) -> list[str]:
        return [s.url for s in self.sources if s.url]

    def frontmatter(self) -> dict[str, Any]:
        """Frontmatter mapping written above the skill content."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "categories": list(self.categories),
            "created": self.created,
            "updated": self.updated,
            "owners": [o.to_dict() for o in self.owners],
            "sources": [s.to_dict() for s in self.sources],
            "active": self.active,
        }
        if self.last_refreshed_at:
            data["lastRefreshedAt"] = self.last_refreshed_at
        if self.history:
            data["history"] = [h.to_dict() for h in self.history]
        return data

    @classmethod
    def from_frontmatter(cls, slug: str, data: dict[str, Any], body: str) -> Skill:
        return cls(
            id=str(data.get("id") or slug),
            slug=slug,
            title=str(data.get("title") or slug),
            content=body.strip(),
            categories=_str_list(data.get("categories")),
            owners=[Owner.from_dict(o) for o in data.get("owners") or [] if isinstance(o, dict)],
            sources=[SourceUrl.from_dict(s) for s in data.get("sources") or [] if isinstance(s, dict)],
            created=str(data.get("created") or now_iso()),
            updated=str(data.get("updated") or now_iso()),
            # Missing flag means active
            active=data.get("active") is not False,
            history=[HistoryEntry.from_dict(h) for h in data.get("history") or [] if isinstance(h, dict)],
            last_refreshed_at=data.get("lastRefreshedAt"),
        )


@dataclass
class SkillDraft:
    """A title/content pair proposed by the LLM."""

    title: str
    content: str
    source_mapping: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title, "content": self.content}
        if self.source_mapping:
            data["sourceMapping"] = self.source_mapping
        return data


@dataclass
class DraftUpdate:
    """Proposed revision of an existing skill."""

    has_changes: bool
    summary: str
    title: str
    content: str
    change_highlights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasChanges": self.has_changes,
            "summary": self.summary,
            "title": self.title,
            "content": self.content,
            "changeHighlights": self.change_highlights,
        }
