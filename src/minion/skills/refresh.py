"""Refresh and suggest flows for skills.

Refreshing re-reads a skill's own source URLs and proposes a revision; the
revision is only written once a reviewer accepts it via `apply_refresh`.
Suggesting drafts a brand new skill (or an update of an existing one) from
pasted text, URLs or a conversation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from minion.config import get_effective_speed, get_model
from minion.llm import complete_json
from minion.logging import get_logger
from minion.skills.coherence import round_half_up
from minion.skills.drafts import (
    UPDATE_MODE_REFRESH,
    UPDATE_MODE_SUGGEST,
    ConversationMessage,
    generate_draft_from_messages,
    generate_draft_update,
    generate_skill_draft,
    sanitize_conversation,
)
from minion.skills.models import DraftUpdate, HistoryEntry, Skill, SkillDraft, now_iso
from minion.skills.prompts import build_initial_message, build_source_diff_prompt, load_system_prompt
from minion.sources.fetcher import fetch_url_content
from minion.sources.material import PER_URL_MATERIAL_LENGTH, build_source_material

_logger = get_logger("skills.refresh")

HISTORY_ACTION_REFRESHED = "refreshed"
NO_CHANGES_SUMMARY = "Refreshed from source URLs - no changes needed"
DEFAULT_CHANGE_SUMMARY = "Content updated from source URLs"

SOURCE_DIFF_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["changeLevel", "changePercentage"],
    "properties": {
        "changeLevel": {"enum": ["minimal", "moderate", "significant"]},
        "changePercentage": {"type": "number", "minimum": 0, "maximum": 100},
        "changeSummary": {
            "type": "object",
            "properties": {
                "newTopics": {"type": "array", "items": {"type": "string"}},
                "updatedContent": {"type": "array", "items": {"type": "string"}},
                "removedContent": {"type": "array", "items": {"type": "string"}},
            },
        },
        "recommendation": {"type": "string"},
    },
}


@dataclass
class RefreshOutcome:
    """Result of re-reading a skill's sources.

    `draft` is set only when the model found changes; the skill itself is
    left untouched in that case.
    """

    has_changes: bool
    message: str = ""
    draft: DraftUpdate | None = None
    original_title: str = ""
    original_content: str = ""

    def to_dict(self) -> dict[str, Any]:
        if not self.has_changes or self.draft is None:
            return {"hasChanges": False, "message": self.message}
        return {
            "hasChanges": True,
            "draft": {
                "title": self.draft.title,
                "content": self.draft.content,
                "changeHighlights": self.draft.change_highlights,
                "summary": self.draft.summary,
            },
            "originalTitle": self.original_title,
            "originalContent": self.original_content,
        }


@dataclass
class ChangeSummary:
    new_topics: list[str] = field(default_factory=list)
    updated_content: list[str] = field(default_factory=list)
    removed_content: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "newTopics": self.new_topics,
            "updatedContent": self.updated_content,
            "removedContent": self.removed_content,
        }


@dataclass
class SourceAnalysis:
    """How far a candidate source URL diverges from a skill."""

    accessible: bool
    change_level: str
    change_percentage: int
    change_summary: ChangeSummary
    recommendation: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "accessible": self.accessible,
            "changeLevel": self.change_level,
            "changePercentage": self.change_percentage,
            "changeSummary": self.change_summary.to_dict(),
            "recommendation": self.recommendation,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class SuggestResult:
    """Either a new-skill draft or an update draft for an existing skill."""

    draft: SkillDraft | None = None
    update: DraftUpdate | None = None
    initial_message: str | None = None
    source_urls: list[str] = field(default_factory=list)

    @property
    def update_mode(self) -> bool:
        return self.update is not None

    def to_dict(self) -> dict[str, Any]:
        if self.update is not None:
            return {"updateMode": True, "draft": self.update.to_dict(), "sourceUrls": self.source_urls}
        data: dict[str, Any] = {"draft": self.draft.to_dict() if self.draft else None}
        if self.initial_message:
            data["initialMessage"] = self.initial_message
        return data


def _stamp_sources(skill: Skill, when: str) -> None:
    for source in skill.sources:
        source.last_fetched = when


def refresh_skill(skill: Skill, *, user: str | None = None) -> RefreshOutcome:
    """Re-read a skill's source URLs and propose an updated draft.

    With no changes the skill is stamped in place (source fetch times,
    `last_refreshed_at`, a `refreshed` history entry) and the caller should
    persist it. With changes the skill is not modified.

    Raises:
        ValueError: If the skill has no source URLs.
        SourceFetchError: If none of the URLs could be loaded.
        LLMError, LLMResponseError: If the draft update fails.
    """
    urls = skill.source_urls
    if not urls:
        raise ValueError("This skill has no source URLs to refresh from")

    material = build_source_material("", urls)
    update = generate_draft_update(
        skill.title,
        skill.content,
        material,
        urls,
        mode=UPDATE_MODE_REFRESH,
        metadata={"skillId": skill.id},
    )

    if not update.has_changes:
        now = now_iso()
        _stamp_sources(skill, now)
        skill.last_refreshed_at = now
        skill.history.append(
            HistoryEntry(date=now, action=HISTORY_ACTION_REFRESHED, summary=NO_CHANGES_SUMMARY, user=user)
        )
        return RefreshOutcome(
            has_changes=False,
            message="Source URLs re-fetched. No updates needed - skill is already up to date.",
        )

    return RefreshOutcome(
        has_changes=True,
        draft=update,
        original_title=skill.title,
        original_content=skill.content,
    )


def apply_refresh(
    skill: Skill,
    title: str,
    content: str,
    change_highlights: list[str] | None = None,
    *,
    user: str | None = None,
) -> Skill:
    """Apply a reviewed refresh draft to the skill in place.

    Raises:
        ValueError: If title or content is empty.
    """
    if not title or not title.strip() or not content or not content.strip():
        raise ValueError("title and content are required")

    now = now_iso()
    highlights = [h for h in change_highlights or [] if h]
    change_summary = "; ".join(highlights) if highlights else DEFAULT_CHANGE_SUMMARY

    skill.title = title.strip()
    skill.content = content.strip()
    skill.last_refreshed_at = now
    _stamp_sources(skill, now)
    skill.history.append(
        HistoryEntry(date=now, action=HISTORY_ACTION_REFRESHED, summary=f"Refreshed: {change_summary}", user=user)
    )
    return skill


def _unreachable(error: str) -> SourceAnalysis:
    return SourceAnalysis(
        accessible=False,
        change_level="unknown",
        change_percentage=0,
        change_summary=ChangeSummary(),
        recommendation="Unable to analyze - URL is not accessible",
        error=error,
    )


def analyze_source_url(skill: Skill, url: str) -> SourceAnalysis:
    """Compare the content behind `url` with a skill before adding it as a source.

    An unreachable URL is reported (accessible=False, change level
    "unknown") rather than raised.

    Raises:
        ValueError: If `url` is blank.
        LLMError, LLMResponseError: If the comparison call fails.
    """
    if not url or not url.strip():
        raise ValueError("URL is required")
    url = url.strip()

    content = fetch_url_content(url, max_length=PER_URL_MATERIAL_LENGTH)
    if not content:
        return _unreachable("Unable to fetch content from URL")

    feature = "skills-source-analysis"
    data = complete_json(
        build_source_diff_prompt(skill.title, skill.content, content, url),
        system_prompt=load_system_prompt("source_url_analysis"),
        feature=feature,
        model=get_model(get_effective_speed(feature)),
        schema=SOURCE_DIFF_SCHEMA,
        metadata={"skillId": skill.id, "url": url},
    )
    summary = data.get("changeSummary") or {}
    return SourceAnalysis(
        accessible=True,
        change_level=data["changeLevel"],
        change_percentage=round_half_up(data["changePercentage"]),
        change_summary=ChangeSummary(
            new_topics=list(summary.get("newTopics") or []),
            updated_content=list(summary.get("updatedContent") or []),
            removed_content=list(summary.get("removedContent") or []),
        ),
        recommendation=str(data.get("recommendation") or ""),
    )


def suggest_skill(
    source_text: str = "",
    source_urls: list[str] | None = None,
    *,
    prompt: str | None = None,
    conversation: list[ConversationMessage | dict[str, Any]] | None = None,
    existing_skill: Skill | None = None,
) -> SuggestResult:
    """Draft a skill from pasted text, URLs or a conversation.

    Precedence: an existing skill plus new material yields a conservative
    update draft; otherwise a conversation is continued; otherwise the
    material is drafted into a new skill.

    Raises:
        ValueError: If no text, URL or conversation message is given.
        SourceFetchError: If the supplied sources could not be loaded.
        LLMError, LLMResponseError: If the draft call fails.
    """
    text = (source_text or "").strip()
    urls = [u.strip() for u in source_urls or [] if u and u.strip()]
    messages = sanitize_conversation(conversation or [])
    if not text and not urls and not messages:
        raise ValueError("Provide conversationMessages or at least one valid source entry.")

    system_prompt = (prompt or "").strip() or load_system_prompt("skills")

    if existing_skill is not None and (text or urls):
        material = build_source_material(text, urls)
        update = generate_draft_update(
            existing_skill.title,
            existing_skill.content,
            material,
            urls,
            mode=UPDATE_MODE_SUGGEST,
            metadata={"skillId": existing_skill.id},
        )
        return SuggestResult(update=update, source_urls=urls)

    if messages:
        draft = generate_draft_from_messages(messages, system_prompt, metadata={"mode": "create-conversation"})
        return SuggestResult(draft=draft)

    material = build_source_material(text, urls)
    draft = generate_skill_draft(
        material,
        prompt=system_prompt,
        metadata={"mode": "create-source", "urlCount": len(urls)},
    )
    _logger.info("Drafted %r from %d URL(s)", draft.title, len(urls))
    return SuggestResult(draft=draft, initial_message=build_initial_message(material), source_urls=urls)
