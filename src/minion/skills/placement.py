"""Placement of newly submitted source URLs in the skill library.

Given URLs a user wants to turn into knowledge, decide whether they extend
an existing skill, deserve a new one, or span several topics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from minion.config import get_effective_speed, get_model
from minion.errors import SourceFetchError
from minion.llm import complete_json
from minion.logging import get_logger
from minion.parallel import run_parallel
from minion.skills.models import Skill
from minion.skills.prompts import build_placement_prompt, load_system_prompt
from minion.skills.volume import SplitSuggestion
from minion.sources.fetcher import fetch_url_content
from minion.sources.material import SECTION_SEPARATOR

_logger = get_logger("skills.placement")

FEATURE = "skills-analyze"
ANALYZER_USER_AGENT = "GRCMinionAnalyzer/1.0"
MAX_URLS = 10
PER_URL_LENGTH = 5_000
TOTAL_LENGTH = 30_000
PREVIEW_LENGTH = 200

ACTION_CREATE_NEW = "create_new"
ACTION_UPDATE_EXISTING = "update_existing"
ACTION_SPLIT_TOPICS = "split_topics"

PLACEMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["suggestion"],
    "properties": {
        "suggestion": {
            "type": "object",
            "required": ["action"],
            "properties": {
                "action": {"enum": [ACTION_CREATE_NEW, ACTION_UPDATE_EXISTING, ACTION_SPLIT_TOPICS]},
                "existingSkillId": {"type": ["string", "null"]},
                "existingSkillTitle": {"type": ["string", "null"]},
                "suggestedTitle": {"type": ["string", "null"]},
                "suggestedTags": {"type": "array", "items": {"type": "string"}},
                "splitSuggestions": {"type": "array", "items": {"type": "object"}},
                "reason": {"type": "string"},
            },
        },
        "sourcePreview": {"type": "string"},
    },
}


@dataclass
class UrlMatch:
    """Input URLs that an existing skill was already built from."""

    skill_id: str
    skill_title: str
    matched_urls: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"skillId": self.skill_id, "skillTitle": self.skill_title, "matchedUrls": self.matched_urls}


@dataclass
class PlacementSuggestion:
    action: str
    reason: str = ""
    existing_skill_id: str | None = None
    existing_skill_title: str | None = None
    suggested_title: str | None = None
    suggested_tags: list[str] = field(default_factory=list)
    split_suggestions: list[SplitSuggestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"action": self.action, "reason": self.reason}
        if self.existing_skill_id:
            data["existingSkillId"] = self.existing_skill_id
            data["existingSkillTitle"] = self.existing_skill_title
        if self.suggested_title:
            data["suggestedTitle"] = self.suggested_title
        if self.suggested_tags:
            data["suggestedTags"] = self.suggested_tags
        if self.split_suggestions:
            data["splitSuggestions"] = [s.to_dict() for s in self.split_suggestions]
        return data


@dataclass
class PlacementResult:
    suggestion: PlacementSuggestion
    source_preview: str
    url_already_used: UrlMatch | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"suggestion": self.suggestion.to_dict(), "sourcePreview": self.source_preview}
        if self.url_already_used:
            data["urlAlreadyUsed"] = self.url_already_used.to_dict()
        return data


def normalize_url(url: str) -> str:
    return url.strip().lower().rstrip("/")


def find_url_matches(urls: list[str], existing_skills: list[Skill]) -> UrlMatch | None:
    """First skill (in list order) whose sources include any of `urls`."""
    for skill in existing_skills:
        known = {normalize_url(u) for u in skill.source_urls}
        if not known:
            continue
        matched = [u for u in urls if normalize_url(u) in known]
        if matched:
            return UrlMatch(skill_id=skill.id, skill_title=skill.title, matched_urls=matched)
    return None


def summarize_skills(skills: list[Skill]) -> str:
    if not skills:
        return "No existing skills in the knowledge base."
    return "\n\n".join(
        f'- "{s.title}" (ID: {s.id})\n'
        f"  Tags: {', '.join(s.categories) or 'none'}\n"
        f"  Preview: {s.content[:PREVIEW_LENGTH]}..."
        for s in skills
    )


def _fetch_preview(url: str) -> str | None:
    text = fetch_url_content(url, max_length=PER_URL_LENGTH, user_agent=ANALYZER_USER_AGENT)
    return f"Source: {url}\n{text}" if text else None


def _suggestion_from_dict(data: dict[str, Any]) -> PlacementSuggestion:
    return PlacementSuggestion(
        action=data["action"],
        reason=str(data.get("reason") or ""),
        existing_skill_id=data.get("existingSkillId"),
        existing_skill_title=data.get("existingSkillTitle"),
        suggested_title=data.get("suggestedTitle"),
        suggested_tags=[str(t) for t in data.get("suggestedTags") or []],
        split_suggestions=[
            SplitSuggestion.from_dict(s) for s in data.get("splitSuggestions") or [] if isinstance(s, dict)
        ],
    )


def suggest_placement(urls: list[str], existing_skills: list[Skill]) -> PlacementResult:
    """Suggest where the content behind `urls` belongs.

    When every URL was already used to build one skill, the answer is
    forced to update that skill whatever the model said; a partial match
    is reported alongside the model's suggestion.

    Raises:
        ValueError: If no URL is given.
        SourceFetchError: If none of the URLs could be fetched.
        LLMError, LLMResponseError: If the analysis call fails.
    """
    urls = [u.strip() for u in urls if u and u.strip()]
    if not urls:
        raise ValueError("Provide at least one source URL.")

    match = find_url_matches(urls, existing_skills)

    sections = [s for s in run_parallel(_fetch_preview, urls[:MAX_URLS]) if s]
    if not sections:
        raise SourceFetchError("Could not fetch any content from the provided URLs.")
    source_content = SECTION_SEPARATOR.join(sections)[:TOTAL_LENGTH]

    data = complete_json(
        build_placement_prompt(summarize_skills(existing_skills), urls, source_content),
        system_prompt=load_system_prompt("skill_analyze"),
        feature=FEATURE,
        model=get_model(get_effective_speed(FEATURE)),
        schema=PLACEMENT_SCHEMA,
        metadata={"urlCount": len(urls), "existingSkillCount": len(existing_skills)},
    )
    result = PlacementResult(
        suggestion=_suggestion_from_dict(data["suggestion"]),
        source_preview=str(data.get("sourcePreview") or ""),
        url_already_used=match,
    )

    if match and len(match.matched_urls) == len(urls):
        _logger.info("All URLs already belong to %r; forcing update", match.skill_title)
        result.suggestion.action = ACTION_UPDATE_EXISTING
        result.suggestion.existing_skill_id = match.skill_id
        result.suggestion.existing_skill_title = match.skill_title
        result.suggestion.reason = (
            f'These URLs were previously used to build "{match.skill_title}". '
            "Updating that skill will refresh it with the latest content."
        )
    return result
