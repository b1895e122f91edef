"""Volume analysis: has a skill grown enough to be split?"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from minion.config import get_effective_speed, get_model
from minion.llm import complete_json
from minion.logging import get_logger
from minion.skills.prompts import build_volume_prompt, load_system_prompt

_logger = get_logger("skills.volume")

FEATURE = "skills-volume"
MIN_SPLIT_CHARS = 6_000
MAX_SPLITS = 4

SPLIT_SUGGESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["title"],
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "relevantUrls": {"type": "array", "items": {"type": "string"}},
    },
}

VOLUME_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["shouldSplit"],
    "properties": {
        "shouldSplit": {"type": "boolean"},
        "reason": {"type": "string"},
        "suggestedSplits": {"type": "array", "items": SPLIT_SUGGESTION_SCHEMA},
    },
}


@dataclass
class SplitSuggestion:
    """One focused skill proposed out of a larger one."""

    title: str
    description: str = ""
    relevant_urls: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "description": self.description, "relevantUrls": self.relevant_urls}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SplitSuggestion:
        return cls(
            title=str(data.get("title", "")).strip(),
            description=str(data.get("description") or "").strip(),
            relevant_urls=[str(u) for u in data.get("relevantUrls") or [] if u],
        )


@dataclass
class VolumeAnalysis:
    should_split: bool
    reason: str
    suggested_splits: list[SplitSuggestion]
    content_length: int
    source_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "shouldSplit": self.should_split,
            "reason": self.reason,
            "suggestedSplits": [s.to_dict() for s in self.suggested_splits],
            "contentLength": self.content_length,
            "sourceCount": self.source_count,
        }


def analyze_volume(title: str, content: str, source_urls: list[str] | None = None) -> VolumeAnalysis:
    """Judge whether a skill covers several distinct topics.

    Content shorter than MIN_SPLIT_CHARS is never split and costs no LLM
    call. A split verdict with fewer than two usable suggestions is
    reported as no split.

    Raises:
        LLMError, LLMResponseError: If the analysis call fails.
    """
    urls = [u for u in source_urls or [] if u]
    if len(content) < MIN_SPLIT_CHARS:
        return VolumeAnalysis(
            should_split=False,
            reason=f"Content is under {MIN_SPLIT_CHARS} characters; no split needed",
            suggested_splits=[],
            content_length=len(content),
            source_count=len(urls),
        )

    data = complete_json(
        build_volume_prompt(title, content, urls),
        system_prompt=load_system_prompt("skill_volume"),
        feature=FEATURE,
        model=get_model(get_effective_speed(FEATURE)),
        schema=VOLUME_SCHEMA,
        metadata={"title": title, "contentLength": len(content), "sourceCount": len(urls)},
    )

    splits = [SplitSuggestion.from_dict(s) for s in data.get("suggestedSplits") or []]
    splits = [s for s in splits if s.title][:MAX_SPLITS]
    should_split = bool(data["shouldSplit"])
    reason = str(data.get("reason") or "").strip()

    if should_split and len(splits) < 2:
        _logger.info("Split suggested for %r with %d usable suggestions; ignoring", title, len(splits))
        should_split = False
    if not should_split:
        splits = []

    return VolumeAnalysis(
        should_split=should_split,
        reason=reason,
        suggested_splits=splits,
        content_length=len(content),
        source_count=len(urls),
    )
