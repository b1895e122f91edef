"""Library-wide analysis: which skills overlap, sprawl or are mislabeled."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from minion.config import get_effective_speed, get_model
from minion.llm import complete_json
from minion.logging import get_logger
from minion.skills.models import Skill
from minion.skills.prompts import build_library_analysis_prompt, load_system_prompt

_logger = get_logger("skills.library")

FEATURE = "skills-library-analysis"
PREVIEW_CHARS = 500
MAX_RECOMMENDATIONS = 10
DEFAULT_HEALTH_SCORE = 75

RECOMMENDATION_TYPES = ("merge", "split", "rename", "retag")
PRIORITIES = ("high", "medium", "low")

LIBRARY_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "recommendations": {"type": "array", "items": {"type": "object"}},
        "summary": {"type": "string"},
        "healthScore": {"type": "number"},
    },
}


@dataclass
class LibraryRecommendation:
    type: str
    priority: str
    title: str
    description: str = ""
    affected_skill_ids: list[str] = field(default_factory=list)
    affected_skill_titles: list[str] = field(default_factory=list)
    suggested_action: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "affectedSkillIds": self.affected_skill_ids,
            "affectedSkillTitles": self.affected_skill_titles,
        }
        if self.suggested_action:
            data["suggestedAction"] = self.suggested_action
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryRecommendation:
        """Build from a model answer, defaulting anything missing or unknown."""
        kind = data.get("type")
        priority = data.get("priority")
        ids = data.get("affectedSkillIds")
        titles = data.get("affectedSkillTitles")
        action = data.get("suggestedAction")
        return cls(
            type=kind if kind in RECOMMENDATION_TYPES else "merge",
            priority=priority if priority in PRIORITIES else "medium",
            title=str(data.get("title") or "Unnamed recommendation"),
            description=str(data.get("description") or ""),
            affected_skill_ids=[str(i) for i in ids] if isinstance(ids, list) else [],
            affected_skill_titles=[str(t) for t in titles] if isinstance(titles, list) else [],
            suggested_action=str(action) if action else None,
        )


@dataclass
class LibraryAnalysis:
    recommendations: list[LibraryRecommendation]
    summary: str
    health_score: float
    skill_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "summary": self.summary,
            "healthScore": self.health_score,
            "skillCount": self.skill_count,
        }


def summarize_skill(skill: Skill, index: int) -> str:
    """One numbered entry of the library listing sent to the model."""
    tags = ", ".join(skill.categories) or "none"
    return (
        f"[{index + 1}] ID: {skill.id}\n"
        f"Title: {skill.title}\n"
        f"Tags: {tags}\n"
        f"Content Preview: {skill.content[:PREVIEW_CHARS]}"
    )


def _health_score(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_HEALTH_SCORE
    return max(0, min(100, value))


def analyze_library(skills: list[Skill]) -> LibraryAnalysis:
    """Look for redundancy and organization problems across the library.

    Libraries with fewer than two skills are reported healthy without an
    LLM call.

    Raises:
        LLMError, LLMResponseError: If the analysis call fails.
    """
    if not skills:
        return LibraryAnalysis(
            recommendations=[],
            summary="No skills to analyze. Add some skills to your knowledge library first.",
            health_score=100,
            skill_count=0,
        )
    if len(skills) == 1:
        return LibraryAnalysis(
            recommendations=[],
            summary="Only one skill in the library. Add more skills to enable redundancy analysis.",
            health_score=100,
            skill_count=1,
        )

    skills_context = "\n\n---\n\n".join(summarize_skill(s, i) for i, s in enumerate(skills))
    data = complete_json(
        build_library_analysis_prompt(skills_context),
        system_prompt=load_system_prompt("library_analysis"),
        feature=FEATURE,
        model=get_model(get_effective_speed(FEATURE)),
        schema=LIBRARY_ANALYSIS_SCHEMA,
        metadata={"skillCount": len(skills)},
    )

    raw = [r for r in data.get("recommendations") or [] if isinstance(r, dict)]
    recommendations = [LibraryRecommendation.from_dict(r) for r in raw[:MAX_RECOMMENDATIONS]]
    if len(raw) > MAX_RECOMMENDATIONS:
        _logger.info("Dropped %d recommendations over the limit", len(raw) - MAX_RECOMMENDATIONS)

    return LibraryAnalysis(
        recommendations=recommendations,
        summary=str(data.get("summary") or "Analysis complete."),
        health_score=_health_score(data.get("healthScore")),
        skill_count=len(skills),
    )
