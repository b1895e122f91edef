"""Coherence analysis for groups of sources about to become one skill.

Finds contradictions between sources grouped under a single topic before a
skill is created from them.

Strategy by group size:
- 1 source: nothing to compare, reported as fully coherent.
- 2-5 sources: every source goes into one prompt and the model compares
  them all at once.
- 6+ sources: a draft skill is generated from the first five, then each
  remaining source is checked against that draft (concurrently) and the
  per-source verdicts are aggregated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from minion.config import get_effective_speed, get_model
from minion.jsonschema import SEVERITY_SCHEMA
from minion.llm import complete_json
from minion.logging import get_logger
from minion.parallel import run_parallel
from minion.skills.drafts import generate_skill_draft
from minion.skills.models import SkillDraft
from minion.skills.prompts import (
    SOURCE_DIVIDER,
    build_draft_comparison_prompt,
    build_group_coherence_prompt,
    load_system_prompt,
)
from minion.sources.material import SourceContent, SourceInput, load_source_contents

_logger = get_logger("skills.coherence")

FEATURE = "skills-refresh"
SMALL_GROUP_MAX = 5
DRAFT_SOURCE_COUNT = 5
SOURCE_MAX_LENGTH = 15_000

CONFLICT_TYPES = (
    "technical_contradiction",
    "version_mismatch",
    "scope_mismatch",
    "outdated_vs_current",
    "different_perspectives",
)
ISSUE_TYPES = (
    "technical_contradiction",
    "outdated_information",
    "different_approach",
    "version_mismatch",
    "incompatible_stance",
)

GROUP_COHERENCE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["coherent", "conflicts"],
    "properties": {
        "coherent": {"type": "boolean"},
        "coherenceLevel": {"enum": ["high", "medium", "low"]},
        "coherencePercentage": {"type": "number", "minimum": 0, "maximum": 100},
        "conflicts": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["description"],
                "properties": {
                    "type": {"type": "string"},
                    "description": {"type": "string"},
                    "affectedSources": {"type": "array", "items": {"type": "integer"}},
                    "severity": SEVERITY_SCHEMA,
                },
            },
        },
        "recommendation": {"type": "string"},
        "summary": {"type": "string"},
    },
}

SOURCE_CHECK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["contradicts", "alignment"],
    "properties": {
        "contradicts": {"type": "boolean"},
        "alignment": {"type": "number", "minimum": 0, "maximum": 100},
        "issues": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["description"],
                "properties": {
                    "type": {"type": "string"},
                    "description": {"type": "string"},
                    "severity": SEVERITY_SCHEMA,
                },
            },
        },
        "recommendation": {"type": "string"},
        "summary": {"type": "string"},
    },
}


@dataclass
class CoherenceConflict:
    """A contradiction found between sources."""

    type: str
    description: str
    affected_sources: list[int] = field(default_factory=list)
    severity: str = "medium"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "affectedSources": self.affected_sources,
            "severity": self.severity,
        }


@dataclass
class CoherenceResult:
    """Outcome of a group coherence analysis."""

    coherent: bool
    coherence_level: str
    coherence_percentage: int
    conflicts: list[CoherenceConflict]
    recommendation: str
    summary: str
    strategy: str = "multi-source"

    def to_dict(self) -> dict[str, Any]:
        return {
            "coherent": self.coherent,
            "coherenceLevel": self.coherence_level,
            "coherencePercentage": self.coherence_percentage,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "recommendation": self.recommendation,
            "summary": self.summary,
            "strategy": self.strategy,
        }


@dataclass
class SourceCheck:
    """Verdict for one source compared against a draft."""

    source_index: int
    source_label: str
    contradicts: bool
    alignment: float
    issues: list[dict[str, Any]]
    recommendation: str = ""
    summary: str = ""


def coherence_level_for(percentage: float) -> str:
    """Map an alignment percentage to high (>90), medium (>70) or low."""
    if percentage > 90:
        return "high"
    if percentage > 70:
        return "medium"
    return "low"


def _clamp_percentage(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(100.0, number))


def round_half_up(value: float) -> int:
    """Round .5 upwards (90.5 -> 91) instead of to the nearest even integer."""
    return math.floor(value + 0.5)


def _conflict_type(value: Any, allowed: tuple[str, ...]) -> str:
    return value if isinstance(value, str) and value in allowed else allowed[0]


def _single_source_result() -> CoherenceResult:
    return CoherenceResult(
        coherent=True,
        coherence_level="high",
        coherence_percentage=100,
        conflicts=[],
        recommendation="Single source - no coherence check needed",
        summary="Only one source in group",
        strategy="single-source",
    )


def _coherence_model() -> str:
    return get_model(get_effective_speed(FEATURE))


def analyze_small_group(sources: list[SourceContent], group_title: str) -> CoherenceResult:
    """Compare all sources of a small group in a single prompt."""
    sources_section = "\n\n".join(
        f"SOURCE {i + 1}: {s.label}\n\n{s.content}\n\n{SOURCE_DIVIDER}" for i, s in enumerate(sources)
    )
    data = complete_json(
        build_group_coherence_prompt(sources_section, group_title, len(sources)),
        system_prompt=load_system_prompt("group_coherence_analysis"),
        feature="group-coherence-analysis",
        model=_coherence_model(),
        schema=GROUP_COHERENCE_SCHEMA,
        metadata={"groupTitle": group_title, "sourceCount": len(sources)},
    )

    conflicts = [
        CoherenceConflict(
            type=_conflict_type(c.get("type"), CONFLICT_TYPES),
            description=str(c["description"]),
            affected_sources=[int(i) for i in c.get("affectedSources") or []],
            severity=str(c.get("severity") or "medium"),
        )
        for c in data["conflicts"]
    ]

    if "coherencePercentage" in data:
        percentage = round_half_up(_clamp_percentage(data["coherencePercentage"]))
    else:
        percentage = 100 if not conflicts else 50
    coherent = bool(data["coherent"])
    if not coherent and not conflicts:
        _logger.warning("Model reported incoherence without conflicts for %r", group_title)

    return CoherenceResult(
        coherent=coherent,
        coherence_level=str(data.get("coherenceLevel") or coherence_level_for(percentage)),
        coherence_percentage=percentage,
        conflicts=conflicts,
        recommendation=str(data.get("recommendation") or ""),
        summary=str(data.get("summary") or ""),
        strategy="multi-source",
    )


def check_source_against_draft(
    draft: SkillDraft,
    source: SourceContent,
    *,
    draft_source_count: int = DRAFT_SOURCE_COUNT,
    group_title: str = "",
    model: str | None = None,
) -> SourceCheck:
    """Ask whether one source contradicts the draft skill."""
    data = complete_json(
        build_draft_comparison_prompt(draft.title, draft.content, source.label, source.content, draft_source_count),
        system_prompt=load_system_prompt("source_skill_coherence"),
        feature="group-coherence-source-check",
        model=model or _coherence_model(),
        schema=SOURCE_CHECK_SCHEMA,
        metadata={"groupTitle": group_title, "sourceIndex": source.index},
    )
    return SourceCheck(
        source_index=source.index,
        source_label=source.label,
        contradicts=bool(data["contradicts"]),
        alignment=_clamp_percentage(data["alignment"]),
        issues=[i for i in data.get("issues") or [] if isinstance(i, dict)],
        recommendation=str(data.get("recommendation") or ""),
        summary=str(data.get("summary") or ""),
    )


def aggregate_source_checks(
    checks: list[SourceCheck],
    *,
    total_sources: int,
    draft_source_count: int = DRAFT_SOURCE_COUNT,
) -> CoherenceResult:
    """Combine per-source verdicts into one group result.

    The group is coherent only if no source contradicts the draft. The
    percentage is the rounded mean alignment (100 when nothing was checked).
    """
    conflicting = [c for c in checks if c.contradicts]
    remaining = len(checks)
    avg_alignment = round_half_up(sum(c.alignment for c in checks) / remaining) if remaining else 100

    conflicts = [
        CoherenceConflict(
            type=_conflict_type(issue.get("type"), ISSUE_TYPES),
            description=f"Source {check.source_index + 1} ({check.source_label}): {issue.get('description', '')}",
            affected_sources=[check.source_index],
            severity=str(issue.get("severity") or "medium"),
        )
        for check in conflicting
        for issue in check.issues
    ]

    first = f"first {draft_source_count} sources"
    if not conflicting:
        recommendation = f"All {total_sources} sources align well - draft generated from {first}"
        summary = f"Draft generated from {first}. Remaining {remaining} sources align with the draft."
    else:
        recommendation = (
            f"{len(conflicting)} of {remaining} additional sources contain contradictions - review recommended"
        )
        summary = f"Draft generated from {first}. {len(conflicting)} of {remaining} additional sources contradict the draft."

    return CoherenceResult(
        coherent=not conflicting,
        coherence_level=coherence_level_for(avg_alignment),
        coherence_percentage=avg_alignment,
        conflicts=conflicts,
        recommendation=recommendation,
        summary=summary,
        strategy="draft-based",
    )


def analyze_large_group(sources: list[SourceContent], group_title: str) -> CoherenceResult:
    """Draft from the first sources, then check the rest against the draft."""
    head, rest = sources[:DRAFT_SOURCE_COUNT], sources[DRAFT_SOURCE_COUNT:]
    _logger.info(
        "Analyzing large group %r with draft-based approach (%d sources, %d checked against draft)",
        group_title,
        len(sources),
        len(rest),
    )

    material = "\n\n---\n\n".join(f"Source {s.index + 1}: {s.label}\n\n{s.content}" for s in head)
    model = _coherence_model()
    draft = generate_skill_draft(
        material,
        title=group_title,
        feature="group-coherence-draft",
        model=model,
        metadata={"groupTitle": group_title, "sourceCount": len(head)},
    )

    checks = run_parallel(
        lambda source: check_source_against_draft(
            draft,
            source,
            draft_source_count=len(head),
            group_title=group_title,
            model=model,
        ),
        rest,
    )
    return aggregate_source_checks(checks, total_sources=len(sources), draft_source_count=len(head))


def analyze_group_coherence(sources: list[SourceInput], group_title: str) -> CoherenceResult:
    """Check a group of sources for contradictions before building a skill.

    Args:
        sources: URL or document sources grouped under one topic.
        group_title: Title of the skill the group will become.

    Returns:
        CoherenceResult; conflict `affected_sources` are indices into `sources`.

    Raises:
        ValueError: If `sources` is empty or `group_title` is blank.
        LLMError, LLMResponseError: If an analysis call fails.
    """
    if not sources:
        raise ValueError("sources array is required")
    if not isinstance(group_title, str) or not group_title.strip():
        raise ValueError("groupTitle is required")

    group_title = group_title.strip()
    if len(sources) < 2:
        return _single_source_result()

    contents = load_source_contents(sources, max_length=SOURCE_MAX_LENGTH)
    if len(contents) <= SMALL_GROUP_MAX:
        return analyze_small_group(contents, group_title)
    return analyze_large_group(contents, group_title)
