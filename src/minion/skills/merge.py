"""Merging several skills into one.

The target skill keeps its id and file; the merged skills are marked
inactive rather than deleted so their history stays readable.
"""

from __future__ import annotations

from minion.config import get_effective_speed, get_model
from minion.llm import complete_json
from minion.logging import get_logger
from minion.skills.drafts import normalize_skill_draft
from minion.skills.models import HistoryEntry, Skill, SkillDraft, SourceUrl, now_iso
from minion.skills.prompts import MERGE_GOALS, build_merge_prompt, load_system_prompt

_logger = get_logger("skills.merge")

FEATURE = "skills-merge"
HISTORY_ACTION_MERGED = "merged"


def merge_skills(target: Skill, others: list[Skill]) -> SkillDraft:
    """Ask the model to fold `others` into `target`.

    Raises:
        ValueError: If there is nothing to merge.
        LLMError, LLMResponseError: If the merge call fails.
    """
    others = [s for s in others if s.id != target.id]
    if not others:
        raise ValueError("Missing targetSkill or skillsToMerge.")

    skills = [target, *others]
    _logger.info("Merging %d skills into %r", len(others), target.title)
    data = complete_json(
        build_merge_prompt([(s.title, s.content) for s in skills]),
        system_prompt=load_system_prompt("skill_organize") + MERGE_GOALS,
        feature=FEATURE,
        model=get_model(get_effective_speed(FEATURE)),
        metadata={"targetId": target.id, "skillCount": len(skills)},
    )
    return normalize_skill_draft(data)


def _merge_unique(first: list[str], *rest: list[str]) -> list[str]:
    seen: list[str] = []
    for values in (first, *rest):
        for value in values:
            if value and value not in seen:
                seen.append(value)
    return seen


def apply_merge(
    target: Skill,
    others: list[Skill],
    draft: SkillDraft,
    *,
    user: str | None = None,
) -> Skill:
    """Write a reviewed merge draft into `target` and retire `others`.

    Source URLs and categories of the merged skills carry over to the
    target. Every skill touched gets a history entry.

    Raises:
        ValueError: If the draft has no title or content.
    """
    if not draft.title.strip() or not draft.content.strip():
        raise ValueError("title and content are required")

    now = now_iso()
    merged_titles = [s.title for s in others]

    known_urls = set(target.source_urls)
    for skill in others:
        for source in skill.sources:
            if source.url and source.url not in known_urls:
                target.sources.append(SourceUrl.from_dict(source.to_dict()))
                known_urls.add(source.url)
    target.categories = _merge_unique(target.categories, *(s.categories for s in others))
    target.title = draft.title.strip()
    target.content = draft.content.strip()
    target.history.append(
        HistoryEntry(date=now, action=HISTORY_ACTION_MERGED, summary=f"Merged: {', '.join(merged_titles)}", user=user)
    )

    for skill in others:
        skill.active = False
        skill.history.append(
            HistoryEntry(date=now, action=HISTORY_ACTION_MERGED, summary=f"Merged into {target.title}", user=user)
        )
    return target
