"""Skill pipeline.

Provides:
- Skill files with YAML frontmatter (store, models)
- LLM drafting of new and updated skills
- Coherence analysis of source groups
- Volume (split) and placement analysis
- Refresh and suggest flows
"""

from minion.skills.coherence import CoherenceResult, analyze_group_coherence
from minion.skills.drafts import generate_draft_update, generate_skill_draft
from minion.skills.models import DraftUpdate, HistoryEntry, Owner, Skill, SkillDraft, SourceUrl
from minion.skills.placement import find_url_matches, suggest_placement
from minion.skills.refresh import analyze_source_url, apply_refresh, refresh_skill, suggest_skill
from minion.skills.store import (
    list_skill_files,
    load_all_skills,
    read_skill_file,
    write_skill_file,
)
from minion.skills.volume import VolumeAnalysis, analyze_volume

__all__ = [
    "CoherenceResult",
    "DraftUpdate",
    "HistoryEntry",
    "Owner",
    "Skill",
    "SkillDraft",
    "SourceUrl",
    "VolumeAnalysis",
    "analyze_group_coherence",
    "analyze_source_url",
    "analyze_volume",
    "apply_refresh",
    "find_url_matches",
    "generate_draft_update",
    "generate_skill_draft",
    "list_skill_files",
    "load_all_skills",
    "read_skill_file",
    "refresh_skill",
    "suggest_placement",
    "suggest_skill",
    "write_skill_file",
]
