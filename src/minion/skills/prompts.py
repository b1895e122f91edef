"""Prompt text for the skill pipelines.

System prompts are keyed; a `<key>.prompt.md` file in the prompts
directory replaces the built-in text, so teams can tune wording without a
release. User prompts are built by the `build_*` functions.
"""

from __future__ import annotations

from pathlib import Path

from minion.config import get_prompts_dir
from minion.io import read_file
from minion.logging import get_logger

_logger = get_logger("skills.prompts")

SOURCE_DIVIDER = "=" * 80

# === System prompts ===

DEFAULT_SKILL_PROMPT = """You are a knowledge extraction specialist for a security and compliance team.
Turn the provided source material into one reusable knowledge skill that grounds answers to
security questionnaires and RFPs.

CONTENT PRINCIPLES:
- Dense with facts, not prose
- Bullet points over paragraphs
- Keep complete lists (integrations, certifications, regions, limits)
- Keep concrete numbers, versions and dates exactly as stated
- Remove marketing language
- Use markdown headings to group related facts

OUTPUT (JSON only):
{
  "title": "Concise, specific title",
  "content": "Complete skill content in markdown",
  "sourceMapping": ["Which source each major section came from", ...]
}"""

KNOWLEDGE_EXTRACTION_PROMPT = (
    "You are a knowledge extraction specialist who creates comprehensive, accurate "
    "documentation from source materials."
)

GROUP_COHERENCE_PROMPT = (
    "You are a content analysis specialist who finds contradictions and conflicts "
    "within topically-aligned source materials."
)

SOURCE_SKILL_COHERENCE_PROMPT = (
    "You are a content analysis specialist who identifies contradictions between "
    "source materials and finalized content."
)

SOURCE_URL_ANALYSIS_PROMPT = (
    "You are a content analysis specialist who compares documents to identify key differences."
)

DRAFT_UPDATE_SUGGEST_PROMPT = """You are a knowledge extraction specialist reviewing an existing skill against new source material.

IMPORTANT: BE CONSERVATIVE ABOUT CHANGES. Only suggest updates if the new source contains genuinely valuable new information.

RETURN hasChanges: false IF:
- The source material is marketing fluff without concrete facts
- The information is already captured in the existing skill (even if worded differently)
- The "new" information is just rephrasing what's already there
- The source doesn't add facts that would help answer RFP questions
- Changes would only be cosmetic (reformatting, rewording)

RETURN hasChanges: true ONLY IF:
- NEW concrete facts: specific numbers, dates, versions, limits, certifications
- NEW capabilities not mentioned in existing skill
- CORRECTIONS to outdated information (version numbers, deprecated features)
- MISSING integrations, platforms, or compliance standards
- Significant new details that would help answer customer questions

WHAT MAKES CHANGES "MEANINGFUL":
Think: "Would this help answer an RFP question that the existing skill cannot?"
- YES: Add the new fact
- NO: Keep the original, return hasChanges: false

CONTENT PRINCIPLES (when hasChanges: true):
- Dense with facts, not prose
- Bullet points over paragraphs
- Keep complete lists (integrations, certifications)
- Remove marketing language
- Preserve existing structure unless new info requires reorganization

OUTPUT (JSON only):
{
  "hasChanges": true/false,
  "summary": "What new facts were added" OR "No meaningful updates - source material doesn't add new information",
  "title": "Keep same unless topic scope genuinely changed",
  "content": "COMPLETE updated skill if hasChanges=true, OR copy of original if hasChanges=false",
  "changeHighlights": ["Specific new fact added", ...]
}"""

DRAFT_UPDATE_REFRESH_PROMPT = """You are a knowledge extraction specialist reviewing an existing skill against refreshed source material.

YOUR GOAL: Ensure the skill comprehensively covers ALL the information from the source URLs.

RETURN hasChanges: true IF ANY of these are true:
- Source contains information about platforms/integrations NOT in existing skill
- Source has specific technical details (numbers, versions, capabilities) not captured
- Source describes features, limitations, or requirements not mentioned
- Source covers topics/sections that the existing skill doesn't address
- Multiple source URLs exist but existing skill only covers content from one

RETURN hasChanges: false ONLY IF:
- The existing skill already covers ALL topics from ALL source URLs
- New content is purely marketing fluff with no concrete facts
- Changes would only be cosmetic rewording of existing information

IMPORTANT: If there are multiple source URLs about different topics but the existing skill only covers ONE topic, you MUST add the missing topics.

DIFF-FRIENDLY EDITING:
- Make SURGICAL edits - only change what needs to change
- PRESERVE the original structure and formatting
- ADD new sections for new topics at the end
- ADD new bullet points within existing sections where appropriate
- DO NOT rewrite content that doesn't need to change

OUTPUT (JSON only):
{
  "hasChanges": true/false,
  "summary": "What new facts/sections were added" OR "Skill already covers all source content",
  "title": "Keep same unless topic scope genuinely changed",
  "content": "COMPLETE skill content including both original AND new information",
  "changeHighlights": ["Added integration details", ...]
}"""

VOLUME_ANALYSIS_PROMPT = """You are a knowledge management expert keeping a library of security documentation skills focused.

A skill should cover ONE topic area (like "Data Encryption", "Access Control", "Incident Response").
Skills grow over time as sources are merged in; your job is to decide whether a skill has
accumulated enough distinct material that it should be SPLIT into several focused skills.

SPLIT ONLY IF:
- The content covers two or more clearly distinct topics that would each answer different questions
- Each resulting skill would be independently useful

DO NOT SPLIT IF:
- The content is long but about a single topic
- Sections are facets of the same topic (e.g. encryption at rest and in transit)

OUTPUT (JSON only):
{
  "shouldSplit": true/false,
  "reason": "Brief explanation",
  "suggestedSplits": [
    {
      "title": "Focused skill title",
      "description": "What this skill would cover",
      "relevantUrls": ["source URLs that belong to this skill"]
    }
  ]
}

When shouldSplit is true, suggest 2-4 skills. When false, suggestedSplits must be empty."""

PLACEMENT_PROMPT = """You are a knowledge management expert helping organize security documentation into focused, topic-specific skills.

Your task is to analyze new source material and decide how it should be organized:

PRINCIPLES:
1. Skills should be FOCUSED on a single topic area (like "Data Encryption", "Access Control", "Incident Response")
2. Avoid creating overly broad skills that cover multiple unrelated topics
3. If content matches an existing skill's topic, UPDATE that skill rather than creating duplicates
4. If content covers multiple distinct topics, suggest SPLITTING into separate skills

DECISION TREE:
1. First, check if the content is clearly about ONE topic that matches an existing skill -> UPDATE_EXISTING
2. If it's ONE topic but no existing skill matches -> CREATE_NEW
3. If the content covers MULTIPLE distinct topics -> SPLIT_TOPICS (suggest 2-4 focused skills)

OUTPUT FORMAT:
Return a JSON object:
{
  "suggestion": {
    "action": "create_new" | "update_existing" | "split_topics",
    "existingSkillId": "for update_existing: id of the skill to update",
    "existingSkillTitle": "for update_existing: title of the skill",
    "suggestedTitle": "for create_new: concise, specific title",
    "suggestedTags": ["for create_new: relevant tags"],
    "splitSuggestions": [
      {"title": "Topic skill", "description": "What this skill would cover", "relevantUrls": ["..."]}
    ],
    "reason": "Brief explanation of why this action was chosen"
  },
  "sourcePreview": "2-3 sentence summary of what the source material contains"
}

GUIDELINES:
- Be specific with titles (not "Security Policy" but "Data Classification Policy")
- Consider semantic overlap, not just keyword matching
- If updating existing, the content should genuinely expand/update that skill's topic
- For splits, each resulting skill should be independently useful"""

SKILL_ORGANIZE_PROMPT = """You are a knowledge management expert helping organize documentation into a structured skill library.
Aim for a compact library of comprehensive, reusable skills rather than many fragmented ones.
Prefer updating existing skills over creating new ones, and consolidate related information.

CONSOLIDATION:
- Each skill covers one coherent topic area
- Keep specific facts (versions, dates, certifications), not vague summaries
- Remove customer-specific context so skills stay reusable

OUTPUT (JSON only):
{ "title": string, "content": string }"""

MERGE_GOALS = """
Your task is to merge the provided skills into a single, well-organized document.

MERGE GOALS:
1. Remove duplicate information - don't repeat the same facts
2. Organize content logically with clear sections
3. Preserve all unique, valuable information from each skill
4. Use markdown headers (##, ###) to organize sections

Return ONLY a JSON object with "title" and "content" fields."""

LIBRARY_ANALYSIS_PROMPT = """You are a knowledge library analyst for a security and compliance team.
Review the skill library as a whole and find organizational problems: skills that overlap and
should be merged, skills that cover too much and should be split, titles that are vague, and
skills whose tags do not match their content.

OUTPUT (JSON only):
{
  "recommendations": [
    {
      "type": "merge" | "split" | "rename" | "retag",
      "priority": "high" | "medium" | "low",
      "title": "Short name for the recommendation",
      "description": "What is wrong and why it matters",
      "affectedSkillIds": ["ids of the skills involved"],
      "affectedSkillTitles": ["titles of the skills involved"],
      "suggestedAction": "Concrete next step"
    }
  ],
  "summary": "1-2 sentence overview of library health",
  "healthScore": 0-100
}

Return at most 10 recommendations, most important first. An empty list is fine for a tidy library."""

_BUILTIN_PROMPTS = {
    "skills": DEFAULT_SKILL_PROMPT,
    "knowledge_extraction": KNOWLEDGE_EXTRACTION_PROMPT,
    "group_coherence_analysis": GROUP_COHERENCE_PROMPT,
    "source_skill_coherence": SOURCE_SKILL_COHERENCE_PROMPT,
    "source_url_analysis": SOURCE_URL_ANALYSIS_PROMPT,
    "skill_update_suggest": DRAFT_UPDATE_SUGGEST_PROMPT,
    "skill_refresh": DRAFT_UPDATE_REFRESH_PROMPT,
    "skill_volume": VOLUME_ANALYSIS_PROMPT,
    "skill_analyze": PLACEMENT_PROMPT,
    "skill_organize": SKILL_ORGANIZE_PROMPT,
    "library_analysis": LIBRARY_ANALYSIS_PROMPT,
}


def load_system_prompt(key: str, default: str | None = None, prompts_dir: Path | None = None) -> str:
    """Load a system prompt by key.

    Order: `<prompts_dir>/<key>.prompt.md` if present and non-empty, then
    `default`, then the built-in prompt for the key.

    Raises:
        KeyError: If nothing is known for the key.
    """
    path = (prompts_dir or get_prompts_dir()) / f"{key}.prompt.md"
    override = read_file(path)
    if override and override.strip():
        _logger.debug("Using system prompt override %s", path)
        return override.strip()
    if default is not None:
        return default
    return _BUILTIN_PROMPTS[key]


# === User prompts ===


def build_initial_message(source_material: str) -> str:
    """First message for creating a skill from merged source material."""
    return "\n".join(
        [
            "Source material:",
            source_material.strip(),
            "",
            'Return a SINGLE JSON object (not an array) with: { "title": "...", "content": "..." }',
        ]
    )


def build_titled_draft_prompt(source_material: str, title: str) -> str:
    """Draft request for a skill whose title is already fixed."""
    return f"""Source material:
{source_material}

Create a skill titled "{title}" that comprehensively covers ALL information from these sources.

Return a SINGLE JSON object with:
{{
  "title": "{title}",
  "content": "Complete skill content in markdown format"
}}"""


def build_group_coherence_prompt(sources_section: str, group_title: str, source_count: int) -> str:
    """Multi-source contradiction check for a small group."""
    return f"""SKILL GROUP: "{group_title}"

SOURCES TO ANALYZE FOR CONTRADICTIONS:

{sources_section}

---

These {source_count} sources have been grouped together under "{group_title}" because they cover the same topic.

Your task: FIND CONTRADICTIONS within these topically-aligned sources.

Look for:
1. TECHNICAL CONTRADICTIONS: Do sources recommend conflicting approaches or incompatible solutions?
2. VERSION MISMATCHES: Do sources cover different versions with breaking changes?
3. CONFLICTING GUIDANCE: Do sources give contradictory advice about the same topic?
4. OUTDATED VS CURRENT: Are some sources outdated with deprecated information while others are current?
5. DIFFERENT PERSPECTIVES: Do sources take incompatible stances on the same issue?

IMPORTANT:
- These sources are ALREADY grouped by topic - don't flag "scope mismatch" unless they truly contradict
- If you find conflicts, you MUST provide specific descriptions with details from the sources
- Empty conflicts array is ONLY acceptable if sources truly have no contradictions
- coherent = false REQUIRES conflicts.length > 0 with detailed descriptions

Return a JSON object:
{{
  "coherent": boolean,
  "coherenceLevel": "high" | "medium" | "low",
  "coherencePercentage": <number 0-100>,
  "conflicts": [
    {{
      "type": "technical_contradiction" | "version_mismatch" | "scope_mismatch" | "outdated_vs_current" | "different_perspectives",
      "description": "<REQUIRED: specific conflict with examples from sources>",
      "affectedSources": [<source indices starting from 0>],
      "severity": "low" | "medium" | "high"
    }}
  ],
  "recommendation": "<actionable advice: which source to trust, need manual review, or safe to proceed>",
  "summary": "<brief 1-2 sentence summary focusing on conflicts found or alignment confirmed>"
}}

Guidelines:
- coherent = true if sources align and complement each other
- coherent = false ONLY if you found actual contradictions (and conflicts array is populated)
- coherenceLevel: "high" if >90% aligned, "medium" if 70-90%, "low" if <70%
- List ALL contradictions found with specific details
- Be specific: quote or reference actual conflicting statements
- If coherent = false, conflicts array MUST have at least one detailed entry

Return ONLY the JSON object."""


def build_draft_comparison_prompt(
    draft_title: str,
    draft_content: str,
    source_label: str,
    source_content: str,
    draft_source_count: int,
) -> str:
    """Check one extra source against a draft built from the first sources."""
    return f"""DRAFT SKILL: "{draft_title}"

Draft Content (reference):
{draft_content}

---

SOURCE TO ANALYZE:
{source_label}

{source_content}

---

Your task: Determine if this source CONTRADICTS the draft skill content.

The draft was created from the first {draft_source_count} sources. Check if this additional source:
1. Contradicts technical details in the draft
2. Provides conflicting information
3. Recommends different approaches than the draft establishes
4. Contains version mismatches or deprecated information
5. Takes an incompatible stance on topics covered by the draft

Return a JSON object:
{{
  "contradicts": boolean,
  "alignment": <number 0-100, where 100 = perfect alignment>,
  "issues": [
    {{
      "type": "technical_contradiction" | "outdated_information" | "different_approach" | "version_mismatch" | "incompatible_stance",
      "description": "<specific contradiction with examples>",
      "severity": "low" | "medium" | "high"
    }}
  ],
  "recommendation": "<should this source be reviewed, removed, or is it acceptable?>",
  "summary": "<brief summary of alignment or conflicts>"
}}

Guidelines:
- contradicts = false if source aligns with or complements the draft
- contradicts = true ONLY if actual contradictions exist (and issues array is populated)
- Be specific about what contradicts and provide examples
- If contradicts = true, issues array MUST have at least one detailed entry

Return ONLY the JSON object."""


def build_draft_update_prompt(
    title: str,
    content: str,
    source_material: str,
    source_urls: list[str],
    *,
    refresh: bool,
) -> str:
    """Ask for a revised skill given new (or refreshed) source material."""
    heading = "REFRESHED SOURCE MATERIAL" if refresh else "NEW SOURCE MATERIAL"
    not_useful = "the source is the same" if refresh else "the source is redundant"
    urls_line = f"\nSource URLs: {', '.join(source_urls)}" if source_urls else ""
    return f"""EXISTING SKILL:
Title: {title}

Current Content:
{content}

---

{heading}:
{source_material}
{urls_line}

---

Review the {heading.lower()} against the existing skill.
- If there's significant new/changed information, return an updated draft with hasChanges=true
- If {not_useful} or doesn't add value, return hasChanges=false

Return ONLY the JSON object."""


def build_source_diff_prompt(title: str, content: str, url_content: str, url: str) -> str:
    """Compare one candidate source URL with a skill."""
    return f"""CURRENT SKILL:
Title: {title}

Content:
{content}

---

NEW SOURCE URL CONTENT:
{url_content}

Source: {url}

---

Compare the new source URL content with the current skill and analyze the differences.

Return a JSON object with:
{{
  "changeLevel": "minimal" | "moderate" | "significant",
  "changePercentage": <number 0-100>,
  "changeSummary": {{
    "newTopics": ["topic 1", "topic 2", ...],
    "updatedContent": ["update 1", "update 2", ...],
    "removedContent": ["removed 1", "removed 2", ...]
  }},
  "recommendation": "<advice for the user>"
}}

Guidelines:
- changeLevel: "minimal" if <15% different, "moderate" if 15-50%, "significant" if >50%
- changePercentage: rough estimate of how different the content is
- newTopics: major new sections or concepts not in current skill
- updatedContent: existing topics with meaningful changes
- removedContent: topics in current skill but missing/deprecated in new source
- recommendation: clear advice on whether to update the skill

Return ONLY the JSON object."""


def build_volume_prompt(title: str, content: str, source_urls: list[str]) -> str:
    """Ask whether an accumulated skill should be split."""
    urls = "\n".join(f"- {u}" for u in source_urls) if source_urls else "(none recorded)"
    return f"""SKILL: "{title}"

SOURCE URLS:
{urls}

CONTENT ({len(content)} characters):
{content}

---

Decide whether this skill has grown to cover several distinct topics and should be split
into focused skills. Assign each source URL to the split it belongs to.

Return ONLY the JSON object."""


def build_placement_prompt(skills_summary: str, source_urls: list[str], source_content: str) -> str:
    """Decide where newly submitted URLs belong in the library."""
    return f"""EXISTING SKILLS IN KNOWLEDGE BASE:
{skills_summary}

---

NEW SOURCE MATERIAL FROM {len(source_urls)} URL(s):
{chr(10).join(source_urls)}

Content preview:
{source_content}

---

Analyze this content and decide: Should it update an existing skill, create a new focused skill, or be split into multiple topic-specific skills?

Return ONLY the JSON object."""


def build_merge_prompt(skills: list[tuple[str, str]]) -> str:
    """Merge (title, content) pairs into one skill; the first is the target."""
    skills_content = "\n\n---\n\n".join(
        f'=== SKILL {i + 1}: "{title}" ===\n{content}' for i, (title, content) in enumerate(skills)
    )
    return f"""Please merge the following {len(skills)} skills into one comprehensive document:

{skills_content}

Merge these into a single, well-organized skill document. Remove duplicates, organize logically, and preserve all unique information.

Return ONLY the JSON object."""


def build_library_analysis_prompt(skills_context: str) -> str:
    return f"""Analyze this knowledge library for organizational issues:

{skills_context}

Return ONLY the JSON object with your analysis."""
