"""Draft generator: source material in, skill title/content out.

Covers three kinds of drafts:
- a new skill from merged source material (or a fixed-title draft used by
  the large-group coherence check),
- a new skill from a conversation with the user,
- a revision of an existing skill against new or refreshed material.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from minion.config import get_effective_speed, get_model
from minion.errors import LLMResponseError
from minion.llm import complete_json
from minion.logging import get_logger
from minion.skills.models import DraftUpdate, SkillDraft
from minion.skills.prompts import (
    build_draft_update_prompt,
    build_initial_message,
    build_titled_draft_prompt,
    load_system_prompt,
)

_logger = get_logger("skills.drafts")

DRAFT_UPDATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["hasChanges"],
    "properties": {
        "hasChanges": {"type": "boolean"},
        "summary": {"type": "string"},
        "title": {"type": "string"},
        "content": {"type": "string"},
        "changeHighlights": {"type": "array", "items": {"type": "string"}},
    },
}

UPDATE_MODE_SUGGEST = "suggest"
UPDATE_MODE_REFRESH = "refresh"


@dataclass
class ConversationMessage:
    """One turn of a skill-building conversation."""

    role: str
    content: str


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items = []
    for entry in value:
        if entry is None:
            continue
        text = entry.strip() if isinstance(entry, str) else str(entry).strip()
        if text:
            items.append(text)
    return items


def normalize_skill_draft(data: Any) -> SkillDraft:
    """Turn a parsed LLM answer into a SkillDraft.

    A list answer is reduced to its first element. `title` and `content`
    must both be present; non-string values are stringified.

    Raises:
        LLMResponseError: If the answer is not an object or lacks fields.
    """
    if isinstance(data, list):
        data = data[0] if data else None

    if not isinstance(data, dict):
        raise LLMResponseError("LLM response is not a valid object.")

    missing = [key for key in ("title", "content") if key not in data]
    if missing:
        received = ", ".join(list(data.keys())[:10])
        raise LLMResponseError(
            f"LLM response missing required fields: {', '.join(missing)}. "
            f"Received keys: {received or '(none)'}"
        )

    title, content = data["title"], data["content"]
    if title is None or content is None:
        raise LLMResponseError("Skill title and content must be strings.")

    mapping = _string_list(data.get("sourceMapping"))
    return SkillDraft(
        title=str(title).strip(),
        content=str(content).strip(),
        source_mapping=mapping or None,
    )


def sanitize_conversation(messages: list[ConversationMessage | dict[str, Any]]) -> list[ConversationMessage]:
    """Normalize roles to user/assistant, trim content, drop empty turns."""
    clean: list[ConversationMessage] = []
    for message in messages or []:
        if isinstance(message, ConversationMessage):
            role, content = message.role, message.content
        elif isinstance(message, dict):
            role, content = message.get("role"), message.get("content")
        else:
            continue
        text = content.strip() if isinstance(content, str) else ""
        if text:
            clean.append(ConversationMessage(role="assistant" if role == "assistant" else "user", content=text))
    return clean


def _render_conversation(messages: list[ConversationMessage]) -> str:
    if len(messages) == 1 and messages[0].role == "user":
        return messages[0].content
    lines = [f"{m.role}: {m.content}" for m in messages]
    lines.append("")
    lines.append("Continue as the assistant. Reply with the skill JSON object only.")
    return "\n".join(lines)


def generate_draft_from_messages(
    messages: list[ConversationMessage | dict[str, Any]],
    prompt: str | None = None,
    *,
    feature: str = "skills-suggest",
    metadata: dict[str, Any] | None = None,
) -> SkillDraft:
    """Generate a skill draft from a user/assistant conversation.

    Raises:
        ValueError: If no non-empty message is given.
        LLMError, LLMResponseError: On call or parse failure.
    """
    clean = sanitize_conversation(messages)
    if not clean:
        raise ValueError("At least one conversation message is required to generate a skill draft.")

    system_prompt = prompt or load_system_prompt("skills")
    data = complete_json(
        _render_conversation(clean),
        system_prompt=system_prompt,
        feature=feature,
        metadata=metadata,
    )
    return normalize_skill_draft(data)


def generate_skill_draft(
    source_material: str,
    *,
    title: str | None = None,
    prompt: str | None = None,
    feature: str = "skills-suggest",
    model: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> SkillDraft:
    """Draft a new skill from source material.

    With `title`, the model is told to keep that title and cover everything
    in the material; this is how coherence drafts are produced.
    """
    if title:
        system_prompt = prompt or load_system_prompt("knowledge_extraction")
        user_prompt = build_titled_draft_prompt(source_material, title)
    else:
        system_prompt = prompt or load_system_prompt("skills")
        user_prompt = build_initial_message(source_material)

    data = complete_json(
        user_prompt,
        system_prompt=system_prompt,
        feature=feature,
        model=model,
        metadata=metadata,
    )
    draft = normalize_skill_draft(data)
    if title and not draft.title:
        draft.title = title
    return draft


def generate_draft_update(
    existing_title: str,
    existing_content: str,
    source_material: str,
    source_urls: list[str],
    *,
    mode: str = UPDATE_MODE_SUGGEST,
    feature: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> DraftUpdate:
    """Propose a revision of an existing skill.

    Modes:
        suggest: conservative; only genuinely new facts justify a change.
        refresh: comprehensive; the skill must cover everything its sources say.

    When the model reports no changes, title and content fall back to the
    existing skill so callers can always show a complete draft.
    """
    if mode not in (UPDATE_MODE_SUGGEST, UPDATE_MODE_REFRESH):
        raise ValueError(f"Unknown draft update mode: {mode}")

    refresh = mode == UPDATE_MODE_REFRESH
    system_prompt = load_system_prompt("skill_refresh" if refresh else "skill_update_suggest")
    feature = feature or ("skills-refresh" if refresh else "skills-suggest")

    data = complete_json(
        build_draft_update_prompt(existing_title, existing_content, source_material, source_urls, refresh=refresh),
        system_prompt=system_prompt,
        feature=feature,
        model=get_model(get_effective_speed(feature)),
        schema=DRAFT_UPDATE_SCHEMA,
        metadata={"mode": mode, "urlCount": len(source_urls), **(metadata or {})},
    )

    has_changes = bool(data["hasChanges"])
    title = str(data.get("title") or "").strip() or existing_title
    content = str(data.get("content") or "").strip() or existing_content
    highlights = _string_list(data.get("changeHighlights")) if has_changes else []

    _logger.info("Draft update (%s): has_changes=%s, %d highlights", mode, has_changes, len(highlights))
    return DraftUpdate(
        has_changes=has_changes,
        summary=str(data.get("summary") or "").strip(),
        title=title,
        content=content,
        change_highlights=highlights,
    )
