"""Tests for minion.skills.drafts module."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from minion.errors import LLMResponseError
from minion.skills.drafts import (
    UPDATE_MODE_REFRESH,
    ConversationMessage,
    generate_draft_from_messages,
    generate_draft_update,
    generate_skill_draft,
    normalize_skill_draft,
    sanitize_conversation,
)
from minion.skills.prompts import DRAFT_UPDATE_REFRESH_PROMPT, KNOWLEDGE_EXTRACTION_PROMPT


class TestNormalizeSkillDraft:
    """Tests for normalize_skill_draft function."""

    def test_object(self) -> None:
        draft = normalize_skill_draft({"title": " MFA ", "content": " body ", "sourceMapping": ["a", " ", 3]})

        assert draft.title == "MFA"
        assert draft.content == "body"
        assert draft.source_mapping == ["a", "3"]

    def test_first_element_of_list(self) -> None:
        assert normalize_skill_draft([{"title": "A", "content": "x"}, {"title": "B"}]).title == "A"

    def test_empty_mapping_is_none(self) -> None:
        assert normalize_skill_draft({"title": "A", "content": "x"}).source_mapping is None

    def test_stringifies_values(self) -> None:
        draft = normalize_skill_draft({"title": 2024, "content": 5})

        assert draft.title == "2024"
        assert draft.content == "5"

    def test_missing_fields(self) -> None:
        with pytest.raises(LLMResponseError, match="missing required fields: content. Received keys: title"):
            normalize_skill_draft({"title": "A"})

    @pytest.mark.parametrize("data", [None, "text", [], {"title": None, "content": "x"}])
    def test_invalid(self, data: object) -> None:
        with pytest.raises(LLMResponseError):
            normalize_skill_draft(data)


class TestConversation:
    def test_sanitize(self) -> None:
        clean = sanitize_conversation(
            [
                {"role": "system", "content": " hi "},
                {"role": "assistant", "content": "ok"},
                {"role": "user", "content": "   "},
                {"role": "user", "content": 42},
                ConversationMessage(role="user", content="more"),
                "junk",
            ]
        )

        assert clean == [
            ConversationMessage(role="user", content="hi"),
            ConversationMessage(role="assistant", content="ok"),
            ConversationMessage(role="user", content="more"),
        ]

    def test_empty_conversation_raises(self) -> None:
        with pytest.raises(ValueError):
            generate_draft_from_messages([{"role": "user", "content": " "}])

    def test_single_user_message_sent_verbatim(self) -> None:
        with patch("minion.skills.drafts.complete_json", return_value={"title": "T", "content": "C"}) as cj:
            draft = generate_draft_from_messages([{"role": "user", "content": "Make a skill about SSO"}])

        assert draft.title == "T"
        assert cj.call_args.args[0] == "Make a skill about SSO"

    def test_multi_turn_rendered(self) -> None:
        with patch("minion.skills.drafts.complete_json", return_value={"title": "T", "content": "C"}) as cj:
            generate_draft_from_messages(
                [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}],
                prompt="custom system",
            )

        sent = cj.call_args.args[0]
        assert sent.startswith("user: a\nassistant: b\n")
        assert cj.call_args.kwargs["system_prompt"] == "custom system"


class TestGenerateSkillDraft:
    """Tests for generate_skill_draft function."""

    def test_untitled(self) -> None:
        with patch("minion.skills.drafts.complete_json", return_value={"title": "T", "content": "C"}) as cj:
            draft = generate_skill_draft("material")

        assert draft.title == "T"
        assert "Source material:\nmaterial" in cj.call_args.args[0]
        assert cj.call_args.kwargs["feature"] == "skills-suggest"

    def test_titled_keeps_title(self) -> None:
        with patch("minion.skills.drafts.complete_json", return_value={"title": "", "content": "C"}) as cj:
            draft = generate_skill_draft("material", title="Access Control", feature="skills-group-coherence")

        assert draft.title == "Access Control"
        assert 'Create a skill titled "Access Control"' in cj.call_args.args[0]
        assert cj.call_args.kwargs["system_prompt"] == KNOWLEDGE_EXTRACTION_PROMPT


class TestGenerateDraftUpdate:
    """Tests for generate_draft_update function."""

    def test_no_changes_falls_back_to_existing(self) -> None:
        with patch(
            "minion.skills.drafts.complete_json",
            return_value={"hasChanges": False, "summary": "Nothing new", "changeHighlights": ["ignored"]},
        ):
            update = generate_draft_update("Title", "Content", "material", ["https://a.com"])

        assert update.has_changes is False
        assert update.title == "Title"
        assert update.content == "Content"
        assert update.change_highlights == []
        assert update.summary == "Nothing new"

    def test_refresh_mode(self) -> None:
        answer = {
            "hasChanges": True,
            "summary": "Added regions",
            "title": "Title",
            "content": "New content",
            "changeHighlights": ["Added EU region"],
        }
        with patch("minion.skills.drafts.complete_json", return_value=answer) as cj:
            update = generate_draft_update("Title", "Old", "material", ["https://a.com"], mode=UPDATE_MODE_REFRESH)

        assert update.has_changes is True
        assert update.content == "New content"
        assert update.change_highlights == ["Added EU region"]
        assert cj.call_args.kwargs["feature"] == "skills-refresh"
        assert cj.call_args.kwargs["system_prompt"] == DRAFT_UPDATE_REFRESH_PROMPT
        assert cj.call_args.kwargs["metadata"] == {"mode": "refresh", "urlCount": 1}

    def test_fast_speed_selects_fast_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MINION_SPEED_SKILLS_REFRESH", "fast")
        monkeypatch.setenv("MINION_FAST_MODEL", "fast-model")
        with patch("minion.skills.drafts.complete_json", return_value={"hasChanges": False}) as cj:
            generate_draft_update("T", "C", "m", [], mode=UPDATE_MODE_REFRESH)

        assert cj.call_args.kwargs["model"] == "fast-model"

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            generate_draft_update("T", "C", "m", [], mode="rewrite")
