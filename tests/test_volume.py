"""Tests for minion.skills.volume module."""

from __future__ import annotations

from unittest.mock import patch

from minion.skills.volume import MAX_SPLITS, MIN_SPLIT_CHARS, analyze_volume

LONG_CONTENT = "x" * MIN_SPLIT_CHARS


def _split(title: str) -> dict:
    return {"title": title, "description": f"About {title}", "relevantUrls": ["https://a.com"]}


class TestAnalyzeVolume:
    """Tests for analyze_volume function."""

    def test_short_content_skips_llm(self) -> None:
        with patch("minion.skills.volume.complete_json") as cj:
            result = analyze_volume("Short", "tiny", ["https://a.com", ""])

        cj.assert_not_called()
        assert result.should_split is False
        assert result.source_count == 1
        assert result.content_length == 4

    def test_split_suggested(self) -> None:
        answer = {"shouldSplit": True, "reason": "Two topics", "suggestedSplits": [_split("SSO"), _split("MFA")]}
        with patch("minion.skills.volume.complete_json", return_value=answer):
            result = analyze_volume("Identity", LONG_CONTENT, ["https://a.com"])

        assert result.should_split is True
        assert [s.title for s in result.suggested_splits] == ["SSO", "MFA"]
        assert result.suggested_splits[0].relevant_urls == ["https://a.com"]
        assert result.to_dict()["suggestedSplits"][1]["title"] == "MFA"

    def test_single_suggestion_is_no_split(self) -> None:
        answer = {"shouldSplit": True, "reason": "r", "suggestedSplits": [_split("Only")]}
        with patch("minion.skills.volume.complete_json", return_value=answer):
            result = analyze_volume("Identity", LONG_CONTENT)

        assert result.should_split is False
        assert result.suggested_splits == []

    def test_no_split_drops_suggestions(self) -> None:
        answer = {"shouldSplit": False, "reason": "Cohesive", "suggestedSplits": [_split("A"), _split("B")]}
        with patch("minion.skills.volume.complete_json", return_value=answer):
            result = analyze_volume("Identity", LONG_CONTENT)

        assert result.suggested_splits == []
        assert result.reason == "Cohesive"

    def test_caps_suggestions(self) -> None:
        splits = [_split(f"T{i}") for i in range(MAX_SPLITS + 2)]
        with patch("minion.skills.volume.complete_json", return_value={"shouldSplit": True, "suggestedSplits": splits}):
            result = analyze_volume("Big", LONG_CONTENT)

        assert len(result.suggested_splits) == MAX_SPLITS
