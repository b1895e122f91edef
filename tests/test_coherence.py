"""Tests for minion.skills.coherence module."""

from __future__ import annotations

import json
import os
import threading
from unittest.mock import MagicMock, patch

import anyio
import pytest
from claude_agent_sdk.types import ResultMessage

from minion.llm import RECURSION_GUARD_VAR

from minion.skills.coherence import (
    SourceCheck,
    aggregate_source_checks,
    analyze_group_coherence,
    coherence_level_for,
)
from minion.sources.material import DocumentSource


def _docs(n: int) -> list[DocumentSource]:
    return [DocumentSource(id=f"d{i}", filename=f"doc{i}.txt", content=f"content {i}") for i in range(n)]


def _check(index: int, *, contradicts: bool = False, alignment: float = 95, issues=None) -> SourceCheck:
    return SourceCheck(
        source_index=index,
        source_label=f"Document: doc{index}.txt",
        contradicts=contradicts,
        alignment=alignment,
        issues=issues or [],
    )


class TestCoherenceLevel:
    @pytest.mark.parametrize(
        ("percentage", "level"),
        [(100, "high"), (91, "high"), (90, "medium"), (71, "medium"), (70, "low"), (0, "low")],
    )
    def test_thresholds(self, percentage: int, level: str) -> None:
        assert coherence_level_for(percentage) == level


class TestAnalyzeGroupCoherence:
    """Tests for analyze_group_coherence function."""

    def test_requires_sources(self) -> None:
        with pytest.raises(ValueError, match="sources"):
            analyze_group_coherence([], "Title")

    def test_requires_title(self) -> None:
        with pytest.raises(ValueError, match="groupTitle"):
            analyze_group_coherence(_docs(2), "  ")

    def test_single_source_skips_llm(self) -> None:
        with patch("minion.skills.coherence.complete_json") as cj:
            result = analyze_group_coherence(_docs(1), "Title")

        cj.assert_not_called()
        assert result.coherent is True
        assert result.coherence_percentage == 100
        assert result.strategy == "single-source"

    def test_small_group_single_prompt(self) -> None:
        answer = {
            "coherent": False,
            "coherencePercentage": 62.4,
            "conflicts": [
                {
                    "type": "version_mismatch",
                    "description": "TLS 1.0 vs TLS 1.2",
                    "affectedSources": [0, 2],
                    "severity": "high",
                },
                {"type": "made_up_type", "description": "Other"},
            ],
            "recommendation": "Trust source 3",
            "summary": "Versions disagree",
        }
        with patch("minion.skills.coherence.complete_json", return_value=answer) as cj:
            result = analyze_group_coherence(_docs(3), "Encryption")

        assert cj.call_count == 1
        prompt = cj.call_args.args[0]
        assert "SOURCE 1: Document: doc0.txt" in prompt
        assert "SOURCE 3: Document: doc2.txt" in prompt
        assert result.strategy == "multi-source"
        assert result.coherent is False
        assert result.coherence_percentage == 62
        assert result.coherence_level == "low"
        assert result.conflicts[0].affected_sources == [0, 2]
        assert result.conflicts[0].severity == "high"
        assert result.conflicts[1].type == "technical_contradiction"
        assert result.conflicts[1].severity == "medium"

    def test_small_group_missing_percentage(self) -> None:
        with patch(
            "minion.skills.coherence.complete_json",
            return_value={"coherent": True, "conflicts": [], "coherenceLevel": "high"},
        ):
            result = analyze_group_coherence(_docs(2), "Encryption")

        assert result.coherence_percentage == 100
        assert result.coherence_level == "high"

    def test_large_group_draft_based(self) -> None:
        def check(prompt: str, **kwargs):
            index = kwargs["metadata"]["sourceIndex"]
            if index == 6:
                return {
                    "contradicts": True,
                    "alignment": 40,
                    "issues": [{"type": "outdated_information", "description": "Old retention period"}],
                }
            return {"contradicts": False, "alignment": 100}

        with (
            patch(
                "minion.skills.drafts.complete_json",
                return_value={"title": "Retention", "content": "Draft body"},
            ) as draft_call,
            patch("minion.skills.coherence.complete_json", side_effect=check) as check_call,
        ):
            result = analyze_group_coherence(_docs(7), "Retention")

        assert draft_call.call_count == 1
        draft_prompt = draft_call.call_args.args[0]
        assert "Source 5: Document: doc4.txt" in draft_prompt
        assert "doc5.txt" not in draft_prompt
        assert check_call.call_count == 2

        assert result.strategy == "draft-based"
        assert result.coherent is False
        assert result.coherence_percentage == 70
        assert result.coherence_level == "low"
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.type == "outdated_information"
        assert conflict.affected_sources == [6]
        assert conflict.description == "Source 7 (Document: doc6.txt): Old retention period"


class TestAggregateSourceChecks:
    """Tests for aggregate_source_checks function."""

    def test_all_aligned(self) -> None:
        result = aggregate_source_checks([_check(5), _check(6, alignment=85)], total_sources=7)

        assert result.coherent is True
        assert result.coherence_percentage == 90
        assert result.coherence_level == "medium"
        assert result.recommendation == "All 7 sources align well - draft generated from first 5 sources"
        assert result.conflicts == []

    def test_conflicts_reported_per_issue(self) -> None:
        checks = [
            _check(
                5,
                contradicts=True,
                alignment=30,
                issues=[
                    {"type": "version_mismatch", "description": "a", "severity": "high"},
                    {"type": "bogus", "description": "b"},
                ],
            ),
            _check(6),
        ]
        result = aggregate_source_checks(checks, total_sources=7)

        assert result.coherent is False
        assert result.recommendation == "1 of 2 additional sources contain contradictions - review recommended"
        assert [c.type for c in result.conflicts] == ["version_mismatch", "technical_contradiction"]

    def test_no_checks(self) -> None:
        result = aggregate_source_checks([], total_sources=5)

        assert result.coherent is True
        assert result.coherence_percentage == 100

    def test_to_dict(self) -> None:
        data = aggregate_source_checks([_check(5)], total_sources=6).to_dict()

        assert set(data) == {
            "coherent",
            "coherenceLevel",
            "coherencePercentage",
            "conflicts",
            "recommendation",
            "summary",
            "strategy",
        }

    def test_round_half_up(self) -> None:
        result = aggregate_source_checks([_check(5, alignment=90), _check(6, alignment=91)], total_sources=7)

        assert result.coherence_percentage == 91
        assert result.coherence_level == "high"

    def test_averages_unrounded_alignment(self) -> None:
        result = aggregate_source_checks([_check(5, alignment=90.4), _check(6, alignment=91.4)], total_sources=7)

        assert result.coherence_percentage == 91


class TestGroupSizeBoundary:
    """Five sources fit one prompt; six switch to the draft-based path."""

    def test_five_sources_single_prompt(self) -> None:
        answer = {"coherent": True, "coherencePercentage": 95, "conflicts": []}
        with (
            patch("minion.skills.drafts.complete_json") as draft_call,
            patch("minion.skills.coherence.complete_json", return_value=answer) as cj,
        ):
            result = analyze_group_coherence(_docs(5), "Access Control")

        draft_call.assert_not_called()
        assert cj.call_count == 1
        assert "SOURCE 5: Document: doc4.txt" in cj.call_args.args[0]
        assert result.strategy == "multi-source"

    def test_six_sources_one_check_against_draft(self) -> None:
        with (
            patch(
                "minion.skills.drafts.complete_json",
                return_value={"title": "Access Control", "content": "Draft body"},
            ) as draft_call,
            patch(
                "minion.skills.coherence.complete_json",
                return_value={"contradicts": False, "alignment": 96},
            ) as check_call,
        ):
            result = analyze_group_coherence(_docs(6), "Access Control")

        assert draft_call.call_count == 1
        assert check_call.call_count == 1
        assert check_call.call_args.kwargs["metadata"]["sourceIndex"] == 5
        assert result.strategy == "draft-based"
        assert result.coherence_percentage == 96
        assert result.coherence_level == "high"


class TestConcurrentSourceChecks:
    """Large groups run real Claude calls on worker threads."""

    def test_guard_never_touches_process_environment(self) -> None:
        seen_env: list[str | None] = []
        seen_options: list[dict] = []
        threads: set[int] = set()

        def _message(payload: dict) -> MagicMock:
            msg = MagicMock(spec=ResultMessage)
            msg.result = json.dumps(payload)
            msg.is_error = False
            msg.usage = {"input_tokens": 1, "output_tokens": 1}
            return msg

        async def mock_query(*, prompt, options):
            seen_env.append(os.environ.get(RECURSION_GUARD_VAR))
            seen_options.append(dict(options.env))
            threads.add(threading.get_ident())
            await anyio.sleep(0.05)
            if "SOURCE TO ANALYZE" in prompt:
                yield _message({"contradicts": False, "alignment": 95})
            else:
                yield _message({"title": "Logging", "content": "- Keep audit logs"})

        with patch("minion.llm.query", mock_query):
            result = analyze_group_coherence(_docs(9), "Logging")

        assert result.strategy == "draft-based"
        assert result.coherent is True
        assert len(seen_options) == 5
        assert all(env == {RECURSION_GUARD_VAR: "1"} for env in seen_options)
        assert seen_env == [None] * 5
        assert os.environ.get(RECURSION_GUARD_VAR) is None
        assert len(threads) > 1
