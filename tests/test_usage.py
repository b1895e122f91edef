"""Tests for minion.usage module."""

from __future__ import annotations

from pathlib import Path

from minion.io import read_jsonl
from minion.usage import record_usage, summarize_usage


class TestUsage:
    """Tests for usage recording and summaries."""

    def test_record_to_default_path(self, tmp_path: Path) -> None:
        assert record_usage(feature="skills-refresh", model="m", input_tokens=10, output_tokens=5, metadata={"a": 1})

        records = read_jsonl(tmp_path / "state" / "usage.jsonl")
        assert records[0]["feature"] == "skills-refresh"
        assert records[0]["metadata"] == {"a": 1}
        assert "timestamp" in records[0]

    def test_summarize(self, tmp_path: Path) -> None:
        path = tmp_path / "usage.jsonl"
        record_usage(feature="a", model="m", input_tokens=1, output_tokens=2, path=path)
        record_usage(feature="a", model="m", input_tokens=3, output_tokens=4, path=path)
        record_usage(feature="b", model="m", path=path)

        assert summarize_usage(path) == {
            "a": {"calls": 2, "input_tokens": 4, "output_tokens": 6},
            "b": {"calls": 1, "input_tokens": 0, "output_tokens": 0},
        }

    def test_summarize_missing_log(self, tmp_path: Path) -> None:
        assert summarize_usage(tmp_path / "none.jsonl") == {}

    def test_unwritable_returns_false(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        assert record_usage(feature="a", model="m", path=blocker / "usage.jsonl") is False
