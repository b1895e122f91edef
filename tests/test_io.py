"""Tests for minion.io module."""

from __future__ import annotations

import json
from pathlib import Path

from minion.io import append_jsonl, ensure_parent_dir, read_file, read_json, read_jsonl, write_file


class TestEnsureParentDir:
    """Tests for ensure_parent_dir function."""

    def test_creates_nested_directories(self, tmp_path: Path) -> None:
        """Should create all parent directories."""
        target = tmp_path / "a" / "b" / "c" / "file.txt"
        result = ensure_parent_dir(target)

        assert result == target
        assert target.parent.is_dir()

    def test_accepts_string_path(self, tmp_path: Path) -> None:
        result = ensure_parent_dir(str(tmp_path / "nested" / "file.txt"))
        assert isinstance(result, Path)
        assert result.parent.exists()


class TestReadFile:
    """Tests for read_file function."""

    def test_reads_existing_file(self, tmp_path: Path) -> None:
        file = tmp_path / "test.txt"
        file.write_text("hello world", encoding="utf-8")

        assert read_file(file) == "hello world"

    def test_returns_default_for_missing_file(self, tmp_path: Path) -> None:
        """Should return default when file doesn't exist."""
        file = tmp_path / "nonexistent.txt"

        assert read_file(file) is None
        assert read_file(file, default="fallback") == "fallback"


class TestReadJson:
    """Tests for read_json function."""

    def test_reads_valid_json(self, tmp_path: Path) -> None:
        file = tmp_path / "data.json"
        file.write_text(json.dumps({"groupTitle": "Access"}), encoding="utf-8")

        assert read_json(file) == {"groupTitle": "Access"}

    def test_returns_default_for_invalid_json(self, tmp_path: Path) -> None:
        """Should return default for malformed JSON."""
        file = tmp_path / "bad.json"
        file.write_text("{not json", encoding="utf-8")

        assert read_json(file) is None
        assert read_json(file, default={}) == {}


class TestWriteFile:
    """Tests for write_file function."""

    def test_writes_and_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "skills" / "encryption.md"
        write_file(target, "# Encryption\n")

        assert target.read_text(encoding="utf-8") == "# Encryption\n"

    def test_overwrites_without_leaving_temp_files(self, tmp_path: Path) -> None:
        """Should replace content atomically and clean up."""
        target = tmp_path / "file.md"
        write_file(target, "one")
        write_file(target, "two")

        assert target.read_text(encoding="utf-8") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["file.md"]


class TestJsonl:
    """Tests for append_jsonl and read_jsonl."""

    def test_appends_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "state" / "usage.jsonl"

        assert append_jsonl(path, [{"a": 1}]) is True
        assert append_jsonl(path, [{"a": 2}, {"a": 3}]) is True

        assert read_jsonl(path) == [{"a": 1}, {"a": 2}, {"a": 3}]

    def test_skips_blank_and_invalid_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "log.jsonl"
        path.write_text('{"a": 1}\n\nnot json\n{"a": 2}\n', encoding="utf-8")

        assert read_jsonl(path) == [{"a": 1}, {"a": 2}]

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        assert read_jsonl(tmp_path / "missing.jsonl") == []

    def test_unserializable_item_returns_false(self, tmp_path: Path) -> None:
        assert append_jsonl(tmp_path / "log.jsonl", [{"bad": object()}]) is False
