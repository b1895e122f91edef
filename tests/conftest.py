"""Shared fixtures: every test runs against its own content and state dirs."""

from __future__ import annotations

from pathlib import Path

import pytest

from minion.logging import set_log_level


@pytest.fixture(autouse=True)
def isolated_dirs(
    tmp_path: Path, tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    content = tmp_path_factory.mktemp("content")
    monkeypatch.setenv("MINION_CONTENT_DIR", str(content))
    monkeypatch.setenv("MINION_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.delenv("MINION_PROMPTS_DIR", raising=False)
    monkeypatch.delenv("MINION_SPEED", raising=False)
    monkeypatch.delenv("MINION_INTERNAL_LLM_CALL", raising=False)
    return content


@pytest.fixture(autouse=True)
def reset_log_level():
    yield
    set_log_level(None)
