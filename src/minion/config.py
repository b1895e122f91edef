"""Configuration and path helpers for minion.

Provides canonical locations for:
- The content repository (git-synced skills, customers, templates, prompts)
- Local state (usage log, sync log database)
- System prompt overrides

and the model/speed selection used by every LLM-backed feature.
"""

import os
from pathlib import Path

DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_FAST_MODEL = "claude-haiku-4-5"
DEFAULT_LLM_TIMEOUT_SECONDS = 180
DEFAULT_GIT_AUTHOR_NAME = "GRC Minion"
DEFAULT_GIT_AUTHOR_EMAIL = "minion@localhost"

SPEED_FAST = "fast"
SPEED_QUALITY = "quality"


def get_content_dir() -> Path:
    """Get the root of the content repository.

    Uses MINION_CONTENT_DIR if set, otherwise falls back to cwd.
    """
    env_dir = os.environ.get("MINION_CONTENT_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.cwd()


def get_state_dir() -> Path:
    """Get the local state directory (.minion/ under the content dir)."""
    env_dir = os.environ.get("MINION_STATE_DIR")
    if env_dir:
        return Path(env_dir)
    return get_content_dir() / ".minion"


def get_prompts_dir() -> Path:
    """Get the directory holding `<key>.prompt.md` system prompt overrides."""
    env_dir = os.environ.get("MINION_PROMPTS_DIR")
    if env_dir:
        return Path(env_dir)
    return get_content_dir() / "prompts" / "system"


def get_skills_dir() -> Path:
    """Get the skills directory inside the content repo."""
    return get_content_dir() / "skills"


def get_usage_log_path() -> Path:
    """Get the path to the LLM usage log (JSONL)."""
    return get_state_dir() / "usage.jsonl"


def get_sync_db_path() -> Path:
    """Get the path to the git sync log SQLite database."""
    return get_state_dir() / "sync.db"


def get_model(speed: str | None = None) -> str:
    """Resolve the model name for a speed setting.

    `fast` maps to MINION_FAST_MODEL, anything else to MINION_MODEL.
    """
    if speed == SPEED_FAST:
        return os.environ.get("MINION_FAST_MODEL", DEFAULT_FAST_MODEL)
    return os.environ.get("MINION_MODEL", DEFAULT_MODEL)


def get_effective_speed(feature: str) -> str:
    """Get the speed setting for a feature.

    A per-feature override (MINION_SPEED_SKILLS_REFRESH for feature
    "skills-refresh") wins over the global MINION_SPEED. Unknown values
    fall back to quality.
    """
    key = "MINION_SPEED_" + feature.upper().replace("-", "_")
    value = os.environ.get(key) or os.environ.get("MINION_SPEED", SPEED_QUALITY)
    value = value.strip().lower()
    return value if value in (SPEED_FAST, SPEED_QUALITY) else SPEED_QUALITY


def get_llm_timeout() -> int:
    """Get the LLM call timeout in seconds (MINION_LLM_TIMEOUT)."""
    raw = os.environ.get("MINION_LLM_TIMEOUT")
    if raw:
        try:
            return max(1, int(raw))
        except ValueError:
            pass
    return DEFAULT_LLM_TIMEOUT_SECONDS


def ensure_minion_dirs() -> None:
    """Ensure the state directory exists."""
    get_state_dir().mkdir(parents=True, exist_ok=True)


def get_git_author() -> tuple[str, str]:
    """Get the (name, email) used for content commits.

    Uses MINION_GIT_AUTHOR_NAME / MINION_GIT_AUTHOR_EMAIL when set.
    """
    return (
        os.environ.get("MINION_GIT_AUTHOR_NAME", DEFAULT_GIT_AUTHOR_NAME),
        os.environ.get("MINION_GIT_AUTHOR_EMAIL", DEFAULT_GIT_AUTHOR_EMAIL),
    )
