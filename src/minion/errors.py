"""Exception types raised at minion pipeline boundaries."""

from __future__ import annotations


class MinionError(Exception):
    """Base class for all minion errors."""


class LLMError(MinionError):
    """The LLM call itself failed (timeout, SDK error, empty output)."""


class LLMResponseError(MinionError):
    """The LLM answered, but not with the JSON shape we asked for."""


class SourceFetchError(MinionError):
    """Source material could not be loaded."""


class SSRFError(SourceFetchError):
    """A URL was rejected by the SSRF check."""


class SkillNotFoundError(MinionError):
    """A skill (or other entity) file does not exist."""


class EntityExistsError(MinionError):
    """A create or rename would overwrite another entity's file."""


class GitError(MinionError):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr
