"""File helpers for minion.

Atomic text writes for content files (a half-written skill must never be
committed) and forgiving reads for local state such as the usage log.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any


def ensure_parent_dir(path: Path | str) -> Path:
    """Ensure the parent directory of a path exists and return it as a Path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def read_file(path: Path | str, default: str | None = None) -> str | None:
    """Read a UTF-8 file, returning default if it is missing or unreadable."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (FileNotFoundError, PermissionError, OSError):
        return default


def read_json(path: Path | str, default: Any = None) -> Any:
    """Read and parse a JSON file, returning default on any error."""
    content = read_file(path)
    if content is None:
        return default
    try:
        return json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return default


def write_file(path: Path | str, content: str) -> None:
    """Write content to a file atomically.

    Writes to a temp file in the destination directory and renames it over
    the target. Unlike the read helpers this raises OSError on failure:
    callers about to commit the file need to know it was not written.

    Args:
        path: Destination file path.
        content: String content to write.
    """
    path = ensure_parent_dir(path)
    fd, tmp_path = tempfile.mkstemp(
        suffix=".tmp",
        prefix=path.name + ".",
        dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def append_jsonl(path: Path | str, items: Iterable[Any]) -> bool:
    """Append JSON-serializable items to a JSONL file.

    Returns:
        True if every item was written, False on any I/O or encoding error.
    """
    try:
        path = ensure_parent_dir(path)
        lines = [json.dumps(item, ensure_ascii=False) for item in items]
        with path.open("a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
        return True
    except (OSError, TypeError, ValueError):
        return False


def read_jsonl(path: Path | str) -> list[Any]:
    """Read a JSONL file, skipping blank and invalid lines.

    Missing or unreadable files read as an empty list.
    """
    items: list[Any] = []
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    items.append(json.loads(line))
                except (json.JSONDecodeError, ValueError):
                    continue
    except (FileNotFoundError, PermissionError, OSError):
        return []
    return items
