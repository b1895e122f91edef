"""LLM usage accounting.

Each completed Claude call appends one line to `<state>/usage.jsonl`.
Recording is best effort: a read-only state dir must not break a draft.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from minion.config import get_usage_log_path
from minion.io import append_jsonl, read_jsonl
from minion.logging import get_logger

_logger = get_logger("usage")


def record_usage(
    *,
    feature: str,
    model: str,
    input_tokens: int = 0,
    output_tokens: int = 0,
    metadata: dict[str, Any] | None = None,
    path: Path | str | None = None,
) -> bool:
    """Append a usage record for one LLM call.

    Returns:
        True if the record was written.
    """
    record = {
        "timestamp": datetime.now(UTC).isoformat(),
        "feature": feature,
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "metadata": metadata or {},
    }
    ok = append_jsonl(path or get_usage_log_path(), [record])
    if not ok:
        _logger.warning("Could not record usage for %s", feature)
    return ok


def summarize_usage(path: Path | str | None = None) -> dict[str, dict[str, int]]:
    """Total calls and tokens per feature from the usage log."""
    totals: dict[str, dict[str, int]] = defaultdict(
        lambda: {"calls": 0, "input_tokens": 0, "output_tokens": 0}
    )
    for record in read_jsonl(path or get_usage_log_path()):
        if not isinstance(record, dict):
            continue
        entry = totals[str(record.get("feature", "unknown"))]
        entry["calls"] += 1
        entry["input_tokens"] += int(record.get("input_tokens") or 0)
        entry["output_tokens"] += int(record.get("output_tokens") or 0)
    return dict(totals)
