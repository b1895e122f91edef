"""JSON Schema validation for LLM responses.

Every structured answer we get back from Claude (drafts, coherence
reports, volume judgements) is checked against a schema before any field
is read. `validate` never raises; callers decide what a failure means.
"""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator, ValidationError

from minion.logging import get_logger

_logger = get_logger("jsonschema")

SEVERITY_SCHEMA: dict[str, Any] = {"enum": ["low", "medium", "high"]}


def validate(data: Any, schema: dict[str, Any]) -> tuple[bool, list[str]]:
    """Validate data against a JSON Schema.

    Args:
        data: The data to validate.
        schema: Schema dict.

    Returns:
        Tuple of (is_valid, list of error messages).
        Never raises - returns (False, [error]) on any failure.
    """
    try:
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    except Exception as e:
        msg = f"Validation failed unexpectedly: {e}"
        _logger.warning(msg)
        return False, [msg]

    if errors:
        messages = [_format_error(e) for e in errors]
        for msg in messages:
            _logger.debug("Validation error: %s", msg)
        return False, messages

    return True, []


def _format_error(error: ValidationError) -> str:
    """Format a validation error as `path: message` (`$` for the root)."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        elif parts:
            parts.append(f".{p}")
        else:
            parts.append(str(p))
    path = "".join(parts) or "$"
    return f"{path}: {error.message}"
