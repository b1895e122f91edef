"""Claude access for minion's structured prompts.

Runs Claude through the Claude Agent SDK with tools disabled and a single
turn, so each call is a plain system-prompt + user-prompt completion.
Every pipeline in minion asks for a JSON object back; `complete_json`
wraps the call, parses the answer, validates it against a schema and
records token usage.

Usage:
    from minion.llm import complete_json

    data = complete_json(
        prompt,
        system_prompt=SYSTEM,
        feature="skills-suggest",
        schema=DRAFT_SCHEMA,
    )
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any

import anyio
from claude_agent_sdk import ClaudeAgentOptions, query
from claude_agent_sdk.types import AssistantMessage, ResultMessage, TextBlock

from minion.config import get_llm_timeout, get_model
from minion.errors import LLMError, LLMResponseError
from minion.jsonschema import validate
from minion.logging import get_logger
from minion.usage import record_usage

_logger = get_logger("llm")

# Set in the environment of every Claude subprocess minion starts. A minion
# process that finds it set refuses to call Claude again.
RECURSION_GUARD_VAR = "MINION_INTERNAL_LLM_CALL"

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


@dataclass
class LLMResult:
    """Result of an LLM call.

    Attributes:
        success: Whether the call succeeded.
        output: Claude's final text output.
        error: Error message if the call failed.
        model: Model the call was made with.
        input_tokens: Prompt tokens reported by the SDK (0 if unknown).
        output_tokens: Completion tokens reported by the SDK (0 if unknown).
    """

    success: bool
    output: str = ""
    error: str = ""
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    usage: dict[str, Any] = field(default_factory=dict)


def is_internal_call() -> bool:
    """Check if we're inside an LLM call (recursion guard is set)."""
    return os.environ.get(RECURSION_GUARD_VAR) == "1"


async def _run_completion(
    prompt: str,
    *,
    model: str | None,
    system_prompt: str | None,
    max_turns: int,
) -> tuple[str, dict[str, Any]]:
    """Run a tool-less Claude completion and collect text and usage."""
    options = ClaudeAgentOptions(
        system_prompt=system_prompt,
        allowed_tools=[],
        max_turns=max_turns,
        model=model,
        env={RECURSION_GUARD_VAR: "1"},
    )

    output = ""
    streamed: list[str] = []
    usage: dict[str, Any] = {}

    async for message in query(prompt=prompt, options=options):
        if isinstance(message, ResultMessage):
            if message.is_error:
                raise LLMError(message.result or "Claude returned an error result")
            output = message.result or ""
            usage = dict(message.usage or {})
        elif isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextBlock):
                    streamed.append(block.text)

    return output or "".join(streamed), usage


def call_claude(
    prompt: str,
    *,
    system_prompt: str | None = None,
    model: str | None = None,
    timeout_seconds: int | None = None,
    max_turns: int = 1,
) -> LLMResult:
    """Run a single Claude completion.

    Never raises: timeouts and SDK failures come back as
    LLMResult(success=False, error=...). Refuses to run when this process was
    itself started from inside a Claude call (recursion guard set).

    Args:
        prompt: The user prompt.
        system_prompt: Optional system prompt.
        model: Model name. Defaults to the quality model.
        timeout_seconds: Maximum time to wait for a response.
        max_turns: Maximum number of conversation turns.

    Returns:
        LLMResult with success status, output text and token usage.
    """
    model = model or get_model()
    timeout_seconds = timeout_seconds or get_llm_timeout()

    if is_internal_call():
        _logger.warning("Refusing nested Claude call (%s is set)", RECURSION_GUARD_VAR)
        return LLMResult(success=False, error="recursive Claude call refused", model=model)

    async def _with_timeout() -> tuple[str, dict[str, Any]]:
        with anyio.fail_after(timeout_seconds):
            return await _run_completion(
                prompt,
                model=model,
                system_prompt=system_prompt,
                max_turns=max_turns,
            )

    try:
        output, usage = anyio.run(_with_timeout)
        if not output.strip():
            return LLMResult(success=False, error="Claude returned an empty response", model=model)

        _logger.debug("Completion finished (%d chars)", len(output))
        return LLMResult(
            success=True,
            output=output,
            model=model,
            input_tokens=int(usage.get("input_tokens") or 0),
            output_tokens=int(usage.get("output_tokens") or 0),
            usage=usage,
        )

    except TimeoutError:
        _logger.warning("Claude call timed out after %ds", timeout_seconds)
        return LLMResult(success=False, error=f"timed out after {timeout_seconds}s", model=model)
    except Exception as e:
        _logger.warning("Claude call failed: %s", e)
        return LLMResult(success=False, error=str(e), model=model)


def strip_code_fence(value: str) -> str:
    """Strip a surrounding markdown code fence (```json ... ```)."""
    if not value.startswith("```"):
        return value

    lines = value.split("\n")
    if len(lines) <= 2:
        return value

    lines.pop(0)
    if lines and lines[-1].strip() == "```":
        lines.pop()

    return "\n".join(lines).strip()


def extract_json_object(value: str) -> str | None:
    """Return the outermost `{...}` span of a string, if any."""
    match = _JSON_OBJECT_RE.search(value)
    return match.group(0) if match else None


def parse_json_response(text: str) -> Any:
    """Parse JSON from an LLM answer.

    Tries the fence-stripped text first, then the outermost object found
    inside it (models like to wrap JSON in prose).

    Raises:
        LLMResponseError: If no JSON can be recovered.
    """
    without_fence = strip_code_fence(text.strip())
    try:
        return json.loads(without_fence)
    except (json.JSONDecodeError, ValueError):
        pass

    candidate = extract_json_object(without_fence)
    if candidate is not None:
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            pass

    raise LLMResponseError("Failed to parse LLM response as JSON")


def complete_json(
    prompt: str,
    *,
    system_prompt: str,
    feature: str,
    model: str | None = None,
    schema: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> Any:
    """Ask Claude for a JSON answer and return the parsed value.

    Args:
        prompt: The user prompt.
        system_prompt: The system prompt.
        feature: Feature name used for usage accounting.
        model: Model name; defaults to the quality model.
        schema: Optional JSON Schema the parsed answer must satisfy.
        metadata: Extra fields stored with the usage record.

    Returns:
        Parsed JSON value.

    Raises:
        LLMError: If the call failed.
        LLMResponseError: If the answer is not valid JSON or fails the schema.
    """
    result = call_claude(prompt, system_prompt=system_prompt, model=model)
    if not result.success:
        raise LLMError(f"{feature}: {result.error}")

    record_usage(
        feature=feature,
        model=result.model,
        input_tokens=result.input_tokens,
        output_tokens=result.output_tokens,
        metadata=metadata,
    )

    data = parse_json_response(result.output)
    if schema is not None:
        ok, errors = validate(data, schema)
        if not ok:
            _logger.warning("%s response failed validation: %s", feature, errors)
            raise LLMResponseError(f"{feature}: unexpected response shape ({'; '.join(errors[:3])})")
    return data
