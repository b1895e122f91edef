"""CLI for drafting a skill from sources or a conversation.

Usage:
    minion skill suggest --url URL [--url URL] [--text-file notes.md]
    minion skill suggest --conversation chat.json
    minion skill suggest --existing SLUG --url URL
    minion skill suggest --url URL --save [--commit]
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path

import typer

from minion.errors import MinionError
from minion.io import read_file, read_json
from minion.scripts.skill.save import save_skill
from minion.skills.models import Skill, SourceUrl
from minion.skills.refresh import suggest_skill
from minion.skills.store import read_skill_file


def _read_text(path: Path | None, what: str) -> str:
    if path is None:
        return ""
    text = read_file(path)
    if text is None:
        typer.echo(f"Error: could not read {what} from {path}", err=True)
        raise typer.Exit(1)
    return text


def main(
    urls: list[str] | None = None,
    text_file: Path | None = None,
    prompt_file: Path | None = None,
    conversation_file: Path | None = None,
    existing: str | None = None,
    save: bool = False,
    commit: bool = False,
    json_output: bool = False,
) -> None:
    """Draft a new skill, or an update of an existing one.

    Args:
        urls: Source URLs.
        text_file: File with pasted source text.
        prompt_file: Custom system prompt.
        conversation_file: JSON list of {"role", "content"} messages.
        existing: Slug of a skill to propose an update for.
        save: Write the new skill (or the accepted update) to the skills dir.
        commit: With --save, commit through git sync.
        json_output: Print the draft as JSON.
    """
    conversation = None
    if conversation_file is not None:
        conversation = read_json(conversation_file)
        if not isinstance(conversation, list):
            typer.echo(f"Error: {conversation_file} must contain a JSON list of messages", err=True)
            raise typer.Exit(1)

    try:
        existing_skill = read_skill_file(existing) if existing else None
        result = suggest_skill(
            _read_text(text_file, "source text"),
            urls or [],
            prompt=_read_text(prompt_file, "prompt") or None,
            conversation=conversation,
            existing_skill=existing_skill,
        )
    except (MinionError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif result.update is not None:
        update = result.update
        typer.echo(f"Has changes: {update.has_changes}. {update.summary}")
        for highlight in update.change_highlights:
            typer.echo(f"  - {highlight}")
    else:
        typer.echo(f"# {result.draft.title}\n\n{result.draft.content}")

    if not save:
        return

    try:
        if result.update is not None and existing_skill is not None:
            if not result.update.has_changes:
                typer.echo("Nothing to save.")
                return
            existing_skill.title = result.update.title
            existing_skill.content = result.update.content
            known = set(existing_skill.source_urls)
            existing_skill.sources.extend(SourceUrl(url=u) for u in result.source_urls if u not in known)
            slug, sha = save_skill(
                existing_skill,
                existing,
                operation="update",
                commit_message=f"Update skill: {existing_skill.title}",
                commit=commit,
            )
        else:
            skill = Skill(
                id=str(uuid.uuid4()),
                slug="",
                title=result.draft.title,
                content=result.draft.content,
                sources=[SourceUrl(url=u) for u in result.source_urls],
            )
            slug, sha = save_skill(
                skill,
                None,
                operation="create",
                commit_message=f"Create skill: {skill.title}",
                commit=commit,
            )
    except MinionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Saved skill {slug}" + (f" (commit {sha[:8]})" if sha else ""), err=json_output)
