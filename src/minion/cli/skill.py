"""Skill commands: suggest, refresh, apply, merge, analyses and listing."""

from pathlib import Path
from typing import Annotated

import typer

from minion.scripts.skill.analyze import analyze_source_main, place_main, volume_main
from minion.scripts.skill.library import main as library_main
from minion.scripts.skill.list_cmd import main as list_main
from minion.scripts.skill.merge import main as merge_main
from minion.scripts.skill.refresh import apply_main
from minion.scripts.skill.refresh import main as refresh_main
from minion.scripts.skill.suggest import main as suggest_main

app = typer.Typer(
    name="skill",
    help="Draft, refresh and analyze knowledge skills",
    no_args_is_help=True,
)

JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


@app.command("suggest")
def suggest(
    urls: Annotated[
        list[str] | None,
        typer.Option("--url", "-u", help="Source URL (repeatable)"),
    ] = None,
    text_file: Annotated[
        Path | None,
        typer.Option("--text-file", "-t", help="File with pasted source text"),
    ] = None,
    prompt_file: Annotated[
        Path | None,
        typer.Option("--prompt-file", help="Custom system prompt"),
    ] = None,
    conversation_file: Annotated[
        Path | None,
        typer.Option("--conversation", "-c", help="JSON list of {role, content} messages"),
    ] = None,
    existing: Annotated[
        str | None,
        typer.Option("--existing", "-e", help="Slug of a skill to propose an update for"),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Write the draft to the skills directory"),
    ] = False,
    commit: Annotated[
        bool,
        typer.Option("--commit", help="With --save, commit through git sync"),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Draft a new skill (or an update) from sources or a conversation."""
    suggest_main(
        urls=urls,
        text_file=text_file,
        prompt_file=prompt_file,
        conversation_file=conversation_file,
        existing=existing,
        save=save,
        commit=commit,
        json_output=json_output,
    )


@app.command("refresh")
def refresh(
    slug: Annotated[str, typer.Argument(help="Skill slug")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the proposed draft JSON here"),
    ] = None,
    commit: Annotated[
        bool,
        typer.Option("--commit", help="Commit the refresh stamp when nothing changed"),
    ] = False,
    user: Annotated[
        str | None,
        typer.Option("--user", help="User recorded in the skill history"),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Re-fetch a skill's source URLs and propose an update."""
    refresh_main(slug=slug, output=output, commit=commit, user=user, json_output=json_output)


@app.command("apply")
def apply_draft(
    slug: Annotated[str, typer.Argument(help="Skill slug")],
    draft: Annotated[
        Path,
        typer.Option("--draft", "-d", help="Draft JSON written by `skill refresh --output`"),
    ],
    commit: Annotated[
        bool,
        typer.Option("--commit", help="Commit the change through git sync"),
    ] = False,
    user: Annotated[
        str | None,
        typer.Option("--user", help="User recorded in the skill history"),
    ] = None,
) -> None:
    """Apply a reviewed refresh draft to a skill."""
    apply_main(slug=slug, draft_path=draft, commit=commit, user=user)


@app.command("analyze-source")
def analyze_source(
    slug: Annotated[str, typer.Argument(help="Skill slug")],
    url: Annotated[str, typer.Argument(help="Candidate source URL")],
    json_output: JsonOption = False,
) -> None:
    """Compare a candidate source URL with a skill."""
    analyze_source_main(slug=slug, url=url, json_output=json_output)


@app.command("place")
def place(
    urls: Annotated[list[str], typer.Argument(help="Source URLs to place")],
    json_output: JsonOption = False,
) -> None:
    """Suggest whether URLs update a skill, create one or split into several."""
    place_main(urls=urls, json_output=json_output)


@app.command("volume")
def volume(
    slug: Annotated[str, typer.Argument(help="Skill slug")],
    json_output: JsonOption = False,
) -> None:
    """Judge whether a skill should be split."""
    volume_main(slug=slug, json_output=json_output)


@app.command("list")
def list_skills(
    include_inactive: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include inactive skills"),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """List stored skills."""
    list_main(include_inactive=include_inactive, json_output=json_output)


@app.command("merge")
def merge(
    target: Annotated[str, typer.Argument(help="Slug of the skill that receives the merge")],
    others: Annotated[list[str], typer.Argument(help="Slugs of the skills to fold in")],
    save: Annotated[
        bool,
        typer.Option("--save", help="Write the merged skill and deactivate the others"),
    ] = False,
    commit: Annotated[
        bool,
        typer.Option("--commit", help="With --save, commit through git sync"),
    ] = False,
    user: Annotated[
        str | None,
        typer.Option("--user", help="User recorded in the skill history"),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Merge several skills into one."""
    merge_main(
        target_slug=target,
        other_slugs=others,
        save=save,
        commit=commit,
        user=user,
        json_output=json_output,
    )


@app.command("analyze-library")
def analyze_library(
    include_inactive: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include inactive skills"),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Recommend merges, splits, renames and retags across the library."""
    library_main(include_inactive=include_inactive, json_output=json_output)
