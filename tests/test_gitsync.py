"""Tests for the git sync services against a real git repository."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from minion.errors import EntityExistsError, GitError, MinionError, SkillNotFoundError
from minion.gitsync import git
from minion.gitsync.entities import (
    Customer,
    PromptBlock,
    Template,
    parse_variants,
    read_prompt_block_file,
    serialize_variants,
    write_prompt_block_file,
)
from minion.gitsync.git import GitAuthor
from minion.gitsync.services import (
    CustomerGitSyncService,
    PromptBlockGitSyncService,
    SkillGitSyncService,
    TemplateGitSyncService,
)
from minion.skills.models import Skill

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

AUTHOR = GitAuthor(name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def repo(isolated_dirs: Path) -> Path:
    subprocess.run(["git", "init", "-q"], cwd=isolated_dirs, check=True)
    return isolated_dirs


def _skill(title: str = "Data Encryption", content: str = "- AES-256") -> Skill:
    return Skill(id="skill-1", slug="", title=title, content=content)


class TestGitHelpers:
    """Tests for the git CLI wrappers."""

    def test_author_str(self) -> None:
        assert str(AUTHOR) == "Ada Lovelace <ada@example.com>"

    def test_nothing_staged_returns_none(self, repo: Path) -> None:
        assert git.commit_staged_changes_if_any("empty", AUTHOR, repo_dir=repo) is None

    def test_commit_and_history(self, repo: Path) -> None:
        (repo / "notes.md").write_text("one\n", encoding="utf-8")
        git.git_add("notes.md", repo_dir=repo)
        sha = git.commit_staged_changes_if_any("Add notes", AUTHOR, repo_dir=repo)

        assert sha is not None and len(sha) == 40
        history = git.get_file_history("notes.md", repo_dir=repo)
        assert len(history) == 1
        assert history[0].sha == sha
        assert history[0].author == "Ada Lovelace"
        assert history[0].email == "ada@example.com"
        assert history[0].message == "Add notes"
        assert git.is_repo_clean(repo_dir=repo)

    def test_failure_raises_git_error(self, repo: Path) -> None:
        with pytest.raises(GitError) as exc_info:
            git.get_file_diff("notes.md", "no-such-commit", repo_dir=repo)

        assert exc_info.value.stderr

    def test_not_a_repo(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(GitError):
            git.is_repo_clean(repo_dir=plain)

    def test_branch_and_push_to_bare_remote(self, repo: Path, tmp_path: Path) -> None:
        remote = tmp_path / "remote.git"
        subprocess.run(["git", "init", "-q", "--bare", str(remote)], check=True)
        subprocess.run(["git", "remote", "add", "origin", str(remote)], cwd=repo, check=True)
        (repo / "notes.md").write_text("one\n", encoding="utf-8")
        git.git_add("notes.md", repo_dir=repo)
        sha = git.commit_staged_changes_if_any("Add notes", AUTHOR, repo_dir=repo)
        (repo / "scratch.txt").write_text("dirty\n", encoding="utf-8")

        branch = git.get_current_branch(repo_dir=repo)
        git.push_to_remote(repo_dir=repo)

        assert branch
        assert not git.is_repo_clean(repo_dir=repo)
        pushed = subprocess.run(
            ["git", "rev-parse", branch], cwd=remote, capture_output=True, text=True, check=True
        )
        assert pushed.stdout.strip() == sha

    def test_push_without_remote_raises(self, repo: Path) -> None:
        (repo / "notes.md").write_text("one\n", encoding="utf-8")
        git.git_add("notes.md", repo_dir=repo)
        git.commit_staged_changes_if_any("Add notes", AUTHOR, repo_dir=repo)

        with pytest.raises(GitError):
            git.push_to_remote("nowhere", repo_dir=repo)


class TestSkillGitSyncService:
    """Tests for the skill sync service."""

    def test_save_and_commit(self, repo: Path) -> None:
        service = SkillGitSyncService()
        sha = service.save_and_commit("data-encryption", _skill(), "Create skill: Data Encryption", AUTHOR)

        assert sha is not None
        assert (repo / "skills" / "data-encryption.md").is_file()
        assert service.read("data-encryption").title == "Data Encryption"
        assert service.get_history("data-encryption")[0].message == "Create skill: Data Encryption"
        assert service.is_clean()

    def test_restaging_committed_file_commits_nothing(self, repo: Path) -> None:
        service = SkillGitSyncService(repo)
        service.save_and_commit("data-encryption", _skill(), "first", AUTHOR)
        git.git_add(service.get_file_path("data-encryption"), repo_dir=repo)

        assert git.commit_staged_changes_if_any("second", AUTHOR, repo_dir=repo) is None
        assert len(service.get_history("data-encryption")) == 1

    def test_update_with_rename(self, repo: Path) -> None:
        service = SkillGitSyncService(repo)
        skill = _skill()
        first = service.save_and_commit("data-encryption", skill, "create", AUTHOR)

        skill.title = "Encryption at Rest"
        skill.content = "- AES-256-GCM"
        second = service.update_and_commit("data-encryption", skill, "rename", AUTHOR)

        assert second is not None and second != first
        assert not (repo / "skills" / "data-encryption.md").exists()
        assert service.read("encryption-at-rest").content == "- AES-256-GCM"
        assert skill.slug == "encryption-at-rest"
        assert service.is_clean()
        diff = git.get_file_diff("skills/data-encryption.md", first, second, repo_dir=repo)
        assert "-- AES-256" in diff

    def test_delete(self, repo: Path) -> None:
        service = SkillGitSyncService(repo)
        service.save_and_commit("data-encryption", _skill(), "create", AUTHOR)

        sha = service.delete_and_commit("data-encryption", "delete", AUTHOR)

        assert sha is not None
        assert service.is_clean()
        with pytest.raises(SkillNotFoundError):
            service.read("data-encryption")

    def test_diff_between_commits(self, repo: Path) -> None:
        service = SkillGitSyncService(repo)
        skill = _skill(content="- TLS 1.2")
        first = service.save_and_commit("data-encryption", skill, "v1", AUTHOR)
        skill.content = "- TLS 1.3"
        second = service.update_and_commit("data-encryption", skill, "v2", AUTHOR)

        diff = service.get_diff("data-encryption", first, second)

        assert "-- TLS 1.2" in diff
        assert "+- TLS 1.3" in diff
        assert [c.message for c in service.get_history("data-encryption")] == ["v2", "v1"]

    def test_create_refuses_existing_slug(self, repo: Path) -> None:
        service = SkillGitSyncService(repo)
        service.create_and_commit("data-encryption", _skill(), "create", AUTHOR)

        with pytest.raises(EntityExistsError):
            service.create_and_commit("data-encryption", _skill(content="- Replaced"), "again", AUTHOR)

        assert service.read("data-encryption").content == "- AES-256"
        assert len(service.get_history("data-encryption")) == 1

    def test_rename_onto_existing_customer(self, repo: Path) -> None:
        service = CustomerGitSyncService(repo)
        acme = Customer(id="c1", slug="", name="Acme", content="Acme notes")
        globex = Customer(id="c2", slug="", name="Globex", content="Globex notes")
        service.create_and_commit("acme", acme, "acme", AUTHOR)
        service.create_and_commit("globex", globex, "globex", AUTHOR)

        acme.name = "Globex"
        with pytest.raises(EntityExistsError):
            service.update_and_commit("acme", acme, "rename", AUTHOR)

        assert service.read("globex").content == "Globex notes"
        assert service.read("acme").content == "Acme notes"


class TestOtherServices:
    """Tests for customer, template and prompt block services."""

    def test_customer_round_trip(self, repo: Path) -> None:
        service = CustomerGitSyncService(repo)
        customer = Customer(id="c1", slug="", name="Acme & Co", content="Notes", industry="Retail", tier="gold")

        slug = service.generate_slug(customer)
        service.save_and_commit(slug, customer, "Create customer", AUTHOR)

        assert slug == "acme-and-co"
        loaded = service.read(slug)
        assert loaded.industry == "Retail"
        assert loaded.tier == "gold"
        assert loaded.region is None

    def test_template_frontmatter_keys(self, repo: Path) -> None:
        service = TemplateGitSyncService(repo)
        template = Template(
            id="t1",
            slug="",
            name="Security Overview",
            content="Hello {{customer.name}}",
            output_format="docx",
            sort_order=2,
            placeholder_mappings=[{"placeholder": "customer.name", "source": "customer"}],
        )
        service.save_and_commit("security-overview", template, "Create template", AUTHOR)

        text = service.get_absolute_path("security-overview").read_text(encoding="utf-8")
        assert "outputFormat: docx" in text
        assert "sortOrder: 2" in text
        loaded = service.read("security-overview")
        assert loaded.slug == "security-overview"
        assert loaded.placeholder_mappings[0]["source"] == "customer"

    def test_prompt_block_never_renames(self, repo: Path) -> None:
        service = PromptBlockGitSyncService(repo)
        block = PromptBlock(id="tone", name="Tone", variants={"default": "Be precise."})
        service.save_and_commit("tone", block, "Create block", AUTHOR)

        assert (repo / "prompts" / "blocks" / "tone.md").is_file()
        block.name = "Voice"
        assert service.update_and_commit("tone", block, "Rename label", AUTHOR) is not None
        with pytest.raises(MinionError, match="renaming not supported"):
            service.rename_file("tone", "voice")


class TestPromptBlockVariants:
    """Tests for variant parsing and serialization."""

    def test_parse(self) -> None:
        body = "Base text\n\n---variant:rfp---\nRFP text\n---variant:empty---\n\n"

        assert parse_variants(body) == {"default": "Base text", "rfp": "RFP text"}

    def test_default_always_present(self) -> None:
        assert parse_variants("---variant:chat---\nChat only") == {"default": "", "chat": "Chat only"}

    def test_serialize(self) -> None:
        text = serialize_variants({"default": "Base", "rfp": "RFP", "empty": ""})

        assert text == "Base\n\n---variant:rfp---\n\nRFP"
        assert parse_variants(text) == {"default": "Base", "rfp": "RFP"}

    def test_file_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "tone.md"
        write_prompt_block_file(path, PromptBlock(id="tone", name="Tone", tier=1, variants={"default": "A", "x": "B"}))

        block = read_prompt_block_file(path)
        assert block.tier == 1
        assert block.variants == {"default": "A", "x": "B"}
