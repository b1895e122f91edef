"""Git sync services for each content entity type."""

from __future__ import annotations

from pathlib import Path

from minion.errors import MinionError
from minion.frontmatter import get_slug
from minion.gitsync.base import BaseGitSyncService
from minion.gitsync.entities import (
    Customer,
    PromptBlock,
    Template,
    delete_entity_file,
    read_customer_file,
    read_prompt_block_file,
    read_template_file,
    rename_entity_file,
    write_customer_file,
    write_prompt_block_file,
    write_template_file,
)
from minion.skills.models import Skill
from minion.skills.store import (
    delete_skill_file,
    get_skill_slug,
    read_skill_file,
    rename_skill_file,
    write_skill_file,
)


class SkillGitSyncService(BaseGitSyncService[Skill]):
    entity_type = "skill"

    @property
    def directory(self) -> str:
        return "skills"

    @property
    def file_extension(self) -> str:
        return "md"

    @property
    def skills_dir(self) -> Path:
        return self.repo_dir / self.directory

    def generate_slug(self, entity: Skill) -> str:
        return get_skill_slug(entity.title)

    def read(self, slug: str) -> Skill:
        return read_skill_file(slug, self.skills_dir)

    def write_file(self, slug: str, entity: Skill) -> None:
        entity.slug = slug
        write_skill_file(slug, entity, self.skills_dir)

    def delete_file(self, slug: str) -> None:
        delete_skill_file(slug, self.skills_dir)

    def rename_file(self, old_slug: str, new_slug: str) -> None:
        rename_skill_file(old_slug, new_slug, self.skills_dir)


class CustomerGitSyncService(BaseGitSyncService[Customer]):
    entity_type = "customer"

    @property
    def directory(self) -> str:
        return "customers"

    @property
    def file_extension(self) -> str:
        return "md"

    def generate_slug(self, entity: Customer) -> str:
        return get_slug(entity.name)

    def read(self, slug: str) -> Customer:
        return read_customer_file(self.get_absolute_path(slug))

    def write_file(self, slug: str, entity: Customer) -> None:
        entity.slug = slug
        write_customer_file(self.get_absolute_path(slug), entity)

    def delete_file(self, slug: str) -> None:
        delete_entity_file(self.get_absolute_path(slug))

    def rename_file(self, old_slug: str, new_slug: str) -> None:
        rename_entity_file(self.get_absolute_path(old_slug), self.get_absolute_path(new_slug))


class TemplateGitSyncService(BaseGitSyncService[Template]):
    entity_type = "template"

    @property
    def directory(self) -> str:
        return "templates"

    @property
    def file_extension(self) -> str:
        return "md"

    def generate_slug(self, entity: Template) -> str:
        return get_slug(entity.name)

    def read(self, slug: str) -> Template:
        return read_template_file(self.get_absolute_path(slug))

    def write_file(self, slug: str, entity: Template) -> None:
        entity.slug = slug
        write_template_file(self.get_absolute_path(slug), entity)

    def delete_file(self, slug: str) -> None:
        delete_entity_file(self.get_absolute_path(slug))

    def rename_file(self, old_slug: str, new_slug: str) -> None:
        rename_entity_file(self.get_absolute_path(old_slug), self.get_absolute_path(new_slug))


class PromptBlockGitSyncService(BaseGitSyncService[PromptBlock]):
    """Prompt blocks are keyed by their stable id, so they never rename."""

    entity_type = "prompt-block"

    @property
    def directory(self) -> str:
        return "prompts/blocks"

    @property
    def file_extension(self) -> str:
        return "md"

    def generate_slug(self, entity: PromptBlock) -> str:
        return entity.id

    def read(self, slug: str) -> PromptBlock:
        return read_prompt_block_file(self.get_absolute_path(slug))

    def write_file(self, slug: str, entity: PromptBlock) -> None:
        write_prompt_block_file(self.get_absolute_path(slug), entity)

    def delete_file(self, slug: str) -> None:
        delete_entity_file(self.get_absolute_path(slug))

    def rename_file(self, old_slug: str, new_slug: str) -> None:
        raise MinionError("Block renaming not supported - IDs should be stable")


SERVICES: dict[str, type[BaseGitSyncService]] = {
    "skill": SkillGitSyncService,
    "customer": CustomerGitSyncService,
    "template": TemplateGitSyncService,
    "prompt-block": PromptBlockGitSyncService,
}
