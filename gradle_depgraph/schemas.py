"""Workspace document schemas.

A workspace document captures what the build tool knows about a build:
its projects, their configurations (with variant attributes and
``extendsFrom`` parents) and the resolved first-level module trees.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gradle_depgraph.exceptions import WorkspaceError
from gradle_depgraph.models.project import (
    DEFAULT_PROJECT_VERSION,
    AttributeKey,
    Configuration,
    Project,
    ResolvedModule,
    Workspace,
)


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ModuleSchema(_Schema):
    group: str
    name: str
    version: str
    children: list[ModuleSchema] = Field(default_factory=list)
    variant_attributes: list[str] = Field(default_factory=list, alias="variantAttributes")

    @field_validator("version", mode="before")
    @classmethod
    def _stringify_version(cls, v: object) -> object:
        # versions are opaque; "1.0" written as a JSON number stays usable
        return str(v) if isinstance(v, (int, float)) else v

    def to_module(self) -> ResolvedModule:
        return ResolvedModule(
            group=self.group,
            name=self.name,
            version=self.version,
            children=[c.to_module() for c in self.children],
            variant_attributes=list(self.variant_attributes),
        )


class ConfigurationSchema(_Schema):
    name: str
    attributes: dict[str, str] | None = None
    extends_from: list[str] = Field(default_factory=list, alias="extendsFrom")
    dependencies: list[ModuleSchema] = Field(default_factory=list)

    @field_validator("attributes", mode="before")
    @classmethod
    def _stringify_values(cls, v: object) -> object:
        if isinstance(v, dict):
            return {k: val if isinstance(val, str) else json.dumps(val) for k, val in v.items()}
        return v

    def to_configuration(self) -> Configuration:
        attributes = None
        if self.attributes is not None:
            attributes = {AttributeKey(k): v for k, v in self.attributes.items()}
        return Configuration(
            name=self.name,
            attributes=attributes,
            extends_from=list(self.extends_from),
            dependencies=[d.to_module() for d in self.dependencies],
        )


class ProjectSchema(_Schema):
    name: str
    path: str | None = None
    build_file: str = Field(alias="buildFile")
    version: str = DEFAULT_PROJECT_VERSION
    configurations: list[ConfigurationSchema] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _stringify_version(cls, v: object) -> object:
        if v is None:
            return DEFAULT_PROJECT_VERSION
        return str(v)

    def to_project(self) -> Project:
        return Project(
            name=self.name,
            path=self.path or f":{self.name}",
            build_file=self.build_file,
            version=self.version,
            configurations=[c.to_configuration() for c in self.configurations],
        )


class WorkspaceDocument(_Schema):
    default_project: str | None = Field(default=None, alias="defaultProject")
    projects: list[ProjectSchema]

    @field_validator("projects")
    @classmethod
    def _non_empty(cls, v: list[ProjectSchema]) -> list[ProjectSchema]:
        if not v:
            raise ValueError("workspace must contain at least one project")
        return v

    def to_workspace(self) -> Workspace:
        projects = [p.to_project() for p in self.projects]
        default = self.default_project or projects[0].name
        if not any(p.name == default for p in projects):
            raise WorkspaceError(f"default project '{default}' is not part of the workspace")
        return Workspace(projects=projects, default_project=default)


def parse_workspace(raw: str) -> Workspace:
    try:
        doc = WorkspaceDocument.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        raise WorkspaceError(f"invalid JSON: {e}") from e
    except ValidationError as e:
        raise WorkspaceError(f"invalid workspace document: {e}") from e
    return doc.to_workspace()


def load_workspace(path: Path) -> Workspace:
    """Read and validate a workspace document from *path*."""
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise WorkspaceError(f"cannot read {path}: {e}") from e
    return parse_workspace(raw)
