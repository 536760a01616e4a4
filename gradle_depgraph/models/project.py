"""Workspace entities as seen through the build tool's resolution API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable

from gradle_depgraph.models.graph import dependency_id, display_id

DEFAULT_PROJECT_VERSION = "unspecified"


@dataclass(frozen=True)
class AttributeKey:
    """Typed key of a variant attribute.

    ``name`` is the fully qualified type name of the attribute, e.g.
    ``com.android.build.api.attributes.BuildTypeAttr``.
    """

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class ResolvedModule:
    """A resolved module and the modules it pulls in."""

    group: str
    name: str
    version: str
    children: list[ResolvedModule] = field(default_factory=list)
    # attribute type names the consumer must set to pick one variant of this module
    variant_attributes: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return dependency_id(self.group, self.name, self.version)

    @property
    def display_name(self) -> str:
        return display_id(self.group, self.name)


@dataclass
class Configuration:
    """A named set of dependency declarations within a project.

    ``attributes`` is ``None`` when the build tool predates variant
    attributes; an empty dict means the tool supports them but none are set.
    """

    name: str
    attributes: dict[AttributeKey, Hashable] | None = None
    extends_from: list[str] = field(default_factory=list)
    dependencies: list[ResolvedModule] = field(default_factory=list)

    @property
    def supports_attributes(self) -> bool:
        return self.attributes is not None


@dataclass
class Project:
    name: str
    path: str
    build_file: str
    version: str = DEFAULT_PROJECT_VERSION
    configurations: list[Configuration] = field(default_factory=list)

    def configuration(self, name: str) -> Configuration | None:
        for conf in self.configurations:
            if conf.name == name:
                return conf
        return None

    def configuration_names(self) -> list[str]:
        return [conf.name for conf in self.configurations]


@dataclass
class Workspace:
    """All projects of a build, root project first."""

    projects: list[Project]
    default_project: str

    def project(self, name: str) -> Project | None:
        for proj in self.projects:
            if proj.name == name:
                return proj
        return None

    @property
    def project_names(self) -> list[str]:
        return [proj.name for proj in self.projects]


@dataclass
class ProjectEntry:
    """Per-project result. ``snyk_graph`` stays ``None`` when nothing was resolved."""

    target_file: str
    snyk_graph: dict[str, dict[str, Any]] | None = None
    project_version: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"targetFile": self.target_file}
        if self.snyk_graph is not None:
            out["snykGraph"] = self.snyk_graph
            out["projectVersion"] = self.project_version
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass
class ScanOutput:
    """Result of a scan over a workspace, plus the attribute report side channel."""

    default_project: str
    projects: dict[str, ProjectEntry]
    all_sub_project_names: list[str]
    attributes: dict[str, set[str]] = field(default_factory=dict)

    @property
    def failed_projects(self) -> list[str]:
        return [name for name, entry in self.projects.items() if entry.error is not None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultProject": self.default_project,
            "projects": {name: entry.to_dict() for name, entry in self.projects.items()},
            "allSubProjectNames": list(self.all_sub_project_names),
        }
