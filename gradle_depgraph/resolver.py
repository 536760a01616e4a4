"""Resolvers: turn a configuration into its resolved first-level modules."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from gradle_depgraph.exceptions import ResolutionError, VariantAmbiguityError
from gradle_depgraph.models.project import Configuration, Project, ResolvedModule


@runtime_checkable
class ConfigurationResolver(Protocol):
    """Interface every resolver must satisfy.

    Implementations may raise :class:`ResolutionError` (or its
    ``VariantAmbiguityError`` subclass); the orchestrator records the failure
    for the project and moves on.
    """

    def resolve(self, project: Project, configuration: Configuration) -> list[ResolvedModule]: ...


class WorkspaceResolver:
    """Resolve from the resolution results recorded in a workspace document.

    A configuration yields its own modules followed by those of every
    configuration it extends, each visited once. Modules that need a variant
    attribute the configuration does not carry fail the way Gradle does when
    it cannot choose between variants.
    """

    def resolve(self, project: Project, configuration: Configuration) -> list[ResolvedModule]:
        modules: list[ResolvedModule] = []
        self._collect(project, configuration, modules, set())
        if configuration.attributes is not None:
            self._check_variants(configuration, modules)
        return modules

    def _collect(
        self,
        project: Project,
        conf: Configuration,
        out: list[ResolvedModule],
        seen: set[str],
    ) -> None:
        if conf.name in seen:
            return
        seen.add(conf.name)
        out.extend(conf.dependencies)
        for parent_name in conf.extends_from:
            parent = project.configuration(parent_name)
            if parent is None:
                raise ResolutionError(
                    f"configuration '{conf.name}' of project {project.name} extends "
                    f"unknown configuration '{parent_name}'"
                )
            self._collect(project, parent, out, seen)

    @staticmethod
    def _check_variants(conf: Configuration, modules: Iterable[ResolvedModule]) -> None:
        present = {key.name for key in conf.attributes or {}}
        stack = list(modules)
        seen: set[str] = set()
        while stack:
            module = stack.pop()
            if module.id in seen:
                continue
            seen.add(module.id)
            for attr in module.variant_attributes:
                if attr not in present:
                    raise VariantAmbiguityError(attr, [])
            stack.extend(module.children)
