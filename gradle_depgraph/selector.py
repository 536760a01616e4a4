"""Pick the configuration to resolve for each project.

A project's configurations are filtered by name (regex) and, optionally, by
variant attributes. One match is used as is; several are merged into a
synthesized configuration that extends all of them.

Attributes copied onto a merged configuration come from every project of the
workspace, not only the one being resolved: if project A depends on B and
only B declares attribute C, resolving A may still need C to pick a concrete
variant of B. Values observed more than once (ambiguous) are left unset, and
the full attribute report is emitted up front so an eventual variant
ambiguity failure can be diagnosed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Hashable

import structlog

from gradle_depgraph.config import ScanOptions
from gradle_depgraph.exceptions import ConfigurationNotFoundError
from gradle_depgraph.models.project import AttributeKey, Configuration, Project

log = structlog.get_logger("gradle_depgraph.selector")

MERGED_CONFIGURATION_NAME = "snykMergedDepsConf"


@dataclass
class AttributeReport:
    """Attribute values observed across all matching configurations of a workspace."""

    values: dict[AttributeKey, set[Hashable]] = field(default_factory=dict)
    as_strings: dict[str, set[str]] = field(default_factory=dict)

    def add(self, key: AttributeKey, value: Hashable) -> None:
        self.values.setdefault(key, set()).add(value)
        self.as_strings.setdefault(key.name, set()).add(str(value))

    def unambiguous(self) -> dict[AttributeKey, Hashable]:
        """Attributes with exactly one distinct observed value."""
        return {key: next(iter(vals)) for key, vals in self.values.items() if len(vals) == 1}

    def ambiguous(self) -> dict[str, set[str]]:
        return {
            key.name: self.as_strings[key.name]
            for key, vals in self.values.items()
            if len(vals) > 1
        }


def matches_attribute_filter(
    conf: Configuration, attr_filter: list[tuple[str, str]] | None
) -> bool:
    """True unless an attribute selected by the filter carries another value.

    A filter key selects attributes whose type name contains it; a
    configuration without attribute support always matches.
    """
    if not attr_filter or conf.attributes is None:
        return True
    return all(
        str(value).lower() == expected
        for key, value in conf.attributes.items()
        for substring, expected in attr_filter
        if substring in key.name.lower()
    )


def is_candidate(conf: Configuration, options: ScanOptions) -> bool:
    return (
        conf.name != MERGED_CONFIGURATION_NAME
        and options.name_filter.search(conf.name) is not None
    )


def matching_configurations(project: Project, options: ScanOptions) -> list[Configuration]:
    confs = [c for c in project.configurations if is_candidate(c, options)]
    if options.conf_attr is not None:
        confs = [c for c in confs if matches_attribute_filter(c, options.conf_attr)]
    return confs


def collect_attributes(projects: Iterable[Project], options: ScanOptions) -> AttributeReport:
    """First pass: gather attribute values of every matching configuration."""
    report = AttributeReport()
    for proj in projects:
        for conf in proj.configurations:
            if not is_candidate(conf, options):
                continue
            if not matches_attribute_filter(conf, options.conf_attr):
                continue
            if conf.attributes is None:
                continue
            for key, value in conf.attributes.items():
                report.add(key, value)
    return report


def merge_configurations(
    confs: list[Configuration], report: AttributeReport
) -> Configuration:
    """Synthesize a configuration extending all of *confs*."""
    merged = Configuration(
        name=MERGED_CONFIGURATION_NAME,
        extends_from=[c.name for c in confs],
    )
    # build tools without attribute support cannot carry them on the merge either
    if any(c.supports_attributes for c in confs):
        merged.attributes = dict(report.unambiguous())
    return merged


def select_configuration(
    project: Project, options: ScanOptions, report: AttributeReport
) -> Configuration | None:
    """Return the configuration to resolve, or ``None`` if the project has none.

    Raises ``ConfigurationNotFoundError`` when the project has configurations
    but none matches.
    """
    confs = matching_configurations(project, options)

    if not confs and project.configurations:
        raise ConfigurationNotFoundError(
            options.configuration, project.name, project.configuration_names()
        )
    if len(confs) == 1:
        return confs[0]
    if len(confs) > 1:
        log.info(
            "selector.merged",
            project=project.name,
            configurations=[c.name for c in confs],
        )
        return merge_configurations(confs, report)
    return None


def should_scan_project(
    project: Project, only_sub_project: str | None, default_project: str
) -> bool:
    if only_sub_project is None:
        return True
    if only_sub_project == ".":
        return project.name == default_project
    return project.name == only_sub_project
