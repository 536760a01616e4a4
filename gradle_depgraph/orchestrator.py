"""Project orchestrator: select, resolve and graph every eligible project."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

from gradle_depgraph.config import ScanOptions
from gradle_depgraph.exceptions import DepGraphError, VariantAmbiguityError
from gradle_depgraph.graph_builder import build_graph
from gradle_depgraph.legacy.tree_parser import build_graph_from_text
from gradle_depgraph.models.project import Project, ProjectEntry, ScanOutput, Workspace
from gradle_depgraph.resolver import ConfigurationResolver, WorkspaceResolver
from gradle_depgraph.selector import (
    MERGED_CONFIGURATION_NAME,
    AttributeReport,
    collect_attributes,
    select_configuration,
    should_scan_project,
)

log = structlog.get_logger("gradle_depgraph.orchestrator")

Echo = Callable[[str], None]


def _no_echo(message: str) -> None:
    pass


class DependencyGraphOrchestrator:
    """Build one :class:`ScanOutput` for a workspace.

    The attribute report is computed once, before any project is resolved,
    and handed to *on_attributes* so it is available even if a resolution
    later fails. A failing project is recorded with its error; the others
    are still scanned.
    """

    def __init__(
        self,
        workspace: Workspace,
        options: ScanOptions | None = None,
        resolver: ConfigurationResolver | None = None,
    ) -> None:
        self.workspace = workspace
        self.options = options or ScanOptions()
        self.resolver = resolver or WorkspaceResolver()

    def scan(
        self,
        echo: Echo | None = None,
        on_attributes: Callable[[dict[str, set[str]]], None] | None = None,
    ) -> ScanOutput:
        echo = echo or _no_echo
        ws = self.workspace

        report = collect_attributes(ws.projects, self.options)
        if on_attributes is not None:
            on_attributes(report.as_strings)
        ambiguous = report.ambiguous()
        if ambiguous:
            log.info("orchestrator.ambiguous_attributes", attributes=sorted(ambiguous))

        output = ScanOutput(
            default_project=ws.default_project,
            projects={},
            all_sub_project_names=ws.project_names,
            attributes=report.as_strings,
        )

        for proj in ws.projects:
            if not should_scan_project(proj, self.options.only_sub_project, ws.default_project):
                continue
            echo(f"processing project: {proj.name}")
            output.projects[proj.name] = self._scan_project(proj, report, echo)

        log.info(
            "orchestrator.done",
            projects=len(output.projects),
            failed=output.failed_projects,
        )
        return output

    def _scan_project(
        self, proj: Project, report: AttributeReport, echo: Echo
    ) -> ProjectEntry:
        try:
            conf = select_configuration(proj, self.options, report)
            if conf is None:
                log.debug("orchestrator.no_configurations", project=proj.name)
                return ProjectEntry(target_file=proj.build_file)

            if conf.name == MERGED_CONFIGURATION_NAME:
                echo(f"constructing merged configuration from {conf.extends_from}")
            echo(f"resolving configuration {conf.name}")
            modules = self.resolver.resolve(proj, conf)

            echo("converting gradle graph to snyk-graph format")
            graph = build_graph(modules)
        except VariantAmbiguityError as e:
            # the resolver only knows the attribute; the report knows its candidates
            candidates = e.candidates or sorted(report.as_strings.get(e.attribute, ()))
            error = str(VariantAmbiguityError(e.attribute, candidates))
            log.warning("orchestrator.variant_ambiguity", project=proj.name, error=error)
            return ProjectEntry(target_file=proj.build_file, error=error)
        except DepGraphError as e:
            log.warning("orchestrator.project_failed", project=proj.name, error=str(e))
            return ProjectEntry(target_file=proj.build_file, error=str(e))
        except Exception as e:
            # host-tool resolvers fail with their own exception types
            log.exception("orchestrator.project_failed", project=proj.name, error=str(e))
            return ProjectEntry(target_file=proj.build_file, error=str(e) or type(e).__name__)

        log.info(
            "orchestrator.project_scanned",
            project=proj.name,
            configuration=conf.name,
            nodes=len(graph),
        )
        return ProjectEntry(
            target_file=proj.build_file,
            snyk_graph=graph.to_dict(),
            project_version=str(proj.version),
        )


def legacy_entry(
    target_file: str, text: str, has_root_line: bool = True
) -> ProjectEntry:
    """Project entry from a legacy text dump; a parse failure marks the entry."""
    result, graph = build_graph_from_text(text, has_root_line)
    if graph is None or result.data is None:
        log.warning("orchestrator.legacy_failed", target_file=target_file, error=result.error)
        return ProjectEntry(target_file=target_file, error=result.error)
    return ProjectEntry(
        target_file=target_file,
        snyk_graph=graph.to_dict(),
        project_version=result.data.version,
    )


@dataclass
class TaskState:
    """Call state of a scan task; ``executed`` flips once the task has run."""

    executed: bool = False


class ResolvedDepsTask:
    """A scan that runs at most once per :class:`TaskState`.

    The task can be attached to every project of a build, so it may be
    triggered several times in one invocation; only the first trigger scans.
    """

    def __init__(self, orchestrator: DependencyGraphOrchestrator) -> None:
        self.orchestrator = orchestrator

    def execute(
        self,
        state: TaskState,
        echo: Echo | None = None,
        on_attributes: Callable[[dict[str, set[str]]], None] | None = None,
    ) -> ScanOutput | None:
        if state.executed:
            log.debug("task.already_executed")
            return None
        (echo or _no_echo)("resolved-deps task is executing")
        output = self.orchestrator.scan(echo=echo, on_attributes=on_attributes)
        state.executed = True
        return output
