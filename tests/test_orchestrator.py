"""Tests for the project orchestrator and the one-shot scan task."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from factories import BUILD_TYPE, USAGE, conf, mod, project

from gradle_depgraph.config import ScanOptions
from gradle_depgraph.exceptions import ResolutionError
from gradle_depgraph.models.graph import ROOT_ID
from gradle_depgraph.models.project import Workspace
from gradle_depgraph.orchestrator import (
    DependencyGraphOrchestrator,
    ResolvedDepsTask,
    TaskState,
    legacy_entry,
)
from gradle_depgraph.resolver import WorkspaceResolver


@pytest.fixture
def multi_workspace() -> Workspace:
    return Workspace(
        projects=[
            project("root"),
            project(
                "lib",
                conf("api", mod("axis:axis:1.3", mod("commons-discovery:commons-discovery:0.2"))),
                conf("implementation", mod("junit:junit:4.12")),
                conf("testImplementation", mod("org.mockito:mockito-core:3.0.0")),
                version="2.0",
            ),
            project("app", conf("implementation", mod("g:app-dep:1"))),
        ],
        default_project="root",
    )


# ── scan ──


class TestScan:
    def test_result_shape(self, multi_workspace):
        out = DependencyGraphOrchestrator(multi_workspace).scan()
        assert out.default_project == "root"
        assert out.all_sub_project_names == ["root", "lib", "app"]
        assert list(out.projects) == ["root", "lib", "app"]

    def test_empty_configuration_project(self, multi_workspace):
        out = DependencyGraphOrchestrator(multi_workspace).scan()
        assert out.projects["root"].to_dict() == {"targetFile": "/work/root/build.gradle"}

    def test_merged_configuration_graph(self, multi_workspace):
        opts = ScanOptions(configuration="^(api|implementation)$")
        out = DependencyGraphOrchestrator(multi_workspace, opts).scan()
        lib = out.projects["lib"]
        assert lib.project_version == "2.0"
        assert set(lib.snyk_graph) == {
            "axis:axis@1.3",
            "commons-discovery:commons-discovery@0.2",
            "junit:junit@4.12",
        }
        assert lib.snyk_graph["junit:junit@4.12"]["parentIds"] == [ROOT_ID]

    def test_project_entry_dict(self, multi_workspace):
        out = DependencyGraphOrchestrator(multi_workspace).scan()
        entry = out.projects["app"].to_dict()
        assert entry == {
            "targetFile": "/work/app/build.gradle",
            "snykGraph": {
                "g:app-dep@1": {"name": "g:app-dep", "version": "1", "parentIds": [ROOT_ID]}
            },
            "projectVersion": "unspecified",
        }

    def test_only_sub_project(self, multi_workspace):
        opts = ScanOptions(only_sub_project="lib")
        out = DependencyGraphOrchestrator(multi_workspace, opts).scan()
        assert list(out.projects) == ["lib"]
        assert out.all_sub_project_names == ["root", "lib", "app"]

    def test_only_default_project(self, multi_workspace):
        opts = ScanOptions(only_sub_project=".")
        out = DependencyGraphOrchestrator(multi_workspace, opts).scan()
        assert list(out.projects) == ["root"]

    def test_echo_messages(self, multi_workspace):
        echoes: list[str] = []
        DependencyGraphOrchestrator(multi_workspace).scan(echo=echoes.append)
        assert "processing project: lib" in echoes
        assert "resolving configuration snykMergedDepsConf" in echoes
        assert any(e.startswith("constructing merged configuration from") for e in echoes)

    def test_single_configuration_with_parents_is_not_a_merge(self):
        app = project(
            "app",
            conf("implementation", mod("g:a:1")),
            conf("runtimeClasspath", extends_from=["implementation"]),
        )
        ws = Workspace(projects=[app], default_project="app")
        echoes: list[str] = []
        opts = ScanOptions(configuration="^runtimeClasspath$")
        out = DependencyGraphOrchestrator(ws, opts).scan(echo=echoes.append)
        assert "resolving configuration runtimeClasspath" in echoes
        assert not any(e.startswith("constructing merged") for e in echoes)
        assert "g:a@1" in out.projects["app"].snyk_graph


# ── failures ──


class TestFailures:
    def test_configuration_not_found_is_per_project(self, multi_workspace):
        opts = ScanOptions(configuration="^api$")
        out = DependencyGraphOrchestrator(multi_workspace, opts).scan()

        app = out.projects["app"]
        assert app.snyk_graph is None
        assert "Matching configurations not found: ^api$" in app.error
        assert "implementation" in app.error

        assert out.projects["lib"].error is None
        assert "axis:axis@1.3" in out.projects["lib"].snyk_graph
        assert out.failed_projects == ["app"]
        assert "app" in out.all_sub_project_names

    def test_resolver_failure_is_per_project(self, multi_workspace):
        real = WorkspaceResolver()
        resolver = MagicMock()

        def resolve(proj, c):
            if proj.name == "lib":
                raise ResolutionError("could not resolve lib")
            return real.resolve(proj, c)

        resolver.resolve.side_effect = resolve
        out = DependencyGraphOrchestrator(multi_workspace, resolver=resolver).scan()
        assert out.projects["lib"].error == "could not resolve lib"
        assert out.projects["lib"].to_dict() == {
            "targetFile": "/work/lib/build.gradle",
            "error": "could not resolve lib",
        }
        assert out.projects["app"].snyk_graph is not None

    def test_host_tool_error_is_per_project(self, multi_workspace):
        real = WorkspaceResolver()
        resolver = MagicMock()

        def resolve(proj, c):
            if proj.name == "lib":
                raise RuntimeError("Could not resolve all files for configuration ':lib:compileClasspath'")
            return real.resolve(proj, c)

        resolver.resolve.side_effect = resolve
        out = DependencyGraphOrchestrator(multi_workspace, resolver=resolver).scan()
        assert "Could not resolve all files" in out.projects["lib"].error
        assert out.projects["lib"].snyk_graph is None
        assert "g:app-dep@1" in out.projects["app"].snyk_graph
        assert out.failed_projects == ["lib"]
        assert out.all_sub_project_names == ["root", "lib", "app"]

    def test_error_without_message_named_by_type(self, multi_workspace):
        resolver = MagicMock()
        resolver.resolve.side_effect = KeyError
        out = DependencyGraphOrchestrator(multi_workspace, resolver=resolver).scan()
        assert out.projects["app"].error == "KeyError"
        assert out.failed_projects == ["lib", "app"]


# ── attribute report ──


class TestAttributeReport:
    @pytest.fixture
    def ambiguous_workspace(self) -> Workspace:
        app = project(
            "app",
            conf(
                "debugRuntimeClasspath",
                mod("g:lib:1", variants=[BUILD_TYPE]),
                attributes={BUILD_TYPE: "debug", USAGE: "java-runtime"},
            ),
            conf(
                "releaseRuntimeClasspath",
                mod("g:lib:1", variants=[BUILD_TYPE]),
                attributes={BUILD_TYPE: "release", USAGE: "java-runtime"},
            ),
        )
        return Workspace(projects=[app], default_project="app")

    def test_report_emitted_before_projects(self, ambiguous_workspace):
        events: list[str] = []
        DependencyGraphOrchestrator(ambiguous_workspace).scan(
            echo=events.append,
            on_attributes=lambda attrs: events.append(f"attrs:{sorted(attrs)}"),
        )
        assert events[0] == f"attrs:{sorted([BUILD_TYPE, USAGE])}"

    def test_ambiguous_attribute_reported(self, ambiguous_workspace):
        out = DependencyGraphOrchestrator(ambiguous_workspace).scan()
        assert out.attributes[BUILD_TYPE] == {"debug", "release"}
        assert out.attributes[USAGE] == {"java-runtime"}

    def test_variant_ambiguity_lists_candidates(self, ambiguous_workspace):
        out = DependencyGraphOrchestrator(ambiguous_workspace).scan()
        error = out.projects["app"].error
        assert BUILD_TYPE in error
        assert "['debug', 'release']" in error

    def test_attribute_filter_resolves_ambiguity(self, ambiguous_workspace):
        opts = ScanOptions(conf_attr="buildtype:release")
        out = DependencyGraphOrchestrator(ambiguous_workspace, opts).scan()
        entry = out.projects["app"]
        assert entry.error is None
        assert "g:lib@1" in entry.snyk_graph
        assert out.attributes == {BUILD_TYPE: {"release"}, USAGE: {"java-runtime"}}


# ── legacy dumps ──


class TestLegacyEntry:
    def test_entry_from_dump(self):
        dump = "com.example:app:1.0\n\\--- axis:axis:1.3\n"
        entry = legacy_entry("build.gradle", dump)
        assert entry.project_version == "1.0"
        assert entry.snyk_graph == {
            "axis:axis@1.3": {"name": "axis:axis", "version": "1.3", "parentIds": [ROOT_ID]}
        }

    def test_malformed_dump_marks_entry(self):
        entry = legacy_entry("build.gradle", "com.example:app:1.0\n  \\--- axis:axis:1.3\n")
        assert entry.snyk_graph is None
        assert "line 2" in entry.error


# ── one-shot task ──


class TestResolvedDepsTask:
    def test_runs_once_per_state(self, multi_workspace):
        task = ResolvedDepsTask(DependencyGraphOrchestrator(multi_workspace))
        state = TaskState()
        first = task.execute(state)
        assert first is not None
        assert state.executed
        assert task.execute(state) is None

    def test_fresh_state_runs_again(self, multi_workspace):
        task = ResolvedDepsTask(DependencyGraphOrchestrator(multi_workspace))
        task.execute(TaskState())
        assert task.execute(TaskState()) is not None

    def test_shared_state_across_tasks(self, multi_workspace):
        state = TaskState()
        calls = []
        for name in ("root", "lib", "app"):
            orchestrator = DependencyGraphOrchestrator(multi_workspace)
            result = ResolvedDepsTask(orchestrator).execute(state)
            calls.append((name, result is not None))
        assert calls == [("root", True), ("lib", False), ("app", False)]
