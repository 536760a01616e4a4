"""CLI entry point: gradle-depgraph.

Subcommands:
    gradle-depgraph scan workspace.json                     # tagged JSONATTRS/JSONDEPS lines
    gradle-depgraph scan workspace.json --json              # pretty JSON
    gradle-depgraph scan workspace.json --configuration '^(api|implementation)$' \\
        --conf-attr buildtype:debug --only-sub-project app
    gradle-depgraph parse-tree deps.txt [--no-root-line] [--graph]
    gradle-depgraph extract console.log                     # pull JSONDEPS out of noisy output
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from gradle_depgraph.config import (
    ENV_CONF_ATTR,
    ENV_CONFIGURATION,
    ENV_ONLY_SUB_PROJECT,
    ScanOptions,
)
from gradle_depgraph.core.logging import setup_logging
from gradle_depgraph.exceptions import OutputFormatError, WorkspaceError
from gradle_depgraph.legacy.tree_parser import parse_tree
from gradle_depgraph.orchestrator import (
    DependencyGraphOrchestrator,
    ResolvedDepsTask,
    TaskState,
    legacy_entry,
)
from gradle_depgraph.output import (
    ECHO_TAG,
    attributes_payload,
    extract_output,
    format_line,
    render_scan,
)
from gradle_depgraph.schemas import load_workspace


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """gradle-depgraph: canonical dependency graphs from Gradle resolution results."""
    setup_logging("DEBUG" if verbose else None)


@main.command("scan")
@click.argument("workspace_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--configuration", envvar=ENV_CONFIGURATION, default=None,
              help="Configuration name regex (case-insensitive)")
@click.option("--conf-attr", envvar=ENV_CONF_ATTR, default=None,
              help="Attribute filter, e.g. buildtype:debug,usage:java-runtime")
@click.option("--only-sub-project", envvar=ENV_ONLY_SUB_PROJECT, default=None,
              help="Scan a single sub-project ('.' for the default project)")
@click.option("--tagged/--json", "tagged", default=True,
              help="Emit tagged lines (default) or a pretty JSON document")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write output to a file instead of stdout")
def scan(
    workspace_file: Path,
    configuration: str | None,
    conf_attr: str | None,
    only_sub_project: str | None,
    tagged: bool,
    output: Path | None,
) -> None:
    """Build dependency graphs for the projects of a workspace document."""
    try:
        options = ScanOptions(
            configuration=configuration,
            conf_attr=conf_attr,
            only_sub_project=only_sub_project,
        )
    except ValidationError as e:
        _fail(f"invalid selection parameters: {e}")
        return

    try:
        workspace = load_workspace(workspace_file)
    except WorkspaceError as e:
        _fail(str(e))
        return

    lines: list[str] = []
    task = ResolvedDepsTask(DependencyGraphOrchestrator(workspace, options))
    result = task.execute(TaskState(), echo=lambda msg: lines.append(format_line(ECHO_TAG, msg)))
    if result is None:
        _fail("scan task was already executed")
        return

    if tagged:
        text = "\n".join(lines + render_scan(result)) + "\n"
    else:
        doc = {"result": result.to_dict(), "attributes": attributes_payload(result.attributes)}
        text = json.dumps(doc, indent=2) + "\n"

    if output is not None:
        output.write_text(text)
        click.echo(f"Scan result written to {output}", err=True)
    else:
        click.echo(text, nl=False)

    for name in result.failed_projects:
        click.echo(f"Warning: project {name} failed: {result.projects[name].error}", err=True)


@main.command("parse-tree")
@click.argument("dump_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--root-line/--no-root-line", default=True,
              help="Whether the first line names the project itself")
@click.option("--graph", "as_graph", is_flag=True, help="Print a project entry with the graph instead of the tree")
def parse_tree_cmd(dump_file: Path, root_line: bool, as_graph: bool) -> None:
    """Parse a legacy 'gradle dependencies' text dump."""
    try:
        text = dump_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        _fail(f"cannot read {dump_file}: {e}")
        return
    if as_graph:
        entry = legacy_entry(str(dump_file), text, root_line)
        if entry.error is not None:
            _fail(f"cannot parse {dump_file}: {entry.error}")
            return
        click.echo(json.dumps(entry.to_dict(), indent=2))
        return

    result = parse_tree(text, root_line)
    if not result.ok or result.data is None:
        _fail(f"cannot parse {dump_file}: {result.error}")
        return
    click.echo(json.dumps(result.data.to_dict(), indent=2))


@main.command("extract")
@click.argument("console_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def extract(console_file: Path) -> None:
    """Extract the scan result from captured build-tool console output."""
    try:
        extracted = extract_output(console_file.read_text(encoding="utf-8", errors="replace"))
    except OutputFormatError as e:
        _fail(str(e))
        return
    for echo in extracted.echoes:
        click.echo(echo, err=True)
    click.echo(json.dumps(extracted.result, indent=2))


if __name__ == "__main__":
    main()
