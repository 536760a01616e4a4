"""gradle-depgraph: canonical dependency graphs from Gradle resolution results."""

__version__ = "0.1.0"

from gradle_depgraph.config import ScanOptions
from gradle_depgraph.exceptions import (
    ConfigurationNotFoundError,
    DepGraphError,
    OutputFormatError,
    ResolutionError,
    VariantAmbiguityError,
    WorkspaceError,
)
from gradle_depgraph.graph_builder import build_graph, get_snyk_graph, load_graph
from gradle_depgraph.legacy.tree_parser import ParseResult, parse_tree
from gradle_depgraph.models.graph import SnykGraph
from gradle_depgraph.orchestrator import DependencyGraphOrchestrator, ResolvedDepsTask, TaskState
from gradle_depgraph.selector import select_configuration

__all__ = [
    "ConfigurationNotFoundError",
    "DepGraphError",
    "DependencyGraphOrchestrator",
    "OutputFormatError",
    "ParseResult",
    "ResolutionError",
    "ResolvedDepsTask",
    "ScanOptions",
    "SnykGraph",
    "TaskState",
    "VariantAmbiguityError",
    "WorkspaceError",
    "build_graph",
    "get_snyk_graph",
    "load_graph",
    "parse_tree",
    "select_configuration",
]
