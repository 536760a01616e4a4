"""Data model shared by the graph builder, selector and orchestrator."""

from gradle_depgraph.models.graph import (
    ROOT_ID,
    GraphNode,
    SnykGraph,
    dependency_id,
    display_id,
)
from gradle_depgraph.models.project import (
    AttributeKey,
    Configuration,
    ProjectEntry,
    Project,
    ResolvedModule,
    ScanOutput,
    Workspace,
)

__all__ = [
    "ROOT_ID",
    "AttributeKey",
    "Configuration",
    "GraphNode",
    "Project",
    "ProjectEntry",
    "ResolvedModule",
    "ScanOutput",
    "SnykGraph",
    "Workspace",
    "dependency_id",
    "display_id",
]
