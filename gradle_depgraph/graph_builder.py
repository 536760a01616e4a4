"""Walk a resolved-module tree into a :class:`SnykGraph`.

The same module may appear any number of times across independent branches
(shared transitive dependency); it becomes one node with several parents.
Expansion is guarded by the set of identities on the current root-to-node
path, so cyclic declarations terminate: the repeated module still gets an
edge to its immediate parent, only its subtree is not walked again.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from gradle_depgraph.models.graph import ROOT_ID, SnykGraph
from gradle_depgraph.models.project import ResolvedModule

log = structlog.get_logger("gradle_depgraph.graph")


def load_graph(
    deps: Iterable[ResolvedModule],
    graph: SnykGraph,
    parent_id: str,
    visited_chain: frozenset[str],
) -> None:
    """Add *deps* below *parent_id*, recursing into children."""
    for dep in deps:
        child_id = dep.id
        if child_id not in graph.nodes:
            graph.set_node(child_id, {"name": dep.display_name, "version": dep.version})

        # Older Gradle versions list one instance of a dependency per
        # configuration at the same level; they collapse onto the first node.
        if child_id not in visited_chain and dep.children:
            load_graph(dep.children, graph, child_id, visited_chain | {child_id})

        graph.set_edge(parent_id, child_id)


def build_graph(deps: Iterable[ResolvedModule], root_id: str = ROOT_ID) -> SnykGraph:
    graph = SnykGraph(root_id)
    load_graph(deps, graph, root_id, frozenset())
    log.debug("graph.built", nodes=len(graph))
    return graph


def get_snyk_graph(deps: Iterable[ResolvedModule]) -> dict:
    """Nodes map form of the graph built from *deps*."""
    return build_graph(deps).to_dict()
