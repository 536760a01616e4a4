"""Canonical dependency graph: parent-linked nodes keyed by identity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ROOT_ID = "root-node"


def dependency_id(group: str, name: str, version: str) -> str:
    """Identity key of a dependency: ``group:name@version``."""
    return f"{group}:{name}@{version}"


def display_id(group: str, name: str) -> str:
    """Human-readable ``group:name``; never used for identity comparison."""
    return f"{group}:{name}"


@dataclass
class GraphNode:
    """A graph vertex.

    The node never stores its own id (it is the map key) nor its children:
    consumers walk the graph bottom-up through ``parent_ids``.
    ``parent_ids`` is an insertion-ordered set.
    """

    name: str
    version: str
    parent_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "parentIds": list(self.parent_ids),
        }


class SnykGraph:
    """Dependency graph rooted at a synthetic, non-dependency root id.

    Degenerate inputs (empty ids, self-loops, back-edges) are absorbed as
    no-ops rather than raised.
    """

    def __init__(self, root_id: str = ROOT_ID) -> None:
        self.root_id = root_id
        self.nodes: dict[str, GraphNode] = {}

    def set_node(self, key: str | None, value: dict[str, str] | None) -> GraphNode | None:
        """Create a node, or return the existing one untouched (first writer wins).

        With ``value=None`` this only looks the node up, which lets
        :meth:`set_edge` refer to nodes created earlier.
        """
        if not key:
            return None
        existing = self.nodes.get(key)
        if existing is not None:
            return existing
        if not value:
            return None
        node = GraphNode(name=value["name"], version=value["version"])
        self.nodes[key] = node
        return node

    def set_edge(self, parent_id: str | None, child_id: str | None) -> None:
        """Record ``child_id`` as a child of ``parent_id``. Idempotent."""
        if not parent_id or not child_id or parent_id == child_id:
            return
        # first-level dependencies hang off the synthetic root, which is not a node
        if parent_id != self.root_id:
            parent = self.set_node(parent_id, None)
            if parent is None:
                return
            # the child is already an ancestor of the parent
            if child_id in parent.parent_ids:
                return
        child = self.set_node(child_id, None)
        if child is None or parent_id in child.parent_ids:
            return
        child.parent_ids.append(parent_id)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Map form of the nodes, as emitted under ``snykGraph``."""
        return {key: node.to_dict() for key, node in self.nodes.items()}

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, key: object) -> bool:
        return key in self.nodes
