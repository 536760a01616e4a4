"""Legacy text-dump support for build tools without a structured resolution API."""

from gradle_depgraph.legacy.tree_parser import (
    PACKAGE_FORMAT_VERSION,
    LegacyDependency,
    LegacyTree,
    ParseResult,
    build_graph_from_text,
    parse_tree,
    tree_to_modules,
)

__all__ = [
    "PACKAGE_FORMAT_VERSION",
    "LegacyDependency",
    "LegacyTree",
    "ParseResult",
    "build_graph_from_text",
    "parse_tree",
    "tree_to_modules",
]
