"""Parse the legacy ``gradle dependencies`` text dump into a dependency tree.

Older Gradle versions can only print the resolved tree as text::

    com.github.jitpack:subproj:unspecified
    +--- axis:axis:1.3
    |    \\--- commons-discovery:commons-discovery:0.2
    \\--- junit:junit:4.12 -> 4.13 (*)

Each dependency line is a prefix of 5-character indentation units (``|    ``
or five spaces), a branch marker (``+--- `` or ``\\--- ``) and a module
token. The parser never raises: it returns a :class:`ParseResult` carrying
either the tree or the reason it was rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from gradle_depgraph.graph_builder import build_graph
from gradle_depgraph.models.graph import SnykGraph
from gradle_depgraph.models.project import DEFAULT_PROJECT_VERSION, ResolvedModule

log = structlog.get_logger("gradle_depgraph.legacy")

PACKAGE_FORMAT_VERSION = "mvn:0.0.1"

_INDENT = 5
_INDENT_UNITS = ("|    ", "     ")

_LINE_RE = re.compile(r"^(?P<prefix>.*?)[+\\]--- (?P<token>.+)$")

# "(*) - dependencies omitted (listed previously)" and friends
_LEGEND_RE = re.compile(r"^\([*a-z]\) - ")

# (*) omitted, (c) constraint, (n) not resolved
_MARKER_RE = re.compile(r"\s+(?:\(\*\)|\([a-z]\)|FAILED)$")

_PROJECT_RE = re.compile(r"^project\s+(?P<path>:\S*)$")


@dataclass
class LegacyDependency:
    name: str
    version: str
    dependencies: dict[str, LegacyDependency] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "version": self.version}
        if self.dependencies is not None:
            out["dependencies"] = {k: v.to_dict() for k, v in self.dependencies.items()}
        return out


@dataclass
class LegacyTree:
    name: str
    version: str
    dependencies: dict[str, LegacyDependency] = field(default_factory=dict)
    package_format_version: str = PACKAGE_FORMAT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "packageFormatVersion": self.package_format_version,
            "dependencies": {k: v.to_dict() for k, v in self.dependencies.items()},
        }


@dataclass
class ParseResult:
    """Tagged outcome: ``ok`` with ``data``, or not ``ok`` with ``error``."""

    ok: bool
    data: LegacyTree | None = None
    error: str | None = None

    @classmethod
    def success(cls, tree: LegacyTree) -> ParseResult:
        return cls(ok=True, data=tree)

    @classmethod
    def failure(cls, reason: str) -> ParseResult:
        return cls(ok=False, error=reason)


class _Malformed(Exception):
    pass


def parse_module_token(token: str) -> tuple[str, str]:
    """Split a module token into its display id and resolved version.

    ``group:name:1.0 -> 1.2 (*)`` yields ``("group:name", "1.2")``;
    ``project :core`` yields ``(":core", "unspecified")``.
    """
    token = token.strip()
    while True:
        stripped = _MARKER_RE.sub("", token)
        if stripped == token:
            break
        token = stripped

    declared, arrow, resolved = token.partition(" -> ")
    declared = declared.strip()
    resolved = resolved.strip()

    project = _PROJECT_RE.match(declared)
    if project:
        return project.group("path"), resolved or DEFAULT_PROJECT_VERSION

    parts = declared.split(":")
    if len(parts) < 2 or not parts[1]:
        raise _Malformed(f"cannot parse module {token!r}")
    if arrow and not resolved:
        raise _Malformed(f"missing resolved version in {token!r}")
    version = resolved or (parts[2] if len(parts) > 2 and parts[2] else DEFAULT_PROJECT_VERSION)
    return f"{parts[0]}:{parts[1]}", version


def _depth_of(prefix: str) -> int:
    if len(prefix) % _INDENT:
        raise _Malformed("inconsistent indentation")
    for i in range(0, len(prefix), _INDENT):
        if prefix[i : i + _INDENT] not in _INDENT_UNITS:
            raise _Malformed("inconsistent indentation")
    return len(prefix) // _INDENT + 1


def parse_tree(
    text: str,
    has_root_line: bool = True,
    *,
    root_name: str = "root",
    root_version: str = DEFAULT_PROJECT_VERSION,
) -> ParseResult:
    """Parse a text dump into a :class:`LegacyTree`.

    With ``has_root_line`` the first line names the project itself;
    otherwise the tree root is named after *root_name*/*root_version*.
    """
    root = LegacyTree(name=root_name, version=root_version)
    # stack[d] is the node currently open at depth d; the root sits at 0
    stack: list[LegacyTree | LegacyDependency] = [root]
    expect_root = has_root_line
    discard_below: int | None = None

    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.rstrip()
        if not line.strip() or _LEGEND_RE.match(line):
            continue
        try:
            m = _LINE_RE.match(line)
            if expect_root:
                if m:
                    raise _Malformed("expected the root project line")
                root.name, root.version = parse_module_token(line)
                expect_root = False
                continue
            if not m:
                raise _Malformed("not a dependency line")

            depth = _depth_of(m.group("prefix"))
            if discard_below is not None:
                if depth > discard_below:
                    continue
                discard_below = None
            if depth > len(stack):
                raise _Malformed(
                    f"indentation jumps to depth {depth} below depth {len(stack) - 1}"
                )

            name, version = parse_module_token(m.group("token"))
        except _Malformed as e:
            log.debug("legacy.malformed", line=lineno, reason=str(e))
            return ParseResult.failure(f"line {lineno}: {e}: {raw!r}")

        del stack[depth:]
        parent = stack[-1]
        if parent.dependencies is None:
            parent.dependencies = {}
        node = parent.dependencies.setdefault(name, LegacyDependency(name=name, version=version))

        if any(open_node.name == name for open_node in stack):
            # cycle back to an open ancestor: keep the node, drop its subtree
            discard_below = depth
            continue
        stack.append(node)

    if expect_root:
        return ParseResult.failure("empty dependency dump: missing root project line")
    return ParseResult.success(root)


def _to_module(name: str, dep: LegacyDependency) -> ResolvedModule:
    group, _, artifact = name.partition(":")
    children = [_to_module(k, v) for k, v in (dep.dependencies or {}).items()]
    return ResolvedModule(group=group, name=artifact, version=dep.version, children=children)


def tree_to_modules(tree: LegacyTree) -> list[ResolvedModule]:
    """Adapt a parsed tree to the graph builder's module records."""
    return [_to_module(name, dep) for name, dep in tree.dependencies.items()]


def build_graph_from_text(
    text: str, has_root_line: bool = True
) -> tuple[ParseResult, SnykGraph | None]:
    result = parse_tree(text, has_root_line)
    if not result.ok or result.data is None:
        return result, None
    return result, build_graph(tree_to_modules(result.data))
