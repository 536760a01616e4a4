"""Custom exceptions for gradle-depgraph."""

from __future__ import annotations


class DepGraphError(Exception):
    """Base exception for all dependency-graph errors."""


class ConfigurationNotFoundError(DepGraphError):
    """Raised when no configuration of a project matches the name filter."""

    def __init__(self, conf_filter: str, project: str, available: list[str]):
        self.conf_filter = conf_filter
        self.project = project
        self.available = available
        super().__init__(
            f"Matching configurations not found: {conf_filter}, "
            f"available configurations for project {project}: {available}"
        )


class ResolutionError(DepGraphError):
    """Raised when a configuration cannot be resolved into modules."""


class VariantAmbiguityError(ResolutionError):
    """Raised when a dependency variant cannot be picked because an attribute is unset."""

    def __init__(self, attribute: str, candidates: list[str]):
        self.attribute = attribute
        self.candidates = candidates
        super().__init__(
            f"Cannot choose between variants: attribute '{attribute}' has "
            f"candidate values {candidates}. Use --conf-attr to pick one."
        )


class WorkspaceError(DepGraphError):
    """Raised when a workspace document cannot be loaded or validated."""


class OutputFormatError(DepGraphError):
    """Raised when tagged console output does not contain a scan result."""
