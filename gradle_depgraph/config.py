"""Selection parameters for a scan.

The CLI reads them from flags, falling back to environment variables:
    GRADLE_DEPGRAPH_CONFIGURATION     configuration name regex (default: all)
    GRADLE_DEPGRAPH_CONF_ATTR         attribute filter, e.g. ``buildtype:debug,usage:java-runtime``
    GRADLE_DEPGRAPH_ONLY_SUB_PROJECT  restrict to one sub-project (``.`` = invoking project)
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator

ENV_CONFIGURATION = "GRADLE_DEPGRAPH_CONFIGURATION"
ENV_CONF_ATTR = "GRADLE_DEPGRAPH_CONF_ATTR"
ENV_ONLY_SUB_PROJECT = "GRADLE_DEPGRAPH_ONLY_SUB_PROJECT"

DEFAULT_CONFIGURATION = ".*"


def parse_conf_attr(raw: str) -> list[tuple[str, str]]:
    """Parse ``key:value,key:value`` into lowercased ``(key, value)`` pairs.

    The key is a substring of the attribute type name, the value the
    stringified attribute value; both compare case-insensitively.
    """
    pairs: list[tuple[str, str]] = []
    for item in raw.lower().split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition(":")
        if not sep or not key.strip() or not value.strip():
            raise ValueError(f"invalid attribute filter {item!r}, expected key:value")
        pairs.append((key.strip(), value.strip()))
    return pairs


class ScanOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    configuration: str = DEFAULT_CONFIGURATION
    conf_attr: list[tuple[str, str]] | None = None
    only_sub_project: str | None = None

    @field_validator("configuration", mode="before")
    @classmethod
    def _check_regex(cls, v: str | None) -> str:
        if v is None or v == "":
            return DEFAULT_CONFIGURATION
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid configuration regex {v!r}: {e}") from e
        return v

    @field_validator("conf_attr", mode="before")
    @classmethod
    def _parse_conf_attr(cls, v: object) -> object:
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return parse_conf_attr(v) or None
        return v

    @field_validator("only_sub_project", mode="before")
    @classmethod
    def _strip_project(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @property
    def name_filter(self) -> re.Pattern[str]:
        return re.compile(self.configuration, re.IGNORECASE)
