"""Line-tagged output framing.

Build tools are chatty (banners, warnings, progress) even when asked to be
quiet, so machine-readable lines carry a tag prefix:

    SNYKECHO <text>   debug information, to be echoed by the caller
    JSONATTRS <json>  attribute name -> observed values, printed first
    JSONDEPS <json>   the scan result
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from gradle_depgraph.exceptions import OutputFormatError
from gradle_depgraph.models.project import ScanOutput

ECHO_TAG = "SNYKECHO"
ATTRS_TAG = "JSONATTRS"
DEPS_TAG = "JSONDEPS"


def format_line(tag: str, payload: Any) -> str:
    if isinstance(payload, str):
        return f"{tag} {payload}"
    return f"{tag} {json.dumps(payload, separators=(',', ':'))}"


def attributes_payload(attributes: dict[str, set[str]]) -> dict[str, list[str]]:
    return {name: sorted(values) for name, values in attributes.items()}


def render_scan(output: ScanOutput) -> list[str]:
    """Tagged lines for a finished scan, attribute report first."""
    return [
        format_line(ATTRS_TAG, attributes_payload(output.attributes)),
        format_line(DEPS_TAG, output.to_dict()),
    ]


@dataclass
class ExtractedOutput:
    result: dict[str, Any]
    attributes: dict[str, list[str]] = field(default_factory=dict)
    echoes: list[str] = field(default_factory=list)


def extract_output(text: str) -> ExtractedOutput:
    """Pick the tagged lines out of noisy console output.

    Raises ``OutputFormatError`` if no ``JSONDEPS`` line is present or a
    tagged payload is not valid JSON.
    """
    result: dict[str, Any] | None = None
    attributes: dict[str, list[str]] = {}
    echoes: list[str] = []

    for line in text.splitlines():
        tag, _, payload = line.partition(" ")
        try:
            if tag == ECHO_TAG:
                echoes.append(payload)
            elif tag == ATTRS_TAG:
                attributes = json.loads(payload)
            elif tag == DEPS_TAG:
                result = json.loads(payload)
        except json.JSONDecodeError as e:
            raise OutputFormatError(f"invalid {tag} payload: {e}") from e

    if result is None:
        raise OutputFormatError(f"no {DEPS_TAG} line found in output")
    return ExtractedOutput(result=result, attributes=attributes, echoes=echoes)
