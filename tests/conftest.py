"""Shared pytest fixtures for gradle-depgraph tests."""

from __future__ import annotations

import json
import logging

import pytest

from factories import BUILD_TYPE, USAGE, conf, mod, project
from gradle_depgraph.core.logging import PACKAGE_LOGGER
from gradle_depgraph.models.project import Workspace


@pytest.fixture
def android_workspace() -> Workspace:
    """Root aggregator plus an app whose debug/release variants differ."""
    app = project(
        "app",
        conf(
            "debugRuntimeClasspath",
            mod("com.squareup.okhttp3:okhttp:4.9.0", mod("com.squareup.okio:okio:2.8.0")),
            attributes={BUILD_TYPE: "debug", USAGE: "java-runtime"},
        ),
        conf(
            "releaseRuntimeClasspath",
            mod("com.google.code.gson:gson:2.8.6"),
            attributes={BUILD_TYPE: "release", USAGE: "java-runtime"},
        ),
        version="1.2.0",
    )
    return Workspace(projects=[project("root"), app], default_project="root")


@pytest.fixture
def workspace_doc() -> dict:
    return {
        "defaultProject": "root",
        "projects": [
            {"name": "root", "buildFile": "/work/build.gradle", "configurations": []},
            {
                "name": "lib",
                "path": ":lib",
                "buildFile": "/work/lib/build.gradle",
                "version": "2.0",
                "configurations": [
                    {
                        "name": "api",
                        "attributes": {USAGE: "java-api"},
                        "dependencies": [
                            {
                                "group": "axis",
                                "name": "axis",
                                "version": "1.3",
                                "children": [
                                    {
                                        "group": "commons-discovery",
                                        "name": "commons-discovery",
                                        "version": "0.2",
                                    }
                                ],
                            }
                        ],
                    },
                    {
                        "name": "implementation",
                        "attributes": {USAGE: "java-api"},
                        "dependencies": [
                            {"group": "junit", "name": "junit", "version": "4.12"}
                        ],
                    },
                    {"name": "testImplementation", "attributes": {}},
                ],
            },
        ],
    }


@pytest.fixture
def workspace_file(tmp_path, workspace_doc):
    path = tmp_path / "workspace.json"
    path.write_text(json.dumps(workspace_doc))
    return path


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers bound to streams captured by a finished test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
