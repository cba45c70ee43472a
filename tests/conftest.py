"""Shared test fixtures for adaptkit."""

import json

import pytest

from adaptkit.config.models import AdaptConfig, AdaptSettings, OutputConfig, ProjectConfig
from adaptkit.project import load_project
from adaptkit.transform.pipeline import TransformContext

from samples import WEBPACK4_CHUNK, WEBPACK4_RUNTIME


@pytest.fixture
def context():
    return TransformContext(package_name="acme-widget", package_version="1.2.0", module_path="src/index")


@pytest.fixture
def cra_project_dir(tmp_path):
    """A create-react-app project with a finished build."""
    root = tmp_path / "acme-widget"
    build = root / "build"
    (build / "static" / "js").mkdir(parents=True)
    (build / "static" / "css").mkdir(parents=True)
    (build / "static" / "media").mkdir(parents=True)

    (root / "package.json").write_text(
        json.dumps(
            {
                "name": "acme-widget",
                "version": "1.2.0",
                "dependencies": {"react": "^16.8.0", "react-scripts": "3.0.1"},
            },
            indent=2,
        )
        + "\n"
    )
    (build / "static" / "js" / "runtime-main.js").write_text(WEBPACK4_RUNTIME)
    (build / "static" / "js" / "main.chunk.js").write_text(WEBPACK4_CHUNK)
    (build / "static" / "css" / "main.css").write_text(
        ".logo { background: url(/static/media/logo.5d5d9eef.svg) no-repeat; }\n"
    )
    (build / "static" / "media" / "logo.5d5d9eef.svg").write_text("<svg/>")
    return root


@pytest.fixture
def cra_config(cra_project_dir):
    return AdaptConfig(
        project=ProjectConfig(dir=str(cra_project_dir)),
        adapt=AdaptSettings(framework="auto", concurrency=2),
        output=OutputConfig(),
    )


@pytest.fixture
def cra_project(cra_config):
    return load_project(cra_config)
