"""Tests for the adaptkit CLI (run, files, config init/show)."""

from __future__ import annotations

import json
import logging

import pytest
import yaml
from typer.testing import CliRunner

from adaptkit.cli import app
from adaptkit.logging_setup import JsonFormatter

from samples import BROKEN_JS

runner = CliRunner()


def _squashed(result) -> str:
    """Output without whitespace, so rich line wrapping cannot split a needle."""
    return "".join(result.output.split())


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    work = tmp_path / "cwd"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    yield
    # drop handlers bound to the runner's captured streams
    logging.getLogger("adaptkit").handlers.clear()


@pytest.fixture
def config_file(tmp_path, cra_project_dir):
    path = tmp_path / "adaptkit.yaml"
    path.write_text(yaml.safe_dump({"project": {"dir": str(cra_project_dir)}, "adapt": {"concurrency": 2}}))
    return path


class TestRun:
    def test_run_adapts_project(self, config_file, cra_project_dir):
        result = runner.invoke(app, ["--config", str(config_file), "run"])
        assert result.exit_code == 0, result.output
        assert "create-react-app" in result.output
        assert "Webpack bundles" in result.output

        work = cra_project_dir / "build.liferay" / "work"
        assert (work / "index.js").exists()
        assert (work / "static" / "js" / "main.chunk.js").exists()
        package = json.loads((work / "package.json").read_text())
        assert package["portlet"]["com.liferay.portlet.header-portlet-css"] == "/static/css/main.css"

    def test_run_reports_transform_failure(self, config_file, cra_project_dir):
        (cra_project_dir / "build" / "static" / "js" / "broken.js").write_text(BROKEN_JS)
        result = runner.invoke(app, ["--config", str(config_file), "run"])
        assert result.exit_code == 1
        assert "broken.js" in _squashed(result)
        assert "AdaptStaticUrlsAtRuntime" in _squashed(result)
        assert "syntaxerror" in _squashed(result)

    def test_run_unknown_framework(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "run", "--framework", "ember-cli"])
        assert result.exit_code == 1
        assert "Unsupportedframework" in _squashed(result)

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "run"])
        assert result.exit_code == 1
        assert "notfound" in _squashed(result)


class TestFiles:
    def test_lists_matches(self, cra_project_dir):
        build = cra_project_dir / "build"
        result = runner.invoke(app, ["files", "static/**/*.js", "!**/runtime-*", "--dir", str(build)])
        assert result.exit_code == 0
        assert "static/js/main.chunk.js" in _squashed(result)
        assert "runtime-main.js" not in _squashed(result)

    def test_no_matches(self, tmp_path):
        result = runner.invoke(app, ["files", "*.nothing", "--dir", str(tmp_path)])
        assert result.exit_code == 0
        assert "No files" in result.output


class TestConfigCommands:
    def test_init_writes_default(self):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert "Created" in result.output

    def test_init_refuses_overwrite(self):
        runner.invoke(app, ["config", "init"])
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert "alreadyexists" in _squashed(result)

    def test_init_force(self):
        runner.invoke(app, ["config", "init"])
        result = runner.invoke(app, ["config", "init", "--force"])
        assert result.exit_code == 0

    def test_show_prints_effective_config(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "config", "show"])
        assert result.exit_code == 0
        assert "concurrency:2" in _squashed(result)


class TestJsonLogging:
    def test_json_formatter(self):
        record = logging.LogRecord("adaptkit.files", logging.WARNING, __file__, 1, "missing %s", ("dir",), None)
        payload = json.loads(JsonFormatter().format(record))
        assert payload["level"] == "warning"
        assert payload["logger"] == "adaptkit.files"
        assert payload["event"] == "missing dir"
