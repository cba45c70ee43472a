"""Tests for adaptkit.config — models and YAML loader."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from adaptkit.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars, load_config
from adaptkit.config.models import AdaptConfig, AdaptSettings, OutputConfig, ProjectConfig
from adaptkit.errors import ConfigError


@pytest.fixture
def no_home_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    return tmp_path


# ── AdaptConfig defaults ───────────────────────────────────────────


class TestAdaptConfigDefaults:
    def test_default_log_settings(self):
        cfg = AdaptConfig()
        assert cfg.log_level == "info"
        assert cfg.log_format == "text"

    def test_default_framework_is_detected(self):
        assert AdaptConfig().adapt.framework == "auto"

    def test_default_output_dirs(self):
        cfg = AdaptConfig()
        assert cfg.output.dir == "build.liferay/work"
        assert cfg.output.generated_dir == "build.liferay/generated"


# ── Individual config model validations ───────────────────────────


class TestProjectConfig:
    def test_defaults(self):
        cfg = ProjectConfig()
        assert cfg.dir == "."
        assert cfg.name is None
        assert cfg.context_path is None
        assert cfg.serving_prefix == "o"


class TestAdaptSettings:
    def test_defaults(self):
        cfg = AdaptSettings()
        assert cfg.concurrency == 8
        assert cfg.define_fn == "Liferay.Loader.define"
        assert cfg.css_header == "com.liferay.portlet.header-portlet-css"
        assert cfg.require_matches is False

    def test_invalid_framework_rejected(self):
        with pytest.raises(ValidationError):
            AdaptSettings(framework="ember-cli")

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValidationError):
            AdaptSettings(concurrency=0)


class TestOutputConfig:
    def test_custom_values(self):
        cfg = OutputConfig(dir="out", generated_dir="gen")
        assert cfg.dir == "out"
        assert cfg.generated_dir == "gen"


# ── _expand_env_vars ───────────────────────────────────────────────


class TestExpandEnvVars:
    def test_expands_string_variable(self):
        with patch.dict(os.environ, {"ADAPT_DIR": "/srv/app"}):
            assert _expand_env_vars("${ADAPT_DIR}") == "/srv/app"

    def test_missing_var_becomes_empty(self):
        os.environ.pop("ADAPTKIT_UNSET_VAR", None)
        assert _expand_env_vars("x${ADAPTKIT_UNSET_VAR}y") == "xy"

    def test_expands_nested_structures(self):
        with patch.dict(os.environ, {"A": "alpha", "B": "beta"}):
            result = _expand_env_vars({"outer": {"inner": "${A}"}, "list": ["${B}", "lit"]})
            assert result == {"outer": {"inner": "alpha"}, "list": ["beta", "lit"]}

    def test_non_string_passthrough(self):
        assert _expand_env_vars(42) == 42
        assert _expand_env_vars(True) is True
        assert _expand_env_vars(None) is None


# ── load_config ────────────────────────────────────────────────────


class TestLoadConfig:
    def test_returns_defaults_when_no_file_exists(self, no_home_config):
        config = load_config()
        assert config == AdaptConfig()

    def test_loads_project_local_yaml(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text(
            "adapt:\n  framework: vue-cli\n  concurrency: 2\nlog_level: debug\n"
        )
        config = load_config()
        assert config.adapt.framework == "vue-cli"
        assert config.adapt.concurrency == 2
        assert config.log_level == "debug"

    def test_cli_path_takes_priority(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text("adapt:\n  framework: vue-cli\n")
        cli_file = no_home_config / "custom.yaml"
        cli_file.write_text("adapt:\n  framework: angular-cli\n")
        assert load_config(str(cli_file)).adapt.framework == "angular-cli"

    def test_missing_cli_path_raises(self, no_home_config):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(no_home_config / "nope.yaml"))

    def test_empty_file_falls_through(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text("")
        assert load_config() == AdaptConfig()

    def test_env_vars_expanded(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text('project:\n  dir: "${WIDGET_DIR}"\n')
        with patch.dict(os.environ, {"WIDGET_DIR": "/work/widget"}):
            assert load_config().project.dir == "/work/widget"

    def test_raises_on_invalid_yaml(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text("  bad:\nyaml: [unterminated")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config()

    def test_raises_on_invalid_config_values(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text("adapt:\n  concurrency: -1\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_default_template_is_loadable(self, no_home_config):
        (no_home_config / "adaptkit.yaml").write_text(DEFAULT_CONFIG_TEMPLATE)
        config = load_config()
        assert config.adapt.framework == "auto"
        assert config.output.dir == "build.liferay/work"
