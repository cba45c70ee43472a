"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from adaptkit.errors import ConfigError

from .models import AdaptConfig


def load_config(cli_path: str | None = None) -> AdaptConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ConfigError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./adaptkit.yaml"),
        Path.home() / ".adaptkit" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return AdaptConfig(**raw)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            except (ValidationError, TypeError) as e:
                raise ConfigError(f"Invalid config in {path}: {e}") from e

    return AdaptConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `adaptkit config init`
DEFAULT_CONFIG_TEMPLATE = """\
# adaptkit.yaml

# Project descriptor
project:
  dir: "."
  # name: "my-app"             # defaults to package.json name
  # version: "1.0.0"           # defaults to package.json version
  # context_path: "/my-app"    # defaults to /<name>-<version>
  serving_prefix: "o"

# Adapt pipeline
adapt:
  framework: "auto"            # auto | create-react-app | angular-cli | vue-cli
  # build_dir: "build"         # overrides the framework default
  concurrency: 8
  define_fn: "Liferay.Loader.define"
  css_header: "com.liferay.portlet.header-portlet-css"
  require_matches: false       # fail when a glob set matches nothing

# Output
output:
  dir: "build.liferay/work"
  generated_dir: "build.liferay/generated"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
