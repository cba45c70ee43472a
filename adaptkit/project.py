"""The project descriptor every adapt component is constructed with."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from adaptkit.config.models import AdaptConfig
from adaptkit.errors import ConfigError
from adaptkit.frameworks import FrameworkProfile, get_profile, detect_framework
from adaptkit.transform.pipeline import TransformContext
from adaptkit.transform.text import normalize_context_path

logger = logging.getLogger(__name__)


class AdaptProject(BaseModel):
    """Resolved facts about the project being adapted.

    Built once from config and package.json and passed explicitly to the
    Adapter; there is no process-wide project state.
    """

    model_config = ConfigDict(frozen=True)

    dir: Path
    name: str
    version: str
    pkg_json: dict[str, Any] = Field(default_factory=dict)
    profile: FrameworkProfile
    build_dir: Path
    output_dir: Path
    generated_dir: Path
    context_path: str
    serving_prefix: str = "o"
    define_fn: str = "Liferay.Loader.define"
    runtime_globals: str = r"webpackJsonp|webpackChunk[\w$]*"
    css_header: str = "com.liferay.portlet.header-portlet-css"
    concurrency: int = 8
    require_matches: bool = False

    @property
    def module_prefix(self) -> str:
        return f"{self.name}@{self.version}"

    def module_id(self, module_path: str) -> str:
        return f"{self.module_prefix}/{module_path}"

    def transform_context(self, asset_urls: dict[str, str] | None = None) -> TransformContext:
        return TransformContext(
            package_name=self.name,
            package_version=self.version,
            asset_urls=asset_urls or {},
        )


def read_package_json(project_dir: Path) -> dict[str, Any]:
    path = project_dir / "package.json"
    if not path.is_file():
        logger.debug("no package.json in %s", project_dir)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid package.json in {project_dir}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"package.json in {project_dir} is not a JSON object")
    return data


def default_context_path(name: str, version: str) -> str:
    """``@acme/widget`` 1.0.0 -> ``/acme-widget-1.0.0``"""
    safe = name.lstrip("@").replace("/", "-")
    return f"/{safe}-{version}"


def load_project(config: AdaptConfig, framework: str | None = None) -> AdaptProject:
    """Resolve config + package.json into an AdaptProject."""
    root = Path(config.project.dir).resolve()
    pkg_json = read_package_json(root)

    name = config.project.name or pkg_json.get("name")
    version = config.project.version or pkg_json.get("version")
    if not name or not version:
        raise ConfigError(
            f"Project name and version are required (set them in package.json or config): {root}"
        )

    chosen = framework or config.adapt.framework
    if chosen == "auto":
        detected = detect_framework(pkg_json)
        if detected is None:
            raise ConfigError("Could not detect the project framework; set adapt.framework")
        logger.info("detected %s project", detected)
        chosen = detected
    profile = get_profile(chosen)

    context_path = config.project.context_path or default_context_path(name, version)

    return AdaptProject(
        dir=root,
        name=name,
        version=version,
        pkg_json=pkg_json,
        profile=profile,
        build_dir=root / (config.adapt.build_dir or profile.build_dir),
        output_dir=root / config.output.dir,
        generated_dir=root / config.output.generated_dir,
        context_path=normalize_context_path(context_path),
        serving_prefix=config.project.serving_prefix,
        define_fn=config.adapt.define_fn,
        runtime_globals=config.adapt.runtime_globals,
        css_header=config.adapt.css_header,
        concurrency=config.adapt.concurrency,
        require_matches=config.adapt.require_matches,
    )
