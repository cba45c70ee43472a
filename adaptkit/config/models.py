from typing import Literal

from pydantic import BaseModel, Field

Framework = Literal["auto", "create-react-app", "angular-cli", "vue-cli"]


class ProjectConfig(BaseModel):
    dir: str = "."
    name: str | None = None  # defaults to package.json "name"
    version: str | None = None  # defaults to package.json "version"
    context_path: str | None = None  # defaults to /<name>-<version>
    serving_prefix: str = "o"


class AdaptSettings(BaseModel):
    framework: Framework = "auto"
    build_dir: str | None = None  # overrides the framework profile's
    concurrency: int = Field(default=8, ge=1)
    define_fn: str = "Liferay.Loader.define"
    runtime_globals: str = r"webpackJsonp|webpackChunk[\w$]*"
    css_header: str = "com.liferay.portlet.header-portlet-css"
    require_matches: bool = False


class OutputConfig(BaseModel):
    dir: str = "build.liferay/work"
    generated_dir: str = "build.liferay/generated"


class AdaptConfig(BaseModel):
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    adapt: AdaptSettings = Field(default_factory=AdaptSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
