"""Build layouts of the framework toolchains whose output can be adapted."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from adaptkit.errors import ConfigError


class FrameworkProfile(BaseModel):
    """Where a framework's build puts things, as globs relative to ``build_dir``."""

    model_config = ConfigDict(frozen=True)

    name: str
    build_dir: str
    static_globs: tuple[str, ...]
    js_globs: tuple[str, ...]
    css_globs: tuple[str, ...]
    asset_globs: tuple[str, ...]
    mount_markup: str = '<div id="root"></div>'
    adapt_static_urls: bool = True


PROFILES: dict[str, FrameworkProfile] = {
    "create-react-app": FrameworkProfile(
        name="create-react-app",
        build_dir="build",
        static_globs=("static/media/**/*",),
        js_globs=("static/js/*.js",),
        css_globs=("static/css/*.css",),
        asset_globs=("static/media/**/*",),
    ),
    "angular-cli": FrameworkProfile(
        name="angular-cli",
        build_dir="dist",
        static_globs=("assets/**/*", "*.ico", "*.svg", "*.png", "*.woff", "*.woff2"),
        js_globs=("*.js",),
        css_globs=("*.css",),
        asset_globs=("assets/**/*", "*.svg", "*.png", "*.woff", "*.woff2"),
        mount_markup="<app-root></app-root>",
    ),
    "vue-cli": FrameworkProfile(
        name="vue-cli",
        build_dir="dist",
        static_globs=("img/**/*", "fonts/**/*", "media/**/*"),
        js_globs=("js/*.js",),
        css_globs=("css/*.css",),
        asset_globs=("img/**/*", "fonts/**/*", "media/**/*"),
        mount_markup='<div id="app"></div>',
    ),
}

# dependency that gives each framework away, checked in this order
_MARKERS = (
    ("react-scripts", "create-react-app"),
    ("@angular/cli", "angular-cli"),
    ("@vue/cli-service", "vue-cli"),
)


def detect_framework(pkg_json: dict[str, Any]) -> str | None:
    """Guess the framework from package.json dependencies, or None."""
    deps: dict[str, Any] = {}
    for section in ("dependencies", "devDependencies"):
        deps.update(pkg_json.get(section) or {})
    for package, framework in _MARKERS:
        if package in deps:
            return framework
    return None


def get_profile(framework: str) -> FrameworkProfile:
    try:
        return PROFILES[framework]
    except KeyError:
        supported = ", ".join(sorted(PROFILES))
        raise ConfigError(f"Unsupported framework '{framework}' (supported: {supported})") from None
