"""Jinja2 rendering of the adapter entry-point templates.

Each template has its own data model listing exactly the fields it uses, so a
missing value is reported before rendering starts instead of surfacing as an
empty string in generated JavaScript.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, PackageLoader, StrictUndefined, TemplateNotFound
from jinja2.exceptions import UndefinedError
from pydantic import BaseModel, ConfigDict, ValidationError

from adaptkit.errors import TemplateDataError

logger = logging.getLogger(__name__)


class TemplateData(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class AdaptRuntimeData(TemplateData):
    """Data for ``adapt-rt.js``, the runtime support module."""

    package_name: str
    package_version: str
    framework: str
    context_path: str
    serving_prefix: str


class IndexData(TemplateData):
    """Data for ``index.js``, the entry point the hosting page calls."""

    framework: str
    runtime_module: str
    bundle_modules: list[str]
    mount_markup: str


class AdapterExtras(BaseModel):
    """Caller-supplied values for the adapter templates."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bundle_modules: list[str]
    mount_markup: str = '<div id="root"></div>'


def build_template_data(cls: type[TemplateData], **values: object) -> TemplateData:
    try:
        return cls(**values)
    except ValidationError as e:
        raise TemplateDataError(f"Invalid data for {cls.__name__}: {e}") from e


class Renderer:
    """Renders ``<name>.j2`` templates from a directory (default: the bundled ones)."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        loader = (
            FileSystemLoader(str(template_dir))
            if template_dir is not None
            else PackageLoader("adaptkit", "templates")
        )
        self.env = Environment(
            loader=loader,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    def render(self, name: str, data: TemplateData) -> str:
        try:
            template = self.env.get_template(f"{name}.j2")
        except TemplateNotFound as e:
            raise TemplateDataError(f"No template named {name}") from e
        try:
            return template.render(**data.model_dump())
        except UndefinedError as e:
            raise TemplateDataError(f"Template {name}: {e.message}") from e
