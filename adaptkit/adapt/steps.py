"""Adapt steps: each turns part of a framework build into shared-page deployable output."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from adaptkit.adapt.runner import copy_files, transform_files, write_text_atomic
from adaptkit.errors import ResolutionError
from adaptkit.files import FileRef, find_files
from adaptkit.project import AdaptProject
from adaptkit.render import AdapterExtras, AdaptRuntimeData, IndexData, Renderer, TemplateData, build_template_data
from adaptkit.transform.data import SetPortletHeader
from adaptkit.transform.js import WebpackRuntimeMatcher, WrapModule, bundle_isolation_pipeline
from adaptkit.transform.js.static_urls import ADAPT_RUNTIME_MODULE
from adaptkit.transform.pipeline import ContentKind, Transform, TransformPipeline
from adaptkit.transform.text import ReplaceAssetUrls, build_asset_url_map

logger = logging.getLogger(__name__)

ADAPTER_TEMPLATES = (f"{ADAPT_RUNTIME_MODULE}.js", "index.js")


class Adapter:
    """The adapt operations for one project.

    Operations read from the project's build dir and write into its output
    dir. They are meant to be awaited one after another; each is fail-fast
    and leaves whatever it already wrote in place on error.
    """

    def __init__(self, project: AdaptProject, renderer: Renderer | None = None) -> None:
        self.project = project
        self.renderer = renderer or Renderer()

    def _resolve(self, globs: Sequence[str], what: str) -> list[FileRef]:
        files = find_files(self.project.build_dir, list(globs))
        if not files:
            if self.project.require_matches:
                raise ResolutionError(str(self.project.build_dir), list(globs))
            logger.warning("no %s found in %s matching %s", what, self.project.build_dir, ", ".join(globs))
        return files

    def isolation_pipeline(self, *framework_transforms: Transform) -> TransformPipeline:
        """Framework stages first, then namespace -> export -> wrap."""
        matcher = WebpackRuntimeMatcher(self.project.runtime_globals)
        standard = bundle_isolation_pipeline(define_fn=self.project.define_fn, matcher=matcher)
        return standard.prepend(*framework_transforms)

    async def copy_static_assets(self, globs: Sequence[str]) -> int:
        copied = await copy_files(
            self.project.build_dir,
            globs,
            self.project.output_dir,
            concurrency=self.project.concurrency,
        )
        logger.debug("Copied %d static assets", len(copied))
        return len(copied)

    async def process_webpack_bundles(self, globs: Sequence[str], *framework_transforms: Transform) -> int:
        """Make every matched bundle safe to co-host: namespaced, deferred, wrapped.

        ``framework_transforms`` run before the standard stages, on the raw
        bundler output.
        """
        bundles = self._resolve(globs, "webpack bundles")
        return await transform_files(
            self.project.build_dir,
            self.project.output_dir,
            bundles,
            self.isolation_pipeline(*framework_transforms),
            self.project.transform_context(),
            operation="Wrapped webpack bundles",
            concurrency=self.project.concurrency,
        )

    async def process_css_files(self, css_globs: Sequence[str], asset_globs: Sequence[str]) -> int:
        """Rewrite static asset URLs in CSS so they point at the served location.

        The URL map is built once from the asset matches before any CSS file
        is touched and is read-only afterwards.
        """
        css_files = self._resolve(css_globs, "CSS files")
        assets = find_files(self.project.build_dir, list(asset_globs))
        url_map = build_asset_url_map(assets, self.project.context_path, self.project.serving_prefix)

        return await transform_files(
            self.project.build_dir,
            self.project.output_dir,
            css_files,
            TransformPipeline(ContentKind.TEXT, [ReplaceAssetUrls(url_map)]),
            self.project.transform_context(asset_urls=url_map),
            operation="Processed CSS files",
            concurrency=self.project.concurrency,
        )

    async def process_package_json(self, css_header: str | None) -> int:
        """Copy package.json, setting (or removing, for None) the CSS header entry."""
        return await transform_files(
            self.project.dir,
            self.project.output_dir,
            [FileRef("package.json")],
            TransformPipeline(ContentKind.DATA, [SetPortletHeader(self.project.css_header, css_header)]),
            self.project.transform_context(),
            operation="Processed package.json",
        )

    async def process_adapter_modules(self, extras: AdapterExtras) -> int:
        """Render the adapt runtime and entry point templates and wrap them as modules."""
        project = self.project
        runtime = build_template_data(
            AdaptRuntimeData,
            package_name=project.name,
            package_version=project.version,
            framework=project.profile.name,
            context_path=project.context_path,
            serving_prefix=project.serving_prefix,
        )
        index = build_template_data(
            IndexData,
            framework=project.profile.name,
            runtime_module=project.module_id(ADAPT_RUNTIME_MODULE),
            bundle_modules=extras.bundle_modules,
            mount_markup=extras.mount_markup,
        )

        for template, data in zip(ADAPTER_TEMPLATES, (runtime, index)):
            await self._process_adapter_module(template, data)
        return len(ADAPTER_TEMPLATES)

    async def _process_adapter_module(self, template: str, data: TemplateData) -> None:
        file = FileRef(template)
        rendered = self.renderer.render(template, data)
        await asyncio.to_thread(write_text_atomic, file.under(self.project.generated_dir), rendered)

        await transform_files(
            self.project.generated_dir,
            self.project.output_dir,
            [file],
            TransformPipeline(ContentKind.SOURCE, [WrapModule(define_fn=self.project.define_fn)]),
            self.project.transform_context(),
            operation=f"Rendered {template} adapter module",
        )
