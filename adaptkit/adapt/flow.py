"""The full adapt flow for a detected framework build."""

from __future__ import annotations

import logging
import time

from pydantic import BaseModel

from adaptkit.adapt.steps import Adapter
from adaptkit.files import find_files
from adaptkit.project import AdaptProject
from adaptkit.render import AdapterExtras
from adaptkit.transform.js import AdaptStaticUrlsAtRuntime

logger = logging.getLogger(__name__)


class AdaptReport(BaseModel):
    framework: str
    static_assets: int = 0
    bundles: int = 0
    css_files: int = 0
    adapter_modules: int = 0
    css_header: str | None = None
    duration: float = 0.0


async def adapt_project(project: AdaptProject, adapter: Adapter | None = None) -> AdaptReport:
    """Run every adapt step, in order, for the project's framework profile."""
    start = time.monotonic()
    adapter = adapter or Adapter(project)
    profile = project.profile
    report = AdaptReport(framework=profile.name)

    report.static_assets = await adapter.copy_static_assets(profile.static_globs)

    framework_transforms = (
        [AdaptStaticUrlsAtRuntime(list(profile.asset_globs))] if profile.adapt_static_urls else []
    )
    report.bundles = await adapter.process_webpack_bundles(profile.js_globs, *framework_transforms)

    report.css_files = await adapter.process_css_files(profile.css_globs, profile.asset_globs)

    css_files = find_files(project.build_dir, list(profile.css_globs))
    report.css_header = f"/{css_files[0].as_posix}" if css_files else None
    await adapter.process_package_json(report.css_header)

    bundles = find_files(project.build_dir, list(profile.js_globs))
    extras = AdapterExtras(
        bundle_modules=[project.module_id(b.without_suffix()) for b in bundles],
        mount_markup=profile.mount_markup,
    )
    report.adapter_modules = await adapter.process_adapter_modules(extras)

    report.duration = time.monotonic() - start
    logger.info(
        "adapted %s build: %d bundles, %d CSS files, %d static assets",
        profile.name,
        report.bundles,
        report.css_files,
        report.static_assets,
    )
    return report
