"""Syntax-aware JavaScript source transforms."""

from .export import ExportModuleAsFunction
from .namespace import (
    BindingSite,
    NamespaceRuntimeGlobal,
    RuntimeGlobalMatcher,
    WebpackRuntimeMatcher,
    namespaced_global,
)
from .static_urls import AdaptStaticUrlsAtRuntime
from .wrap import DEFAULT_DEFINE_FN, WrapModule, required_modules

from adaptkit.transform.pipeline import ContentKind, TransformPipeline


def bundle_isolation_pipeline(
    define_fn: str = DEFAULT_DEFINE_FN,
    matcher: RuntimeGlobalMatcher | None = None,
) -> TransformPipeline:
    """namespace -> export -> wrap, the order every shared-page bundle needs."""
    return TransformPipeline(
        ContentKind.SOURCE,
        [NamespaceRuntimeGlobal(matcher), ExportModuleAsFunction(), WrapModule(define_fn=define_fn)],
    )


__all__ = [
    "AdaptStaticUrlsAtRuntime",
    "BindingSite",
    "DEFAULT_DEFINE_FN",
    "ExportModuleAsFunction",
    "NamespaceRuntimeGlobal",
    "RuntimeGlobalMatcher",
    "WebpackRuntimeMatcher",
    "WrapModule",
    "bundle_isolation_pipeline",
    "namespaced_global",
    "required_modules",
]
