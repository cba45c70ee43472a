"""Content transforms and the pipeline that chains them."""

from .pipeline import (
    ContentKind,
    FunctionTransform,
    Transform,
    TransformContext,
    TransformPipeline,
    content_transform,
)
from .data import SetJsonKey, SetPortletHeader
from .text import ReplaceAssetUrls, build_asset_url_map

__all__ = [
    "ContentKind",
    "FunctionTransform",
    "ReplaceAssetUrls",
    "SetJsonKey",
    "SetPortletHeader",
    "Transform",
    "TransformContext",
    "TransformPipeline",
    "build_asset_url_map",
    "content_transform",
]
