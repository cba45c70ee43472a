"""Rewrites static asset references in CSS to the URLs they are served from.

This is a best-effort, build-time substitution: CSS cannot run code, so URLs
that a proxy or CDN would rewrite at request time are out of reach. Only
literal occurrences of known asset paths are replaced.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from adaptkit.files import FileRef
from adaptkit.transform.pipeline import ContentKind, Transform, TransformContext

DEFAULT_SERVING_PREFIX = "o"

# a path character on either side means the key is part of a longer path; a
# single leading "/" is allowed (root-relative url) unless it follows one
_SEGMENT_CHAR = r"[\w.~-]"
_PATH_CHAR = r"[\w./~-]"


def normalize_context_path(context_path: str) -> str:
    """``my-context/`` -> ``/my-context``; empty stays empty."""
    stripped = context_path.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def build_asset_url_map(
    assets: Iterable[FileRef],
    context_path: str,
    serving_prefix: str = DEFAULT_SERVING_PREFIX,
) -> dict[str, str]:
    """Map each asset's source-relative posix path to its served URL."""
    base = f"{serving_prefix.strip('/')}{normalize_context_path(context_path)}"
    return {asset.as_posix: f"{base}/{asset.as_posix}" for asset in assets}


def _compile(url_map: Mapping[str, str]) -> re.Pattern[str] | None:
    if not url_map:
        return None
    keys = sorted(url_map, key=len, reverse=True)
    alternatives = "|".join(re.escape(k) for k in keys)
    return re.compile(rf"(?<!{_SEGMENT_CHAR})(?<!{_PATH_CHAR}/)(?:{alternatives})(?!{_PATH_CHAR})")


class ReplaceAssetUrls(Transform):
    """Replace literal asset paths in text with their served URLs.

    Uses the map given at construction, or the run context's ``asset_urls``
    when constructed without one. Rewritten URLs are never re-matched, so
    applying this twice is the same as applying it once.
    """

    input_kind = ContentKind.TEXT
    output_kind = ContentKind.TEXT

    def __init__(self, url_map: Mapping[str, str] | None = None) -> None:
        self.url_map = dict(url_map) if url_map is not None else None
        self._pattern = _compile(self.url_map) if self.url_map is not None else None

    def apply(self, content: str, context: TransformContext) -> str:
        url_map = self.url_map if self.url_map is not None else context.asset_urls
        pattern = self._pattern if self.url_map is not None else _compile(url_map)
        if pattern is None:
            return content
        return pattern.sub(lambda m: url_map[m.group(0)], content)
