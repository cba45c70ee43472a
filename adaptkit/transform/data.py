"""Structured-data (JSON manifest) transforms."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from adaptkit.errors import TransformError
from adaptkit.transform.pipeline import ContentKind, Transform, TransformContext


def split_key_path(key_path: str | Sequence[str]) -> tuple[str, ...]:
    """``"headers.x"`` -> ``("headers", "x")``; sequences pass through."""
    if isinstance(key_path, str):
        parts = tuple(key_path.split("."))
    else:
        parts = tuple(key_path)
    if not parts or any(not p for p in parts):
        raise ValueError(f"invalid key path: {key_path!r}")
    return parts


class SetJsonKey(Transform):
    """Set (or, for ``None``, remove) one key at a nested path of a JSON object.

    Missing intermediate objects are created. Key order of everything else is
    kept, and a key that already exists keeps its position.
    """

    input_kind = ContentKind.DATA
    output_kind = ContentKind.DATA

    def __init__(self, key_path: str | Sequence[str], value: Any) -> None:
        self.key_path = split_key_path(key_path)
        self.value = value

    def apply(self, content: dict, context: TransformContext) -> dict:
        data = copy.deepcopy(content)
        *parents, leaf = self.key_path

        node = data
        for depth, key in enumerate(parents):
            child = node.get(key)
            if child is None:
                if self.value is None:
                    return data
                child = node[key] = {}
            elif not isinstance(child, dict):
                where = ".".join(self.key_path[: depth + 1])
                raise TransformError(f"cannot set {'.'.join(self.key_path)}: {where} is not an object")
            node = child

        if self.value is None:
            node.pop(leaf, None)
        else:
            node[leaf] = self.value
        return data


class SetPortletHeader(SetJsonKey):
    """Set ``portlet[<header>]`` in a package.json-style manifest."""

    def __init__(self, header: str, value: Any) -> None:
        super().__init__(("portlet", header), value)
