"""TransformPipeline — runs an ordered chain of content transforms over one file's content."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from adaptkit.errors import PipelineCompositionError, TransformError
from adaptkit.files import FileRef
from adaptkit.transform.codecs import JsonStyle, decode_json, encode_json


class ContentKind(str, Enum):
    SOURCE = "source"  # JavaScript program text
    DATA = "data"  # parsed JSON object
    TEXT = "text"  # raw text, e.g. CSS


class TransformContext(BaseModel):
    """Facts shared by every transform of one pipeline run.

    Immutable. Per-file values (``module_path``, ``source_path``) are filled
    in on a copy via :meth:`for_file`; the run-level context is never touched.
    """

    model_config = ConfigDict(frozen=True)

    package_name: str
    package_version: str
    module_path: str = ""
    source_path: str = ""
    asset_urls: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("asset_urls", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @property
    def module_prefix(self) -> str:
        return f"{self.package_name}@{self.package_version}"

    @property
    def module_id(self) -> str:
        """``acme-widget@1.2.0/src/index`` for module path ``src/index``."""
        return f"{self.module_prefix}/{self.module_path}"

    def for_file(self, file: FileRef, source_path: str = "") -> TransformContext:
        return self.model_copy(
            update={
                "module_path": file.without_suffix(),
                "source_path": source_path or file.as_posix,
            }
        )


class Transform(ABC):
    """A pure content-to-content function.

    Subclasses declare which content kind they accept and produce; the
    pipeline checks adjacent stages agree when it is built.
    """

    input_kind: ClassVar[ContentKind] = ContentKind.SOURCE
    output_kind: ClassVar[ContentKind] = ContentKind.SOURCE

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def apply(self, content: Any, context: TransformContext) -> Any:
        """Return the transformed content. Raise TransformError on malformed input."""
        ...

    def __repr__(self) -> str:
        return f"<{self.name} {self.input_kind.value}->{self.output_kind.value}>"


class FunctionTransform(Transform):
    """Adapts a plain ``(content, context) -> content`` function into a stage."""

    def __init__(
        self,
        func: Callable[[Any, TransformContext], Any],
        kind: ContentKind,
        name: str | None = None,
    ) -> None:
        self._func = func
        self._kind = kind
        self._name = name or getattr(func, "__name__", "function")

    @property
    def name(self) -> str:
        return self._name

    # instance-level kinds shadow the ClassVar defaults
    @property
    def input_kind(self) -> ContentKind:  # type: ignore[override]
        return self._kind

    @property
    def output_kind(self) -> ContentKind:  # type: ignore[override]
        return self._kind

    def apply(self, content: Any, context: TransformContext) -> Any:
        return self._func(content, context)


def content_transform(kind: ContentKind, name: str | None = None):
    """Decorator turning a function into a :class:`Transform` of ``kind``."""

    def decorator(func: Callable[[Any, TransformContext], Any]) -> FunctionTransform:
        return FunctionTransform(func, kind, name)

    return decorator


def _check_kinds(kind: ContentKind, stages: tuple[Transform, ...]) -> None:
    current = kind
    for position, stage in enumerate(stages):
        if stage.input_kind != current:
            raise PipelineCompositionError(
                f"stage {position} ({stage.name}) accepts {stage.input_kind.value} "
                f"content but receives {current.value}"
            )
        current = stage.output_kind
    if current != kind:
        raise PipelineCompositionError(
            f"pipeline of {kind.value} content ends with {current.value} content"
        )


class TransformPipeline:
    """An ordered, fixed chain of transforms for one content kind.

    Stages run in the given order, each receiving the previous stage's
    output. Order is the caller's contract: stages are not commutative.
    Framework-specific stages are added with :meth:`prepend` so they see the
    raw bundler output before the standard isolation stages run.
    """

    def __init__(self, kind: ContentKind, transforms: Iterable[Transform] = ()) -> None:
        self.kind = kind
        self.transforms: tuple[Transform, ...] = tuple(transforms)
        _check_kinds(kind, self.transforms)

    def prepend(self, *stages: Transform) -> TransformPipeline:
        return TransformPipeline(self.kind, (*stages, *self.transforms))

    def append(self, *stages: Transform) -> TransformPipeline:
        return TransformPipeline(self.kind, (*self.transforms, *stages))

    def __len__(self) -> int:
        return len(self.transforms)

    def __repr__(self) -> str:
        names = " -> ".join(t.name for t in self.transforms) or "(empty)"
        return f"TransformPipeline[{self.kind.value}]({names})"

    def apply(self, content: str, context: TransformContext) -> str:
        """Run every stage over ``content`` (file text) and return the new text."""
        value, style = self._decode(content, context)
        for stage in self.transforms:
            try:
                value = stage.apply(value, context)
            except TransformError as e:
                raise e.located(path=context.source_path, stage=stage.name)
            except (ValueError, TypeError, KeyError) as e:
                raise TransformError(str(e), path=context.source_path, stage=stage.name) from e
        return self._encode(value, style)

    def _decode(self, content: str, context: TransformContext) -> tuple[Any, JsonStyle | None]:
        if self.kind is not ContentKind.DATA:
            return content, None
        try:
            data, style = decode_json(content)
        except ValueError as e:
            raise TransformError(f"invalid JSON: {e}", path=context.source_path, stage="parse") from e
        if not isinstance(data, dict):
            raise TransformError(
                "expected a JSON object at top level", path=context.source_path, stage="parse"
            )
        return data, style

    def _encode(self, value: Any, style: JsonStyle | None) -> str:
        if self.kind is ContentKind.DATA:
            return encode_json(value, style or JsonStyle())
        return value
