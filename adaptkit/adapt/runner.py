"""Runs a transform pipeline over a file set, writing results into a new tree."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import shutil
import tempfile
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from adaptkit.errors import AdaptIOError, TransformError
from adaptkit.files import FileRef, find_files
from adaptkit.transform.pipeline import TransformContext, TransformPipeline

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8

T = TypeVar("T")


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise TransformError(f"not valid UTF-8: {e}", path=str(path), stage="read") from e
    except OSError as e:
        raise AdaptIOError(str(path), e) from e


def write_text_atomic(path: Path, content: str) -> None:
    """Write via a temp sibling + rename so readers never see half a file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise AdaptIOError(str(path), e) from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise AdaptIOError(str(path), e) from e


def copy_file(source: Path, dest: Path) -> None:
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
    except OSError as e:
        raise AdaptIOError(str(source), e) from e


async def run_blocking(func: Callable[..., T], *args: Any) -> T:
    """Run ``func`` in a worker thread.

    A thread cannot be interrupted, so on cancellation this waits for ``func``
    to return before re-raising. Nothing it writes lands after the caller has
    moved on.
    """
    future = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        with contextlib.suppress(Exception):
            await future
        raise


async def run_fail_fast(jobs: Sequence[Awaitable[None]]) -> None:
    """Run jobs concurrently; on the first failure cancel the rest and re-raise it.

    When several jobs have already failed, the one earliest in ``jobs`` wins
    so the reported cause does not depend on scheduling.
    """
    tasks = [asyncio.ensure_future(job) for job in jobs]
    if not tasks:
        return
    try:
        _done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    first: BaseException | None = None
    for task in tasks:
        if task.cancelled():
            continue
        error = task.exception()
        if error is not None and first is None:
            first = error
    if first is not None:
        raise first


async def transform_files(
    source_dir: str | os.PathLike[str],
    dest_dir: str | os.PathLike[str],
    files: Sequence[FileRef],
    pipeline: TransformPipeline,
    context: TransformContext,
    *,
    operation: str,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> int:
    """Transform every file from ``source_dir`` into the same relative place under ``dest_dir``.

    Files are independent and processed concurrently; the chain within one
    file runs in order. Each output is only written once its whole chain has
    succeeded. Files written before a failure are left in place.

    Returns the number of files processed.
    """
    source_root = Path(source_dir)
    dest_root = Path(dest_dir)
    semaphore = asyncio.Semaphore(concurrency)

    async def process(file: FileRef) -> None:
        async with semaphore:
            source = file.under(source_root)
            content = await run_blocking(read_text, source)
            result = pipeline.apply(content, context.for_file(file, source_path=str(source)))
            await run_blocking(write_text_atomic, file.under(dest_root), result)

    await run_fail_fast([process(file) for file in files])

    logger.debug("%s: %d files", operation, len(files))
    return len(files)


async def copy_files(
    source_dir: str | os.PathLike[str],
    globs: Sequence[str],
    dest_dir: str | os.PathLike[str],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[FileRef]:
    """Copy files matching ``globs`` verbatim, preserving relative layout."""
    source_root = Path(source_dir)
    dest_root = Path(dest_dir)
    files = find_files(source_root, list(globs))
    semaphore = asyncio.Semaphore(concurrency)

    async def copy(file: FileRef) -> None:
        async with semaphore:
            await run_blocking(copy_file, file.under(source_root), file.under(dest_root))

    await run_fail_fast([copy(file) for file in files])
    return files
