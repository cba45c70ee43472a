"""File references and glob resolution over build output trees."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class FileRef:
    """A path relative to some base directory.

    The posix rendering is canonical: it is what globs match against and what
    keys asset URL maps. The native rendering is only used to touch disk.
    """

    posix: str

    @classmethod
    def of(cls, path: str | os.PathLike[str]) -> FileRef:
        raw = os.fspath(path).replace(os.sep, "/")
        if os.altsep:
            raw = raw.replace(os.altsep, "/")
        return cls(PurePosixPath(raw).as_posix())

    @property
    def as_posix(self) -> str:
        return self.posix

    @property
    def as_native(self) -> str:
        return str(Path(*PurePosixPath(self.posix).parts))

    def without_suffix(self) -> str:
        """``static/js/main.1a2b.js`` -> ``static/js/main.1a2b``"""
        path = PurePosixPath(self.posix)
        if not path.suffix:
            return self.posix
        return path.with_suffix("").as_posix()

    def under(self, base: str | os.PathLike[str]) -> Path:
        """Resolve this reference against a base directory."""
        return Path(base) / self.as_native

    def __str__(self) -> str:
        return self.posix


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a posix glob into an anchored regex.

    ``*`` and ``?`` never cross a ``/``; ``**`` does, and ``**/`` also
    matches zero directories.
    """
    if pattern.startswith("./"):
        pattern = pattern[2:]
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                if pattern.startswith("**/", i):
                    out.append("(?:[^/]+/)*")
                    i += 3
                else:
                    out.append(".*")
                    i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end + 1
                continue
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out))


def matches_any(posix_path: str, globs: list[str] | tuple[str, ...]) -> bool:
    """True if the path matches at least one include and no ``!`` exclude."""
    included = False
    for glob in globs:
        if glob.startswith("!"):
            if glob_to_regex(glob[1:]).fullmatch(posix_path):
                return False
        elif not included and glob_to_regex(glob).fullmatch(posix_path):
            included = True
    return included


def _walk_files(base_dir: Path) -> list[FileRef]:
    found: list[FileRef] = []
    for dirpath, _dirnames, filenames in os.walk(base_dir, followlinks=False):
        for name in filenames:
            full = Path(dirpath) / name
            # is_file() follows symlinks, so dangling links and links to
            # directories drop out here
            if not full.is_file():
                continue
            found.append(FileRef.of(full.relative_to(base_dir)))
    return found


def find_files(base_dir: str | os.PathLike[str], globs: list[str] | tuple[str, ...]) -> list[FileRef]:
    """Return the files under ``base_dir`` matching any of ``globs``.

    The result is sorted by posix path and contains no duplicates. Globs that
    match nothing are not an error; the caller decides whether an empty
    result matters.
    """
    base = Path(base_dir)
    if not base.is_dir():
        logger.warning("source directory %s does not exist", base)
        return []

    candidates = _walk_files(base)
    matched = sorted({ref for ref in candidates if matches_any(ref.as_posix, globs)})

    if logger.isEnabledFor(logging.DEBUG):
        for glob in globs:
            if glob.startswith("!"):
                continue
            regex = glob_to_regex(glob)
            if not any(regex.fullmatch(ref.as_posix) for ref in matched):
                logger.debug("glob %r matched no files in %s", glob, base)

    return matched
