"""Parse/serialize disciplines for each content kind."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

_INDENT_RE = re.compile(r"^[\[{][ \t]*\r?\n([ \t]+)\S", re.MULTILINE)
_STRING_RE = re.compile(r'"(?:[^"\\]|\\.)*"')


@dataclass(frozen=True)
class JsonStyle:
    """Formatting facts captured from a JSON document so it can be re-emitted alike."""

    indent: str | None = None
    spaced: bool = True
    trailing_newline: bool = False
    newline: str = "\n"


def detect_json_style(text: str) -> JsonStyle:
    trailing_newline = text.endswith("\n")
    newline = "\r\n" if "\r\n" in text else "\n"
    body = text.strip()
    if "\n" in body:
        match = _INDENT_RE.search(body)
        indent = match.group(1) if match else "  "
        return JsonStyle(indent=indent, trailing_newline=trailing_newline, newline=newline)
    # single line: keep it compact if the author wrote it compact; string
    # contents do not count
    tokens = _STRING_RE.sub('""', body)
    spaced = bool(re.search(r"[,:] ", tokens))
    return JsonStyle(spaced=spaced, trailing_newline=trailing_newline, newline=newline)


def decode_json(text: str) -> tuple[Any, JsonStyle]:
    """Parse JSON text. Raises ``ValueError`` for malformed documents."""
    data = json.loads(text)
    return data, detect_json_style(text)


def encode_json(data: Any, style: JsonStyle) -> str:
    if style.indent is not None:
        out = json.dumps(data, indent=style.indent, ensure_ascii=False)
    elif style.spaced:
        out = json.dumps(data, ensure_ascii=False)
    else:
        out = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    if style.trailing_newline:
        out += "\n"
    # json.dumps escapes newlines inside strings, so every raw "\n" is a line break
    return out.replace("\n", style.newline) if style.newline != "\n" else out
