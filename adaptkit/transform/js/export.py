"""Turns an auto-executing bundle into one that exports its entry as a factory."""

from __future__ import annotations

import re

from adaptkit.errors import TransformError
from adaptkit.transform.js.syntax import parse_source, top_level_statements
from adaptkit.transform.pipeline import Transform, TransformContext

_SOURCE_MAP_COMMENT = re.compile(r"\n?[ \t]*//[#@] sourceMappingURL=[^\n]*\s*\Z")


class ExportModuleAsFunction(Transform):
    """``<program>`` -> ``module.exports = function() { <program> };``

    Nothing in the bundle runs on evaluation; the hosting runtime calls the
    exported function when (and as many times as) it wants an instance. A
    trailing ``sourceMappingURL`` comment stays last so tooling still finds it.
    """

    def apply(self, content: str, context: TransformContext) -> str:
        parsed = parse_source(content)
        for statement in top_level_statements(parsed):
            if statement.type in ("import_statement", "export_statement"):
                row = statement.start_point[0] + 1
                raise TransformError(f"ES module {statement.type} on line {row} cannot be deferred")

        source_map = ""
        match = _SOURCE_MAP_COMMENT.search(content)
        if match:
            source_map = match.group(0).strip()
            content = content[: match.start()]

        body = content.rstrip()
        out = f"module.exports = function() {{\n{body}\n}};\n"
        if source_map:
            out += source_map + "\n"
        return out
