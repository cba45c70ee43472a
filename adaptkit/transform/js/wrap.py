"""Wraps a source file in an AMD-style module definition keyed by its module id."""

from __future__ import annotations

import json

from adaptkit.transform.js.syntax import ParsedSource, iter_nodes, parse_source, string_value
from adaptkit.transform.pipeline import Transform, TransformContext

DEFAULT_DEFINE_FN = "Liferay.Loader.define"

_IMPLICIT_DEPENDENCIES = ("module", "exports", "require")


def required_modules(parsed: ParsedSource) -> list[str]:
    """Module names passed as a string literal to ``require(...)``, in source order."""
    found: list[str] = []
    for node in iter_nodes(parsed.root):
        if node.type != "call_expression":
            continue
        callee = node.child_by_field_name("function")
        if callee is None or callee.type != "identifier" or parsed.text(callee) != "require":
            continue
        arguments = node.child_by_field_name("arguments")
        if arguments is None or len(arguments.named_children) != 1:
            continue
        name = string_value(parsed, arguments.named_children[0])
        if name and name not in found and name not in _IMPLICIT_DEPENDENCIES:
            found.append(name)
    return found


class WrapModule(Transform):
    """Register the file with the page's module loader under a unique id.

    Must be the last stage of a chain: it only adds an envelope around
    whatever earlier stages produced.
    """

    def __init__(self, module_id: str | None = None, define_fn: str = DEFAULT_DEFINE_FN) -> None:
        self.module_id = module_id
        self.define_fn = define_fn

    def apply(self, content: str, context: TransformContext) -> str:
        parsed = parse_source(content)
        module_id = self.module_id or context.module_id
        dependencies = [*_IMPLICIT_DEPENDENCIES, *required_modules(parsed)]

        header = (
            f"{self.define_fn}({json.dumps(module_id)}, {json.dumps(dependencies)}, "
            "function(module, exports, require) {\n"
            "var define = undefined;\n"
        )
        return f"{header}{content.rstrip()}\n}});\n"
