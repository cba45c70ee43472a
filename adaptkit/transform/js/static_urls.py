"""Routes static asset URLs in bundles through the adapt runtime.

Bundlers bake asset URLs in as ``__webpack_require__.p + "static/media/x.png"``,
which only works when the app is served from its own origin root. Once assets
live under the shared page's context path the URL has to be computed at run
time, so these references are replaced with a call into the adapt runtime.
"""

from __future__ import annotations

import json

from tree_sitter import Node

from adaptkit.files import matches_any
from adaptkit.transform.js.syntax import Edit, ParsedSource, apply_edits, iter_nodes, parse_source, string_value
from adaptkit.transform.pipeline import Transform, TransformContext

ADAPT_RUNTIME_MODULE = "adapt-rt"

# parent type -> field holding a value the string may be replaced in; None
# means any named child of the parent is a value
_VALUE_FIELDS: dict[str, str | None] = {
    "variable_declarator": "value",
    "assignment_expression": "right",
    "pair": "value",
    "return_statement": None,
    "array": None,
    "arguments": None,
}
_TERNARY_BRANCHES = ("consequence", "alternative")


def _public_path_concat(parsed: ParsedSource, string_node: Node) -> Node | None:
    """The enclosing ``__webpack_require__.p + "..."`` expression, if any."""
    parent = string_node.parent
    if parent is None or parent.type != "binary_expression":
        return None
    operator = parent.child_by_field_name("operator")
    right = parent.child_by_field_name("right")
    left = parent.child_by_field_name("left")
    if operator is None or parsed.text(operator) != "+" or right is None or right.id != string_node.id:
        return None
    if left is not None and left.type == "member_expression" and parsed.text(left).endswith(".p"):
        return parent
    return None


def _is_field(parent: Node, field: str, node: Node) -> bool:
    child = parent.child_by_field_name(field)
    return child is not None and child.id == node.id


def _in_value_position(parsed: ParsedSource, node: Node) -> bool:
    """True where an expression may stand in for the string.

    Object keys, import sources, comparison operands and the like are not
    value positions: replacing them breaks the syntax or changes meaning.
    """
    parent = node.parent
    if parent is None:
        return False
    if parent.type == "ternary_expression":
        return any(_is_field(parent, branch, node) for branch in _TERNARY_BRANCHES)
    if parent.type not in _VALUE_FIELDS:
        return False
    field = _VALUE_FIELDS[parent.type]
    if field is not None:
        return _is_field(parent, field, node)
    if parent.type == "arguments":
        # require("x.png") names a module, not a URL
        call = parent.parent
        callee = call.child_by_field_name("function") if call is not None else None
        return callee is None or parsed.text(callee) not in ("require", "import")
    return True


class AdaptStaticUrlsAtRuntime(Transform):
    """Replace string literals naming a matched static asset with a runtime lookup.

    Only ``<public path> + "..."`` concatenations and strings used as values
    are replaced; keys and comparison operands are left as they are.
    """

    def __init__(self, asset_globs: list[str], runtime_module: str = ADAPT_RUNTIME_MODULE) -> None:
        self.asset_globs = list(asset_globs)
        self.runtime_module = runtime_module

    def apply(self, content: str, context: TransformContext) -> str:
        parsed = parse_source(content)
        runtime_id = f"{context.module_prefix}/{self.runtime_module}"

        edits: list[Edit] = []
        for node in iter_nodes(parsed.root):
            if node.type != "string":
                continue
            value = string_value(parsed, node)
            if not value or not matches_any(value.lstrip("/"), self.asset_globs):
                continue
            target = _public_path_concat(parsed, node)
            if target is None:
                if not _in_value_position(parsed, node):
                    continue
                target = node
            replacement = (
                f"require({json.dumps(runtime_id)}).adaptStaticURL({json.dumps(value.lstrip('/'))})"
            )
            edits.append(Edit(target.start_byte, target.end_byte, replacement))

        if not edits:
            return content
        return apply_edits(parsed, edits)
