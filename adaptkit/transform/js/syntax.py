"""Syntax-tree helpers for JavaScript source transforms.

Source transforms never rewrite text blindly: they parse with tree-sitter,
locate nodes, and splice byte-range edits back into the original text so
everything they do not touch (formatting, comments, string contents) is
preserved exactly.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Node, Parser, Tree

from adaptkit.errors import TransformError

JAVASCRIPT = Language(tsjs.language())

FUNCTION_TYPES = frozenset({"function", "function_expression", "arrow_function"})
_TRANSPARENT_UNARY = frozenset({"!", "void", "+", "-", "~"})


@dataclass(frozen=True)
class ParsedSource:
    tree: Tree
    data: bytes

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8")


@dataclass(frozen=True, order=True)
class Edit:
    """Replace bytes ``[start, end)`` of the source with ``text``."""

    start: int
    end: int
    text: str


def parse_source(source: str) -> ParsedSource:
    """Parse JavaScript, raising TransformError if it is not syntactically valid."""
    data = source.encode("utf-8")
    tree = Parser(JAVASCRIPT).parse(data)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        row, column = bad.start_point
        raise TransformError(f"syntax error at line {row + 1}, column {column + 1}")
    return ParsedSource(tree, data)


def _first_error(root: Node) -> Node:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return root


def apply_edits(parsed: ParsedSource, edits: list[Edit]) -> str:
    """Splice non-overlapping edits into the source and return the new text."""
    out: list[bytes] = []
    cursor = 0
    for edit in sorted(edits):
        if edit.start < cursor:
            raise TransformError(f"overlapping edits at byte {edit.start}")
        out.append(parsed.data[cursor : edit.start])
        out.append(edit.text.encode("utf-8"))
        cursor = edit.end
    out.append(parsed.data[cursor:])
    return b"".join(out).decode("utf-8")


def iter_nodes(node: Node) -> Iterator[Node]:
    """Depth-first, document order, without recursion (bundles nest deeply)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def top_level_statements(parsed: ParsedSource) -> list[Node]:
    return [n for n in parsed.root.named_children if n.type not in ("comment", "hash_bang_line")]


def unwrap_expression(node: Node | None) -> Node | None:
    """Strip parentheses and value-discarding unary operators: ``!(function(){})()``."""
    while node is not None:
        if node.type == "parenthesized_expression":
            node = node.named_children[0] if node.named_children else None
        elif node.type == "unary_expression":
            operator = node.child_by_field_name("operator")
            if operator is None or operator.type not in _TRANSPARENT_UNARY:
                return node
            node = node.child_by_field_name("argument")
        else:
            return node
    return None


def statement_expression(statement: Node) -> Node | None:
    if statement.type != "expression_statement":
        return None
    return unwrap_expression(statement.named_children[0] if statement.named_children else None)


def string_value(parsed: ParsedSource, node: Node) -> str | None:
    """The literal value of a simple string node, or None for anything else."""
    if node.type != "string":
        return None
    raw = parsed.text(node)
    if len(raw) < 2 or "\\" in raw:
        return None
    return raw[1:-1]


def is_function(node: Node | None) -> bool:
    return node is not None and node.type in FUNCTION_TYPES
