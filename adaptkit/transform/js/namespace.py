"""Renames the bundler runtime global so independently built bundles don't share it.

Webpack's generated runtime registers chunks through one global array
(``window["webpackJsonp"]`` in webpack 4, ``self["webpackChunk<name>"]`` in
webpack 5, a global ``webpackJsonp`` function in webpack 3). Two bundles
loaded into the same page would otherwise overwrite each other's registry.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tree_sitter import Node

from adaptkit.transform.js.syntax import (
    Edit,
    ParsedSource,
    apply_edits,
    is_function,
    iter_nodes,
    parse_source,
    statement_expression,
    string_value,
    top_level_statements,
    unwrap_expression,
)
from adaptkit.transform.pipeline import Transform, TransformContext

DEFAULT_RUNTIME_GLOBALS = r"webpackJsonp|webpackChunk[\w$]*"

_UNSAFE_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_$]")


@dataclass(frozen=True)
class BindingSite:
    """Byte range of one occurrence of the runtime global's name."""

    start: int
    end: int
    name: str


@runtime_checkable
class RuntimeGlobalMatcher(Protocol):
    """Finds where a bundler runtime binds its global registry.

    This is the extension point for bundler runtimes other than webpack's:
    implement ``find_sites`` and pass the matcher to NamespaceRuntimeGlobal.
    """

    def find_sites(self, parsed: ParsedSource) -> list[BindingSite]: ...


class WebpackRuntimeMatcher:
    """Matches webpack 3/4/5 runtime preamble binding sites.

    Only top-level statements shaped like bundler output are inspected:
    bootstrap IIFEs, ``var lib = (function(modules){...})(...)``, chunk
    ``(...).push([...])`` registrations and webpack 3 ``webpackJsonp(...)``
    calls. Anything else (for instance code already wrapped in a module
    definition) is left alone.
    """

    GLOBAL_OBJECTS = frozenset({"window", "self", "globalThis"})

    def __init__(self, names: str = DEFAULT_RUNTIME_GLOBALS) -> None:
        self.names = re.compile(names)

    def find_sites(self, parsed: ParsedSource) -> list[BindingSite]:
        sites: list[BindingSite] = []
        for statement in top_level_statements(parsed):
            if not self._is_runtime_statement(parsed, statement):
                continue
            callee = self._bare_call_callee(parsed, statement)
            if callee is not None:
                sites.append(BindingSite(callee.start_byte, callee.end_byte, parsed.text(callee)))
            for node in iter_nodes(statement):
                site = self._site(parsed, node)
                if site is not None:
                    sites.append(site)
        return sites

    # -- statement shapes ---------------------------------------------------

    def _is_runtime_statement(self, parsed: ParsedSource, statement: Node) -> bool:
        if statement.type in ("variable_declaration", "lexical_declaration"):
            return any(
                self._is_iife(declarator.child_by_field_name("value"))
                for declarator in statement.named_children
                if declarator.type == "variable_declarator"
            )
        expression = statement_expression(statement)
        if expression is None or expression.type != "call_expression":
            return False
        if self._is_iife(expression):
            return True
        callee = unwrap_expression(expression.child_by_field_name("function"))
        if callee is None:
            return False
        if callee.type == "member_expression":
            prop = callee.child_by_field_name("property")
            return prop is not None and parsed.text(prop) == "push"
        return self._bare_call_callee(parsed, statement) is not None

    def _is_iife(self, node: Node | None) -> bool:
        node = unwrap_expression(node)
        if node is None or node.type != "call_expression":
            return False
        callee = unwrap_expression(node.child_by_field_name("function"))
        if is_function(callee):
            return True
        # (function(){ ... }).call(this)
        if callee is not None and callee.type == "member_expression":
            target = unwrap_expression(callee.child_by_field_name("object"))
            return is_function(target)
        return False

    def _bare_call_callee(self, parsed: ParsedSource, statement: Node) -> Node | None:
        expression = statement_expression(statement)
        if expression is None or expression.type != "call_expression":
            return None
        callee = expression.child_by_field_name("function")
        if callee is not None and callee.type == "identifier" and self.names.fullmatch(parsed.text(callee)):
            return callee
        return None

    # -- binding sites --------------------------------------------------------

    def _is_global_object(self, parsed: ParsedSource, node: Node | None) -> bool:
        if node is None:
            return False
        if node.type == "this":
            return True
        return node.type == "identifier" and parsed.text(node) in self.GLOBAL_OBJECTS

    def _site(self, parsed: ParsedSource, node: Node) -> BindingSite | None:
        if node.type == "subscript_expression":
            if not self._is_global_object(parsed, node.child_by_field_name("object")):
                return None
            index = node.child_by_field_name("index")
            value = string_value(parsed, index) if index is not None else None
            if value is None or not self.names.fullmatch(value):
                return None
            return BindingSite(index.start_byte + 1, index.end_byte - 1, value)
        if node.type == "member_expression":
            if not self._is_global_object(parsed, node.child_by_field_name("object")):
                return None
            prop = node.child_by_field_name("property")
            if prop is None or not self.names.fullmatch(parsed.text(prop)):
                return None
            return BindingSite(prop.start_byte, prop.end_byte, parsed.text(prop))
        return None


def namespaced_global(name: str, module_prefix: str) -> str:
    """``webpackJsonp`` + ``acme-widget@1.2.0`` -> ``webpackJsonp_acme_widget_1_2_0``"""
    return f"{name}_{_UNSAFE_IDENTIFIER_CHARS.sub('_', module_prefix)}"


class NamespaceRuntimeGlobal(Transform):
    """Rename the runtime global to one derived from the bundle's package id.

    The name is derived from ``name@version`` rather than the full module id
    so every chunk file of one bundle keeps sharing a single registry.
    """

    def __init__(self, matcher: RuntimeGlobalMatcher | None = None) -> None:
        self.matcher = matcher or WebpackRuntimeMatcher()

    def apply(self, content: str, context: TransformContext) -> str:
        parsed = parse_source(content)
        sites = self.matcher.find_sites(parsed)
        if not sites:
            return content
        edits = {
            (site.start, site.end): Edit(site.start, site.end, namespaced_global(site.name, context.module_prefix))
            for site in sites
        }
        return apply_edits(parsed, list(edits.values()))
