# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for dependency analysis."""

import pytest

from emlib.compiler.dependencies import DependencyGraph, analyze_dependencies
from emlib.compiler.errors import InternalConsistencyError
from emlib.compiler.exports import resolve_exports
from emlib.compiler.renamer import SymbolTable, rename_symbols
from emlib.compiler.scope import analyze_scopes
from emlib.config.model import TransformConfig
from emlib.parser.parser import parse

# ###############
# Test Helpers
# ###############


def _graph(source: str) -> DependencyGraph:
    program = parse(source)
    export_map = resolve_exports(program)
    analysis = analyze_scopes(program)
    table = rename_symbols(program, analysis, export_map, TransformConfig(local_prefix="t"))
    return analyze_dependencies(analysis, table)


# ###############
# Edges
# ###############


class TestEdges:
    def test_every_symbol_is_a_key_in_declaration_order(self) -> None:
        graph = _graph("function a() {} function b() {} export function c() {}")
        assert list(graph) == ["_t_a", "_t_b", "c"]
        assert all(deps == () for deps in graph.values())

    def test_edges_are_deduplicated_in_first_seen_order(self) -> None:
        graph = _graph("function a() {} function b() {} export function c() { b(); a(); b(); return a; }")
        assert graph["c"] == ("_t_b", "_t_a")

    def test_recursion_is_not_an_edge(self) -> None:
        graph = _graph("export function loop(n) { return n && loop(n - 1); }")
        assert graph == {"loop": ()}

    def test_mutual_recursion(self) -> None:
        source = "export function even(n) { return n ? odd(n - 1) : true; } function odd(n) { return even(n); }"
        graph = _graph(source)
        assert graph == {"even": ("_t_odd",), "_t_odd": ("even",)}

    def test_variable_initializer_edges(self) -> None:
        graph = _graph("function g() {} export var table = { fn: function () { return g(); } };")
        assert graph["table"] == ("_t_g",)

    def test_references_inside_nested_functions_count(self) -> None:
        source = "var a = 1; export function f() { function inner() { return a; } return inner; }"
        assert _graph(source)["f"] == ("_t_a",)

    def test_shadowed_names_are_not_edges(self) -> None:
        assert _graph("var a = 1; export function f(a) { return a; }")["f"] == ()

    def test_export_lists_are_not_edges(self) -> None:
        graph = _graph("var a = 1; function f() {} export { a, f };")
        assert graph == {"a": (), "f": ()}

    def test_edges_use_external_names(self) -> None:
        graph = _graph("var v = 1; function get() { return v; } export { v as value, get as read };")
        assert graph == {"value": (), "read": ("value",)}


class TestConsistency:
    def test_missing_symbol_is_an_internal_error(self) -> None:
        program = parse("var a = 1; function f() { return a; }")
        analysis = analyze_scopes(program)
        with pytest.raises(InternalConsistencyError, match="not in the symbol table"):
            analyze_dependencies(analysis, SymbolTable(()))
