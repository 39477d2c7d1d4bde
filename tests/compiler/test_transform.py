# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for the library pass."""

import re

import pytest

from emlib.codegen.printer import print_program
from emlib.compiler.errors import (
    ImpureInitializerError,
    InternalConsistencyError,
    NameCollisionError,
    TransformError,
    UnresolvedExportError,
    UnsupportedStatementError,
)
from emlib.compiler.renamer import Visibility
from emlib.compiler.scope import SymbolKind
from emlib.compiler.transform import TransformResult, transform
from emlib.config.model import ImpureInitializerPolicy, ReferenceStyle, TransformConfig
from emlib.model.nodes import ExpressionStatement
from emlib.parser.parser import parse

# ###############
# Test Helpers
# ###############


def _transform(source: str, **options: object) -> TransformResult:
    return transform(parse(source), TransformConfig(**options))


def _compile(source: str, **options: object) -> str:
    """Run the pass on *source* and return the printed descriptor."""
    return print_program(_transform(source, **options).program)


def _descriptor(*entries: str) -> str:
    """Build the expected descriptor text from pre-indented entries."""
    if not entries:
        return "Object.assign(LibraryManager.library, {});\n"
    return "Object.assign(LibraryManager.library, {\n" + ",\n".join(entries) + "\n});\n"


# ###############
# Reference Scenarios
# ###############


class TestScenarios:
    def test_local_function_referenced_by_exported_one(self) -> None:
        code = _compile("function x(){} export function y(){ return x(); }", local_prefix="test")
        assert code == _descriptor(
            "    _test_x: function () {}",
            "    y: function () {\n        return _test_x();\n    }",
            "    y__deps: ['_test_x']",
        )

    def test_exported_function_referenced_by_another_one(self) -> None:
        code = _compile("export function x(){} export function y(){ return x(); }", local_prefix="test")
        assert code == _descriptor(
            "    x: function () {}",
            "    y: function () {\n        return x();\n    }",
            "    y__deps: ['x']",
        )

    def test_pure_local_variable_used_by_exported_function(self) -> None:
        code = _compile("var x = 10 + 20 - ~30; export function getX(){ return x; }", local_prefix="test")
        assert code == _descriptor(
            "    _test_x: 10 + 20 - ~30",
            "    getX: function () {\n        return _test_x;\n    }",
            "    getX__deps: ['_test_x']",
        )

    def test_impure_local_variable_is_rejected(self) -> None:
        with pytest.raises(ImpureInitializerError) as exc_info:
            _compile("var x = new ArrayBuffer(10); export function getX(){ return x; }", local_prefix="test")
        assert "x = new ArrayBuffer(10)" in str(exc_info.value)

    def test_top_level_call_is_rejected(self) -> None:
        with pytest.raises(UnsupportedStatementError) as exc_info:
            _compile("sideEffect();")
        assert isinstance(exc_info.value.node, ExpressionStatement)
        assert "sideEffect();" in str(exc_info.value)

    def test_exported_variable_with_call_initializer_is_rejected(self) -> None:
        with pytest.raises(ImpureInitializerError):
            _compile("export var x = getX(); function getX() { return 42; }", local_prefix="test")

    def test_exporting_with_custom_names(self) -> None:
        source = """
            var localVar = 10;

            function localFunc() {}

            export {
                localVar as exportedVar,
                localFunc as exportedFunc
            };
        """
        assert _compile(source, local_prefix="test") == _descriptor(
            "    exportedVar: 10",
            "    exportedFunc: function () {}",
        )


# ###############
# Pass Properties
# ###############


class TestProperties:
    def test_empty_module_produces_empty_descriptor(self) -> None:
        assert _compile("") == _descriptor()

    def test_one_entry_per_symbol(self) -> None:
        result = _transform("var a = 1, b = [2]; function f() { return a + b; } export { f };", local_prefix="p")
        keys = re.findall(r"^    (\S+):", print_program(result.program), re.MULTILINE)
        assert keys == ["_p_a", "_p_b", "f", "f__deps"]
        assert len(result.symbols) == 3

    def test_different_prefixes_never_collide(self) -> None:
        source = "function helper() {} export function api() { return helper(); }"
        first = _transform(source, local_prefix="liba")
        second = _transform(source, local_prefix="libb")
        private_first = {s.external_name for s in first.symbols if s.visibility is Visibility.PRIVATE}
        private_second = {s.external_name for s in second.symbols if s.visibility is Visibility.PRIVATE}
        assert private_first == {"_liba_helper"}
        assert private_second == {"_libb_helper"}
        assert private_first.isdisjoint(private_second)

    def test_private_names_do_not_survive_unprefixed(self) -> None:
        source = """
            var counter = 0;
            function helper(n) { return n + counter; }
            export function api(x) {
                var inner = function () { return helper(x) + counter; };
                return inner();
            }
        """
        code = _compile(source, local_prefix="lib")
        for name in ("counter", "helper"):
            assert re.search(rf"(?<![\w$]){name}(?![\w$])", code) is None
        assert "_lib_counter" in code
        assert "_lib_helper" in code

    def test_dependency_lists_name_each_target_once(self) -> None:
        source = "function a() {} function b() {} export function c() { a(); b(); a(); return b; }"
        result = _transform(source, local_prefix="t")
        assert result.dependencies["c"] == ("_t_a", "_t_b")
        assert "    c__deps: ['_t_a', '_t_b']" in print_program(result.program)

    def test_recursive_function_has_no_self_edge(self) -> None:
        result = _transform("export function fact(n) { return n ? n * fact(n - 1) : 1; }")
        assert result.dependencies == {"fact": ()}
        code = print_program(result.program)
        assert "__deps" not in code
        assert "return n ? n * fact(n - 1) : 1;" in code

    def test_default_prefix(self) -> None:
        assert _compile("var a = 1;") == _descriptor("    _unnamed_a: 1")

    def test_shadowing_parameter_is_not_renamed(self) -> None:
        code = _compile("var x = 1; export function f(x) { return x; }", local_prefix="t")
        assert "    f: function (x) {\n        return x;\n    }" in code
        assert "f__deps" not in code

    def test_variable_without_initializer(self) -> None:
        assert _compile("export var ready;") == _descriptor("    ready: void 0")

    def test_symbol_table(self) -> None:
        result = _transform("var v = 1; export function f() { return v; }", local_prefix="t")
        assert [(s.internal_name, s.external_name, s.visibility, s.kind) for s in result.symbols] == [
            ("v", "_t_v", Visibility.PRIVATE, SymbolKind.VALUE),
            ("f", "f", Visibility.PUBLIC, SymbolKind.FUNCTION),
        ]

    def test_default_config_is_used_when_omitted(self) -> None:
        result = transform(parse("function g() {}"))
        assert result.symbols.get("g") is not None
        assert result.dependencies == {"_unnamed_g": ()}


# ###############
# Failures
# ###############


class TestFailures:
    def test_user_errors_share_a_base_class(self) -> None:
        for error in (UnsupportedStatementError, ImpureInitializerError, NameCollisionError, UnresolvedExportError):
            assert issubclass(error, TransformError)

    def test_internal_errors_are_a_separate_category(self) -> None:
        assert not issubclass(InternalConsistencyError, TransformError)

    def test_import_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedStatementError):
            _compile("import { a } from './a';")

    def test_export_from_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedStatementError):
            _compile("export { a } from './a';")

    def test_unresolved_export(self) -> None:
        with pytest.raises(UnresolvedExportError, match="'missing'"):
            _compile("export { missing };")

    def test_duplicate_declaration(self) -> None:
        with pytest.raises(NameCollisionError, match="declared 2 times"):
            _compile("var a = 1; function a() {}")

    def test_captured_reference(self) -> None:
        source = "var a = 1; export function f() { var _t_a = 2; return a + _t_a; }"
        with pytest.raises(NameCollisionError, match="captured"):
            _compile(source, local_prefix="t")


# ###############
# Reference Styles and Postsets
# ###############


class TestReferenceStyles:
    def test_emscripten_style(self) -> None:
        code = _compile(
            "function x(){} export function y(){ return x(); }",
            local_prefix="test",
            reference_style=ReferenceStyle.EMSCRIPTEN,
        )
        assert code == _descriptor(
            "    $test_x: function () {}",
            "    y: function () {\n        return test_x();\n    }",
            "    y__deps: ['$test_x']",
        )

    def test_emscripten_style_exported_reference(self) -> None:
        code = _compile(
            "export function x(){} export function y(){ return x(); }",
            reference_style=ReferenceStyle.EMSCRIPTEN,
        )
        assert "        return _x();" in code
        assert "    y__deps: ['x']" in code

    def test_emscripten_style_alias_reference(self) -> None:
        code = _compile(
            "var v = 1; function get() { return v; } export { v as value, get };",
            reference_style=ReferenceStyle.EMSCRIPTEN,
        )
        assert code == _descriptor(
            "    value: 1",
            "    get: function () {\n        return _value;\n    }",
            "    get__deps: ['value']",
        )


class TestPostset:
    def test_impure_initializer_becomes_postset(self) -> None:
        code = _compile(
            "export var x = getX(); function getX() { return 42; }",
            local_prefix="test",
            impure_initializers=ImpureInitializerPolicy.POSTSET,
        )
        assert code == _descriptor(
            "    x: void 0",
            "    x__postset: 'x = _test_getX()'",
            "    _test_getX: function () {\n        return 42;\n    }",
            "    x__deps: ['_test_getX']",
        )

    def test_postset_with_emscripten_style(self) -> None:
        code = _compile(
            "export var x = getX(); function getX() { return 42; }",
            local_prefix="test",
            reference_style=ReferenceStyle.EMSCRIPTEN,
            impure_initializers=ImpureInitializerPolicy.POSTSET,
        )
        assert code == _descriptor(
            "    x: void 0",
            "    x__postset: '_x = test_getX()'",
            "    $test_getX: function () {\n        return 42;\n    }",
            "    x__deps: ['$test_getX']",
        )

    def test_pure_initializers_are_unaffected(self) -> None:
        code = _compile("var a = 1;", local_prefix="t", impure_initializers=ImpureInitializerPolicy.POSTSET)
        assert code == _descriptor("    _t_a: 1")

    def test_statements_are_still_rejected(self) -> None:
        with pytest.raises(UnsupportedStatementError):
            _compile("sideEffect();", impure_initializers=ImpureInitializerPolicy.POSTSET)
