# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for top-level statement validation and the pure-value predicate."""

import json

import pytest

from emlib.compiler.errors import ImpureInitializerError, UnsupportedStatementError
from emlib.compiler.validation import is_pure_value, validate_program
from emlib.config.model import ImpureInitializerPolicy
from emlib.model.nodes import Expression, VariableDeclaration
from emlib.parser.parser import parse

# ###############
# Test Helpers
# ###############


def _init(source: str) -> Expression:
    """Return the initializer of ``var x = <source>;``."""
    stmt = parse(f"var x = {source};").body[0]
    assert isinstance(stmt, VariableDeclaration)
    init = stmt.declarations[0].init
    assert init is not None
    return init


# ###############
# Pure Values
# ###############


class TestIsPureValue:
    @pytest.mark.parametrize(
        "source",
        [
            "1",
            "'text'",
            "true",
            "null",
            "this",
            "function () { sideEffect(); }",
            "function named() {}",
            "-1",
            "!true",
            "void 0",
            "typeof this",
            "10 + 20 - ~30",
            "1 + 2 * 3",
            "true && false",
            "null ?? 1",
            "[1, [2, 3]]",
            "[1, , 2]",
            "[]",
            "{ a: 1, b: { c: 2 } }",
            "{ 'k': function () {} }",
            "{ ['k' + 1]: 1 }",
            "{ m() { return g(); } }",
            "{}",
        ],
    )
    def test_pure(self, source: str) -> None:
        assert is_pure_value(_init(source))

    @pytest.mark.parametrize(
        "source",
        [
            "f()",
            "new ArrayBuffer(10)",
            "a",
            "a.b",
            "this.x",
            "() => 1",
            "a = 1",
            "true ? 1 : 2",
            "(1, 2)",
            "[f()]",
            "[a]",
            "{ a: f() }",
            "{ a }",
            "{ [k]: 1 }",
            "1 + f()",
            "-f()",
            "typeof undefinedName",
            "delete o.p",
        ],
    )
    def test_impure(self, source: str) -> None:
        assert not is_pure_value(_init(source))

    def test_missing_initializer_is_pure(self) -> None:
        assert is_pure_value(None)


# ###############
# Top-Level Statements
# ###############


class TestValidateProgram:
    def test_declarations_are_accepted(self) -> None:
        source = """
            function f() { sideEffect(); }
            var a = 1, b;
            let c = [1];
            export function g() {}
            export var d = 2;
            export { f as h };
        """
        validate_program(parse(source))

    def test_empty_module_is_accepted(self) -> None:
        validate_program(parse(""))

    @pytest.mark.parametrize(
        "source",
        [
            "sideEffect();",
            "if (a) {}",
            "for (;;) {}",
            "while (a) {}",
            "{ var a = 1; }",
            "try {} finally {}",
            ";",
            "import { a } from './a';",
            "export { a } from './a';",
        ],
    )
    def test_other_statements_are_rejected(self, source: str) -> None:
        program = parse(source)
        with pytest.raises(UnsupportedStatementError) as exc_info:
            validate_program(program)
        assert exc_info.value.node is program.body[0]

    def test_first_offending_statement_is_reported(self) -> None:
        program = parse("function f() {} first(); second();")
        with pytest.raises(UnsupportedStatementError) as exc_info:
            validate_program(program)
        assert exc_info.value.source == "first();"
        assert str(exc_info.value) == "Unsupported top-level statement: first();"

    def test_error_carries_tree_description(self) -> None:
        with pytest.raises(UnsupportedStatementError) as exc_info:
            validate_program(parse("sideEffect();"))
        description = json.loads(exc_info.value.description)
        assert description["kind"] == "expression_statement"
        assert description["expression"]["kind"] == "call"

    def test_impure_initializer_is_rejected(self) -> None:
        program = parse("var x = new ArrayBuffer(10);")
        with pytest.raises(ImpureInitializerError) as exc_info:
            validate_program(program)
        stmt = program.body[0]
        assert isinstance(stmt, VariableDeclaration)
        assert exc_info.value.node is stmt.declarations[0]
        assert str(exc_info.value) == "Initializer of 'x' is not a pure value: x = new ArrayBuffer(10)"

    def test_impure_exported_initializer_is_rejected(self) -> None:
        with pytest.raises(ImpureInitializerError, match="'x'"):
            validate_program(parse("export var x = getX();"))

    def test_impure_initializer_in_second_declarator(self) -> None:
        with pytest.raises(ImpureInitializerError, match="'b'"):
            validate_program(parse("var a = 1, b = a;"))

    def test_postset_policy_accepts_impure_initializers(self) -> None:
        validate_program(
            parse("var x = new ArrayBuffer(10);"),
            impure_initializers=ImpureInitializerPolicy.POSTSET,
        )

    def test_program_is_not_modified(self) -> None:
        program = parse("export function f() {} var a = 1;")
        before = program.model_dump()
        validate_program(program)
        assert program.model_dump() == before
