# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Static scope analysis for a single module.

:func:`analyze_scopes` walks the tree once and returns an immutable record of
the module-level symbols and of every identifier that refers to one of them.
Nothing in the tree is modified; renaming is a separate step that consumes
the analysis.

Modelled scopes:

- the module scope: top-level functions, variables (including ``var``
  declarations nested in top-level blocks and loops), and import bindings;
- function scopes: parameters, ``arguments`` (not for arrow functions), the
  name of a named function expression, hoisted ``var`` declarations, and
  function and ``let``/``const`` declarations of the body;
- block scopes: ``let``/``const`` and function declarations of a block or
  switch body, the ``let``/``const`` head of a ``for`` loop, and catch
  parameters.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import assert_never

from emlib.model.nodes import (
    ArrayExpression,
    ArrowFunctionExpression,
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    CallExpression,
    ConditionalExpression,
    ContinueStatement,
    DoWhileStatement,
    EmptyStatement,
    ExportNamedDeclaration,
    Expression,
    ExpressionStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    ImportDeclaration,
    ImportSpecifier,
    LiteralExpression,
    LogicalExpression,
    MemberExpression,
    NewExpression,
    ObjectExpression,
    Program,
    ReturnStatement,
    SequenceExpression,
    Statement,
    SwitchStatement,
    ThisExpression,
    ThrowStatement,
    TryStatement,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class SymbolKind(enum.Enum):
    """What introduced a module-level binding."""

    FUNCTION = "function"
    VALUE = "value"
    IMPORT = "import"


@dataclass(frozen=True)
class ModuleSymbol:
    """A name declared directly in the module scope.

    Attributes:
        name: The declared name.
        kind: The first declaration's kind.
        declarations: Every declaring node, in source order.  More than one
            entry means the name is declared repeatedly.
        identifiers: The definition-site identifiers, one per declaration.
    """

    name: str
    kind: SymbolKind
    declarations: tuple[FunctionDeclaration | VariableDeclarator | ImportSpecifier, ...]
    identifiers: tuple[Identifier, ...]


@dataclass(frozen=True)
class Reference:
    """A use-site identifier that resolves to a module symbol.

    Attributes:
        identifier: The identifier node in the tree.
        symbol: Name of the module symbol it resolves to.
        owner: Name of the top-level declaration whose code contains the
            reference, or None for references outside any declaration.
        shadowed: Names bound by the inner scopes enclosing the reference.
            Renaming the symbol to one of these would capture the reference.
    """

    identifier: Identifier
    symbol: str
    owner: str | None
    shadowed: frozenset[str]


@dataclass(frozen=True)
class ScopeAnalysis:
    """Result of :func:`analyze_scopes`.

    Attributes:
        symbols: Module symbols in declaration order.
        references: Use-site references to module symbols in source order.
        globals: Sorted names referenced but declared nowhere in the module.
    """

    symbols: tuple[ModuleSymbol, ...]
    references: tuple[Reference, ...]
    globals: tuple[str, ...]

    def symbol(self, name: str) -> ModuleSymbol | None:
        """Return the module symbol called *name*, if declared."""
        for symbol in self.symbols:
            if symbol.name == name:
                return symbol
        return None

    def references_to(self, name: str) -> list[Reference]:
        return [ref for ref in self.references if ref.symbol == name]


def analyze_scopes(program: Program) -> ScopeAnalysis:
    """Resolve every identifier of *program* against its lexical scopes.

    Args:
        program: A parsed module.  It is not modified.

    Returns:
        The module symbols, the references to them, and the free names.
    """
    analysis = _ScopeWalker(program).run()
    logger.debug(
        "Scope analysis found %d module symbols, %d references, %d globals",
        len(analysis.symbols),
        len(analysis.references),
        len(analysis.globals),
    )
    return analysis


# ################
# Implementation
# ################


class _Scope:
    """A lexical scope: the names it binds and its enclosing scope."""

    def __init__(self, parent: _Scope | None, names: Iterable[str] = ()) -> None:
        self.parent = parent
        self.names: set[str] = set(names)


class _SymbolBuilder:
    def __init__(self, name: str, kind: SymbolKind) -> None:
        self.name = name
        self.kind = kind
        self.declarations: list[FunctionDeclaration | VariableDeclarator | ImportSpecifier] = []
        self.identifiers: list[Identifier] = []

    def build(self) -> ModuleSymbol:
        return ModuleSymbol(
            name=self.name,
            kind=self.kind,
            declarations=tuple(self.declarations),
            identifiers=tuple(self.identifiers),
        )


class _ScopeWalker:
    """Single-use walker that collects module symbols and references."""

    def __init__(self, program: Program) -> None:
        self._program = program
        self._symbols: dict[str, _SymbolBuilder] = {}
        self._references: list[Reference] = []
        self._globals: set[str] = set()
        self._owner: str | None = None
        self._module = _Scope(None)

    def run(self) -> ScopeAnalysis:
        self._collect_module_symbols()
        self._module.names.update(self._symbols)

        for stmt in self._program.body:
            self._visit_module_item(stmt)

        return ScopeAnalysis(
            symbols=tuple(builder.build() for builder in self._symbols.values()),
            references=tuple(self._references),
            globals=tuple(sorted(self._globals)),
        )

    # ------------------------------------------------------------------
    # Module scope
    # ------------------------------------------------------------------

    def _declare(
        self,
        name: str,
        kind: SymbolKind,
        declaration: FunctionDeclaration | VariableDeclarator | ImportSpecifier,
        identifier: Identifier,
    ) -> None:
        builder = self._symbols.get(name)
        if builder is None:
            builder = self._symbols[name] = _SymbolBuilder(name, kind)
        builder.declarations.append(declaration)
        builder.identifiers.append(identifier)

    def _collect_module_symbols(self) -> None:
        for stmt in self._program.body:
            if isinstance(stmt, ExportNamedDeclaration) and stmt.declaration is not None:
                stmt = stmt.declaration
            if isinstance(stmt, FunctionDeclaration):
                self._declare(stmt.id.name, SymbolKind.FUNCTION, stmt, stmt.id)
            elif isinstance(stmt, VariableDeclaration):
                for declarator in stmt.declarations:
                    self._declare(declarator.id.name, SymbolKind.VALUE, declarator, declarator.id)
            elif isinstance(stmt, ImportDeclaration):
                for spec in stmt.specifiers:
                    self._declare(spec.local.name, SymbolKind.IMPORT, spec, spec.local)
            else:
                for declarator in _hoisted_var_declarators([stmt]):
                    self._declare(declarator.id.name, SymbolKind.VALUE, declarator, declarator.id)

    def _visit_module_item(self, stmt: Statement) -> None:
        if isinstance(stmt, ExportNamedDeclaration):
            if stmt.declaration is not None:
                self._visit_module_item(stmt.declaration)
            elif stmt.source is None:
                self._owner = None
                for spec in stmt.specifiers:
                    self._reference(spec.local, self._module)
            return
        if isinstance(stmt, FunctionDeclaration):
            self._owner = stmt.id.name
            self._visit_function(stmt.params, stmt.body, self._module, self_name=None, arrow=False)
        elif isinstance(stmt, VariableDeclaration):
            for declarator in stmt.declarations:
                self._owner = declarator.id.name
                if declarator.init is not None:
                    self._visit_expression(declarator.init, self._module)
        else:
            self._owner = None
            self._visit_statement(stmt, self._module)
        self._owner = None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _reference(self, identifier: Identifier, scope: _Scope) -> None:
        """Resolve *identifier* from *scope* outwards and record the outcome."""
        name = identifier.name
        shadowed: set[str] = set()
        current: _Scope | None = scope
        while current is not None:
            if name in current.names:
                if current is self._module:
                    self._references.append(Reference(identifier, name, self._owner, frozenset(shadowed)))
                return
            shadowed.update(current.names)
            current = current.parent
        self._globals.add(name)

    # ------------------------------------------------------------------
    # Scope construction
    # ------------------------------------------------------------------

    def _visit_function(
        self,
        params: list[Identifier],
        body: BlockStatement | Expression,
        scope: _Scope,
        *,
        self_name: str | None,
        arrow: bool,
    ) -> None:
        fn_scope = _Scope(scope, (p.name for p in params))
        if self_name is not None:
            fn_scope.names.add(self_name)
        if not arrow:
            fn_scope.names.add("arguments")
        if not isinstance(body, BlockStatement):
            self._visit_expression(body, fn_scope)
            return
        fn_scope.names.update(d.id.name for d in _hoisted_var_declarators(body.body))
        fn_scope.names.update(_lexical_names(body.body))
        # The body block shares the function scope.
        for stmt in body.body:
            self._visit_statement(stmt, fn_scope)

    def _visit_block(self, statements: list[Statement], scope: _Scope) -> None:
        block_scope = _Scope(scope, _lexical_names(statements))
        for stmt in statements:
            self._visit_statement(stmt, block_scope)

    def _loop_head_scope(self, head: VariableDeclaration | Expression | None, scope: _Scope) -> _Scope:
        if isinstance(head, VariableDeclaration) and head.declaration_kind != "var":
            return _Scope(scope, (d.id.name for d in head.declarations))
        return scope

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _visit_statement(self, stmt: Statement, scope: _Scope) -> None:
        if isinstance(stmt, FunctionDeclaration):
            # The name is bound by the enclosing scope.
            self._visit_function(stmt.params, stmt.body, scope, self_name=None, arrow=False)
        elif isinstance(stmt, VariableDeclaration):
            self._visit_declarators(stmt, scope)
        elif isinstance(stmt, ExportNamedDeclaration | ImportDeclaration):
            # Only reachable at the top level, which _visit_module_item handles.
            return
        elif isinstance(stmt, ExpressionStatement):
            self._visit_expression(stmt.expression, scope)
        elif isinstance(stmt, BlockStatement):
            self._visit_block(stmt.body, scope)
        elif isinstance(stmt, ReturnStatement | ThrowStatement):
            if stmt.argument is not None:
                self._visit_expression(stmt.argument, scope)
        elif isinstance(stmt, IfStatement):
            self._visit_expression(stmt.test, scope)
            self._visit_statement(stmt.consequent, scope)
            if stmt.alternate is not None:
                self._visit_statement(stmt.alternate, scope)
        elif isinstance(stmt, ForStatement):
            head = self._loop_head_scope(stmt.init, scope)
            if isinstance(stmt.init, VariableDeclaration):
                self._visit_declarators(stmt.init, head)
            elif stmt.init is not None:
                self._visit_expression(stmt.init, head)
            for expr in (stmt.test, stmt.update):
                if expr is not None:
                    self._visit_expression(expr, head)
            self._visit_statement(stmt.body, head)
        elif isinstance(stmt, ForInStatement | ForOfStatement):
            head = self._loop_head_scope(stmt.left, scope)
            if isinstance(stmt.left, VariableDeclaration):
                self._visit_declarators(stmt.left, head)
            else:
                self._visit_expression(stmt.left, head)
            self._visit_expression(stmt.right, head)
            self._visit_statement(stmt.body, head)
        elif isinstance(stmt, WhileStatement | DoWhileStatement):
            self._visit_expression(stmt.test, scope)
            self._visit_statement(stmt.body, scope)
        elif isinstance(stmt, TryStatement):
            self._visit_block(stmt.block.body, scope)
            if stmt.handler is not None:
                params = [stmt.handler.param.name] if stmt.handler.param is not None else []
                self._visit_block(stmt.handler.body.body, _Scope(scope, params))
            if stmt.finalizer is not None:
                self._visit_block(stmt.finalizer.body, scope)
        elif isinstance(stmt, SwitchStatement):
            self._visit_expression(stmt.discriminant, scope)
            case_scope = _Scope(scope, _lexical_names(s for case in stmt.cases for s in case.consequent))
            for case in stmt.cases:
                if case.test is not None:
                    self._visit_expression(case.test, case_scope)
                for s in case.consequent:
                    self._visit_statement(s, case_scope)
        elif isinstance(stmt, BreakStatement | ContinueStatement | EmptyStatement):
            return
        else:
            assert_never(stmt)

    def _visit_declarators(self, declaration: VariableDeclaration, scope: _Scope) -> None:
        # Declarator names were bound when their scope was built.
        for declarator in declaration.declarations:
            if declarator.init is not None:
                self._visit_expression(declarator.init, scope)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _visit_expression(self, expr: Expression, scope: _Scope) -> None:
        if isinstance(expr, Identifier):
            self._reference(expr, scope)
        elif isinstance(expr, LiteralExpression | ThisExpression):
            return
        elif isinstance(expr, ArrayExpression):
            for element in expr.elements:
                if element is not None:
                    self._visit_expression(element, scope)
        elif isinstance(expr, ObjectExpression):
            for prop in expr.properties:
                # A non-computed key is a property name, not a reference.
                if prop.computed:
                    self._visit_expression(prop.key, scope)
                self._visit_expression(prop.value, scope)
        elif isinstance(expr, FunctionExpression):
            self_name = expr.id.name if expr.id is not None else None
            self._visit_function(expr.params, expr.body, scope, self_name=self_name, arrow=False)
        elif isinstance(expr, ArrowFunctionExpression):
            self._visit_function(expr.params, expr.body, scope, self_name=None, arrow=True)
        elif isinstance(expr, UnaryExpression | UpdateExpression):
            self._visit_expression(expr.argument, scope)
        elif isinstance(expr, BinaryExpression | LogicalExpression | AssignmentExpression):
            self._visit_expression(expr.left, scope)
            self._visit_expression(expr.right, scope)
        elif isinstance(expr, ConditionalExpression):
            self._visit_expression(expr.test, scope)
            self._visit_expression(expr.consequent, scope)
            self._visit_expression(expr.alternate, scope)
        elif isinstance(expr, CallExpression | NewExpression):
            self._visit_expression(expr.callee, scope)
            for argument in expr.arguments:
                self._visit_expression(argument, scope)
        elif isinstance(expr, MemberExpression):
            self._visit_expression(expr.object, scope)
            if expr.computed:
                self._visit_expression(expr.property, scope)
        elif isinstance(expr, SequenceExpression):
            for item in expr.expressions:
                self._visit_expression(item, scope)
        else:
            assert_never(expr)


# ------------------------------------------------------------------
# Module-level helper functions
# ------------------------------------------------------------------


def _lexical_names(statements: Iterable[Statement]) -> Iterator[str]:
    """Yield the names a block binds directly: let/const and function declarations."""
    for stmt in statements:
        if isinstance(stmt, FunctionDeclaration):
            yield stmt.id.name
        elif isinstance(stmt, VariableDeclaration) and stmt.declaration_kind != "var":
            yield from (d.id.name for d in stmt.declarations)


def _hoisted_var_declarators(statements: Iterable[Statement]) -> Iterator[VariableDeclarator]:
    """Yield `var` declarators of *statements*, descending into blocks but not functions."""
    for stmt in statements:
        if isinstance(stmt, VariableDeclaration):
            if stmt.declaration_kind == "var":
                yield from stmt.declarations
        elif isinstance(stmt, BlockStatement):
            yield from _hoisted_var_declarators(stmt.body)
        elif isinstance(stmt, IfStatement):
            yield from _hoisted_var_declarators([stmt.consequent])
            if stmt.alternate is not None:
                yield from _hoisted_var_declarators([stmt.alternate])
        elif isinstance(stmt, ForStatement):
            if isinstance(stmt.init, VariableDeclaration):
                yield from _hoisted_var_declarators([stmt.init])
            yield from _hoisted_var_declarators([stmt.body])
        elif isinstance(stmt, ForInStatement | ForOfStatement):
            if isinstance(stmt.left, VariableDeclaration):
                yield from _hoisted_var_declarators([stmt.left])
            yield from _hoisted_var_declarators([stmt.body])
        elif isinstance(stmt, WhileStatement | DoWhileStatement):
            yield from _hoisted_var_declarators([stmt.body])
        elif isinstance(stmt, TryStatement):
            yield from _hoisted_var_declarators(stmt.block.body)
            if stmt.handler is not None:
                yield from _hoisted_var_declarators(stmt.handler.body.body)
            if stmt.finalizer is not None:
                yield from _hoisted_var_declarators(stmt.finalizer.body)
        elif isinstance(stmt, SwitchStatement):
            for case in stmt.cases:
                yield from _hoisted_var_declarators(case.consequent)
