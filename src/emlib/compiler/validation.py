# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural checks on the top level of a bundled module.

A library descriptor is a static table: every top-level statement must be a
declaration, and every variable must be initialized with a value that can be
evaluated without side effects.
"""

from __future__ import annotations

import logging
from typing import assert_never

from emlib.compiler.errors import ImpureInitializerError, UnsupportedStatementError
from emlib.config.model import ImpureInitializerPolicy
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
    WhileStatement,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def is_pure_value(expr: Expression | None) -> bool:
    """Return True if evaluating *expr* provably has no side effects.

    Pure values are literals, ``this``, function expressions, unary
    operations over a pure operand, arrays of pure elements, objects whose
    keys and values are pure, and binary or logical operations over pure
    operands.  A missing initializer is pure.
    """
    if expr is None:
        return True
    if isinstance(expr, LiteralExpression | ThisExpression | FunctionExpression):
        return True
    if isinstance(expr, UnaryExpression):
        return is_pure_value(expr.argument)
    if isinstance(expr, ArrayExpression):
        return all(is_pure_value(element) for element in expr.elements)
    if isinstance(expr, ObjectExpression):
        return all(
            is_pure_value(prop.value) and (not prop.computed or is_pure_value(prop.key)) for prop in expr.properties
        )
    if isinstance(expr, BinaryExpression | LogicalExpression):
        return is_pure_value(expr.left) and is_pure_value(expr.right)
    if isinstance(
        expr,
        Identifier
        | ArrowFunctionExpression
        | UpdateExpression
        | AssignmentExpression
        | ConditionalExpression
        | CallExpression
        | NewExpression
        | MemberExpression
        | SequenceExpression,
    ):
        return False
    assert_never(expr)


def validate_program(
    program: Program,
    *,
    impure_initializers: ImpureInitializerPolicy = ImpureInitializerPolicy.REJECT,
) -> None:
    """Check that *program* can be turned into a library descriptor.

    Args:
        program: The bundled module.
        impure_initializers: With REJECT, a non-pure variable initializer is an
            error.  With POSTSET it is accepted and deferred by the serializer.

    Raises:
        UnsupportedStatementError: For the first top-level statement that is
            not a function, variable, or local export declaration.
        ImpureInitializerError: For the first non-pure initializer when the
            policy is REJECT.
    """
    for stmt in program.body:
        if not _is_supported_statement(stmt):
            raise UnsupportedStatementError(stmt)
        declaration = stmt.declaration if isinstance(stmt, ExportNamedDeclaration) else stmt
        if not isinstance(declaration, VariableDeclaration):
            continue
        for declarator in declaration.declarations:
            if is_pure_value(declarator.init):
                continue
            if impure_initializers is ImpureInitializerPolicy.REJECT:
                raise ImpureInitializerError(declarator)
            logger.debug("Deferring impure initializer of '%s' to a postset entry", declarator.id.name)
    logger.debug("Validated %d top-level statements", len(program.body))


# ################
# Implementation
# ################


def _is_supported_statement(stmt: Statement) -> bool:
    if isinstance(stmt, FunctionDeclaration | VariableDeclaration):
        return True
    if isinstance(stmt, ExportNamedDeclaration):
        # `export ... from` pulls in another module and belongs to the bundler.
        return stmt.source is None
    if isinstance(
        stmt,
        ImportDeclaration
        | ExpressionStatement
        | BlockStatement
        | ReturnStatement
        | IfStatement
        | ForStatement
        | ForInStatement
        | ForOfStatement
        | WhileStatement
        | DoWhileStatement
        | BreakStatement
        | ContinueStatement
        | ThrowStatement
        | TryStatement
        | SwitchStatement
        | EmptyStatement,
    ):
        return False
    assert_never(stmt)
