# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Syntax tree shared by the parser, the printer, and the compiler pass."""

from emlib.model.nodes import (
    ArrayExpression,
    ArrowFunctionExpression,
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    CallExpression,
    CatchClause,
    ConditionalExpression,
    ContinueStatement,
    DoWhileStatement,
    EmptyStatement,
    ExportNamedDeclaration,
    ExportSpecifier,
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
    Property,
    ReturnStatement,
    SequenceExpression,
    Statement,
    SwitchCase,
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

__all__ = [
    # Expressions
    "Expression",
    "Identifier",
    "LiteralExpression",
    "ThisExpression",
    "ArrayExpression",
    "Property",
    "ObjectExpression",
    "FunctionExpression",
    "ArrowFunctionExpression",
    "UnaryExpression",
    "UpdateExpression",
    "BinaryExpression",
    "LogicalExpression",
    "AssignmentExpression",
    "ConditionalExpression",
    "CallExpression",
    "NewExpression",
    "MemberExpression",
    "SequenceExpression",
    # Statements
    "Statement",
    "VariableDeclarator",
    "VariableDeclaration",
    "FunctionDeclaration",
    "ExportSpecifier",
    "ExportNamedDeclaration",
    "ImportSpecifier",
    "ImportDeclaration",
    "ExpressionStatement",
    "BlockStatement",
    "ReturnStatement",
    "IfStatement",
    "ForStatement",
    "ForInStatement",
    "ForOfStatement",
    "WhileStatement",
    "DoWhileStatement",
    "BreakStatement",
    "ContinueStatement",
    "ThrowStatement",
    "CatchClause",
    "TryStatement",
    "SwitchCase",
    "SwitchStatement",
    "EmptyStatement",
    "Program",
]
