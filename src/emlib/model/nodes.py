# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Syntax tree for the ES-module subset understood by emlib.

Every node carries a ``kind`` discriminator so that statement and expression
positions accept exactly the closed set of variants listed below.  Node
identity matters: scope analysis records identifier objects and the renamer
mutates them in place.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

# ------------------------------------------------------------------
# Expressions
# ------------------------------------------------------------------


class Identifier(BaseModel):
    """A name occurrence: a binding, a reference, or a property name."""

    kind: Literal["identifier"] = "identifier"
    name: str


class LiteralExpression(BaseModel):
    """A string, number, boolean, or null literal.

    ``raw`` keeps the source spelling of numbers so that ``0x10`` or ``1e3``
    are printed back unchanged.
    """

    kind: Literal["literal"] = "literal"
    value: str | bool | int | float | None
    raw: str | None = None


class ThisExpression(BaseModel):
    kind: Literal["this"] = "this"


class ArrayExpression(BaseModel):
    """An array literal; ``None`` elements are holes (``[1, , 2]``)."""

    kind: Literal["array"] = "array"
    elements: list[Expression | None] = _Field(default_factory=list)


class Property(BaseModel):
    """A key/value pair inside an object literal."""

    kind: Literal["property"] = "property"
    key: Expression
    value: Expression
    computed: bool = False
    shorthand: bool = False
    method: bool = False


class ObjectExpression(BaseModel):
    kind: Literal["object"] = "object"
    properties: list[Property] = _Field(default_factory=list)


class FunctionExpression(BaseModel):
    kind: Literal["function_expression"] = "function_expression"
    id: Identifier | None = None
    params: list[Identifier] = _Field(default_factory=list)
    body: BlockStatement


class ArrowFunctionExpression(BaseModel):
    """An arrow function; ``body`` is a block or a single expression."""

    kind: Literal["arrow_function"] = "arrow_function"
    params: list[Identifier] = _Field(default_factory=list)
    body: BlockStatement | Expression


class UnaryExpression(BaseModel):
    kind: Literal["unary"] = "unary"
    operator: str
    argument: Expression


class UpdateExpression(BaseModel):
    kind: Literal["update"] = "update"
    operator: str
    prefix: bool
    argument: Expression


class BinaryExpression(BaseModel):
    kind: Literal["binary"] = "binary"
    operator: str
    left: Expression
    right: Expression


class LogicalExpression(BaseModel):
    kind: Literal["logical"] = "logical"
    operator: str
    left: Expression
    right: Expression


class AssignmentExpression(BaseModel):
    kind: Literal["assignment"] = "assignment"
    operator: str
    left: Expression
    right: Expression


class ConditionalExpression(BaseModel):
    kind: Literal["conditional"] = "conditional"
    test: Expression
    consequent: Expression
    alternate: Expression


class CallExpression(BaseModel):
    kind: Literal["call"] = "call"
    callee: Expression
    arguments: list[Expression] = _Field(default_factory=list)


class NewExpression(BaseModel):
    kind: Literal["new"] = "new"
    callee: Expression
    arguments: list[Expression] = _Field(default_factory=list)


class MemberExpression(BaseModel):
    """Property access; ``property`` is an Identifier unless ``computed``."""

    kind: Literal["member"] = "member"
    object: Expression
    property: Expression
    computed: bool = False


class SequenceExpression(BaseModel):
    kind: Literal["sequence"] = "sequence"
    expressions: list[Expression]


# ------------------------------------------------------------------
# Statements
# ------------------------------------------------------------------


class VariableDeclarator(BaseModel):
    """One ``name = init`` binding of a variable declaration."""

    kind: Literal["variable_declarator"] = "variable_declarator"
    id: Identifier
    init: Expression | None = None


class VariableDeclaration(BaseModel):
    kind: Literal["variable_declaration"] = "variable_declaration"
    declaration_kind: Literal["var", "let", "const"] = "var"
    declarations: list[VariableDeclarator]


class FunctionDeclaration(BaseModel):
    kind: Literal["function_declaration"] = "function_declaration"
    id: Identifier
    params: list[Identifier] = _Field(default_factory=list)
    body: BlockStatement


class ExportSpecifier(BaseModel):
    """``local as exported`` inside an export list."""

    kind: Literal["export_specifier"] = "export_specifier"
    local: Identifier
    exported: Identifier


class ExportNamedDeclaration(BaseModel):
    """``export <declaration>`` or ``export { a as b } [from "m"]``."""

    kind: Literal["export_named"] = "export_named"
    declaration: FunctionDeclaration | VariableDeclaration | None = None
    specifiers: list[ExportSpecifier] = _Field(default_factory=list)
    source: LiteralExpression | None = None


class ImportSpecifier(BaseModel):
    """``imported as local`` inside an import list."""

    kind: Literal["import_specifier"] = "import_specifier"
    imported: Identifier
    local: Identifier


class ImportDeclaration(BaseModel):
    kind: Literal["import"] = "import"
    specifiers: list[ImportSpecifier] = _Field(default_factory=list)
    source: LiteralExpression


class ExpressionStatement(BaseModel):
    kind: Literal["expression_statement"] = "expression_statement"
    expression: Expression


class BlockStatement(BaseModel):
    kind: Literal["block"] = "block"
    body: list[Statement] = _Field(default_factory=list)


class ReturnStatement(BaseModel):
    kind: Literal["return"] = "return"
    argument: Expression | None = None


class IfStatement(BaseModel):
    kind: Literal["if"] = "if"
    test: Expression
    consequent: Statement
    alternate: Statement | None = None


class ForStatement(BaseModel):
    kind: Literal["for"] = "for"
    init: VariableDeclaration | Expression | None = None
    test: Expression | None = None
    update: Expression | None = None
    body: Statement


class ForInStatement(BaseModel):
    kind: Literal["for_in"] = "for_in"
    left: VariableDeclaration | Expression
    right: Expression
    body: Statement


class ForOfStatement(BaseModel):
    kind: Literal["for_of"] = "for_of"
    left: VariableDeclaration | Expression
    right: Expression
    body: Statement


class WhileStatement(BaseModel):
    kind: Literal["while"] = "while"
    test: Expression
    body: Statement


class DoWhileStatement(BaseModel):
    kind: Literal["do_while"] = "do_while"
    body: Statement
    test: Expression


class BreakStatement(BaseModel):
    kind: Literal["break"] = "break"


class ContinueStatement(BaseModel):
    kind: Literal["continue"] = "continue"


class ThrowStatement(BaseModel):
    kind: Literal["throw"] = "throw"
    argument: Expression


class CatchClause(BaseModel):
    kind: Literal["catch_clause"] = "catch_clause"
    param: Identifier | None = None
    body: BlockStatement


class TryStatement(BaseModel):
    kind: Literal["try"] = "try"
    block: BlockStatement
    handler: CatchClause | None = None
    finalizer: BlockStatement | None = None


class SwitchCase(BaseModel):
    """A ``case test:`` clause; ``test`` is ``None`` for ``default:``."""

    kind: Literal["switch_case"] = "switch_case"
    test: Expression | None = None
    consequent: list[Statement] = _Field(default_factory=list)


class SwitchStatement(BaseModel):
    kind: Literal["switch"] = "switch"
    discriminant: Expression
    cases: list[SwitchCase] = _Field(default_factory=list)


class EmptyStatement(BaseModel):
    kind: Literal["empty"] = "empty"


class Program(BaseModel):
    """Root of a parsed module: the ordered top-level statements."""

    kind: Literal["program"] = "program"
    body: list[Statement] = _Field(default_factory=list)


# An expression node -- the `kind` discriminator selects the variant.
Expression = Annotated[
    Identifier
    | LiteralExpression
    | ThisExpression
    | ArrayExpression
    | ObjectExpression
    | FunctionExpression
    | ArrowFunctionExpression
    | UnaryExpression
    | UpdateExpression
    | BinaryExpression
    | LogicalExpression
    | AssignmentExpression
    | ConditionalExpression
    | CallExpression
    | NewExpression
    | MemberExpression
    | SequenceExpression,
    _Field(discriminator="kind"),
]

# A statement or module item node.
Statement = Annotated[
    FunctionDeclaration
    | VariableDeclaration
    | ExportNamedDeclaration
    | ImportDeclaration
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
    _Field(discriminator="kind"),
]


# Resolve forward references for every model that mentions a union alias.
for _model in (
    ArrayExpression,
    Property,
    ObjectExpression,
    FunctionExpression,
    ArrowFunctionExpression,
    UnaryExpression,
    UpdateExpression,
    BinaryExpression,
    LogicalExpression,
    AssignmentExpression,
    ConditionalExpression,
    CallExpression,
    NewExpression,
    MemberExpression,
    SequenceExpression,
    VariableDeclarator,
    VariableDeclaration,
    FunctionDeclaration,
    ExportNamedDeclaration,
    ExpressionStatement,
    BlockStatement,
    ReturnStatement,
    IfStatement,
    ForStatement,
    ForInStatement,
    ForOfStatement,
    WhileStatement,
    DoWhileStatement,
    ThrowStatement,
    CatchClause,
    TryStatement,
    SwitchCase,
    SwitchStatement,
    Program,
):
    _model.model_rebuild()
