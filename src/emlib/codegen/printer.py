# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Source text generation for syntax trees.

The printer is the inverse of :func:`emlib.parser.parse`: for every tree it
accepts, parsing the printed text yields a structurally equal tree.
Parentheses are inserted from an operator precedence table rather than
recorded in the tree.
"""

from __future__ import annotations

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

# ###############
# Public Interface
# ###############

INDENT = "    "


def print_program(program: Program) -> str:
    """Render a whole module, one top-level statement per line group.

    Returns:
        The module text, terminated by a newline unless the program is empty.
    """
    printer = _Printer()
    if not program.body:
        return ""
    return "\n".join(printer.statement(stmt, 0) for stmt in program.body) + "\n"


def print_node(node: Statement | Expression | VariableDeclarator | Property | Program) -> str:
    """Render a single node at indentation level zero.

    Used for error messages that quote the offending construct.
    """
    printer = _Printer()
    if isinstance(node, Program):
        return print_program(node)
    if isinstance(node, VariableDeclarator):
        return printer.declarator(node, 0)
    if isinstance(node, Property):
        return printer.property(node, 0)
    if isinstance(node, _STATEMENT_TYPES):
        return printer.statement(node, 0)
    return printer.expression(node, 0)


# ################
# Implementation
# ################

_SEQUENCE = 0
_ASSIGNMENT = 1
_CONDITIONAL = 2
_NULLISH = 3
_LOGICAL_AND = 4
_UNARY = 14
_POSTFIX = 15
_CALL = 16
_MEMBER = 17
_PRIMARY = 18
# Forces parentheses regardless of the operand.
_ALWAYS = _PRIMARY + 1

_BINARY_PRECEDENCE: dict[str, int] = {
    "??": _NULLISH,
    "||": _NULLISH,
    "&&": _LOGICAL_AND,
    "|": 5,
    "^": 6,
    "&": 7,
    "==": 8,
    "!=": 8,
    "===": 8,
    "!==": 8,
    "<": 9,
    ">": 9,
    "<=": 9,
    ">=": 9,
    "instanceof": 9,
    "in": 9,
    "<<": 10,
    ">>": 10,
    ">>>": 10,
    "+": 11,
    "-": 11,
    "*": 12,
    "/": 12,
    "%": 12,
    "**": 13,
}

_STATEMENT_TYPES = (
    FunctionDeclaration,
    VariableDeclaration,
    ExportNamedDeclaration,
    ImportDeclaration,
    ExpressionStatement,
    BlockStatement,
    ReturnStatement,
    IfStatement,
    ForStatement,
    ForInStatement,
    ForOfStatement,
    WhileStatement,
    DoWhileStatement,
    BreakStatement,
    ContinueStatement,
    ThrowStatement,
    TryStatement,
    SwitchStatement,
    EmptyStatement,
)

_STRING_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def quote_string(value: str) -> str:
    """Return *value* as a single-quoted string literal."""
    parts: list[str] = []
    for ch in value:
        if ch in _STRING_ESCAPES:
            parts.append(_STRING_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\x{ord(ch):02x}")
        else:
            parts.append(ch)
    return "'" + "".join(parts) + "'"


class _Printer:
    """Renders statements and expressions.

    ``statement`` returns text whose first line is not indented; callers
    prepend the indentation for the level they place it at.  Continuation
    lines are fully indented.
    """

    def __init__(self) -> None:
        # Set while printing the init clause of a `for (;;)` head, where a
        # bare `in` operator would be read as a for-in loop.
        self._no_in = False

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def statement(self, node: Statement, level: int) -> str:
        if isinstance(node, FunctionDeclaration):
            return f"function {node.id.name}({self._params(node.params)}) {self.block(node.body, level)}"
        if isinstance(node, VariableDeclaration):
            return self._variable_declaration(node, level) + ";"
        if isinstance(node, ExportNamedDeclaration):
            return self._export(node, level)
        if isinstance(node, ImportDeclaration):
            source = quote_string(str(node.source.value))
            if not node.specifiers:
                return f"import {source};"
            names = ", ".join(
                spec.local.name
                if spec.imported.name == spec.local.name
                else f"{spec.imported.name} as {spec.local.name}"
                for spec in node.specifiers
            )
            return f"import {{ {names} }} from {source};"
        if isinstance(node, ExpressionStatement):
            text = self.expression(node.expression, level)
            if _starts_ambiguously(node.expression):
                text = f"({text})"
            return text + ";"
        if isinstance(node, BlockStatement):
            return self.block(node, level)
        if isinstance(node, ReturnStatement):
            if node.argument is None:
                return "return;"
            return f"return {self.expression(node.argument, level)};"
        if isinstance(node, IfStatement):
            return self._if(node, level)
        if isinstance(node, ForStatement):
            return self._for(node, level)
        if isinstance(node, ForInStatement | ForOfStatement):
            left = self._for_left(node.left, level)
            if isinstance(node, ForInStatement):
                head = f"{left} in {self.expression(node.right, level)}"
            else:
                head = f"{left} of {self.expression(node.right, level, _ASSIGNMENT)}"
            return f"for ({head}){self._body(node.body, level)}"
        if isinstance(node, WhileStatement):
            return f"while ({self.expression(node.test, level)}){self._body(node.body, level)}"
        if isinstance(node, DoWhileStatement):
            body = self._body(node.body, level)
            if isinstance(node.body, BlockStatement):
                return f"do{body} while ({self.expression(node.test, level)});"
            return f"do{body}\n{INDENT * level}while ({self.expression(node.test, level)});"
        if isinstance(node, BreakStatement):
            return "break;"
        if isinstance(node, ContinueStatement):
            return "continue;"
        if isinstance(node, ThrowStatement):
            return f"throw {self.expression(node.argument, level)};"
        if isinstance(node, TryStatement):
            text = f"try {self.block(node.block, level)}"
            if node.handler is not None:
                param = f"({node.handler.param.name}) " if node.handler.param is not None else ""
                text += f" catch {param}{self.block(node.handler.body, level)}"
            if node.finalizer is not None:
                text += f" finally {self.block(node.finalizer, level)}"
            return text
        if isinstance(node, SwitchStatement):
            return self._switch(node, level)
        if isinstance(node, EmptyStatement):
            return ";"
        assert_never(node)

    def block(self, node: BlockStatement, level: int) -> str:
        if not node.body:
            return "{}"
        inner = INDENT * (level + 1)
        lines = [inner + self.statement(stmt, level + 1) for stmt in node.body]
        return "{\n" + "\n".join(lines) + "\n" + INDENT * level + "}"

    def declarator(self, node: VariableDeclarator, level: int) -> str:
        if node.init is None:
            return node.id.name
        return f"{node.id.name} = {self.expression(node.init, level, _ASSIGNMENT)}"

    def _variable_declaration(self, node: VariableDeclaration, level: int) -> str:
        declarators = ", ".join(self.declarator(d, level) for d in node.declarations)
        return f"{node.declaration_kind} {declarators}"

    def _export(self, node: ExportNamedDeclaration, level: int) -> str:
        if node.declaration is not None:
            return "export " + self.statement(node.declaration, level)
        names = ", ".join(
            spec.local.name if spec.local.name == spec.exported.name else f"{spec.local.name} as {spec.exported.name}"
            for spec in node.specifiers
        )
        text = f"export {{ {names} }}" if names else "export {}"
        if node.source is not None:
            text += f" from {quote_string(str(node.source.value))}"
        return text + ";"

    def _body(self, node: Statement, level: int) -> str:
        """Render the body of a compound statement, preceded by its separator."""
        if isinstance(node, BlockStatement):
            return " " + self.block(node, level)
        if isinstance(node, EmptyStatement):
            return ";"
        return "\n" + INDENT * (level + 1) + self.statement(node, level + 1)

    def _if(self, node: IfStatement, level: int) -> str:
        test = self.expression(node.test, level)
        consequent = node.consequent
        if node.alternate is not None and isinstance(consequent, IfStatement) and consequent.alternate is None:
            # Without braces the else would attach to the inner if.
            text = f"if ({test}) {{\n{INDENT * (level + 1)}{self.statement(consequent, level + 1)}\n{INDENT * level}}}"
        else:
            text = f"if ({test}){self._body(consequent, level)}"
        if node.alternate is None:
            return text
        separator = " " if isinstance(consequent, BlockStatement) or text.endswith("}") else "\n" + INDENT * level
        if isinstance(node.alternate, IfStatement):
            return f"{text}{separator}else {self.statement(node.alternate, level)}"
        return f"{text}{separator}else{self._body(node.alternate, level)}"

    def _for(self, node: ForStatement, level: int) -> str:
        init = ""
        if node.init is not None:
            self._no_in = True
            try:
                if isinstance(node.init, VariableDeclaration):
                    init = self._variable_declaration(node.init, level)
                else:
                    init = self.expression(node.init, level)
            finally:
                self._no_in = False
        test = f" {self.expression(node.test, level)}" if node.test is not None else ""
        update = f" {self.expression(node.update, level)}" if node.update is not None else ""
        return f"for ({init};{test};{update}){self._body(node.body, level)}"

    def _for_left(self, left: VariableDeclaration | Expression, level: int) -> str:
        if isinstance(left, VariableDeclaration):
            return self._variable_declaration(left, level)
        return self.expression(left, level, _POSTFIX)

    def _switch(self, node: SwitchStatement, level: int) -> str:
        discriminant = self.expression(node.discriminant, level)
        if not node.cases:
            return f"switch ({discriminant}) {{}}"
        lines = [f"switch ({discriminant}) {{"]
        for case in node.cases:
            label = "default:" if case.test is None else f"case {self.expression(case.test, level + 1)}:"
            lines.append(INDENT * (level + 1) + label)
            lines.extend(INDENT * (level + 2) + self.statement(stmt, level + 2) for stmt in case.consequent)
        lines.append(INDENT * level + "}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def expression(self, node: Expression, level: int, min_precedence: int = _SEQUENCE) -> str:
        """Render *node*, parenthesized if it binds looser than *min_precedence*."""
        text, precedence = self._expression(node, level)
        if precedence < min_precedence:
            return f"({text})"
        return text

    def property(self, node: Property, level: int) -> str:
        if node.computed:
            key = f"[{self.expression(node.key, level, _ASSIGNMENT)}]"
        elif isinstance(node.key, Identifier):
            key = node.key.name
        elif isinstance(node.key, LiteralExpression):
            key = _literal(node.key)
        else:
            key = f"[{self.expression(node.key, level, _ASSIGNMENT)}]"
        if node.shorthand and isinstance(node.value, Identifier) and node.value.name == key:
            return key
        if node.method and isinstance(node.value, FunctionExpression):
            return f"{key}({self._params(node.value.params)}) {self.block(node.value.body, level)}"
        return f"{key}: {self.expression(node.value, level, _ASSIGNMENT)}"

    def _expression(self, node: Expression, level: int) -> tuple[str, int]:
        if isinstance(node, Identifier):
            return node.name, _PRIMARY
        if isinstance(node, LiteralExpression):
            text = _literal(node)
            return text, _UNARY if text.startswith("-") else _PRIMARY
        if isinstance(node, ThisExpression):
            return "this", _PRIMARY
        if isinstance(node, ArrayExpression):
            return self._array(node, level), _PRIMARY
        if isinstance(node, ObjectExpression):
            return self._object(node, level), _PRIMARY
        if isinstance(node, FunctionExpression):
            name = f" {node.id.name}" if node.id is not None else " "
            return f"function{name}({self._params(node.params)}) {self.block(node.body, level)}", _PRIMARY
        if isinstance(node, ArrowFunctionExpression):
            return self._arrow(node, level), _ASSIGNMENT
        if isinstance(node, UnaryExpression):
            argument = self.expression(node.argument, level, _UNARY)
            if node.operator.isalpha():
                return f"{node.operator} {argument}", _UNARY
            if node.operator in ("+", "-") and argument.startswith(("+", "-")):
                return f"{node.operator} {argument}", _UNARY
            return f"{node.operator}{argument}", _UNARY
        if isinstance(node, UpdateExpression):
            if node.prefix:
                return node.operator + self.expression(node.argument, level, _UNARY), _UNARY
            return self.expression(node.argument, level, _CALL) + node.operator, _POSTFIX
        if isinstance(node, BinaryExpression | LogicalExpression):
            return self._binary(node, level)
        if isinstance(node, AssignmentExpression):
            left = self.expression(node.left, level, _CALL)
            right = self.expression(node.right, level, _ASSIGNMENT)
            return f"{left} {node.operator} {right}", _ASSIGNMENT
        if isinstance(node, ConditionalExpression):
            test = self.expression(node.test, level, _NULLISH)
            consequent = self.expression(node.consequent, level, _ASSIGNMENT)
            alternate = self.expression(node.alternate, level, _ASSIGNMENT)
            return f"{test} ? {consequent} : {alternate}", _CONDITIONAL
        if isinstance(node, CallExpression):
            callee = self.expression(node.callee, level, _CALL)
            return f"{callee}({self._arguments(node.arguments, level)})", _CALL
        if isinstance(node, NewExpression):
            callee = self.expression(node.callee, level, _ALWAYS if _contains_call(node.callee) else _MEMBER)
            return f"new {callee}({self._arguments(node.arguments, level)})", _MEMBER
        if isinstance(node, MemberExpression):
            # `1.x` would be read as a malformed number.
            numeric = isinstance(node.object, LiteralExpression) and isinstance(node.object.value, int | float)
            obj = self.expression(node.object, level, _ALWAYS if numeric else _CALL)
            if node.computed:
                return f"{obj}[{self.expression(node.property, level)}]", _MEMBER
            assert isinstance(node.property, Identifier)
            return f"{obj}.{node.property.name}", _MEMBER
        if isinstance(node, SequenceExpression):
            return ", ".join(self.expression(e, level, _ASSIGNMENT) for e in node.expressions), _SEQUENCE
        assert_never(node)

    def _binary(self, node: BinaryExpression | LogicalExpression, level: int) -> tuple[str, int]:
        precedence = _BINARY_PRECEDENCE[node.operator]
        if node.operator == "**":
            # Right-associative, and a unary operand on the left is a syntax error.
            left_min, right_min = _POSTFIX, precedence
        else:
            left_min, right_min = precedence, precedence + 1
        if _mixes_nullish(node, node.left):
            left_min = _ALWAYS
        if _mixes_nullish(node, node.right):
            right_min = _ALWAYS
        left = self.expression(node.left, level, left_min)
        right = self.expression(node.right, level, right_min)
        text = f"{left} {node.operator} {right}"
        if node.operator == "in" and self._no_in:
            return f"({text})", _PRIMARY
        return text, precedence

    def _arrow(self, node: ArrowFunctionExpression, level: int) -> str:
        params = f"({self._params(node.params)})"
        if isinstance(node.body, BlockStatement):
            return f"{params} => {self.block(node.body, level)}"
        body = self.expression(node.body, level, _ASSIGNMENT)
        if isinstance(node.body, ObjectExpression):
            body = f"({body})"
        return f"{params} => {body}"

    def _array(self, node: ArrayExpression, level: int) -> str:
        parts = ["" if e is None else self.expression(e, level, _ASSIGNMENT) for e in node.elements]
        text = ", ".join(parts)
        if node.elements and node.elements[-1] is None:
            # A trailing hole needs an explicit comma to survive re-parsing.
            text += ","
        return f"[{text}]"

    def _object(self, node: ObjectExpression, level: int) -> str:
        if not node.properties:
            return "{}"
        inner = INDENT * (level + 1)
        lines = [inner + self.property(prop, level + 1) for prop in node.properties]
        return "{\n" + ",\n".join(lines) + "\n" + INDENT * level + "}"

    def _arguments(self, arguments: list[Expression], level: int) -> str:
        return ", ".join(self.expression(a, level, _ASSIGNMENT) for a in arguments)

    @staticmethod
    def _params(params: list[Identifier]) -> str:
        return ", ".join(p.name for p in params)


def _literal(node: LiteralExpression) -> str:
    value = node.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return quote_string(value)
    if node.raw is not None:
        return node.raw
    return repr(value)


def _starts_ambiguously(node: Expression) -> bool:
    """Return True if the leftmost token of *node* is `function` or `{`.

    Such an expression statement would be read as a declaration or a block.
    """
    while True:
        if isinstance(node, FunctionExpression | ObjectExpression):
            return True
        if isinstance(node, CallExpression):
            node = node.callee
        elif isinstance(node, MemberExpression):
            node = node.object
        elif isinstance(node, BinaryExpression | LogicalExpression | AssignmentExpression):
            node = node.left
        elif isinstance(node, ConditionalExpression):
            node = node.test
        elif isinstance(node, SequenceExpression):
            node = node.expressions[0]
        elif isinstance(node, UpdateExpression) and not node.prefix:
            node = node.argument
        else:
            return False


def _contains_call(node: Expression) -> bool:
    """Return True if a call appears along the member chain of a `new` callee."""
    while isinstance(node, MemberExpression):
        node = node.object
    return isinstance(node, CallExpression)


def _mixes_nullish(parent: BinaryExpression | LogicalExpression, child: Expression) -> bool:
    """`??` cannot be combined with `||` or `&&` without parentheses."""
    if not isinstance(parent, LogicalExpression) or not isinstance(child, LogicalExpression):
        return False
    if parent.operator == "??":
        return child.operator in ("||", "&&")
    return child.operator == "??"
