# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for bundled ES modules.

Converts a token stream produced by the scanner into a :class:`Program`
tree.  The accepted language is the ES-module subset modelled in
:mod:`emlib.model.nodes`; anything outside it is reported as a
:class:`ParseError` naming the unsupported construct.
"""

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
from emlib.parser.lexer import Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid or unsupported construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


def parse(source: str) -> Program:
    """Parse module source text into a :class:`Program` tree.

    Args:
        source: The full text of an ES module.

    Returns:
        A Program whose body holds the top-level statements in source order.

    Raises:
        LexerError: If the source contains invalid characters or unterminated literals.
        ParseError: If the source is syntactically invalid or uses a construct
            outside the supported subset.
    """
    tokens = tokenize(source)
    return _Parser(tokens).parse()


# ################
# Implementation
# ################

_ASSIGNMENT_OPERATORS: frozenset[str] = frozenset(
    {"=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", ">>=", ">>>=", "&=", "|=", "^=", "&&=", "||=", "??="}
)

_UNARY_OPERATORS: frozenset[str] = frozenset({"!", "~", "+", "-", "typeof", "void", "delete"})

_LOGICAL_OPERATORS: frozenset[str] = frozenset({"??", "||", "&&"})

# Binding power of binary operators; higher binds tighter.
_BINARY_PRECEDENCE: dict[str, int] = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "===": 7,
    "!==": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "instanceof": 8,
    "in": 8,
    "<<": 9,
    ">>": 9,
    ">>>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
    "**": 12,
}

_UNSUPPORTED_KEYWORDS: dict[str, str] = {
    "class": "Classes are not supported",
    "with": "'with' statements are not supported",
    "debugger": "'debugger' statements are not supported",
    "yield": "Generators are not supported",
    "super": "'super' is not supported",
}


def _number_value(raw: str) -> int | float:
    """Return the numeric value of a NUMBER token's source spelling."""
    lowered = raw.lower()
    if lowered.startswith("0x"):
        return int(raw[2:], 16)
    if lowered.startswith("0o"):
        return int(raw[2:], 8)
    if lowered.startswith("0b"):
        return int(raw[2:], 2)
    if "." in lowered or "e" in lowered:
        return float(raw)
    return int(raw)


class _Parser:
    """Recursive-descent parser for module token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> Program:
        """Parse the full token stream and return a Program."""
        body: list[Statement] = []
        while not self._at_end():
            body.append(self._parse_module_item())
        return Program(body=body)

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> Token:
        """Return the token *offset* positions ahead, clamped to EOF."""
        return self._tokens[min(self._pos + offset, len(self._tokens) - 1)]

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _check(self, *values: str) -> bool:
        """Return True if the current token is a punctuator or keyword in *values*."""
        return _is_symbol(self._current(), values)

    def _check_contextual(self, word: str) -> bool:
        """Return True if the current token is the contextual keyword *word* (e.g. 'from')."""
        tok = self._current()
        return tok.type == TokenType.IDENTIFIER and tok.value == word

    def _expect(self, value: str) -> Token:
        """Consume the current token if it is the punctuator or keyword *value*.

        Raises ParseError if the current token does not match.
        """
        if not self._check(value):
            raise self._error(f"Expected {value!r}, got {_describe(self._current())}")
        return self._advance()

    def _expect_contextual(self, word: str) -> Token:
        if not self._check_contextual(word):
            raise self._error(f"Expected {word!r}, got {_describe(self._current())}")
        return self._advance()

    def _expect_identifier(self) -> Identifier:
        """Consume an identifier token and return it as an Identifier node."""
        tok = self._current()
        if tok.type != TokenType.IDENTIFIER:
            raise self._error(f"Expected identifier, got {_describe(tok)}")
        self._advance()
        return Identifier(name=tok.value)

    def _expect_property_name(self) -> Identifier:
        """Consume an identifier name; reserved words are allowed after '.'."""
        tok = self._current()
        if tok.type not in (TokenType.IDENTIFIER, TokenType.KEYWORD):
            raise self._error(f"Expected property name, got {_describe(tok)}")
        self._advance()
        return Identifier(name=tok.value)

    def _expect_string(self) -> LiteralExpression:
        tok = self._current()
        if tok.type != TokenType.STRING:
            raise self._error(f"Expected string literal, got {_describe(tok)}")
        self._advance()
        return LiteralExpression(value=tok.value)

    def _consume_semicolon(self) -> None:
        """Consume a ';' or accept an automatically inserted one.

        A semicolon is inserted before '}', at end of input, and before a
        token that starts on a new line.
        """
        if self._check(";"):
            self._advance()
            return
        tok = self._current()
        if self._check("}") or tok.type == TokenType.EOF or tok.newline_before:
            return
        raise self._error(f"Expected ';', got {_describe(tok)}")

    def _error(self, message: str, tok: Token | None = None) -> ParseError:
        tok = tok or self._current()
        return ParseError(message, tok.line, tok.column)

    # ------------------------------------------------------------------
    # Module items
    # ------------------------------------------------------------------

    def _parse_module_item(self) -> Statement:
        """Parse one top-level item: an import, an export, or a statement."""
        if self._check("import"):
            return self._parse_import()
        if self._check("export"):
            return self._parse_export()
        return self._parse_statement()

    def _parse_import(self) -> ImportDeclaration:
        """Parse: import { a [as b], ... } from "source" | import "source" """
        self._expect("import")
        if self._current().type == TokenType.STRING:
            source = self._expect_string()
            self._consume_semicolon()
            return ImportDeclaration(source=source)
        if self._check("*"):
            raise self._error("Namespace imports are not supported")
        if not self._check("{"):
            raise self._error("Default imports are not supported")
        self._advance()  # consume {
        specifiers: list[ImportSpecifier] = []
        while not self._check("}"):
            imported = self._expect_property_name()
            if imported.name == "default":
                raise self._error("Default imports are not supported")
            local = Identifier(name=imported.name)
            if self._check_contextual("as"):
                self._advance()
                local = self._expect_identifier()
            specifiers.append(ImportSpecifier(imported=imported, local=local))
            if not self._check("}"):
                self._expect(",")
        self._expect("}")
        self._expect_contextual("from")
        source = self._expect_string()
        self._consume_semicolon()
        return ImportDeclaration(specifiers=specifiers, source=source)

    def _parse_export(self) -> ExportNamedDeclaration:
        """Parse: export <declaration> | export { a [as b], ... } [from "source"]"""
        self._expect("export")
        if self._check("default"):
            raise self._error("Default exports are not supported")
        if self._check("*"):
            raise self._error("'export *' is not supported")
        if self._check("function"):
            return ExportNamedDeclaration(declaration=self._parse_function_declaration())
        if self._check("var", "let", "const"):
            declaration = self._parse_variable_declaration()
            _check_const_initializers(declaration, self)
            self._consume_semicolon()
            return ExportNamedDeclaration(declaration=declaration)
        if not self._check("{"):
            raise self._error(f"Unexpected token {_describe(self._current())} after 'export'")
        self._advance()  # consume {
        specifiers: list[ExportSpecifier] = []
        while not self._check("}"):
            local = self._expect_property_name()
            exported = Identifier(name=local.name)
            if self._check_contextual("as"):
                self._advance()
                exported = self._expect_property_name()
            if exported.name == "default":
                raise self._error("Default exports are not supported")
            specifiers.append(ExportSpecifier(local=local, exported=exported))
            if not self._check("}"):
                self._expect(",")
        self._expect("}")
        source: LiteralExpression | None = None
        if self._check_contextual("from"):
            self._advance()
            source = self._expect_string()
        self._consume_semicolon()
        return ExportNamedDeclaration(specifiers=specifiers, source=source)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Statement:
        """Parse a single statement."""
        tok = self._current()
        if tok.type == TokenType.EOF:
            raise self._error("Unexpected end of input")
        if self._check("{"):
            return self._parse_block()
        if self._check(";"):
            self._advance()
            return EmptyStatement()
        if self._check("function"):
            return self._parse_function_declaration()
        if self._check("var", "let", "const"):
            declaration = self._parse_variable_declaration()
            _check_const_initializers(declaration, self)
            self._consume_semicolon()
            return declaration
        if self._check("if"):
            return self._parse_if()
        if self._check("for"):
            return self._parse_for()
        if self._check("while"):
            self._advance()
            test = self._parse_parenthesized()
            return WhileStatement(test=test, body=self._parse_statement())
        if self._check("do"):
            return self._parse_do_while()
        if self._check("return"):
            return self._parse_return()
        if self._check("break", "continue"):
            return self._parse_jump()
        if self._check("throw"):
            return self._parse_throw()
        if self._check("try"):
            return self._parse_try()
        if self._check("switch"):
            return self._parse_switch()
        if self._check("import", "export"):
            raise self._error(f"'{tok.value}' is only allowed at the top level")
        if tok.type == TokenType.KEYWORD and tok.value in _UNSUPPORTED_KEYWORDS:
            raise self._error(_UNSUPPORTED_KEYWORDS[tok.value])

        expression = self._parse_expression()
        if isinstance(expression, Identifier) and self._check(":"):
            raise self._error("Labeled statements are not supported", tok)
        self._consume_semicolon()
        return ExpressionStatement(expression=expression)

    def _parse_block(self) -> BlockStatement:
        """Parse: { statement* }"""
        self._expect("{")
        body: list[Statement] = []
        while not self._check("}"):
            if self._at_end():
                raise self._error("Expected '}', got end of input")
            body.append(self._parse_statement())
        self._expect("}")
        return BlockStatement(body=body)

    def _parse_parenthesized(self) -> Expression:
        """Parse: ( expression )"""
        self._expect("(")
        expression = self._parse_expression()
        self._expect(")")
        return expression

    def _parse_variable_declaration(self, allow_in: bool = True) -> VariableDeclaration:
        """Parse: var|let|const name [= init] (, name [= init])*  (no trailing ';')"""
        kind_tok = self._advance()
        declarations = [self._parse_declarator(allow_in)]
        while self._check(","):
            self._advance()
            declarations.append(self._parse_declarator(allow_in))
        return VariableDeclaration(declaration_kind=kind_tok.value, declarations=declarations)

    def _parse_declarator(self, allow_in: bool) -> VariableDeclarator:
        if self._check("[", "{"):
            raise self._error("Destructuring patterns are not supported")
        name = self._expect_identifier()
        init: Expression | None = None
        if self._check("="):
            self._advance()
            init = self._parse_assignment(allow_in)
        return VariableDeclarator(id=name, init=init)

    def _parse_function_declaration(self) -> FunctionDeclaration:
        """Parse: function name(params) { body }"""
        self._expect("function")
        if self._check("*"):
            raise self._error("Generators are not supported")
        name = self._expect_identifier()
        params = self._parse_params()
        return FunctionDeclaration(id=name, params=params, body=self._parse_block())

    def _parse_params(self) -> list[Identifier]:
        """Parse: ( name (, name)* [,] )"""
        self._expect("(")
        params: list[Identifier] = []
        while not self._check(")"):
            if self._check("..."):
                raise self._error("Rest parameters are not supported")
            if self._check("[", "{"):
                raise self._error("Destructuring patterns are not supported")
            params.append(self._expect_identifier())
            if self._check("="):
                raise self._error("Default parameter values are not supported")
            if not self._check(")"):
                self._expect(",")
        self._expect(")")
        return params

    def _parse_if(self) -> IfStatement:
        """Parse: if (test) consequent [else alternate]"""
        self._expect("if")
        test = self._parse_parenthesized()
        consequent = self._parse_statement()
        alternate: Statement | None = None
        if self._check("else"):
            self._advance()
            alternate = self._parse_statement()
        return IfStatement(test=test, consequent=consequent, alternate=alternate)

    def _parse_for(self) -> ForStatement | ForInStatement | ForOfStatement:
        """Parse the three for-loop forms: for(;;), for-in, and for-of."""
        self._expect("for")
        self._expect("(")
        init: VariableDeclaration | Expression | None = None
        if self._check("var", "let", "const"):
            declaration = self._parse_variable_declaration(allow_in=False)
            if self._check("in") or self._check_contextual("of"):
                if len(declaration.declarations) != 1 or declaration.declarations[0].init is not None:
                    raise self._error("Invalid left-hand side in for-in/for-of loop")
                return self._parse_for_in_of(declaration)
            _check_const_initializers(declaration, self)
            init = declaration
        elif not self._check(";"):
            expression = self._parse_expression(allow_in=False)
            if self._check("in") or self._check_contextual("of"):
                if not isinstance(expression, Identifier | MemberExpression):
                    raise self._error("Invalid left-hand side in for-in/for-of loop")
                return self._parse_for_in_of(expression)
            init = expression
        self._expect(";")
        test = None if self._check(";") else self._parse_expression()
        self._expect(";")
        update = None if self._check(")") else self._parse_expression()
        self._expect(")")
        return ForStatement(init=init, test=test, update=update, body=self._parse_statement())

    def _parse_for_in_of(self, left: VariableDeclaration | Expression) -> ForInStatement | ForOfStatement:
        if self._check("in"):
            self._advance()
            right = self._parse_expression()
            self._expect(")")
            return ForInStatement(left=left, right=right, body=self._parse_statement())
        self._expect_contextual("of")
        right = self._parse_assignment()
        self._expect(")")
        return ForOfStatement(left=left, right=right, body=self._parse_statement())

    def _parse_do_while(self) -> DoWhileStatement:
        """Parse: do body while (test) [;]"""
        self._expect("do")
        body = self._parse_statement()
        self._expect("while")
        test = self._parse_parenthesized()
        if self._check(";"):
            self._advance()
        return DoWhileStatement(body=body, test=test)

    def _parse_return(self) -> ReturnStatement:
        """Parse: return [argument]; a line break ends the statement."""
        self._expect("return")
        tok = self._current()
        argument: Expression | None = None
        if not (self._check(";", "}") or tok.type == TokenType.EOF or tok.newline_before):
            argument = self._parse_expression()
        self._consume_semicolon()
        return ReturnStatement(argument=argument)

    def _parse_jump(self) -> BreakStatement | ContinueStatement:
        keyword = self._advance()
        tok = self._current()
        if tok.type == TokenType.IDENTIFIER and not tok.newline_before:
            raise self._error("Labeled statements are not supported")
        self._consume_semicolon()
        if keyword.value == "break":
            return BreakStatement()
        return ContinueStatement()

    def _parse_throw(self) -> ThrowStatement:
        self._expect("throw")
        if self._current().newline_before:
            raise self._error("Illegal newline after 'throw'")
        argument = self._parse_expression()
        self._consume_semicolon()
        return ThrowStatement(argument=argument)

    def _parse_try(self) -> TryStatement:
        """Parse: try { } [catch [(param)] { }] [finally { }]"""
        self._expect("try")
        block = self._parse_block()
        handler: CatchClause | None = None
        finalizer: BlockStatement | None = None
        if self._check("catch"):
            self._advance()
            param: Identifier | None = None
            if self._check("("):
                self._advance()
                if self._check("[", "{"):
                    raise self._error("Destructuring patterns are not supported")
                param = self._expect_identifier()
                self._expect(")")
            handler = CatchClause(param=param, body=self._parse_block())
        if self._check("finally"):
            self._advance()
            finalizer = self._parse_block()
        if handler is None and finalizer is None:
            raise self._error("Missing catch or finally after try")
        return TryStatement(block=block, handler=handler, finalizer=finalizer)

    def _parse_switch(self) -> SwitchStatement:
        """Parse: switch (discriminant) { case test: ... default: ... }"""
        self._expect("switch")
        discriminant = self._parse_parenthesized()
        self._expect("{")
        cases: list[SwitchCase] = []
        while not self._check("}"):
            test: Expression | None = None
            if self._check("case"):
                self._advance()
                test = self._parse_expression()
            else:
                self._expect("default")
            self._expect(":")
            consequent: list[Statement] = []
            while not self._check("case", "default", "}"):
                if self._at_end():
                    raise self._error("Expected '}', got end of input")
                consequent.append(self._parse_statement())
            cases.append(SwitchCase(test=test, consequent=consequent))
        self._expect("}")
        return SwitchStatement(discriminant=discriminant, cases=cases)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self, allow_in: bool = True) -> Expression:
        """Parse: assignment (, assignment)*"""
        expression = self._parse_assignment(allow_in)
        if not self._check(","):
            return expression
        expressions = [expression]
        while self._check(","):
            self._advance()
            expressions.append(self._parse_assignment(allow_in))
        return SequenceExpression(expressions=expressions)

    def _parse_assignment(self, allow_in: bool = True) -> Expression:
        """Parse an arrow function, an assignment, or a conditional expression."""
        if self._is_arrow_ahead():
            return self._parse_arrow(allow_in)
        left = self._parse_conditional(allow_in)
        tok = self._current()
        if tok.type == TokenType.PUNCTUATOR and tok.value in _ASSIGNMENT_OPERATORS:
            if not isinstance(left, Identifier | MemberExpression):
                raise self._error("Invalid assignment target")
            self._advance()
            right = self._parse_assignment(allow_in)
            return AssignmentExpression(operator=tok.value, left=left, right=right)
        return left

    def _is_arrow_ahead(self) -> bool:
        """Look ahead for `name =>` or a parenthesized list followed by `=>`."""
        tok = self._current()
        if tok.type == TokenType.IDENTIFIER:
            nxt = self._peek()
            return _is_symbol(nxt, ("=>",)) and not nxt.newline_before
        if not self._check("("):
            return False
        depth = 0
        index = self._pos
        while index < len(self._tokens):
            t = self._tokens[index]
            if t.type == TokenType.EOF:
                return False
            if _is_symbol(t, ("(",)):
                depth += 1
            elif _is_symbol(t, (")",)):
                depth -= 1
                if depth == 0:
                    break
            index += 1
        if index + 1 >= len(self._tokens):
            return False
        nxt = self._tokens[index + 1]
        return _is_symbol(nxt, ("=>",)) and not nxt.newline_before

    def _parse_arrow(self, allow_in: bool) -> ArrowFunctionExpression:
        """Parse: name => body | (params) => body"""
        if self._current().type == TokenType.IDENTIFIER:
            params = [self._expect_identifier()]
        else:
            params = self._parse_params()
        self._expect("=>")
        if self._check("{"):
            return ArrowFunctionExpression(params=params, body=self._parse_block())
        return ArrowFunctionExpression(params=params, body=self._parse_assignment(allow_in))

    def _parse_conditional(self, allow_in: bool) -> Expression:
        """Parse: binary [? assignment : assignment]"""
        test = self._parse_binary(1, allow_in)
        if not self._check("?"):
            return test
        self._advance()
        consequent = self._parse_assignment()
        self._expect(":")
        alternate = self._parse_assignment(allow_in)
        return ConditionalExpression(test=test, consequent=consequent, alternate=alternate)

    def _parse_binary(self, min_precedence: int, allow_in: bool) -> Expression:
        """Precedence-climbing parser for binary and logical operators."""
        expression, _ = self._parse_binary_chain(min_precedence, allow_in)
        return expression

    def _parse_binary_chain(self, min_precedence: int, allow_in: bool) -> tuple[Expression, set[str]]:
        """Parse a binary expression; also return the operators it combines outside parentheses."""
        first = self._current()
        unary_left = first.type in (TokenType.PUNCTUATOR, TokenType.KEYWORD) and first.value in _UNARY_OPERATORS
        left = self._parse_unary()
        operators: set[str] = set()
        while True:
            tok = self._current()
            if tok.type not in (TokenType.PUNCTUATOR, TokenType.KEYWORD):
                break
            operator = tok.value
            precedence = _BINARY_PRECEDENCE.get(operator)
            if precedence is None or precedence < min_precedence:
                break
            if operator == "in" and not allow_in:
                break
            if operator == "**" and unary_left:
                raise self._error("Unary operator before '**' needs parentheses", tok)
            self._advance()
            # '**' is right-associative; everything else associates left.
            next_min = precedence if operator == "**" else precedence + 1
            right, right_operators = self._parse_binary_chain(next_min, allow_in)
            operators |= right_operators
            operators.add(operator)
            if "??" in operators and operators & {"||", "&&"}:
                raise self._error("'??' cannot be mixed with '||' or '&&' without parentheses", tok)
            if operator in _LOGICAL_OPERATORS:
                left = LogicalExpression(operator=operator, left=left, right=right)
            else:
                left = BinaryExpression(operator=operator, left=left, right=right)
            unary_left = False
        return left, operators

    def _parse_unary(self) -> Expression:
        """Parse prefix operators, then a postfix expression."""
        tok = self._current()
        if tok.type in (TokenType.PUNCTUATOR, TokenType.KEYWORD) and tok.value in _UNARY_OPERATORS:
            self._advance()
            return UnaryExpression(operator=tok.value, argument=self._parse_unary())
        if self._check("++", "--"):
            self._advance()
            argument = self._parse_unary()
            self._check_update_target(argument, tok)
            return UpdateExpression(operator=tok.value, prefix=True, argument=argument)
        expression = self._parse_left_hand_side()
        if self._check("++", "--") and not self._current().newline_before:
            operator = self._advance()
            self._check_update_target(expression, operator)
            return UpdateExpression(operator=operator.value, prefix=False, argument=expression)
        return expression

    def _check_update_target(self, argument: Expression, tok: Token) -> None:
        if not isinstance(argument, Identifier | MemberExpression):
            raise self._error(f"Invalid operand for {tok.value!r}", tok)

    def _parse_left_hand_side(self) -> Expression:
        """Parse a primary or `new` expression followed by calls and member accesses."""
        if self._check("new"):
            expression = self._parse_new()
        else:
            expression = self._parse_primary()
        return self._parse_call_tail(expression, allow_call=True)

    def _parse_new(self) -> NewExpression:
        """Parse: new callee [(arguments)]"""
        self._expect("new")
        if self._check("."):
            raise self._error("'new.target' is not supported")
        callee = self._parse_new() if self._check("new") else self._parse_primary()
        callee = self._parse_call_tail(callee, allow_call=False)
        arguments = self._parse_arguments() if self._check("(") else []
        return NewExpression(callee=callee, arguments=arguments)

    def _parse_call_tail(self, expression: Expression, allow_call: bool) -> Expression:
        """Parse a chain of `.name`, `[expr]`, and (when allowed) `(args)` suffixes."""
        while True:
            if self._check("."):
                self._advance()
                name = self._expect_property_name()
                expression = MemberExpression(object=expression, property=name)
            elif self._check("["):
                self._advance()
                prop = self._parse_expression()
                self._expect("]")
                expression = MemberExpression(object=expression, property=prop, computed=True)
            elif allow_call and self._check("("):
                expression = CallExpression(callee=expression, arguments=self._parse_arguments())
            elif self._check("?."):
                raise self._error("Optional chaining is not supported")
            else:
                return expression

    def _parse_arguments(self) -> list[Expression]:
        """Parse: ( assignment (, assignment)* [,] )"""
        self._expect("(")
        arguments: list[Expression] = []
        while not self._check(")"):
            if self._check("..."):
                raise self._error("Spread arguments are not supported")
            arguments.append(self._parse_assignment())
            if not self._check(")"):
                self._expect(",")
        self._expect(")")
        return arguments

    def _parse_primary(self) -> Expression:
        """Parse identifiers, literals, `this`, function expressions, and bracketed forms."""
        tok = self._current()
        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(name=tok.value)
        if tok.type == TokenType.NUMBER:
            self._advance()
            return LiteralExpression(value=_number_value(tok.value), raw=tok.value)
        if tok.type == TokenType.STRING:
            self._advance()
            return LiteralExpression(value=tok.value)
        if tok.type == TokenType.EOF:
            raise self._error("Unexpected end of input")
        if tok.type == TokenType.KEYWORD:
            if tok.value in ("true", "false"):
                self._advance()
                return LiteralExpression(value=tok.value == "true")
            if tok.value == "null":
                self._advance()
                return LiteralExpression(value=None)
            if tok.value == "this":
                self._advance()
                return ThisExpression()
            if tok.value == "function":
                return self._parse_function_expression()
            if tok.value in _UNSUPPORTED_KEYWORDS:
                raise self._error(_UNSUPPORTED_KEYWORDS[tok.value])
            raise self._error(f"Unexpected token {_describe(tok)}")
        if self._check("("):
            return self._parse_parenthesized()
        if self._check("["):
            return self._parse_array()
        if self._check("{"):
            return self._parse_object()
        if self._check("/", "/="):
            raise self._error("Regular expression literals are not supported")
        raise self._error(f"Unexpected token {_describe(tok)}")

    def _parse_function_expression(self) -> FunctionExpression:
        """Parse: function [name](params) { body }"""
        self._expect("function")
        if self._check("*"):
            raise self._error("Generators are not supported")
        name: Identifier | None = None
        if self._current().type == TokenType.IDENTIFIER:
            name = self._expect_identifier()
        params = self._parse_params()
        return FunctionExpression(id=name, params=params, body=self._parse_block())

    def _parse_array(self) -> ArrayExpression:
        """Parse: [ element? (, element?)* ]; empty slots become holes."""
        self._expect("[")
        elements: list[Expression | None] = []
        while not self._check("]"):
            if self._check(","):
                self._advance()
                elements.append(None)
                continue
            if self._check("..."):
                raise self._error("Spread elements are not supported")
            elements.append(self._parse_assignment())
            if not self._check("]"):
                self._expect(",")
        self._expect("]")
        return ArrayExpression(elements=elements)

    def _parse_object(self) -> ObjectExpression:
        """Parse: { property (, property)* [,] }"""
        self._expect("{")
        properties: list[Property] = []
        while not self._check("}"):
            properties.append(self._parse_property())
            if not self._check("}"):
                self._expect(",")
        self._expect("}")
        return ObjectExpression(properties=properties)

    def _parse_property(self) -> Property:
        """Parse `key: value`, a shorthand `name`, or a method `key(params) { }`."""
        tok = self._current()
        computed = False
        key: Expression
        if self._check("..."):
            raise self._error("Spread properties are not supported")
        if self._check("["):
            self._advance()
            key = self._parse_assignment()
            self._expect("]")
            computed = True
        elif tok.type in (TokenType.IDENTIFIER, TokenType.KEYWORD):
            key = self._expect_property_name()
        elif tok.type == TokenType.STRING:
            key = self._expect_string()
        elif tok.type == TokenType.NUMBER:
            self._advance()
            key = LiteralExpression(value=_number_value(tok.value), raw=tok.value)
        else:
            raise self._error(f"Unexpected token {_describe(tok)} in object literal")

        if self._check(":"):
            self._advance()
            return Property(key=key, value=self._parse_assignment(), computed=computed)
        if self._check("("):
            params = self._parse_params()
            method = FunctionExpression(params=params, body=self._parse_block())
            return Property(key=key, value=method, computed=computed, method=True)
        if tok.type == TokenType.IDENTIFIER and not computed:
            if tok.value in ("get", "set") and self._current().type in (TokenType.IDENTIFIER, TokenType.KEYWORD):
                raise self._error("Getters and setters are not supported")
            return Property(key=key, value=Identifier(name=tok.value), shorthand=True)
        raise self._error(f"Expected ':', got {_describe(self._current())}")


# ------------------------------------------------------------------
# Module-level helper functions
# ------------------------------------------------------------------


def _is_symbol(tok: Token, values: tuple[str, ...]) -> bool:
    """Return True if *tok* is a punctuator or keyword spelled as one of *values*."""
    return tok.type in (TokenType.PUNCTUATOR, TokenType.KEYWORD) and tok.value in values


def _describe(tok: Token) -> str:
    """Return a human-readable description of a token for error messages."""
    if tok.type == TokenType.EOF:
        return "end of input"
    return repr(tok.value)


def _check_const_initializers(declaration: VariableDeclaration, parser: _Parser) -> None:
    """Reject `const` declarators without an initializer."""
    if declaration.declaration_kind != "const":
        return
    for declarator in declaration.declarations:
        if declarator.init is None:
            raise parser._error(f"Missing initializer in const declaration '{declarator.id.name}'")
