# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for bundled ES modules.

Converts raw source text into a sequence of tokens for subsequent parsing.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """Token categories produced by the scanner."""

    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"
    PUNCTUATOR = "PUNCTUATOR"
    STRING = "STRING"
    NUMBER = "NUMBER"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (decoded content for STRING tokens).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
        newline_before: True if a line terminator separates this token from
            the previous one.  Drives automatic semicolon insertion.
    """

    type: TokenType
    value: str
    line: int
    column: int
    newline_before: bool = False


class LexerError(Exception):
    """Raised when the scanner encounters an invalid character or unterminated literal.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


KEYWORDS: frozenset[str] = frozenset(
    {
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "let",
        "new",
        "null",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    }
)


def tokenize(source: str) -> list[Token]:
    """Tokenize module source text into a sequence of tokens.

    Comments and whitespace are consumed and not included in the output; a
    line break inside them still marks the next token with ``newline_before``.

    Args:
        source: The full text of a module.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unexpected characters, unterminated string literals or
            block comments, malformed numbers, and template literals.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

# Longest first so that maximal munch picks ">>>=" over ">>" over ">".
_PUNCTUATORS: tuple[str, ...] = (
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    ">>",
    "**",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ";",
    ",",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    "=",
    ".",
)

_LINE_TERMINATORS = "\n\r\u2028\u2029"

_SIMPLE_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def _is_identifier_start(ch: str) -> bool:
    return ch != "" and (ch.isalpha() or ch in "$_")


def _is_identifier_part(ch: str) -> bool:
    return ch != "" and (ch.isalnum() or ch in "$_")


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._newline_pending = False
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_whitespace_and_comments()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._emit(TokenType.EOF, "", self._line, self._column)
        return self._tokens

    def _emit(self, token_type: TokenType, value: str, line: int, col: int) -> None:
        self._tokens.append(Token(token_type, value, line, col, self._newline_pending))
        self._newline_pending = False

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' past the end."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch in _LINE_TERMINATORS:
            # "\r\n" counts as a single line break.
            if not (ch == "\r" and self._current() == "\n"):
                self._line += 1
                self._column = 1
        else:
            self._column += 1
        return ch

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comment runs at the current position."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in _LINE_TERMINATORS:
                self._newline_pending = True
                self._advance()
            elif ch.isspace() or ch == "\ufeff":
                self._advance()
            elif ch == "/" and self._peek() == "/":
                self._skip_line_comment()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _skip_line_comment(self) -> None:
        """Consume from '//' through end-of-line (exclusive of the newline itself)."""
        while self._pos < len(self._source) and self._current() not in _LINE_TERMINATORS:
            self._advance()

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the matching '*/'."""
        start_line = self._line
        start_col = self._column
        self._advance()  # /
        self._advance()  # *
        while self._pos < len(self._source):
            if self._current() == "*" and self._peek() == "/":
                self._advance()  # *
                self._advance()  # /
                return
            if self._current() in _LINE_TERMINATORS:
                self._newline_pending = True
            self._advance()
        raise LexerError("Unterminated block comment", start_line, start_col)

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch in "\"'":
            self._scan_string(line, col)
        elif ch.isdigit() or (ch == "." and self._peek().isdigit()):
            self._scan_number(line, col)
        elif _is_identifier_start(ch):
            self._scan_identifier_or_keyword(line, col)
        elif ch == "`":
            raise LexerError("Template literals are not supported", line, col)
        else:
            self._scan_punctuator(line, col)

    def _scan_punctuator(self, line: int, col: int) -> None:
        """Scan the longest punctuator starting at the current position."""
        for punct in _PUNCTUATORS:
            if self._source.startswith(punct, self._pos):
                # "?." followed by a digit is a conditional and a number (a?.5:b).
                if punct == "?." and self._peek(2).isdigit():
                    continue
                for _ in punct:
                    self._advance()
                self._emit(TokenType.PUNCTUATOR, punct, line, col)
                return
        raise LexerError(f"Unexpected character: {self._current()!r}", line, col)

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_string(self, line: int, col: int) -> None:
        """Scan a single- or double-quoted string literal with escape sequences."""
        quote = self._advance()
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == quote:
                self._advance()  # closing quote
                self._emit(TokenType.STRING, "".join(chars), line, col)
                return
            if ch in "\n\r":
                raise LexerError("Unterminated string literal", line, col)
            if ch == "\\":
                self._advance()
                if self._pos >= len(self._source):
                    raise LexerError("Unterminated string literal", line, col)
                chars.append(self._scan_escape())
            else:
                chars.append(ch)
                self._advance()
        raise LexerError("Unterminated string literal", line, col)

    def _scan_escape(self) -> str:
        """Decode the escape sequence following a backslash."""
        line = self._line
        col = self._column
        esc = self._advance()
        if esc in _SIMPLE_ESCAPES and not (esc == "0" and self._current().isdigit()):
            return _SIMPLE_ESCAPES[esc]
        if esc in _LINE_TERMINATORS:
            # Line continuation.
            if esc == "\r" and self._current() == "\n":
                self._advance()
            return ""
        if esc == "x":
            return chr(self._read_hex_digits(2, line, col))
        if esc == "u":
            if self._current() == "{":
                self._advance()
                start = self._pos
                while self._pos < len(self._source) and self._current() != "}":
                    self._advance()
                digits = self._source[start : self._pos]
                if self._current() != "}" or not digits:
                    raise LexerError("Invalid unicode escape sequence", line, col)
                self._advance()  # }
                try:
                    return chr(int(digits, 16))
                except ValueError:
                    raise LexerError("Invalid unicode escape sequence", line, col) from None
            return chr(self._read_hex_digits(4, line, col))
        if esc.isdigit():
            raise LexerError(f"Octal escape sequences are not supported: '\\{esc}'", line, col)
        return esc

    def _read_hex_digits(self, count: int, line: int, col: int) -> int:
        digits = self._source[self._pos : self._pos + count]
        if len(digits) != count or any(d not in "0123456789abcdefABCDEF" for d in digits):
            raise LexerError("Invalid hexadecimal escape sequence", line, col)
        for _ in range(count):
            self._advance()
        return int(digits, 16)

    def _scan_number(self, line: int, col: int) -> None:
        """Scan a numeric literal; the token value keeps the source spelling."""
        start = self._pos
        if self._current() == "0" and self._peek() in ("x", "X", "o", "O", "b", "B"):
            base_char = self._peek().lower()
            allowed = {"x": "0123456789abcdefABCDEF", "o": "01234567", "b": "01"}[base_char]
            self._advance()  # 0
            self._advance()  # x / o / b
            digits_start = self._pos
            while self._pos < len(self._source) and self._current() in allowed:
                self._advance()
            if self._pos == digits_start:
                raise LexerError("Missing digits in numeric literal", line, col)
        else:
            self._consume_digits()
            if self._current() == ".":
                self._advance()
                self._consume_digits()
            if self._current() in ("e", "E"):
                self._advance()
                if self._current() in ("+", "-"):
                    self._advance()
                if not self._current().isdigit():
                    raise LexerError("Missing exponent in numeric literal", line, col)
                self._consume_digits()
        if _is_identifier_start(self._current()):
            raise LexerError("Identifier starts immediately after numeric literal", self._line, self._column)
        self._emit(TokenType.NUMBER, self._source[start : self._pos], line, col)

    def _consume_digits(self) -> None:
        while self._pos < len(self._source) and self._current().isdigit():
            self._advance()

    def _scan_identifier_or_keyword(self, line: int, col: int) -> None:
        """Scan an identifier and classify it as a keyword if reserved."""
        start = self._pos
        while self._pos < len(self._source) and _is_identifier_part(self._current()):
            self._advance()
        value = self._source[start : self._pos]
        token_type = TokenType.KEYWORD if value in KEYWORDS else TokenType.IDENTIFIER
        self._emit(token_type, value, line, col)
