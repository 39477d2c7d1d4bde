# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Scanner and parser for bundled ES modules."""

from emlib.parser.lexer import LexerError, Token, TokenType, tokenize
from emlib.parser.parser import ParseError, parse

__all__ = [
    "parse",
    "ParseError",
    "tokenize",
    "Token",
    "TokenType",
    "LexerError",
]
