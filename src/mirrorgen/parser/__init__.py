# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer shared by the .mirror schema parser and the declared-type parser."""

from mirrorgen.parser.lexer import LexerError, Token, TokenType, tokenize

__all__ = [
    "tokenize",
    "Token",
    "TokenType",
    "LexerError",
]
