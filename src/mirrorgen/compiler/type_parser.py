# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for declared field types.

Grammar::

    type := base "?"?
    base := "List" "<" type ">"
          | "MutableSet" "<" type ">"
          | "Optional" "<" type ">"
          | "Map" "<" type "," type ">"
          | IDENTIFIER
"""

from __future__ import annotations

from typing import NoReturn

from mirrorgen.compiler.classifier import is_primitive_name
from mirrorgen.model.mapping import MappingError
from mirrorgen.model.types import (
    ListTypeExpr,
    MapTypeExpr,
    OptionalTypeExpr,
    PrimitiveType,
    PrimitiveTypeExpr,
    ReferenceTypeExpr,
    SetTypeExpr,
    TypeExpr,
)
from mirrorgen.parser.lexer import LexerError, Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class UnparsableTypeError(MappingError):
    """Raised when declared-type text does not match any type shape.

    Attributes:
        text: The declared-type text that failed to parse.
    """

    def __init__(self, message: str, text: str) -> None:
        super().__init__(f"Cannot parse type {text!r}: {message}")
        self.text = text


class MalformedMapTypeError(UnparsableTypeError):
    """Raised when a ``Map<...>`` type does not have exactly two scalar-keyed arguments."""


def parse_type(text: str) -> TypeExpr:
    """Parse declared-type text into a type expression.

    Args:
        text: The declared type, e.g. ``"Map<String, List<Person>>"``.

    Returns:
        The parsed type expression.

    Raises:
        UnparsableTypeError: If the text is empty, malformed, or nests an
            optional directly inside another optional.
        MalformedMapTypeError: If a map does not have exactly two type
            arguments or its key is not a scalar name.
    """
    try:
        tokens = tokenize(text)
    except LexerError as exc:
        raise UnparsableTypeError(str(exc), text) from exc
    return _TypeParser(tokens, text).parse()


# ################
# Implementation
# ################

_WRAPPER_NAMES: frozenset[str] = frozenset({"List", "MutableSet", "Optional", "Map"})


class _TypeParser:
    """Recursive-descent parser over the tokens of one declared type."""

    def __init__(self, tokens: list[Token], text: str) -> None:
        self._tokens = tokens
        self._text = text
        self._pos = 0

    def parse(self) -> TypeExpr:
        """Parse the complete token stream as a single type."""
        if self._check(TokenType.EOF):
            raise UnparsableTypeError("empty type", self._text)
        expr = self._parse_type()
        if not self._check(TokenType.EOF):
            self._fail(f"unexpected {self._current().value!r} after type")
        return expr

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _expect(self, token_type: TokenType, what: str) -> Token:
        if not self._check(token_type):
            tok = self._current()
            found = tok.value if tok.type != TokenType.EOF else "end of type"
            self._fail(f"expected {what}, got {found!r}")
        return self._advance()

    def _fail(self, message: str, error: type[UnparsableTypeError] = UnparsableTypeError) -> NoReturn:
        tok = self._current()
        raise error(f"{message} (column {tok.column})", self._text)

    # ------------------------------------------------------------------
    # Grammar rules
    # ------------------------------------------------------------------

    def _parse_type(self) -> TypeExpr:
        expr = self._parse_base()
        if self._check(TokenType.QUESTION):
            if isinstance(expr, OptionalTypeExpr):
                self._fail("an optional type cannot be optional again")
            self._advance()
            expr = OptionalTypeExpr(inner_type=expr)
            if self._check(TokenType.QUESTION):
                self._fail("an optional type cannot be optional again")
        return expr

    def _parse_base(self) -> TypeExpr:
        name = self._expect(TokenType.IDENTIFIER, "a type name").value
        if name in _WRAPPER_NAMES:
            return self._parse_wrapper(name)
        if is_primitive_name(name):
            return PrimitiveTypeExpr(primitive=PrimitiveType(name))
        return ReferenceTypeExpr(name=name)

    def _parse_wrapper(self, name: str) -> TypeExpr:
        if not self._check(TokenType.LANGLE):
            self._fail(f"expected '<' after {name!r}")
        arguments = self._parse_arguments()
        if name == "Map":
            return self._build_map(arguments)
        if len(arguments) != 1:
            self._fail(f"{name!r} takes exactly one type argument, got {len(arguments)}")
        (inner,) = arguments
        if name == "List":
            return ListTypeExpr(element_type=inner)
        if name == "MutableSet":
            return SetTypeExpr(element_type=inner)
        if isinstance(inner, OptionalTypeExpr):
            self._fail("an optional type cannot be optional again")
        return OptionalTypeExpr(inner_type=inner)

    def _parse_arguments(self) -> list[TypeExpr]:
        """Parse: '<' [type (',' type)*] '>'"""
        self._expect(TokenType.LANGLE, "'<'")
        arguments: list[TypeExpr] = []
        if not self._check(TokenType.RANGLE):
            arguments.append(self._parse_type())
            while self._check(TokenType.COMMA):
                self._advance()  # consume ,
                arguments.append(self._parse_type())
        self._expect(TokenType.RANGLE, "',' or '>'")
        return arguments

    def _build_map(self, arguments: list[TypeExpr]) -> MapTypeExpr:
        if len(arguments) != 2:
            self._fail(
                f"'Map' takes exactly two type arguments, got {len(arguments)}",
                MalformedMapTypeError,
            )
        key, value = arguments
        if not isinstance(key, (PrimitiveTypeExpr, ReferenceTypeExpr)):
            self._fail("'Map' keys must be a scalar type name", MalformedMapTypeError)
        return MapTypeExpr(key_type=key, value_type=value)
