# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for .mirror schema files.

Converts a token stream produced by the lexer into a SchemaFile model.
Field types are captured as declared-type text; they are parsed into type
expressions by the mapping plan compiler, not here.
"""

import keyword

from mirrorgen.compiler.classifier import is_primitive_name
from mirrorgen.model.entities import EnumDecl, MirrorRequest, RecordDecl, SchemaFile
from mirrorgen.model.types import FieldDescriptor
from mirrorgen.parser.lexer import Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


class NotARecordDeclarationError(ParseError):
    """Raised when ``@mirror`` is attached to something other than a record."""


def parse(source: str) -> SchemaFile:
    """Parse schema source text into a SchemaFile model.

    Args:
        source: The full text of a .mirror file.

    Returns:
        A SchemaFile instance with records and enums in declaration order.

    Raises:
        LexerError: If the source contains invalid characters or unterminated literals.
        NotARecordDeclarationError: If ``@mirror`` precedes anything but a record.
        ParseError: If the source is otherwise syntactically invalid.
    """
    tokens = tokenize(source)
    return _Parser(tokens).parse()


# ################
# Implementation
# ################

_MIRROR_ATTRIBUTE = "mirror"
_PERSISTED_ATTRIBUTE = "persisted"

_RESERVED_TYPE_NAMES: frozenset[str] = frozenset({"List", "MutableSet", "Map", "Optional"})

_KEYWORD_TYPES: frozenset[TokenType] = frozenset({TokenType.RECORD, TokenType.ENUM})

# Methods every mirror class defines.
_MIRROR_METHOD_NAMES: frozenset[str] = frozenset({"from_persisted", "build_persisted_object"})

# Names bound by the imports of a generated module.
_GENERATED_MODULE_NAMES: frozenset[str] = frozenset({"dataclass", "datetime", "immutabledict", "observable"})


class _Parser:
    """Recursive-descent parser for schema token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._declared: set[str] = set()

    def parse(self) -> SchemaFile:
        """Parse the full token stream and return a SchemaFile."""
        result = SchemaFile()
        while not self._at_end():
            self._parse_top_level(result)
        return result

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _peek_type(self) -> TokenType:
        """Return the token type of the current token."""
        return self._tokens[self._pos].type

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._peek_type() == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            raise ParseError(
                f"Expected {expected}, got {tok.value!r}",
                tok.line,
                tok.column,
            )
        return self._advance()

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without consuming)."""
        return self._peek_type() in types

    def _expect_name_token(self) -> Token:
        """Consume the current token as a field name.

        Accepts identifiers and schema keywords used in name positions (e.g. a
        field named 'record'). Raises ParseError for structural tokens, EOF,
        Python keywords and the names of the generated mirror methods.
        """
        tok = self._current()
        if tok.type != TokenType.IDENTIFIER and tok.type not in _KEYWORD_TYPES:
            raise ParseError(
                f"Expected field name, got {tok.value!r}",
                tok.line,
                tok.column,
            )
        if keyword.iskeyword(tok.value):
            raise ParseError(f"Field name {tok.value!r} is a Python keyword", tok.line, tok.column)
        if tok.value in _MIRROR_METHOD_NAMES:
            raise ParseError(
                f"Field name {tok.value!r} clashes with a generated mirror method",
                tok.line,
                tok.column,
            )
        return self._advance()

    # ------------------------------------------------------------------
    # Top-level declarations
    # ------------------------------------------------------------------

    def _parse_top_level(self, result: SchemaFile) -> None:
        """Parse one top-level declaration, with its attributes, and append it."""
        mirrors: list[MirrorRequest] = []
        while self._check(TokenType.AT):
            mirrors.append(self._parse_mirror_attribute())

        tok = self._current()
        if mirrors and tok.type != TokenType.RECORD:
            found = "end of file" if tok.type == TokenType.EOF else repr(tok.value)
            raise NotARecordDeclarationError(
                f"'@mirror' can only be attached to a record declaration, got {found}",
                tok.line,
                tok.column,
            )
        if tok.type == TokenType.RECORD:
            record = self._parse_record()
            record.mirrors = mirrors
            result.records.append(record)
        elif tok.type == TokenType.ENUM:
            result.enums.append(self._parse_enum())
        else:
            raise ParseError(
                f"Unexpected token {tok.value!r} at top level",
                tok.line,
                tok.column,
            )

    def _parse_mirror_attribute(self) -> MirrorRequest:
        """Parse: @mirror [ '(' <mode> ')' ]"""
        at_tok = self._expect(TokenType.AT)
        name_tok = self._expect(TokenType.IDENTIFIER)
        if name_tok.value != _MIRROR_ATTRIBUTE:
            raise ParseError(
                f"Unknown declaration attribute '@{name_tok.value}'",
                name_tok.line,
                name_tok.column,
            )
        mode: str | None = None
        if self._check(TokenType.LPAREN):
            self._advance()  # consume (
            mode_tok = self._expect(TokenType.IDENTIFIER, TokenType.STRING)
            mode = mode_tok.value
            self._expect(TokenType.RPAREN)
        return MirrorRequest(mode=mode, line=at_tok.line)

    def _declare(self, name_tok: Token) -> None:
        """Register a top-level type name, rejecting duplicates and reserved names."""
        name = name_tok.value
        if keyword.iskeyword(name):
            raise ParseError(f"{name!r} is a Python keyword and cannot name a type", name_tok.line, name_tok.column)
        if name in _GENERATED_MODULE_NAMES:
            raise ParseError(
                f"{name!r} is imported by generated modules and cannot name a type",
                name_tok.line,
                name_tok.column,
            )
        if name in _RESERVED_TYPE_NAMES or is_primitive_name(name):
            raise ParseError(
                f"{name!r} is a built-in type name and cannot be redeclared",
                name_tok.line,
                name_tok.column,
            )
        if name in self._declared:
            raise ParseError(f"Duplicate declaration of {name!r}", name_tok.line, name_tok.column)
        self._declared.add(name)

    # ------------------------------------------------------------------
    # Enum declarations
    # ------------------------------------------------------------------

    def _parse_enum(self) -> EnumDecl:
        """Parse: enum <Name> { <Value>* }"""
        self._expect(TokenType.ENUM)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._declare(name_tok)
        self._expect(TokenType.LBRACE)
        enum_decl = EnumDecl(name=name_tok.value)
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            value_tok = self._expect(TokenType.IDENTIFIER)
            enum_decl.values.append(value_tok.value)
        self._expect(TokenType.RBRACE)
        return enum_decl

    # ------------------------------------------------------------------
    # Record declarations
    # ------------------------------------------------------------------

    def _parse_record(self) -> RecordDecl:
        """Parse: record <Name> { field* }"""
        self._expect(TokenType.RECORD)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._declare(name_tok)
        self._expect(TokenType.LBRACE)
        record = RecordDecl(name=name_tok.value)
        seen: set[str] = set()
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            name_line, name_col = self._current().line, self._current().column
            field = self._parse_field()
            if field.name in seen:
                raise ParseError(
                    f"Duplicate field {field.name!r} in record {record.name!r}",
                    name_line,
                    name_col,
                )
            seen.add(field.name)
            record.fields.append(field)
        self._expect(TokenType.RBRACE)
        return record

    def _parse_field(self) -> FieldDescriptor:
        """Parse: [@persisted] <name>: <type>"""
        persisted = False
        while self._check(TokenType.AT):
            self._advance()  # consume @
            attr_tok = self._expect(TokenType.IDENTIFIER)
            if attr_tok.value != _PERSISTED_ATTRIBUTE:
                raise ParseError(
                    f"Unknown field attribute '@{attr_tok.value}'",
                    attr_tok.line,
                    attr_tok.column,
                )
            persisted = True
        name_tok = self._expect_name_token()
        self._expect(TokenType.COLON)
        declared_type = self._parse_type_text()
        return FieldDescriptor(name=name_tok.value, declared_type=declared_type, persisted=persisted)

    # ------------------------------------------------------------------
    # Declared types
    # ------------------------------------------------------------------

    def _parse_type_text(self) -> str:
        """Capture the tokens of a declared type as normalized text.

        Only bracket balance is checked here; the type itself is validated
        when the field is compiled.
        """
        parts: list[str] = [self._expect(TokenType.IDENTIFIER).value]
        if self._check(TokenType.LANGLE):
            depth = 0
            while True:
                tok = self._current()
                if tok.type == TokenType.LANGLE:
                    depth += 1
                elif tok.type == TokenType.RANGLE:
                    depth -= 1
                elif tok.type not in (TokenType.IDENTIFIER, TokenType.COMMA, TokenType.QUESTION):
                    raise ParseError(
                        f"Unterminated type arguments, got {tok.value!r}",
                        tok.line,
                        tok.column,
                    )
                self._advance()
                parts.append(", " if tok.type == TokenType.COMMA else tok.value)
                if depth == 0:
                    break
        while self._check(TokenType.QUESTION):
            parts.append(self._advance().value)
        return "".join(parts)
