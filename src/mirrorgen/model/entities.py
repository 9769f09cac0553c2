# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarations produced by the schema front end."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import Field as _Field

from mirrorgen.model.types import FieldDescriptor

# ###############
# Public Interface
# ###############


class MirrorRequest(BaseModel):
    """A ``@mirror`` attribute attached to a record.

    Attributes:
        mode: The raw mode argument text, or ``None`` when the attribute has
            no argument. It is resolved by the compiler, not the parser.
        line: 1-based line number of the attribute.
    """

    mode: str | None = None
    line: int = 0


class RecordDecl(BaseModel):
    """A persistent record type and the mirrors requested for it."""

    name: str
    fields: list[FieldDescriptor] = _Field(default_factory=list)
    mirrors: list[MirrorRequest] = _Field(default_factory=list)

    @property
    def persisted_fields(self) -> list[FieldDescriptor]:
        """The fields carrying the persistence marker, in declaration order."""
        return [f for f in self.fields if f.persisted]


class EnumDecl(BaseModel):
    """An enumeration declared alongside the records."""

    name: str
    values: list[str] = _Field(default_factory=list)


class SchemaFile(BaseModel):
    """Top-level model representing the parsed contents of a single .mirror file."""

    records: list[RecordDecl] = _Field(default_factory=list)
    enums: list[EnumDecl] = _Field(default_factory=list)
