# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type expressions for declared field types of persistent records."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveType(Enum):
    """Scalar types that are copied unchanged between persistent and mirror form."""

    STRING = "String"
    CHARACTER = "Character"
    INT = "Int"
    INT8 = "Int8"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    UINT = "UInt"
    UINT8 = "UInt8"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    FLOAT = "Float"
    DOUBLE = "Double"
    BOOL = "Bool"
    DATE = "Date"
    DATA = "Data"
    URL = "URL"
    UUID = "UUID"


class PrimitiveTypeExpr(BaseModel):
    """A primitive scalar type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveType


class OptionalTypeExpr(BaseModel):
    """An optional value, written ``T?`` or ``Optional<T>``.

    The inner type is never itself optional.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["optional"] = "optional"
    inner_type: TypeExpr


class ListTypeExpr(BaseModel):
    """An ordered sequence, written ``List<T>``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    element_type: TypeExpr


class SetTypeExpr(BaseModel):
    """An unordered set, written ``MutableSet<T>``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["set"] = "set"
    element_type: TypeExpr


class MapTypeExpr(BaseModel):
    """A keyed mapping, written ``Map<K, V>``. Keys are scalar names."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["map"] = "map"
    key_type: TypeExpr
    value_type: TypeExpr


class ReferenceTypeExpr(BaseModel):
    """A named record type that is mirrored on its own."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["reference"] = "reference"
    name: str


# A parsed declared type. The `kind` discriminator keeps (de)serialization
# of plan artifacts unambiguous.
TypeExpr = Annotated[
    PrimitiveTypeExpr | OptionalTypeExpr | ListTypeExpr | SetTypeExpr | MapTypeExpr | ReferenceTypeExpr,
    _Field(discriminator="kind"),
]


class FieldDescriptor(BaseModel):
    """A field of a persistent record as handed over by the schema front end.

    Attributes:
        name: The field identifier.
        declared_type: The declared type text, e.g. ``"List<Person>"``.
        persisted: Whether the field carries the persistence marker. Only
            persisted fields are mirrored.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    declared_type: str
    persisted: bool = True


def render_type_expr(expr: TypeExpr) -> str:
    """Render a type expression back to canonical declared-type text."""
    if isinstance(expr, PrimitiveTypeExpr):
        return expr.primitive.value
    if isinstance(expr, ReferenceTypeExpr):
        return expr.name
    if isinstance(expr, OptionalTypeExpr):
        return f"{render_type_expr(expr.inner_type)}?"
    if isinstance(expr, ListTypeExpr):
        return f"List<{render_type_expr(expr.element_type)}>"
    if isinstance(expr, SetTypeExpr):
        return f"MutableSet<{render_type_expr(expr.element_type)}>"
    return f"Map<{render_type_expr(expr.key_type)}, {render_type_expr(expr.value_type)}>"


# Resolve forward references for models that use TypeExpr.
OptionalTypeExpr.model_rebuild()
ListTypeExpr.model_rebuild()
SetTypeExpr.model_rebuild()
MapTypeExpr.model_rebuild()
