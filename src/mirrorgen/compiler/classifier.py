# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Classification of parsed type expressions into mapping shapes."""

from __future__ import annotations

from dataclasses import dataclass

from mirrorgen.model.mapping import Shape
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

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Classification:
    """The shape of a type expression together with its constituents.

    Attributes:
        shape: The top-level shape.
        inner: Element type of a list or set, or the wrapped type of an optional.
        key: Key type of a map.
        value: Value type of a map.
        name: Primitive or record name for scalar shapes.
    """

    shape: Shape
    inner: TypeExpr | None = None
    key: TypeExpr | None = None
    value: TypeExpr | None = None
    name: str | None = None


def is_primitive_name(name: str) -> bool:
    """Return True if *name* is one of the fixed primitive type names."""
    return name in _PRIMITIVE_NAMES


def is_primitive(expr: TypeExpr) -> bool:
    """Return True if *expr* is a primitive scalar type."""
    return isinstance(expr, PrimitiveTypeExpr)


def classify(expr: TypeExpr) -> Classification:
    """Classify a type expression into exactly one of the six shapes."""
    if isinstance(expr, PrimitiveTypeExpr):
        return Classification(Shape.PRIMITIVE, name=expr.primitive.value)
    if isinstance(expr, OptionalTypeExpr):
        return Classification(Shape.OPTIONAL, inner=expr.inner_type)
    if isinstance(expr, ListTypeExpr):
        return Classification(Shape.LIST, inner=expr.element_type)
    if isinstance(expr, SetTypeExpr):
        return Classification(Shape.SET, inner=expr.element_type)
    if isinstance(expr, MapTypeExpr):
        return Classification(Shape.MAP, key=expr.key_type, value=expr.value_type)
    if isinstance(expr, ReferenceTypeExpr):
        return Classification(Shape.REFERENCE, name=expr.name)
    raise TypeError(f"Not a type expression: {expr!r}")


# ################
# Implementation
# ################

_PRIMITIVE_NAMES: frozenset[str] = frozenset(p.value for p in PrimitiveType)
