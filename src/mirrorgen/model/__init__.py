# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic model for mirrorgen (type expressions, records, mapping plans)."""

from mirrorgen.model.entities import EnumDecl, MirrorRequest, RecordDecl, SchemaFile
from mirrorgen.model.mapping import (
    FieldMapping,
    MappingError,
    MappingMode,
    ModeConfig,
    RecordPlan,
    Shape,
    UnrecognizedMappingModeError,
    mode_config,
    parse_mapping_mode,
)
from mirrorgen.model.types import (
    FieldDescriptor,
    ListTypeExpr,
    MapTypeExpr,
    OptionalTypeExpr,
    PrimitiveType,
    PrimitiveTypeExpr,
    ReferenceTypeExpr,
    SetTypeExpr,
    TypeExpr,
    render_type_expr,
)

__all__ = [
    # Type expressions
    "PrimitiveType",
    "PrimitiveTypeExpr",
    "OptionalTypeExpr",
    "ListTypeExpr",
    "SetTypeExpr",
    "MapTypeExpr",
    "ReferenceTypeExpr",
    "TypeExpr",
    "FieldDescriptor",
    "render_type_expr",
    # Mapping plans
    "MappingError",
    "UnrecognizedMappingModeError",
    "MappingMode",
    "Shape",
    "ModeConfig",
    "mode_config",
    "parse_mapping_mode",
    "FieldMapping",
    "RecordPlan",
    # Declarations
    "MirrorRequest",
    "RecordDecl",
    "EnumDecl",
    "SchemaFile",
]
