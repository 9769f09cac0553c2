# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for .mirror files: parsing, classification, planning and assembly."""

from mirrorgen.compiler.artifact import (
    PLAN_SUFFIX,
    deserialize_plans,
    read_plans,
    serialize_plans,
    write_plans,
)
from mirrorgen.compiler.assembler import assemble, assemble_module, assemble_plan
from mirrorgen.compiler.build import (
    OUTPUT_SUFFIX,
    SCHEMA_SUFFIX,
    CompilerError,
    compile_files,
    compile_source,
    plan_schema,
    plan_source,
)
from mirrorgen.compiler.classifier import Classification, classify, is_primitive, is_primitive_name
from mirrorgen.compiler.parser import NotARecordDeclarationError, ParseError, parse
from mirrorgen.compiler.planner import (
    EnumReferenceError,
    FieldMappingError,
    UnresolvedReferenceError,
    compile_field,
    compile_record,
)
from mirrorgen.compiler.type_parser import MalformedMapTypeError, UnparsableTypeError, parse_type

__all__ = [
    "parse",
    "ParseError",
    "NotARecordDeclarationError",
    "parse_type",
    "UnparsableTypeError",
    "MalformedMapTypeError",
    "classify",
    "Classification",
    "is_primitive",
    "is_primitive_name",
    "compile_field",
    "compile_record",
    "FieldMappingError",
    "UnresolvedReferenceError",
    "EnumReferenceError",
    "assemble",
    "assemble_plan",
    "assemble_module",
    "plan_schema",
    "plan_source",
    "compile_source",
    "compile_files",
    "CompilerError",
    "SCHEMA_SUFFIX",
    "OUTPUT_SUFFIX",
    "serialize_plans",
    "deserialize_plans",
    "write_plans",
    "read_plans",
    "PLAN_SUFFIX",
]
