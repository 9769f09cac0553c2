# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapping plan compiler.

Derives, for every persisted field of a record, the mirror field declaration
and the two conversion snippets used by the generated mirror class:

* the forward expression, evaluated inside ``from_persisted`` with the
  persistent record bound to ``persisted_object``;
* the backward statement, executed inside ``build_persisted_object`` with the
  mirror bound to ``self`` and a freshly constructed persistent record bound
  to ``persisted_object``.

Conversions are derived recursively over the type expression, so nested
containers and optional elements are handled by construction. Top-level
containers of the fresh persistent record are filled in place; nested
containers are rebuilt as new ``list``, ``set`` and ``dict`` values.
Readonly mirrors hold maps as ``immutabledict`` values so that they stay
hashable and cannot be written to.
"""

from __future__ import annotations

from collections.abc import Container

from mirrorgen.compiler.classifier import classify, is_primitive
from mirrorgen.compiler.type_parser import parse_type
from mirrorgen.model.entities import RecordDecl
from mirrorgen.model.mapping import (
    FieldMapping,
    MappingError,
    MappingMode,
    ModeConfig,
    RecordPlan,
    Shape,
    mode_config,
)
from mirrorgen.model.types import (
    FieldDescriptor,
    PrimitiveType,
    PrimitiveTypeExpr,
    ReferenceTypeExpr,
    TypeExpr,
)

# ###############
# Public Interface
# ###############

PERSISTED_OBJECT = "persisted_object"


class UnresolvedReferenceError(MappingError):
    """Raised in strict mode when a referenced record has no scheduled mirror."""

    def __init__(self, record_name: str, mirror_name: str) -> None:
        super().__init__(f"Referenced record {record_name!r} has no mirror {mirror_name!r}")
        self.record_name = record_name
        self.mirror_name = mirror_name


class EnumReferenceError(MappingError):
    """Raised when a field refers to an enum declared in the schema.

    Enums have no mirrors, so a field holding enum values cannot be mapped.
    Map keys are exempt because they pass through unchanged.
    """

    def __init__(self, enum_name: str) -> None:
        super().__init__(f"Enum {enum_name!r} cannot be mirrored; only records and built-in types can")
        self.enum_name = enum_name


class FieldMappingError(MappingError):
    """Raised when one field of a record cannot be mapped.

    The whole record fails; the underlying error is chained as ``__cause__``.

    Attributes:
        record_name: The record being compiled.
        field_name: The offending field.
        declared_type: The declared type text of the offending field.
    """

    def __init__(self, record_name: str, field_name: str, declared_type: str, reason: MappingError) -> None:
        super().__init__(f"Record {record_name!r}, field {field_name!r} ({declared_type}): {reason}")
        self.record_name = record_name
        self.field_name = field_name
        self.declared_type = declared_type


def compile_field(
    field: FieldDescriptor,
    mode: MappingMode,
    *,
    mirror_names: Container[str] | None = None,
    enum_names: Container[str] = (),
) -> FieldMapping:
    """Compute the mapping of a single field.

    Args:
        field: The persistent field.
        mode: The mapping mode of the enclosing record.
        mirror_names: Names of all mirror classes that will exist. When given,
            every referenced record must have its mirror in this collection.
            When omitted, references are trusted.
        enum_names: Names of the enums declared next to the record.

    Returns:
        The field mapping.

    Raises:
        UnparsableTypeError: If the declared type cannot be parsed.
        MalformedMapTypeError: If a map type is malformed.
        UnresolvedReferenceError: If *mirror_names* is given and a referenced
            mirror is not in it.
        EnumReferenceError: If the field refers to one of *enum_names*.
    """
    expr = parse_type(field.declared_type)
    config = mode_config(mode)
    for name in _referenced_records(expr):
        if name in enum_names:
            raise EnumReferenceError(name)
    if mirror_names is not None:
        for name in _referenced_records(expr):
            mirror_name = config.mirror_name(name)
            if mirror_name not in mirror_names:
                raise UnresolvedReferenceError(name, mirror_name)
    builder = _ExpressionBuilder(config)
    return FieldMapping(
        name=field.name,
        declared_type=field.declared_type,
        shape=classify(expr).shape,
        mirror_field_decl=f"{field.name}: {builder.mirror_type(expr)}",
        forward_expr=builder.forward(expr, f"{PERSISTED_OBJECT}.{field.name}"),
        backward_expr=builder.backward_statement(expr, field.name),
        imports=tuple(sorted(_required_imports(expr, config))),
    )


def compile_record(
    record: RecordDecl,
    mode: MappingMode,
    *,
    mirror_names: Container[str] | None = None,
    enum_names: Container[str] = (),
) -> RecordPlan:
    """Compute the mapping plan of every persisted field of *record*.

    Fields without the persistence marker are skipped. The first field that
    fails aborts the record.

    Raises:
        FieldMappingError: If any persisted field cannot be mapped.
    """
    mappings: list[FieldMapping] = []
    for field in record.persisted_fields:
        try:
            mappings.append(compile_field(field, mode, mirror_names=mirror_names, enum_names=enum_names))
        except MappingError as exc:
            raise FieldMappingError(record.name, field.name, field.declared_type, exc) from exc
    return RecordPlan(
        record_name=record.name,
        mirror_name=mode_config(mode).mirror_name(record.name),
        mode=mode,
        fields=tuple(mappings),
    )


# ################
# Implementation
# ################

_PYTHON_TYPES: dict[PrimitiveType, str] = {
    PrimitiveType.STRING: "str",
    PrimitiveType.CHARACTER: "str",
    PrimitiveType.INT: "int",
    PrimitiveType.INT8: "int",
    PrimitiveType.INT16: "int",
    PrimitiveType.INT32: "int",
    PrimitiveType.INT64: "int",
    PrimitiveType.UINT: "int",
    PrimitiveType.UINT8: "int",
    PrimitiveType.UINT16: "int",
    PrimitiveType.UINT32: "int",
    PrimitiveType.UINT64: "int",
    PrimitiveType.FLOAT: "float",
    PrimitiveType.DOUBLE: "float",
    PrimitiveType.BOOL: "bool",
    PrimitiveType.DATE: "datetime",
    PrimitiveType.DATA: "bytes",
    PrimitiveType.URL: "str",
    PrimitiveType.UUID: "UUID",
}

_PRIMITIVE_IMPORTS: dict[PrimitiveType, str] = {
    PrimitiveType.DATE: "from datetime import datetime",
    PrimitiveType.UUID: "from uuid import UUID",
}


class _ExpressionBuilder:
    """Renders mirror types and conversion code for one mode."""

    def __init__(self, config: ModeConfig) -> None:
        self._config = config

    def mirror_type(self, expr: TypeExpr) -> str:
        """Return the Python annotation of the mirror value for *expr*."""
        c = classify(expr)
        if c.shape is Shape.PRIMITIVE:
            return _python_type(expr)
        if c.shape is Shape.REFERENCE:
            return self._config.mirror_name(c.name)
        if c.shape is Shape.OPTIONAL:
            return f"{self.mirror_type(c.inner)} | None"
        if c.shape is Shape.LIST:
            return self._config.sequence_of(self.mirror_type(c.inner))
        if c.shape is Shape.SET:
            return f"{self._config.set_type}[{self.mirror_type(c.inner)}]"
        return f"{self._config.mapping_type}[{_key_type(c.key)}, {self.mirror_type(c.value)}]"

    def forward(self, expr: TypeExpr, source: str, depth: int = 0) -> str:
        """Return an expression converting the persistent value *source* to its mirror."""
        c = classify(expr)
        if _is_identity(expr):
            return source
        if c.shape is Shape.REFERENCE:
            return f"{self._config.mirror_name(c.name)}.from_persisted({source})"
        if c.shape is Shape.OPTIONAL:
            return f"{self.forward(c.inner, source, depth)} if {source} is not None else None"
        if c.shape is Shape.LIST:
            return self._forward_collection(self._config.sequence_type, c.inner, source, depth)
        if c.shape is Shape.SET:
            return self._forward_collection(self._config.set_type, c.inner, source, depth)
        mapping = self._config.mapping_type
        if _is_identity(c.value):
            return f"{mapping}({source})"
        key, value = _variable("key", depth), _variable("value", depth)
        converted = self.forward(c.value, value, depth + 1)
        pairs = f"{{{key}: {converted} for {key}, {value} in {source}.items()}}"
        return pairs if mapping == "dict" else f"{mapping}({pairs})"

    def backward(self, expr: TypeExpr, source: str, depth: int = 0) -> str:
        """Return an expression converting the mirror value *source* to a new persistent value."""
        c = classify(expr)
        if _is_identity(expr):
            return source
        if c.shape is Shape.REFERENCE:
            return f"{source}.build_persisted_object()"
        if c.shape is Shape.OPTIONAL:
            return f"{self.backward(c.inner, source, depth)} if {source} is not None else None"
        if c.shape in (Shape.LIST, Shape.SET):
            if _is_identity(c.inner):
                return f"{'list' if c.shape is Shape.LIST else 'set'}({source})"
            item = _variable("item", depth)
            converted = self.backward(c.inner, item, depth + 1)
            if c.shape is Shape.LIST:
                return f"[{converted} for {item} in {source}]"
            return f"{{{converted} for {item} in {source}}}"
        if _is_identity(c.value):
            return f"dict({source})"
        return self._backward_pairs(c.value, source, depth)

    def backward_statement(self, expr: TypeExpr, field_name: str) -> str:
        """Return the statement storing ``self.<field_name>`` into the fresh persistent record."""
        c = classify(expr)
        target = f"{PERSISTED_OBJECT}.{field_name}"
        source = f"self.{field_name}"
        if c.shape in (Shape.LIST, Shape.SET):
            method = "extend" if c.shape is Shape.LIST else "update"
            if _is_identity(c.inner):
                return f"{target}.{method}({source})"
            item = _variable("item", 0)
            return f"{target}.{method}({self.backward(c.inner, item, 1)} for {item} in {source})"
        if c.shape is Shape.MAP:
            if _is_identity(c.value):
                return f"{target}.update({source})"
            return f"{target}.update({self._backward_pairs(c.value, source, 0)})"
        return f"{target} = {self.backward(expr, source)}"

    def _forward_collection(self, container: str, element: TypeExpr, source: str, depth: int) -> str:
        if _is_identity(element):
            return f"{container}({source})"
        item = _variable("item", depth)
        return f"{container}({self.forward(element, item, depth + 1)} for {item} in {source})"

    def _backward_pairs(self, value_type: TypeExpr, source: str, depth: int) -> str:
        key, value = _variable("key", depth), _variable("value", depth)
        converted = self.backward(value_type, value, depth + 1)
        return f"{{{key}: {converted} for {key}, {value} in {source}.items()}}"


def _is_identity(expr: TypeExpr) -> bool:
    """Return True if values of *expr* are copied unchanged in both directions."""
    c = classify(expr)
    if c.shape is Shape.OPTIONAL:
        return _is_identity(c.inner)
    return is_primitive(expr)


def _python_type(expr: TypeExpr) -> str:
    if not isinstance(expr, PrimitiveTypeExpr):
        raise TypeError(f"Expected a primitive type, got {expr.kind!r}")
    return _PYTHON_TYPES[expr.primitive]


def _key_type(expr: TypeExpr) -> str:
    """Map keys pass through unchanged, so a record key keeps its persistent name."""
    if isinstance(expr, ReferenceTypeExpr):
        return expr.name
    return _python_type(expr)


def _variable(stem: str, depth: int) -> str:
    """Return a comprehension variable name that is unique per nesting depth."""
    return stem if depth == 0 else f"{stem}_{depth}"


def _children(expr: TypeExpr) -> list[TypeExpr]:
    c = classify(expr)
    if c.shape is Shape.MAP:
        return [c.value]
    return [c.inner] if c.inner is not None else []


def _referenced_records(expr: TypeExpr) -> list[str]:
    """Return the names of records whose mirrors *expr* refers to (map keys excluded)."""
    if isinstance(expr, ReferenceTypeExpr):
        return [expr.name]
    return [name for child in _children(expr) for name in _referenced_records(child)]


def _required_imports(expr: TypeExpr, config: ModeConfig) -> set[str]:
    c = classify(expr)
    if isinstance(expr, PrimitiveTypeExpr):
        line = _PRIMITIVE_IMPORTS.get(expr.primitive)
        return {line} if line else set()
    lines: set[str] = set()
    children = _children(expr)
    if c.shape is Shape.MAP:
        children.append(c.key)
        if config.mapping_import:
            lines.add(config.mapping_import)
    return lines.union(*(_required_imports(child, config) for child in children))
