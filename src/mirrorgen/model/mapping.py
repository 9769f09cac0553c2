# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapping modes and the mapping plans computed for persistent records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class MappingError(Exception):
    """Base class for all errors raised while computing a mapping plan."""


class UnrecognizedMappingModeError(MappingError):
    """Raised when a mode argument matches neither ``readonly`` nor ``observable``."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Unrecognized mapping mode {text!r}; expected 'readonly' or 'observable'")
        self.text = text


class MappingMode(Enum):
    """Selects the kind of mirror generated for a record."""

    READONLY = "readonly"
    OBSERVABLE = "observable"


class Shape(Enum):
    """The six mutually exclusive shapes a declared type classifies into."""

    PRIMITIVE = "primitive"
    OPTIONAL = "optional"
    LIST = "list"
    SET = "set"
    MAP = "map"
    REFERENCE = "reference"


@dataclass(frozen=True)
class ModeConfig:
    """Everything that differs between the two mirror kinds.

    A single mapping algorithm is parameterized by this struct, so the
    readonly and observable mirrors never diverge in their conversions.

    Attributes:
        mode: The mode this configuration belongs to.
        prefix: Prepended to a record name to form its mirror name.
        frozen: Whether generated fields are immutable bindings.
        decorators: Class decorators, outermost first.
        sequence_type: Mirror container for ``List<T>``.
        set_type: Mirror container for ``MutableSet<T>``.
        mapping_type: Mirror container for ``Map<K, V>``.
        mapping_import: Import line providing *mapping_type*, if it is not a builtin.
    """

    mode: MappingMode
    prefix: str
    frozen: bool
    decorators: tuple[str, ...]
    sequence_type: str
    set_type: str
    mapping_type: str
    mapping_import: str | None = None

    def mirror_name(self, record_name: str) -> str:
        """Return the mirror class name for *record_name* under this mode."""
        return f"{self.prefix}{record_name}"

    def sequence_of(self, element: str) -> str:
        """Return the annotation of a mirror sequence holding *element* values."""
        if self.sequence_type == "tuple":
            return f"tuple[{element}, ...]"
        return f"{self.sequence_type}[{element}]"


def mode_config(mode: MappingMode) -> ModeConfig:
    """Return the configuration struct for *mode*."""
    return _MODE_CONFIGS[mode]


def parse_mapping_mode(text: str | None, default: MappingMode = MappingMode.READONLY) -> MappingMode:
    """Resolve a mode argument to a MappingMode.

    Args:
        text: The mode literal, optionally quoted. ``None`` means the argument
            was omitted.
        default: The mode used when *text* is ``None``.

    Returns:
        The selected mode.

    Raises:
        UnrecognizedMappingModeError: If *text* is given but is neither
            ``readonly`` nor ``observable``.
    """
    if text is None:
        return default
    literal = text.strip().strip("\"'").strip()
    for mode in MappingMode:
        if mode.value == literal:
            return mode
    raise UnrecognizedMappingModeError(text)


class FieldMapping(BaseModel):
    """The computed mapping of one persistent field onto its mirror field.

    Attributes:
        name: The field name, shared by the persistent record and the mirror.
        declared_type: The declared type text the mapping was computed from.
        shape: The top-level shape of the declared type.
        mirror_field_decl: The mirror field declaration, e.g. ``"tags: dict[str, str]"``.
        forward_expr: Expression computing the mirror value from ``persisted_object``.
        backward_expr: Statement storing the mirror value (``self``) into ``persisted_object``.
        imports: Import lines the declaration needs, e.g. ``"from uuid import UUID"``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    declared_type: str
    shape: Shape
    mirror_field_decl: str
    forward_expr: str
    backward_expr: str
    imports: tuple[str, ...] = ()


class RecordPlan(BaseModel):
    """The mapping plan of one record under one mode, fields in schema order."""

    model_config = ConfigDict(frozen=True)

    record_name: str
    mirror_name: str
    mode: MappingMode
    fields: tuple[FieldMapping, ...] = _Field(default_factory=tuple)

    @property
    def imports(self) -> tuple[str, ...]:
        """All import lines required by the fields, deduplicated and sorted."""
        return tuple(sorted({line for f in self.fields for line in f.imports}))


# ################
# Implementation
# ################

_MODE_CONFIGS: dict[MappingMode, ModeConfig] = {
    MappingMode.READONLY: ModeConfig(
        mode=MappingMode.READONLY,
        prefix="Readonly",
        frozen=True,
        decorators=("@dataclass(frozen=True)",),
        sequence_type="tuple",
        set_type="frozenset",
        mapping_type="immutabledict",
        mapping_import="from immutabledict import immutabledict",
    ),
    MappingMode.OBSERVABLE: ModeConfig(
        mode=MappingMode.OBSERVABLE,
        prefix="Observable",
        frozen=False,
        decorators=("@observable", "@dataclass(eq=False)"),
        sequence_type="list",
        set_type="set",
        mapping_type="dict",
    ),
}
