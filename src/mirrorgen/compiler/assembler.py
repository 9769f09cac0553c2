# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Assembly of mirror class declarations and generated modules from mapping plans."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from mirrorgen.compiler.planner import PERSISTED_OBJECT
from mirrorgen.model.mapping import FieldMapping, MappingMode, RecordPlan, mode_config

# ###############
# Public Interface
# ###############

RUNTIME_IMPORT = "from mirrorgen.runtime import observable"


def assemble(record_name: str, mode: MappingMode, mappings: Sequence[FieldMapping]) -> str:
    """Assemble the declaration of one mirror class.

    The declaration consists of, in order: the class decorators (the
    ``@observable`` marker only in observable mode), the class header, the
    field declarations, the ``from_persisted`` converting constructor and the
    ``build_persisted_object`` builder. Fields appear in the order of
    *mappings* in all three places.

    Args:
        record_name: Name of the persistent record class.
        mode: The mapping mode.
        mappings: Field mappings in schema order.

    Returns:
        The Python source of the mirror class, without a trailing newline.
    """
    config = mode_config(mode)
    mirror_name = config.mirror_name(record_name)
    lines: list[str] = list(config.decorators)
    lines.append(f"class {mirror_name}:")
    for mapping in mappings:
        lines.append(f"    {mapping.mirror_field_decl}")
    if mappings:
        lines.append("")

    lines.append("    @classmethod")
    lines.append(f"    def from_persisted(cls, {PERSISTED_OBJECT}: {record_name}) -> {mirror_name}:")
    if mappings:
        lines.append("        return cls(")
        for mapping in mappings:
            lines.append(f"            {mapping.name}={mapping.forward_expr},")
        lines.append("        )")
    else:
        lines.append("        return cls()")
    lines.append("")

    lines.append(f"    def build_persisted_object(self) -> {record_name}:")
    lines.append(f"        {PERSISTED_OBJECT} = {record_name}()")
    for mapping in mappings:
        lines.append(f"        {mapping.backward_expr}")
    lines.append(f"        return {PERSISTED_OBJECT}")
    return "\n".join(lines)


def assemble_plan(plan: RecordPlan) -> str:
    """Assemble the mirror class declaration described by *plan*."""
    return assemble(plan.record_name, plan.mode, plan.fields)


def assemble_module(
    plans: Sequence[RecordPlan],
    *,
    persistent_module: str | None = None,
    source_label: str | None = None,
) -> str:
    """Assemble a complete Python module holding the mirrors of *plans*.

    Args:
        plans: Record plans in the order their classes should appear.
        persistent_module: Dotted module name the persistent record classes
            are imported from. When omitted, no such import is emitted and the
            classes must already be in scope where the module is executed.
        source_label: Name of the schema the module was generated from,
            mentioned in the header comment.

    Returns:
        The module source, ending with a single newline.
    """
    origin = f" from {source_label}" if source_label else ""
    lines: list[str] = [
        f"# Generated by mirrorgen{origin}. Do not edit.",
        "",
        "from __future__ import annotations",
        "",
    ]
    imports = {"from dataclasses import dataclass"}
    for plan in plans:
        imports.update(plan.imports)
    stdlib_imports = sorted(line for line in imports if _imported_module(line) in sys.stdlib_module_names)
    lines.extend(stdlib_imports)
    third_party_imports = sorted(imports.difference(stdlib_imports))
    if third_party_imports:
        lines.extend(["", *third_party_imports])

    if any(plan.mode is MappingMode.OBSERVABLE for plan in plans):
        lines.extend(["", RUNTIME_IMPORT])

    record_names = sorted({plan.record_name for plan in plans})
    if persistent_module and record_names:
        lines.extend(["", f"from {persistent_module} import {', '.join(record_names)}"])

    for plan in plans:
        lines.extend(["", "", assemble_plan(plan)])
    return "\n".join(lines) + "\n"


# ################
# Implementation
# ################


def _imported_module(line: str) -> str:
    """Return the top-level package of a ``from X import Y`` line."""
    return line.split()[1].partition(".")[0]
