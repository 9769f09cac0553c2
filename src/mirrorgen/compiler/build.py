# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler workflow for .mirror schema files.

Each schema file is compiled on its own: it is parsed, every ``@mirror``
request is resolved to a mapping mode, a mapping plan is computed for each
requested mirror, and the plans are assembled into one Python module.

Records are compiled independently of each other and in declaration order.
No registry of mapped types is consulted unless strict references are
requested, in which case the registry is exactly the set of mirrors the same
schema file schedules.
"""

from __future__ import annotations

import keyword
from pathlib import Path

from mirrorgen.compiler.assembler import assemble_module
from mirrorgen.compiler.parser import ParseError, parse
from mirrorgen.compiler.planner import compile_record
from mirrorgen.model.entities import RecordDecl, SchemaFile
from mirrorgen.model.mapping import (
    MappingError,
    MappingMode,
    RecordPlan,
    mode_config,
    parse_mapping_mode,
)
from mirrorgen.parser.lexer import LexerError
from mirrorgen.workspace.config import MirrorgenConfig

# ###############
# Public Interface
# ###############

SCHEMA_SUFFIX = ".mirror"
OUTPUT_SUFFIX = "_mirrors.py"


class CompilerError(Exception):
    """Raised when the compiler encounters any unrecoverable error.

    Covers lexer and parse errors, unrecognized mapping modes, duplicate
    mirror requests and field mapping failures.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


def plan_schema(
    schema: SchemaFile,
    *,
    default_mode: MappingMode = MappingMode.READONLY,
    strict_references: bool = False,
    source_label: str = "<string>",
) -> list[RecordPlan]:
    """Compute the mapping plans of every mirror requested in *schema*.

    Args:
        schema: The parsed schema file.
        default_mode: Mode of ``@mirror`` attributes without an argument.
        strict_references: Report references to records that have no mirror
            of the same mode in this schema.
        source_label: Human-readable label used in error messages.

    Returns:
        One plan per mirror request, in declaration order.

    Raises:
        CompilerError: On an unrecognized mode, a record mirrored twice in the
            same mode, or a field that cannot be mapped (including fields
            holding enum values).
    """
    requests = _resolve_requests(schema, default_mode, source_label)
    mirror_names: set[str] | None = None
    if strict_references:
        mirror_names = {mode_config(mode).mirror_name(record.name) for record, mode in requests}
    enum_names = {enum.name for enum in schema.enums}

    plans: list[RecordPlan] = []
    for record, mode in requests:
        try:
            plans.append(compile_record(record, mode, mirror_names=mirror_names, enum_names=enum_names))
        except MappingError as exc:
            raise CompilerError(f"{source_label}: {exc}") from exc
    return plans


def compile_source(
    source: str,
    *,
    default_mode: MappingMode = MappingMode.READONLY,
    persistent_module: str | None = None,
    strict_references: bool = False,
    source_label: str = "<string>",
) -> str:
    """Compile schema source text into the source of a Python mirror module.

    Raises:
        CompilerError: On any lexer, parse or mapping error.
    """
    plans = plan_source(
        source,
        default_mode=default_mode,
        strict_references=strict_references,
        source_label=source_label,
    )
    return assemble_module(plans, persistent_module=persistent_module, source_label=source_label)


def plan_source(
    source: str,
    *,
    default_mode: MappingMode = MappingMode.READONLY,
    strict_references: bool = False,
    source_label: str = "<string>",
) -> list[RecordPlan]:
    """Parse schema source text and compute its mapping plans.

    Raises:
        CompilerError: On any lexer, parse or mapping error.
    """
    try:
        schema = parse(source)
    except (LexerError, ParseError) as exc:
        raise CompilerError(f"{source_label}: {exc}") from exc
    return plan_schema(
        schema,
        default_mode=default_mode,
        strict_references=strict_references,
        source_label=source_label,
    )


def compile_files(files: list[Path], build_dir: Path, config: MirrorgenConfig) -> dict[Path, Path]:
    """Compile schema files and write one generated module per file.

    The module for ``models.mirror`` is written to
    ``<build_dir>/models_mirrors.py``. Persistent record classes are imported
    from ``config.persistent_module``, or from a module named after the schema
    file stem when that is not configured.

    Args:
        files: Paths of the .mirror schema files.
        build_dir: Directory receiving the generated modules.
        config: The project configuration.

    Returns:
        A mapping from each schema file to the module written for it.

    Raises:
        CompilerError: If a file cannot be read, fails to compile, or two
            files would be written to the same module, or the persistent
            module name is not a valid dotted Python name.
    """
    outputs: dict[Path, Path] = {}
    generated: dict[Path, str] = {}
    for schema_file in files:
        persistent_module = config.persistent_module or schema_file.stem
        if not _is_module_name(persistent_module):
            raise CompilerError(
                f"{schema_file}: persistent module name {persistent_module!r} is not a valid Python module name"
            )
        output = build_dir / f"{schema_file.stem}{OUTPUT_SUFFIX}"
        if output in generated:
            raise CompilerError(f"{schema_file}: output module '{output.name}' is already generated from another file")
        generated[output] = compile_source(
            _read_source(schema_file),
            default_mode=config.default_mode,
            persistent_module=persistent_module,
            strict_references=config.strict_references,
            source_label=schema_file.name,
        )
        outputs[schema_file] = output

    # Nothing is written unless every file compiled.
    build_dir.mkdir(parents=True, exist_ok=True)
    for output, text in generated.items():
        output.write_text(text, encoding="utf-8")
    return outputs


# ################
# Implementation
# ################


def _is_module_name(name: str) -> bool:
    """Return True if *name* can follow ``from`` in an import statement."""
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in name.split("."))


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CompilerError(f"Cannot read schema file '{path}': {exc}") from exc


def _resolve_requests(
    schema: SchemaFile,
    default_mode: MappingMode,
    source_label: str,
) -> list[tuple[RecordDecl, MappingMode]]:
    """Resolve every ``@mirror`` request of *schema* to a (record, mode) pair."""
    requests: list[tuple[RecordDecl, MappingMode]] = []
    for record in schema.records:
        modes: set[MappingMode] = set()
        for request in record.mirrors:
            try:
                mode = parse_mapping_mode(request.mode, default_mode)
            except MappingError as exc:
                raise CompilerError(f"{source_label}: Line {request.line}: record {record.name!r}: {exc}") from exc
            if mode in modes:
                raise CompilerError(
                    f"{source_label}: Line {request.line}: "
                    f"record {record.name!r} is mirrored twice in {mode.value!r} mode"
                )
            modes.add(mode)
            requests.append((record, mode))
    return requests
