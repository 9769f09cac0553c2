# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the mirrorgen command-line interface."""

import argparse
import sys
from pathlib import Path

from mirrorgen.compiler.artifact import serialize_plans, write_plans
from mirrorgen.compiler.build import SCHEMA_SUFFIX, CompilerError, compile_files, plan_source
from mirrorgen.model.mapping import MappingMode
from mirrorgen.workspace.config import (
    CONFIG_FILE_NAME,
    ConfigError,
    MirrorgenConfig,
    load_config,
    render_default_config,
)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the mirrorgen CLI."""
    parser = argparse.ArgumentParser(
        prog="mirrorgen",
        description="mirrorgen - readonly and observable mirrors for persistent records",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Create a mirrorgen configuration file",
        description=f"Write a default {CONFIG_FILE_NAME} into a project directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check that all schema files compile",
        description=f"Compile every {SCHEMA_SUFFIX} file in a project without writing output.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate mirror modules for all schema files",
        description=f"Compile every {SCHEMA_SUFFIX} file in a project and write the mirror modules.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )

    # plan subcommand
    plan_parser = subparsers.add_parser(
        "plan",
        help="Print the mapping plan of a schema file as JSON",
        description="Compute the mapping plans of one schema file and print or write them as JSON.",
    )
    plan_parser.add_argument("schema", help=f"Path to a {SCHEMA_SUFFIX} file")
    plan_parser.add_argument(
        "--default-mode",
        choices=[mode.value for mode in MappingMode],
        default=MappingMode.READONLY.value,
        help="Mode of @mirror attributes without an argument (default: readonly)",
    )
    plan_parser.add_argument(
        "--strict-references",
        action="store_true",
        help="Report references to records without a mirror of the same mode",
    )
    plan_parser.add_argument(
        "-o",
        "--output",
        help="Write the plan to this file instead of standard output",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "plan":
        return _cmd_plan(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / CONFIG_FILE_NAME

    if config_file.exists():
        print(
            f"Error: configuration already exists at '{config_file}'.",
            file=sys.stderr,
        )
        return 1

    config_file.write_text(render_default_config(), encoding="utf-8")
    print(f"Initialized mirrorgen configuration at '{config_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    loaded = _load_project(args.directory)
    if loaded is None:
        return 1
    config, schema_files = loaded

    if not schema_files:
        print(f"No {SCHEMA_SUFFIX} files found.")
        return 0

    print(f"Checking {len(schema_files)} schema file(s)...")
    has_errors = False
    for schema_file in schema_files:
        try:
            plan_source(
                schema_file.read_text(encoding="utf-8"),
                default_mode=config.default_mode,
                strict_references=config.strict_references,
                source_label=schema_file.name,
            )
        except OSError as exc:
            print(f"Error: cannot read '{schema_file}': {exc}", file=sys.stderr)
            has_errors = True
        except CompilerError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            has_errors = True

    if has_errors:
        return 1

    print("No issues found.")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    loaded = _load_project(args.directory)
    if loaded is None:
        return 1
    config, schema_files = loaded

    if not schema_files:
        print(f"No {SCHEMA_SUFFIX} files found.")
        return 0

    directory = Path(args.directory).resolve()
    build_dir = directory / config.build_directory
    print(f"Generating mirrors for {len(schema_files)} schema file(s)...")
    try:
        outputs = compile_files(schema_files, build_dir, config)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for schema_file, output in outputs.items():
        print(f"  {schema_file.relative_to(directory)} -> {output.relative_to(directory)}")
    return 0


def _cmd_plan(args: argparse.Namespace) -> int:
    """Handle the plan subcommand."""
    schema_file = Path(args.schema)
    if not schema_file.is_file():
        print(f"Error: schema file '{schema_file}' does not exist.", file=sys.stderr)
        return 1

    try:
        plans = plan_source(
            schema_file.read_text(encoding="utf-8"),
            default_mode=MappingMode(args.default_mode),
            strict_references=args.strict_references,
            source_label=schema_file.name,
        )
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        write_plans(plans, Path(args.output))
        print(f"Wrote {len(plans)} plan(s) to '{args.output}'.")
    else:
        print(serialize_plans(plans))
    return 0


def _load_project(directory_arg: str) -> tuple[MirrorgenConfig, list[Path]] | None:
    """Load the configuration of a project directory and find its schema files.

    A missing configuration file means default settings. Returns ``None``
    after reporting an error.
    """
    directory = Path(directory_arg).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None

    config = MirrorgenConfig()
    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        try:
            config = load_config(config_file)
        except ConfigError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return None

    build_dir = directory / config.build_directory
    schema_files = sorted(f for f in directory.rglob(f"*{SCHEMA_SUFFIX}") if build_dir not in f.parents)
    return config, schema_files
