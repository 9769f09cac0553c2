# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the mirrorgen configuration file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from mirrorgen.model.mapping import MappingMode, UnrecognizedMappingModeError, parse_mapping_mode

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".mirrorgen.yaml"

DEFAULT_BUILD_DIRECTORY = "generated"


class ConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


@dataclass
class MirrorgenConfig:
    """The parsed configuration of a mirrorgen project.

    Attributes:
        build_directory: Relative path (from the project root) for generated modules.
        persistent_module: Dotted module name the persistent record classes are
            imported from. When ``None``, each schema file's stem is used.
        default_mode: Mode used by ``@mirror`` attributes without an argument.
        strict_references: Whether references to records without a mirror of
            the same mode are reported as errors.
    """

    build_directory: str = DEFAULT_BUILD_DIRECTORY
    persistent_module: str | None = None
    default_mode: MappingMode = MappingMode.READONLY
    strict_references: bool = False


def load_config(path: Path) -> MirrorgenConfig:
    """Load and parse a mirrorgen configuration file.

    Args:
        path: Path to the `.mirrorgen.yaml` file.

    Returns:
        A MirrorgenConfig instance populated from the file.

    Raises:
        ConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file: {exc}") from exc

    return parse_config(text, source_label=str(path))


def parse_config(text: str, source_label: str = "<string>") -> MirrorgenConfig:
    """Parse configuration YAML text into a MirrorgenConfig.

    An empty document yields the defaults.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        ConfigError: If the YAML is invalid, a key is unknown, or a value has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return MirrorgenConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: configuration must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{source_label}: unknown configuration key(s): {', '.join(map(str, unknown))}")

    config = MirrorgenConfig()
    if "build-directory" in data:
        config.build_directory = _require_string(data, "build-directory", source_label)
    if "persistent-module" in data:
        config.persistent_module = _require_string(data, "persistent-module", source_label)
    if "default-mode" in data:
        mode_text = _require_string(data, "default-mode", source_label)
        try:
            config.default_mode = parse_mapping_mode(mode_text)
        except UnrecognizedMappingModeError as exc:
            raise ConfigError(f"{source_label}: {exc}") from exc
    if "strict-references" in data:
        value = data["strict-references"]
        if not isinstance(value, bool):
            raise ConfigError(f"{source_label}: 'strict-references' must be a boolean")
        config.strict_references = value
    return config


def render_default_config() -> str:
    """Return the text written by ``mirrorgen init``."""
    return (
        "# mirrorgen configuration\n"
        f"build-directory: {DEFAULT_BUILD_DIRECTORY}\n"
        "# persistent-module: app.models\n"
        f"default-mode: {MappingMode.READONLY.value}\n"
        "strict-references: false\n"
    )


# ################
# Implementation
# ################

_KNOWN_KEYS: frozenset[str] = frozenset(
    {"build-directory", "persistent-module", "default-mode", "strict-references"}
)


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a string field from a mapping, raising ConfigError if it is not a non-empty string."""
    value = mapping[key]
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{source_label}: '{key}' must be a non-empty string")
    return value
