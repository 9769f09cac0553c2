# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project configuration for mirrorgen."""

from mirrorgen.workspace.config import (
    CONFIG_FILE_NAME,
    DEFAULT_BUILD_DIRECTORY,
    ConfigError,
    MirrorgenConfig,
    load_config,
    parse_config,
    render_default_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_BUILD_DIRECTORY",
    "ConfigError",
    "MirrorgenConfig",
    "load_config",
    "parse_config",
    "render_default_config",
]
