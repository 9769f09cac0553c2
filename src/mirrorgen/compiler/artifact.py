# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of mapping plans.

Plans are stored as JSON so the decisions behind a generated module can be
inspected without reading the module. The format is versioned so future
schema changes can be detected.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from mirrorgen.model.mapping import RecordPlan

# ###############
# Public Interface
# ###############

PLAN_FORMAT_VERSION = "1"
PLAN_SUFFIX = ".plan.json"


def serialize_plans(plans: Sequence[RecordPlan]) -> str:
    """Serialize record plans to an indented JSON string."""
    payload = {
        "v": PLAN_FORMAT_VERSION,
        "records": [plan.model_dump(mode="json") for plan in plans],
    }
    return json.dumps(payload, indent=2)


def deserialize_plans(data: str) -> list[RecordPlan]:
    """Deserialize record plans from a JSON string.

    Args:
        data: JSON string produced by :func:`serialize_plans`.

    Returns:
        The reconstructed plans, in their original order.

    Raises:
        ValueError: If the format version is not recognised.
    """
    obj = json.loads(data)
    version = obj.get("v")
    if version != PLAN_FORMAT_VERSION:
        raise ValueError(f"Unsupported plan format version: {version!r}")
    return [RecordPlan.model_validate(record) for record in obj.get("records", [])]


def write_plans(plans: Sequence[RecordPlan], path: Path) -> None:
    """Write plans to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_plans(plans), encoding="utf-8")


def read_plans(path: Path) -> list[RecordPlan]:
    """Read and deserialize plans from *path*."""
    return deserialize_plans(path.read_text(encoding="utf-8"))
