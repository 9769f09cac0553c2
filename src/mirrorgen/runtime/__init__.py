# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runtime support imported by generated mirror modules."""

from mirrorgen.runtime.observation import Change, Observer, is_observable, observable, observe

__all__ = [
    "Change",
    "Observer",
    "is_observable",
    "observable",
    "observe",
]
