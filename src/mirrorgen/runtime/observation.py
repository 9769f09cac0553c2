# Copyright 2026 Mirrorgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Change observation for generated observable mirrors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

# ###############
# Public Interface
# ###############

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class Change:
    """A single attribute assignment on an observable instance.

    Attributes:
        instance: The instance that changed.
        name: The assigned attribute.
        old_value: The value before the assignment, or ``None`` if unset.
        new_value: The assigned value.
    """

    instance: Any
    name: str
    old_value: Any
    new_value: Any


Observer = Callable[[Change], None]


def observable(cls: T) -> T:
    """Class decorator that broadcasts every attribute assignment to observers.

    Apply it on top of ``@dataclass``. Observers registered with
    :func:`observe` are called after the new value has been stored.
    """
    original_setattr = cls.__setattr__

    def __setattr__(self: Any, name: str, value: Any) -> None:
        old_value = self.__dict__.get(name)
        original_setattr(self, name, value)
        for observer in list(self.__dict__.get(_OBSERVERS_ATTR, ())):
            observer(Change(self, name, old_value, value))

    cls.__setattr__ = __setattr__  # type: ignore[method-assign]
    setattr(cls, _MARKER_ATTR, True)
    return cls


def is_observable(obj: Any) -> bool:
    """Return True if *obj* is an instance or class decorated with :func:`observable`."""
    return getattr(obj, _MARKER_ATTR, False) is True


def observe(instance: Any, observer: Observer) -> Callable[[], None]:
    """Register *observer* for changes on *instance*.

    Returns:
        A function that unregisters the observer. Calling it twice is harmless.

    Raises:
        TypeError: If *instance* is not observable.
    """
    if not is_observable(instance):
        raise TypeError(f"{type(instance).__name__} instances are not observable")
    observers: list[Observer] = instance.__dict__.setdefault(_OBSERVERS_ATTR, [])
    observers.append(observer)

    def unsubscribe() -> None:
        if observer in observers:
            observers.remove(observer)

    return unsubscribe


# ################
# Implementation
# ################

_MARKER_ATTR = "__mirrorgen_observable__"
_OBSERVERS_ATTR = "_mirrorgen_observers"
