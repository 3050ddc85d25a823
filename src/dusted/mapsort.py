"""Deterministic ordering of mapping keys."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TypeVar

K = TypeVar("K")
V = TypeVar("V")


def keys(mapping: Mapping[str, object]) -> list[str]:
    """Return the keys of a mapping in alphabetical order."""
    return sorted(mapping)


def keys_by_value(mapping: Mapping[K, V], get_string_value: Callable[[V], str]) -> list[K]:
    """Return the keys of a mapping ordered alphabetically by their values.

    ``get_string_value`` derives the string each value is sorted by. Keys whose
    values compare equal keep the mapping's iteration order.

    Example:
        >>> keys_by_value({"a": 3, "b": 1, "c": 2}, str)
        ['b', 'c', 'a']
    """
    return sorted(mapping, key=lambda k: get_string_value(mapping[k]))


__all__ = ["keys", "keys_by_value"]
