"""Containment checks for sequences."""

from __future__ import annotations

from collections.abc import Hashable, Iterable


def contains_more_than(items: Iterable[Hashable], *more_than: Hashable) -> bool:
    """Check that ``items`` holds every value of ``more_than`` and something else.

    Example:
        >>> contains_more_than([1, 2, 3, 4], 1, 4)
        True
        >>> contains_more_than([1, 2, 3], 1, 3, 2)
        False
    """
    present = set(items)
    expected = set(more_than)
    return expected <= present and bool(present - expected)


__all__ = ["contains_more_than"]
