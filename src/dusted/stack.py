"""
Bounded call-stack capture for diagnostics.

A ``Trace`` is a snapshot of the interpreter stack taken at the point where a
fault is first created. Capturing is cheap: frames are walked once, bounded
to ``DEFAULT_DEPTH`` entries, and source lines are not looked up until the
trace is rendered.

Examples:
    >>> trace = capture()
    >>> len(trace) <= DEFAULT_DEPTH
    True
    >>> str(trace).startswith("\\nat ")
    True

Tags:
    stack-trace, diagnostics, dusted

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterator

DEFAULT_DEPTH = 32


class Trace:
    """Captured frames, innermost first."""

    def __init__(self, frames: traceback.StackSummary):
        self._frames = frames

    @property
    def frames(self) -> list[traceback.FrameSummary]:
        return list(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[traceback.FrameSummary]:
        return iter(self._frames)

    def __str__(self) -> str:
        parts = []
        for frame in self._frames:
            parts.append(f"\nat {frame.filename}:{frame.lineno}\n   --> {frame.name}")
        return "".join(parts)

    def __reduce__(self):
        # FrameSummary may reference code objects, which do not pickle
        locations = [(f.filename, f.lineno, f.name) for f in self._frames]
        return (_restore, (locations,))

    def __repr__(self) -> str:
        return f"Trace(frames={len(self._frames)})"


def _restore(locations: list[tuple[str, int | None, str]]) -> Trace:
    frames = [
        traceback.FrameSummary(filename, lineno, name, lookup_line=False)
        for filename, lineno, name in locations
    ]
    return Trace(traceback.StackSummary.from_list(frames))


def capture(skip: int = 0, depth: int = DEFAULT_DEPTH) -> Trace:
    """Capture the stack of the caller.

    Args:
        skip: Additional frames to drop above the direct caller of ``capture``
            (e.g. ``1`` when called from a factory function that should not
            appear in its own traces).
        depth: Maximum number of frames to keep.
    """
    frame = sys._getframe(skip + 1)
    summary = traceback.StackSummary.extract(
        traceback.walk_stack(frame),
        limit=depth,
        lookup_lines=False,
    )
    return Trace(summary)


__all__ = [
    "DEFAULT_DEPTH",
    "Trace",
    "capture",
]
