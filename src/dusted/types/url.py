"""URL value type defaulting to HTTPS."""

from __future__ import annotations

_SCHEMES = ("http://", "https://")


class URL(str):
    """A URL string that always carries an ``http://`` or ``https://`` scheme.

    Example:
        >>> URL("example.com")
        'https://example.com'
        >>> URL("http://example.com").pretty()
        'example.com'
        >>> URL("").is_empty
        True
    """

    def __new__(cls, value: str = "") -> URL:
        if value and not value.startswith(_SCHEMES):
            value = "https://" + value
        return super().__new__(cls, value)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def pretty(self) -> str:
        """Return the URL without its scheme."""
        return self.removeprefix("https://").removeprefix("http://")


__all__ = ["URL"]
