"""
E-mail address value type.

``parse_email`` validates and normalises raw user input. Every validation
problem is raised as a ``UserFault`` so that web handlers can show it to the
user as is.

Examples:
    >>> addr = parse_email("  Jane.Doe@Example.com ")
    >>> addr.normalised
    'jane.doe@example.com'
    >>> addr.domain
    'example.com'
    >>> parse_email("nope")
    Traceback (most recent call last):
    ...
    dusted.fault.UserFault: Email address is invalid. (invalid_email_address)

Tags:
    email, validation, value-type, dusted
"""

from __future__ import annotations

from dataclasses import dataclass

from dusted.fault import user

# Shortest address considered valid: x@x.xx
MIN_LENGTH = 6


@dataclass(frozen=True)
class Address:
    """A validated, lowercase and trimmed e-mail address."""

    value: str
    domain: str

    @property
    def normalised(self) -> str:
        return self.value

    def equals(self, other: str) -> bool:
        """Compare against a raw address, ignoring case."""
        return self.value == other.lower()

    def __str__(self) -> str:
        return self.value


EMPTY = Address(value="", domain="")


def parse_email(value: str) -> Address:
    """Validate, normalise and create a new address."""
    value = value.lower().strip()

    if not value:
        raise user("missing_email_address", "Email address is required.")

    at = value.rfind("@")
    if len(value) < MIN_LENGTH or at == -1 or value.rfind(".") < at:
        raise user("invalid_email_address", "Email address is invalid.")

    return Address(value=value, domain=value.split("@", 1)[1])


__all__ = [
    "MIN_LENGTH",
    "Address",
    "EMPTY",
    "parse_email",
]
