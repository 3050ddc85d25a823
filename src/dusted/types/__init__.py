"""Value types whose parsers report problems as user faults."""

from dusted.types.email import EMPTY, Address, parse_email
from dusted.types.url import URL

__all__ = [
    "EMPTY",
    "Address",
    "parse_email",
    "URL",
]
