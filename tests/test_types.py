"""Tests for dusted.types (e-mail address and URL value types)."""

import pytest

from dusted.fault import UserFault
from dusted.types import EMPTY, URL, Address, parse_email


class TestParseEmail:
    def test_normalises(self):
        addr = parse_email("  Jane.Doe@Example.COM ")
        assert addr.normalised == "jane.doe@example.com"
        assert addr.domain == "example.com"
        assert str(addr) == "jane.doe@example.com"

    def test_empty_is_missing(self):
        with pytest.raises(UserFault) as exc_info:
            parse_email("   ")
        assert exc_info.value.errors() == {"missing_email_address": "Email address is required."}

    @pytest.mark.parametrize(
        "value",
        [
            "a@b.c",          # too short
            "nobody.example",  # no @
            "nobody@example",  # no .
            "first.last@example",  # . only before @
        ],
    )
    def test_invalid(self, value):
        with pytest.raises(UserFault) as exc_info:
            parse_email(value)
        assert exc_info.value.error() == "Email address is invalid. (invalid_email_address)"

    def test_shortest_valid(self):
        assert parse_email("x@x.xx").domain == "x.xx"

    def test_domain_after_first_at(self):
        assert parse_email("a@b@example.com").domain == "b@example.com"


class TestAddress:
    def test_equals_ignores_case(self):
        addr = parse_email("jane@example.com")
        assert addr.equals("JANE@Example.com")
        assert not addr.equals("john@example.com")

    def test_empty(self):
        assert EMPTY == Address(value="", domain="")
        assert EMPTY.normalised == ""

    def test_frozen(self):
        addr = parse_email("jane@example.com")
        with pytest.raises(AttributeError):
            addr.value = "x"  # type: ignore[misc]


class TestURL:
    def test_adds_https(self):
        assert URL("example.com") == "https://example.com"

    @pytest.mark.parametrize("value", ["http://example.com", "https://example.com"])
    def test_keeps_scheme(self, value):
        assert URL(value) == value

    def test_empty(self):
        assert URL("").is_empty
        assert URL() == ""
        assert not URL("example.com").is_empty

    def test_pretty(self):
        assert URL("https://example.com/a").pretty() == "example.com/a"
        assert URL("http://example.com").pretty() == "example.com"

    def test_is_str(self):
        assert isinstance(URL("example.com"), str)
        assert str(URL("example.com")) == "https://example.com"
