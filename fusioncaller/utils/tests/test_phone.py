"""Tests for phone number normalization."""

import pytest

from fusioncaller.db.phone_numbers.repository import digits_only
from fusioncaller.utils.phone import format_phone_number


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("(212) 736-5000", "+12127365000"),
        ("212.736.5000", "+12127365000"),
        ("+1 212 736 5000", "+12127365000"),
        ("+33 1 42 68 53 00", "+33142685300"),
    ],
)
def test_formats_to_e164(raw, expected):
    assert format_phone_number(raw) == expected


def test_empty_is_none():
    assert format_phone_number("") is None
    assert format_phone_number(None) is None


def test_unparseable_is_returned_unchanged():
    assert format_phone_number("not a number") == "not a number"


def test_digits_only():
    assert digits_only("+1 (212) 736-5000") == "12127365000"
    assert digits_only(None) == ""
