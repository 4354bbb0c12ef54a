"""Tests for delimited-input parsing and amount formatting."""

from decimal import Decimal

import pytest

from tabsplit.exceptions import InvalidInputError, ShareParseError
from tabsplit.parsing import (
    format_amount,
    parse_amount,
    parse_shares,
    split_delimited,
    unique_members,
)


class TestSplitDelimited:
    """Tests for split_delimited."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("a||b", ["a", "b"]),
            ("|a|", ["a"]),
            ("", []),
            (None, []),
            (["a", "", "b"], ["a", "b"]),
        ],
    )
    def test_drops_empty_tokens(self, value, expected):
        """Empty segments are silently dropped."""
        assert split_delimited(value) == expected

    def test_keeps_whitespace(self):
        """Names are taken verbatim."""
        assert split_delimited(" a | b") == [" a ", " b"]

    def test_unique_members(self):
        """Duplicates are dropped keeping first position."""
        assert unique_members("b|a|b|c|a") == ["b", "a", "c"]


class TestParseShares:
    """Tests for parse_shares."""

    def test_absent(self):
        """No shares means equal split."""
        assert parse_shares(None) is None
        assert parse_shares("") is None

    def test_delimiters_only(self):
        """Supplied but empty yields no shares, which fails the count check."""
        assert parse_shares("||") == []

    def test_numbers(self):
        """Tokens become Decimals."""
        assert parse_shares("10.5|0.25|3") == [
            Decimal("10.5"),
            Decimal("0.25"),
            Decimal("3"),
        ]

    def test_list_of_floats(self):
        """Floats don't pick up binary noise."""
        assert parse_shares([0.1, 0.2]) == [Decimal("0.1"), Decimal("0.2")]

    @pytest.mark.parametrize("token", ["abc", "1.2.3", "nan", "-inf", "1,5"])
    def test_bad_token(self, token):
        """Non-numeric or non-finite tokens raise ShareParseError."""
        with pytest.raises(ShareParseError):
            parse_shares(f"1|{token}")


class TestAmounts:
    """Tests for parse_amount and format_amount."""

    def test_parse_amount(self):
        """Strings, ints and floats are accepted."""
        assert parse_amount("12.50") == Decimal("12.50")
        assert parse_amount(3) == Decimal("3")
        assert parse_amount(0.3) == Decimal("0.3")

    @pytest.mark.parametrize("value", ["-1", "abc", "inf"])
    def test_parse_amount_invalid(self, value):
        """Negative, non-numeric and infinite amounts are rejected."""
        with pytest.raises(InvalidInputError):
            parse_amount(value)

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("30"), "30.00"),
            (Decimal("100") / 3, "33.33"),
            (Decimal("0.005"), "0.01"),
            (Decimal("-0.004"), "0.00"),
            (Decimal("-12.345"), "-12.35"),
        ],
    )
    def test_format_amount(self, amount, expected):
        """Always two decimals, half-up rounding."""
        assert format_amount(amount) == expected

    def test_format_beyond_default_precision(self):
        """Values past 28 digits are formatted rather than raising."""
        assert format_amount(Decimal("3e30")) == "3" + "0" * 30 + ".00"

    @pytest.mark.parametrize("value", ["1e26", "1e30"])
    def test_parse_amount_too_large(self, value):
        """Amounts that can't be held to the cent are invalid input."""
        with pytest.raises(InvalidInputError):
            parse_amount(value)

    def test_parse_shares_too_large(self):
        """Shares that can't be held to the cent are parse errors."""
        with pytest.raises(ShareParseError):
            parse_shares("1e26|1")
