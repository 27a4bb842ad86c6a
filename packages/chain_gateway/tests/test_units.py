"""
Tests for address validation and unit conversion.
"""
from decimal import Decimal

import pytest

from chain_gateway.errors import InvalidAddressError, InvalidAmountError
from chain_gateway.units import MAX_UINT256, format_units, parse_units, validate_address


class TestFormatUnits:
    """Exact fixed-point rendering."""

    @pytest.mark.parametrize("raw,decimals,expected", [
        (0, 0, "0"),
        (0, 3, "0"),
        (0, 18, "0"),
        (10 ** 18, 18, "1"),
        (15 * 10 ** 17, 18, "1.5"),
        (5, 3, "0.005"),
        (1234, 3, "1.234"),
        (1000, 3, "1"),
        (1000, 0, "1000"),
        (7, 0, "7"),
        (1, 18, "0.000000000000000001"),
        (1_234_500_000, 6, "1234.5"),
        (10, 1, "1"),
    ])
    def test_examples(self, raw, decimals, expected):
        assert format_units(raw, decimals) == expected

    def test_uint256_max_keeps_every_digit(self):
        """No float rounding on the largest possible balance."""
        text = format_units(MAX_UINT256, 18)
        integer, fraction = text.split(".")
        assert integer + fraction == str(MAX_UINT256)
        assert len(fraction) == 18

    def test_decimals_larger_than_digits(self):
        assert format_units(42, 255) == "0." + "0" * 253 + "42"

    @pytest.mark.parametrize("raw,decimals", [(-1, 18), (1, -1), (1, 256), (1.5, 2), (True, 2)])
    def test_rejects_invalid_input(self, raw, decimals):
        with pytest.raises(InvalidAmountError):
            format_units(raw, decimals)


class TestParseUnits:
    """Display amount -> smallest unit."""

    def test_whole_units(self):
        assert parse_units(5, 6) == 5_000_000
        assert parse_units(1, 18) == 10 ** 18
        assert parse_units(3, 0) == 3

    def test_large_values_are_exact(self):
        assert parse_units(10 ** 9, 30) == 10 ** 39

    def test_decimal_strings(self):
        assert parse_units("1.5", 18) == 15 * 10 ** 17
        assert parse_units(Decimal("0.000001"), 6) == 1

    def test_too_many_decimals(self):
        with pytest.raises(InvalidAmountError):
            parse_units("0.0000001", 6)

    @pytest.mark.parametrize("amount", [1.5, True, "abc", "NaN", -1, "-2"])
    def test_rejects_invalid_amounts(self, amount):
        with pytest.raises(InvalidAmountError):
            parse_units(amount, 18)

    def test_overflow(self):
        with pytest.raises(InvalidAmountError):
            parse_units(MAX_UINT256, 1)


class TestValidateAddress:
    """0x-prefixed 20-byte hex."""

    def test_returns_checksum(self):
        lower = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
        assert validate_address(lower) == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

    def test_accepts_uppercase(self):
        upper = "0x5AAEB6053F3E94C9B9A09F33669435E7EF1BEAED"
        assert validate_address(upper) == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

    @pytest.mark.parametrize("bad", [
        "",
        "0x",
        "0x123",
        "5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaedff",
        "0xZZaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        "not an address",
        None,
        12345,
    ])
    def test_rejects_malformed(self, bad):
        with pytest.raises(InvalidAddressError):
            validate_address(bad)
