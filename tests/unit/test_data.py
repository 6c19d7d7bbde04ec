"""Unit tests for raw payload decoding.

This module contains tests for:
- hex_to_integer (ASCII-hex to unsigned integer)
- to_readable_hex (telegram to readable byte order)
- decode_bcd (Type A BCD)
- decode_date (Type G date)
"""

from __future__ import annotations

import pytest

from src.minomess.exceptions import MinomessDecodingError
from src.minomess.protocol.data import decode_bcd, decode_date, hex_to_integer, to_readable_hex

# =============================================================================
# Hex Decoder Tests
# =============================================================================


class TestHexToInteger:
    """Tests for hex_to_integer."""

    @pytest.mark.parametrize(
        ("text", "expected_value"),
        [
            ("55000000", 0x55000000),
            ("000059", 0x59),
            ("00000059", 89),
            ("FFFFFF", 0xFFFFFF),
            ("ffffff", 0xFFFFFF),
            ("aBcD", 0xABCD),
            ("0", 0),
            ("F", 15),
            ("800000", 0x800000),
            ("FFFFFFFFFFFFFFFF", 0xFFFFFFFFFFFFFFFF),
        ],
        ids=[
            "documented_55000000",
            "profile_window_59",
            "readable_total_89",
            "all_f_window",
            "lower_case",
            "mixed_case",
            "single_zero",
            "single_f",
            "sentinel_window",
            "sixty_four_bits",
        ],
    )
    def test_valid_hex(self, text: str, expected_value: int) -> None:
        """Test parsing of valid hex strings."""
        assert hex_to_integer(text) == expected_value

    def test_documented_value(self) -> None:
        """Test the documented example value."""
        assert hex_to_integer("55000000") == 1426063360

    def test_empty_string_is_zero(self) -> None:
        """Test that an empty string parses to 0."""
        assert hex_to_integer("") == 0

    @pytest.mark.parametrize(
        "text",
        ["G0", "12 4", "0x12", "-1", "1_0", "12\n", "٣"],
        ids=["letter_g", "space", "prefix", "sign", "underscore", "newline", "arabic_digit"],
    )
    def test_invalid_character_raises(self, text: str) -> None:
        """Test that non-hex characters raise instead of producing a wrong value."""
        with pytest.raises(MinomessDecodingError, match="Invalid hex digit"):
            hex_to_integer(text)

    def test_decoding_error_is_value_error(self) -> None:
        """Test that decoding errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            hex_to_integer("ZZ")

    def test_matches_nibble_sum(self) -> None:
        """Test that the result equals the nibble sum for every hex digit position."""
        text = "0123456789ABCDEF"
        expected = sum(int(character, 16) * 16 ** (len(text) - 1 - i) for i, character in enumerate(text))
        assert hex_to_integer(text) == expected


class TestToReadableHex:
    """Tests for to_readable_hex."""

    @pytest.mark.parametrize(
        ("raw_hex", "expected"),
        [
            ("59000000", "00000059"),
            ("A12B", "2BA1"),
            ("000080", "800000"),
            ("12", "12"),
            ("", ""),
            ("FBFE000000", "000000FEFB"),
        ],
        ids=["four_bytes", "two_bytes", "three_bytes", "one_byte", "empty", "profile_head"],
    )
    def test_reverses_byte_order(self, raw_hex: str, expected: str) -> None:
        """Test that byte pairs are reversed, nibbles within a byte are kept."""
        assert to_readable_hex(raw_hex) == expected

    def test_odd_length_raises(self) -> None:
        """Test that a dangling nibble is rejected."""
        with pytest.raises(MinomessDecodingError, match="odd length"):
            to_readable_hex("123")


# =============================================================================
# BCD Decoder Tests
# =============================================================================


class TestDecodeBcd:
    """Tests for decode_bcd."""

    @pytest.mark.parametrize(
        ("readable_hex", "expected"),
        [
            ("80000000", 80000000),
            ("00012345", 12345),
            ("00000000", 0),
            ("", 0),
            ("99", 99),
            ("F0000123", -123),
        ],
        ids=["zenner_target", "digits", "zero", "empty", "one_byte", "negative"],
    )
    def test_valid(self, readable_hex: str, expected: int) -> None:
        assert decode_bcd(readable_hex) == expected

    @pytest.mark.parametrize(
        "readable_hex",
        ["FFFFFFFF", "0000000A", "000E0000", "F0F00000"],
        ids=["all_f", "a_digit", "e_digit", "f_not_leading"],
    )
    def test_invalid_digits_return_none(self, readable_hex: str) -> None:
        """Test that digits A-E and non-leading F mark the value invalid."""
        assert decode_bcd(readable_hex) is None

    def test_non_hex_raises(self) -> None:
        with pytest.raises(MinomessDecodingError):
            decode_bcd("0000G000")


# =============================================================================
# Date Decoder Tests
# =============================================================================


class TestDecodeDate:
    """Tests for decode_date (Type G)."""

    @pytest.mark.parametrize(
        ("raw_hex", "expected"),
        [
            ("A12B", "2021-11-01"),
            ("BE2B", "2021-11-30"),
            ("E121", "2023-01-01"),
            ("EC21", "2023-01-12"),
            ("a12b", "2021-11-01"),
        ],
        ids=["target_date_2021", "meter_date_2021", "target_date_2023", "meter_date_2023", "lower_case"],
    )
    def test_valid_dates(self, raw_hex: str, expected: str) -> None:
        """Test decoding of dates from real telegrams."""
        assert decode_date(raw_hex) == expected

    def test_invalid_marker_returns_none(self) -> None:
        """Test that FFFF (invalid marker) decodes to None."""
        assert decode_date("FFFF") is None

    @pytest.mark.parametrize(
        "raw_hex",
        ["A1", "A12B00", ""],
        ids=["one_byte", "three_bytes", "empty"],
    )
    def test_wrong_length_raises(self, raw_hex: str) -> None:
        """Test that payloads other than 2 bytes are rejected."""
        with pytest.raises(MinomessDecodingError, match="Invalid data length"):
            decode_date(raw_hex)

    @pytest.mark.parametrize(
        ("raw_hex", "message"),
        [
            ("A120", "Invalid month"),
            ("A02B", "Invalid day"),
            ("A1FB", "Invalid year"),
        ],
        ids=["month_zero", "day_zero", "year_127"],
    )
    def test_out_of_range_raises(self, raw_hex: str, message: str) -> None:
        """Test that out-of-range date components are rejected."""
        with pytest.raises(MinomessDecodingError, match=message):
            decode_date(raw_hex)

    def test_non_hex_raises(self) -> None:
        """Test that non-hex payloads are rejected."""
        with pytest.raises(MinomessDecodingError):
            decode_date("ZZZZ")
