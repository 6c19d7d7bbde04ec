"""Raw payload decoding for Minomess data items.

This module turns the ASCII-hex payload of a data item into numbers and dates.
It provides:

Functions:
    - hex_to_integer: Parse an ASCII-hex digit string (most significant nibble first)
    - to_readable_hex: Reverse telegram byte order into readable (big-endian) order
    - decode_bcd: Decode a Type A (BCD) number from readable order
    - decode_date: Decode a Type G date (CP16) into an ISO date string

Byte order:
    Data items travel least significant byte first. The readable form reverses
    the byte pairs so that the string can be read as a big-endian numeral:

        telegram order "59000000" -> readable "00000059" -> 0x59

Reference: EN 13757-3:2018, Annex A
"""

from __future__ import annotations

from ..exceptions import MinomessDecodingError

# =============================================================================
# Hex Constants
# =============================================================================

HEX_DIGITS_PER_BYTE = 2

_NIBBLE_VALUES = {character: value for value, character in enumerate("0123456789abcdef")} | {
    character: value for value, character in enumerate("0123456789ABCDEF")
}

# =============================================================================
# Hex Decoders
# =============================================================================


def hex_to_integer(text: str) -> int:
    """Parse an ASCII-hex digit string into an unsigned integer.

    The string is treated as a base-16 numeral with the most significant
    nibble first:

        value = sum(nibble(text[i]) * 16 ** (len(text) - 1 - i))

    Args:
        text: Hex digits (0-9, A-F, a-f). May be empty.

    Returns:
        Unsigned integer value, 0 for an empty string

    Raises:
        MinomessDecodingError: If any character is not a hex digit
    """
    value = 0

    for position, character in enumerate(text):
        nibble = _NIBBLE_VALUES.get(character)

        if nibble is None:
            raise MinomessDecodingError(f"Invalid hex digit {character!r} at position {position} in {text!r}")

        value = (value << 4) | nibble

    return value


def to_readable_hex(raw_hex: str) -> str:
    """Reverse the byte order of a telegram-order hex string.

    Args:
        raw_hex: Hex string in telegram order (least significant byte first)

    Returns:
        Hex string with byte pairs reversed (most significant byte first)

    Raises:
        MinomessDecodingError: If the string has an odd number of characters
    """
    if len(raw_hex) % HEX_DIGITS_PER_BYTE:
        raise MinomessDecodingError(f"Hex string {raw_hex!r} has odd length {len(raw_hex)}")

    return "".join(
        raw_hex[position : position + HEX_DIGITS_PER_BYTE]
        for position in range(len(raw_hex) - HEX_DIGITS_PER_BYTE, -1, -HEX_DIGITS_PER_BYTE)
    )


# =============================================================================
# Numeric Data Type Decoders
# =============================================================================


def decode_bcd(readable_hex: str) -> int | None:
    """Decode Type A: Unsigned BCD (Binary Coded Decimal).

    Each hex digit of the readable string is one decimal digit, most
    significant first.

    Special values:
        - Digits A-E: Invalid/error marker (returns None)
        - Digit F in the most significant position: Negative number marker

    Reference: EN 13757-3:2018, Annex A, Table A.1

    Args:
        readable_hex: BCD digits in readable order (e.g. "80000000")

    Returns:
        Decoded integer (can be negative), or None if invalid BCD digits found

    Raises:
        MinomessDecodingError: If any character is not a hex digit
    """
    value = hex_to_integer(readable_hex)

    result = 0
    multiplier = 1

    while value > 0:
        digit = value & 0x0F
        value >>= 4

        if digit > 9:
            if value == 0 and digit == 0x0F:
                result = -result
                break

            return None

        result += digit * multiplier
        multiplier *= 10

    return result


# =============================================================================
# Date/Time Data Type Decoders
# =============================================================================


def decode_date(raw_hex: str) -> str | None:
    """Decode Type G: Date CP16 (2 bytes).

    Year is offset from 2000 (0-99 for years 2000-2099).

    Special values:
        - 0xFFFF: Invalid (returns None)

    Reference: EN 13757-3:2018, Annex A, Table A.6

    Args:
        raw_hex: 4 hex digits in telegram order (e.g. "A12B" for 2021-11-01)

    Returns:
        Date as "YYYY-MM-DD", or None if the invalid marker is present

    Raises:
        MinomessDecodingError: If the payload is not 2 bytes of hex or holds
            an out-of-range month, day or year
    """
    if len(raw_hex) != 2 * HEX_DIGITS_PER_BYTE:
        raise MinomessDecodingError(f"Invalid data length for date: {raw_hex!r} (expected 4 hex digits)")

    value = hex_to_integer(to_readable_hex(raw_hex))

    # Reported as missing instead of the out-of-range date the raw bits would give
    if value == 0xFFFF:
        return None

    low = value & 0xFF
    high = value >> 8

    day = low & 0b00011111  # Bits 0-4
    month = high & 0b00001111  # Bits 8-11
    year = ((high >> 1) & 0b01111000) | (low >> 5)  # Bits 12-15 and 5-7

    if not 1 <= month <= 12:
        raise MinomessDecodingError(f"Invalid month: {month}")

    if not 1 <= day <= 31:
        raise MinomessDecodingError(f"Invalid day: {day}")

    if not 0 <= year <= 99:
        raise MinomessDecodingError(f"Invalid year: {year}")

    return f"{2000 + year:04d}-{month:02d}-{day:02d}"
