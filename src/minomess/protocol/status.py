"""Status word decoding for Minomess meters.

The meter reports two status bytes in the error flags record (DIF/VIF 02FD17).
The data sheet calls them byte A and byte B; byte A is taken as the high byte,
so 0x8000 is byte A bit 7. In the telegram the low byte comes first, so the
telegram bytes for byte A bit 7 are "0080".

    Byte A:
    bit 7 removal active in the past
    bit 6 tamper active in the past
    bit 5 leak active in the past
    bit 4 temporary error (in connection with smart functions)
    bit 3 permanent error (meter value might be lost)
    bit 2 battery EOL (measured)
    bit 1 abnormal error
    bit 0 unused

    Byte B:
    bit 7 burst
    bit 6 removal
    bit 5 leak
    bit 4 backflow in the past
    bit 3 backflow
    bit 2 meter blocked in the past
    bit 1 meter undersized
    bit 0 meter oversized
"""

from __future__ import annotations

from enum import Flag

STATUS_OK = "OK"

STATUS_WORD_MASK = 0xFFFF

# Ordered (mask, name) table, most significant bit first. 0x0100 is not used.
STATUS_FLAGS: tuple[tuple[int, str], ...] = (
    (0x8000, "WAS_REMOVED"),
    (0x4000, "WAS_TAMPERED"),
    (0x2000, "WAS_LEAKING"),
    (0x1000, "TEMPORARY_ERROR"),
    (0x0800, "PERMANENT_ERROR"),
    (0x0400, "BATTERY_EOL"),
    (0x0200, "ABNORMAL_ERROR"),
    (0x0080, "BURSTING"),
    (0x0040, "REMOVED"),
    (0x0020, "LEAKING"),
    (0x0010, "WAS_BACKFLOWING"),
    (0x0008, "BACKFLOWING"),
    (0x0004, "WAS_BLOCKED"),
    (0x0002, "UNDERSIZED"),
    (0x0001, "OVERSIZED"),
)

# Typed view of the status word, one member per table entry
StatusFlag = Flag("StatusFlag", [(name, mask) for mask, name in STATUS_FLAGS])


def _check_word(word: int) -> int:
    if word < 0:
        raise ValueError(f"Status word cannot be negative: {word}")

    return word & STATUS_WORD_MASK


def decode_status_flags(word: int) -> StatusFlag:
    """Return the flags set in a status word. Unknown bits are dropped."""
    word = _check_word(word)

    flags = StatusFlag(0)

    for mask, name in STATUS_FLAGS:
        if word & mask:
            flags |= StatusFlag[name]

    return flags


def decode_status(word: int, separator: str = " ") -> str:
    """Decode a status word into its textual form.

    Args:
        word: 16-bit status word (byte A high, byte B low)
        separator: Text placed between flag names

    Returns:
        "OK" if no known flag is set, otherwise the names of all set flags in
        table order (most significant bit first)

    Raises:
        ValueError: If word is negative
    """
    word = _check_word(word)

    names = [name for mask, name in STATUS_FLAGS if word & mask]

    if not names:
        return STATUS_OK

    return separator.join(names)
