"""Shared test fixtures for pyMinomess tests.

The records below are the data items of real Minomess telegrams (after
decryption), split into key, payload and payload offset.
"""

from __future__ import annotations

import pytest

from src.minomess.protocol.field import DataField

# Readable-order profile windows
UNCOMMISSIONED_WINDOW = "800000"
EMPTY_WINDOW = "FFFFFF"


def make_fields(*items: tuple[str, str, int]) -> list[DataField]:
    """Build data items from (key, payload, offset) tuples."""
    return [DataField.from_key(key, raw_hex, offset) for key, raw_hex, offset in items]


@pytest.fixture
def mino_fields() -> list[DataField]:
    """Wireless telegram of a meter commissioned this month (profile all FFFFFF)."""
    return make_fields(
        ("0C13", "59000000", 0x1B),
        ("026C", "BE2B", 0x21),
        ("82046C", "A12B", 0x26),
        ("8C0413", "FFFFFFFF", 0x2B),
        ("8D049313", "FBFE" + "FF" * 42, 0x34),
        ("02FD17", "0000", 0x63),
    )


@pytest.fixture
def zenner_cold_fields() -> list[DataField]:
    """Wireless telegram with every profile month not commissioned (000080)."""
    return make_fields(
        ("0C13", "55000000", 0x1B),
        ("026C", "EC21", 0x21),
        ("82046C", "E121", 0x26),
        ("8C0413", "00000080", 0x2B),
        ("8D049313", "33FE" + "000080" * 14, 0x34),
        ("02FD17", "0000", 0x63),
    )


@pytest.fixture
def wired_fields() -> list[DataField]:
    """Wired M-Bus telegram, history starts at storage 1 and has no profile."""
    return make_fields(
        ("0C78", "57575757", 0x13),
        ("046D", "2414DE28", 0x18),
        ("0413", "00000000", 0x1E),
        ("0C943C", "00000000", 0x25),
        ("4413", "FFFFFFFF", 0x2B),
        ("426C", "FFFF", 0x31),
        ("840113", "FFFFFFFF", 0x36),
        ("02FD17", "0000", 0x6A),
    )


@pytest.fixture
def profile_register() -> str:
    """Readable-order profile: month 1 = 0x000059, month 2 not commissioned, rest empty."""
    return EMPTY_WINDOW * 12 + UNCOMMISSIONED_WINDOW + "000059" + "FEFB"
