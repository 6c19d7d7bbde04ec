"""Reverse compact profile decoding.

The Minomess meters report the volume at the end of each of the last 14
completed months in a single variable-length register (VIFE 0x13, reverse
compact profile without register). In readable byte order the register looks
like this:

    chars   0-5    6-11   ...   72-77   78-83   84-87
            n-15   n-14   ...   n-3     n-2     header
            m14    m13    ...   m2      m1

Month 1 is the most recent completed month before the current one and sits
nearest the header; each older month moves 6 characters toward the start.

A window whose first hex digit is '8' (e.g. 0x800000, the 24-bit "invalid"
marker) means the meter was not commissioned yet for that month and yields no
reading. Device documentation talks about FFFFFF as the "no data" pattern,
the '8' test is what real devices have been decoded with so far.

Reference: EN 13757-3:2018, Annex F (compact profiles)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple

from .data import hex_to_integer
from .value import check_scale, scale_quantity

_LOGGER = logging.getLogger(__name__)

# =============================================================================
# Profile Layout
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class ProfileLayout:
    """Character layout of a readable-order profile register."""

    register_chars: int = 88  # 44 bytes
    header_chars: int = 4  # 2 bytes, trailing in readable order
    window_chars: int = 6  # 3 bytes per month
    months: int = 14
    sentinel_char: str = "8"  # Leading digit of a not yet commissioned month

    def __post_init__(self) -> None:
        if self.months < 1 or self.window_chars < 1:
            raise ValueError("Profile layout needs at least one month window")

        if self.header_chars < 0 or self.months * self.window_chars + self.header_chars > self.register_chars:
            raise ValueError("Profile windows and header do not fit into the register")

        if len(self.sentinel_char) != 1:
            raise ValueError("Sentinel must be a single hex digit")

    @property
    def first_window_start(self) -> int:
        """Start of the month 1 window in a full-length register."""
        return self.months * self.window_chars - self.window_chars


DEFAULT_PROFILE_LAYOUT = ProfileLayout()


class MonthlyReading(NamedTuple):
    """Volume at the end of a completed month (1 = most recent)."""

    month: int
    value: float | None


# =============================================================================
# Window Arithmetic
# =============================================================================


def profile_window(
    month: int,
    register_length: int | None = None,
    layout: ProfileLayout = DEFAULT_PROFILE_LAYOUT,
) -> tuple[int, int] | None:
    """Compute the (start, length) of a month window.

    Month i starts at 78 - (i-1)*6, counted from the start of the register
    whatever its length. A window that does not end inside the register is
    unavailable. Month 1 sits furthest from the start, so a short register
    loses it first.

    Args:
        month: Month index, 1 (most recent) to layout.months
        register_length: Length of the register string (default: full layout)
        layout: Profile layout

    Returns:
        (start, length) in characters, or None if the window is not inside
        the register

    Raises:
        ValueError: If month is outside 1..layout.months
    """
    if not 1 <= month <= layout.months:
        raise ValueError(f"Month must be between 1 and {layout.months}, got {month}")

    if register_length is None:
        register_length = layout.register_chars

    start = layout.first_window_start - (month - 1) * layout.window_chars

    if start + layout.window_chars > register_length:
        return None

    return start, layout.window_chars


# =============================================================================
# Profile Extraction
# =============================================================================


def extract_monthly_profile(
    register: str,
    scale: float,
    layout: ProfileLayout = DEFAULT_PROFILE_LAYOUT,
) -> tuple[MonthlyReading, ...]:
    """Decode the monthly volumes of a reverse compact profile register.

    Args:
        register: Profile register in readable byte order
        scale: Scale factor of the profile's VIF
        layout: Profile layout

    Returns:
        Readings in month order. Months holding the sentinel and months outside
        a truncated register are omitted.

    Raises:
        MinomessScaleError: If scale is not a positive finite number
        MinomessDecodingError: If a window contains non-hex characters
    """
    check_scale(scale)

    readings: list[MonthlyReading] = []

    for month in range(1, layout.months + 1):
        window = profile_window(month, len(register), layout)

        if window is None:
            _LOGGER.debug(
                "Profile register too short (%d chars), months %d-%d unavailable", len(register), month, layout.months
            )
            break

        start, length = window
        window_text = register[start : start + length]

        if window_text.startswith(layout.sentinel_char):
            _LOGGER.debug("Month %d window %r not commissioned yet", month, window_text)
            continue

        raw = hex_to_integer(window_text)
        value = scale_quantity(raw, scale)

        _LOGGER.debug("Month %d window %r raw %d scale %g value %g", month, window_text, raw, scale, value)

        readings.append(MonthlyReading(month, value))

    return tuple(readings)
