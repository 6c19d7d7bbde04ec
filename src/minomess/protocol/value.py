"""Physical value scaling for Minomess data items.

A raw integer becomes a physical quantity by dividing it with a scale factor
derived from the item's VIF. For the volume VIFs used by water meters:

    E001 0nnn: value = raw * 10^(nnn-6) m³  ->  scale = 10^(6-nnn)

    VIF 0x13 (litres) -> scale 1000
    VIF 0x16 (m³)     -> scale 1

Reference: EN 13757-3:2018, Table 10
"""

from __future__ import annotations

import math
from enum import StrEnum

from ..exceptions import MinomessScaleError

# =============================================================================
# VIF Constants
# =============================================================================

VIF_EXTENSION_BIT_MASK = 0b10000000  # Bit 7: extension bit (more VIFE bytes follow)

VIF_VOLUME_CODE = 0b00010000  # E001 0nnn
VIF_VOLUME_MASK = 0b01111000
VIF_EXPONENT_MASK = 0b00000111  # nnn

VIF_VOLUME_EXPONENT_OFFSET = 6  # Volume is 10^(nnn-6) m³


class ValueUnit(StrEnum):
    """Units of the values produced by the decoder."""

    M3 = "m³"  # Cubic meter


def vif_scale(vif: int) -> float | None:
    """Return the scale factor for a volume VIF.

    Args:
        vif: VIF byte, the extension bit is ignored

    Returns:
        Scale factor (raw / scale = m³), or None if the VIF is not a volume
    """
    if vif & VIF_VOLUME_MASK != VIF_VOLUME_CODE:
        return None

    return float(10 ** (VIF_VOLUME_EXPONENT_OFFSET - (vif & VIF_EXPONENT_MASK)))


def check_scale(scale: float) -> float:
    """Validate a scale factor.

    Raises:
        MinomessScaleError: If scale is zero, negative or not finite
    """
    if not math.isfinite(scale) or scale <= 0:
        raise MinomessScaleError(f"Scale factor must be a positive finite number, got {scale!r}")

    return scale


def scale_quantity(raw: int, scale: float) -> float:
    """Convert a raw integer into a physical value.

    No rounding is applied beyond native floating point division.

    Args:
        raw: Raw integer read from the data item
        scale: Positive scale factor

    Returns:
        raw / scale

    Raises:
        MinomessScaleError: If scale is zero, negative or not finite
    """
    return raw / check_scale(scale)
