"""Protocol layer components for Minomess record decoding.

This package contains the pure decoding functions used by the driver.

Reference: EN 13757-3:2018
"""

from .common import MeasurementType, VIFRange
from .data import decode_bcd, decode_date, hex_to_integer, to_readable_hex
from .field import DataField, FieldMatcher, KeyCoordinates, parse_key
from .profile import DEFAULT_PROFILE_LAYOUT, MonthlyReading, ProfileLayout, extract_monthly_profile, profile_window
from .status import STATUS_FLAGS, STATUS_OK, StatusFlag, decode_status, decode_status_flags
from .value import ValueUnit, scale_quantity, vif_scale

__all__ = [
    # Common types
    "MeasurementType",
    "VIFRange",
    # Raw payload decoding
    "decode_bcd",
    "decode_date",
    "hex_to_integer",
    "to_readable_hex",
    # Data items
    "DataField",
    "FieldMatcher",
    "KeyCoordinates",
    "parse_key",
    # Profile
    "DEFAULT_PROFILE_LAYOUT",
    "MonthlyReading",
    "ProfileLayout",
    "extract_monthly_profile",
    "profile_window",
    # Status
    "STATUS_FLAGS",
    "STATUS_OK",
    "StatusFlag",
    "decode_status",
    "decode_status_flags",
    # Values
    "ValueUnit",
    "scale_quantity",
    "vif_scale",
]
