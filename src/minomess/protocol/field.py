"""Data items and field lookup.

A data item is one record of a telegram as delivered by the link layer: its
DIF/DIFE/VIF/VIFE key, the payload as ASCII hex in telegram order and the byte
offset of the payload. This module provides:

Classes:
    - DataField: One data item with the coordinates parsed from its key
    - FieldMatcher: Finds a data item by coordinates or by exact key

The key encodes the lookup coordinates:
    - Data field (payload length and coding, e.g. 8 digit BCD): DIF bits 0-3
    - Function (instantaneous/maximum/minimum/error): DIF bits 4-5
    - Storage number: DIF bit 6 + DIFE bits 0-3
    - Tariff: DIFE bits 4-5
    - Subunit: DIFE bit 6
    - VIF range and scale: VIF (+ VIFE for the error flags record)

Example (reverse compact profile of the Minomess meter):
    8D 04 93 13
    |  |  |  +- VIFE: reverse compact profile without register
    |  |  +---- VIF: volume in litres (0x13), extension bit set
    |  +------- DIFE: storage bits 0-3 = 4 -> storage number 8
    +---------- DIF: variable length, instantaneous, extension bit set

Reference: EN 13757-3:2018
    - Table 4 (page 13): Data field encoding
    - Table 7 (page 14): Function field encoding
    - Table 8 (page 14): DIFE encoding
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from ..exceptions import MinomessDecodingError
from .common import MeasurementType, VIFRange
from .data import hex_to_integer, to_readable_hex
from .value import VIF_EXTENSION_BIT_MASK, check_scale, vif_scale

# =============================================================================
# DIF/VIF Constants (EN 13757-3:2018)
# =============================================================================

DIF_EXTENSION_BIT_MASK = 0b10000000  # Bit 7: extension bit (more DIFE bytes follow)
DIF_DATA_FIELD_BIT_MASK = 0b00001111  # Bits 0-3: data field (length and coding)
DIF_FUNCTION_BIT_MASK = 0b00110000  # Bits 4-5: function
DIF_FUNCTION_BIT_SHIFT = 4

DIF_STORAGE_NUMBER_BIT_MASK = 0b01000000  # Bit 6: LSB of storage number
DIF_STORAGE_NUMBER_BIT_SHIFT = 6
DIF_STORAGE_NUMBER_BIT_LENGTH = 1

DIFE_EXTENSION_BIT_MASK = 0b10000000  # Bit 7: extension bit (more DIFE bytes follow)

DIFE_MAXIMUM_CHAIN_LENGTH = 10  # Maximum number of chained DIFE bytes

DIFE_STORAGE_NUMBER_BIT_MASK = 0b00001111  # Bits 0-3
DIFE_STORAGE_NUMBER_BIT_LENGTH = 4

DIFE_TARIFF_BIT_MASK = 0b00110000  # Bits 4-5
DIFE_TARIFF_BIT_SHIFT = 4
DIFE_TARIFF_BIT_LENGTH = 2

DIFE_SUBUNIT_BIT_MASK = 0b01000000  # Bit 6
DIFE_SUBUNIT_BIT_SHIFT = 6
DIFE_SUBUNIT_BIT_LENGTH = 1

VIFE_MAXIMUM_CHAIN_LENGTH = 10  # Maximum number of chained VIFE bytes

VIF_DATE = 0b01101100  # E110 1100: Date (Type G)
VIF_EXTENSION_FD = 0b11111101  # Second extension table follows
VIFE_FD_ERROR_FLAGS = 0b00010111  # E001 0111: Error flags (binary)

# Data field codes with BCD coding: 2, 4, 6, 8 and 12 digits (Table 4)
DIF_BCD_DATA_FIELDS = frozenset((0b00001001, 0b00001010, 0b00001011, 0b00001100, 0b00001110))

_FUNCTIONS = (
    MeasurementType.INSTANTANEOUS,
    MeasurementType.MAXIMUM,
    MeasurementType.MINIMUM,
    MeasurementType.ERROR,
)


class KeyCoordinates(NamedTuple):
    """Lookup coordinates parsed from a DIF/DIFE/VIF/VIFE key."""

    data_field: int
    measurement_type: MeasurementType
    storage_number: int
    tariff: int
    subunit: int
    vif: int
    vifes: tuple[int, ...]
    vif_range: VIFRange


def _classify_vif(vif: int, vifes: tuple[int, ...]) -> VIFRange:
    if vif_scale(vif) is not None:
        return VIFRange.VOLUME

    if vif & ~VIF_EXTENSION_BIT_MASK == VIF_DATE:
        return VIFRange.DATE

    if vif == VIF_EXTENSION_FD and vifes and vifes[0] & ~VIF_EXTENSION_BIT_MASK == VIFE_FD_ERROR_FLAGS:
        return VIFRange.ERROR_FLAGS

    return VIFRange.OTHER


def parse_key(key: str) -> KeyCoordinates:
    """Parse a DIF/DIFE/VIF/VIFE key into lookup coordinates.

    Args:
        key: Key as hex in telegram order, e.g. "8C0413"

    Returns:
        Parsed coordinates

    Raises:
        MinomessDecodingError: If the key is not hex, is truncated or has too
            long DIFE/VIFE chains
    """
    if len(key) % 2:
        raise MinomessDecodingError(f"Key {key!r} has odd length {len(key)}")

    key_bytes = [hex_to_integer(key[position : position + 2]) for position in range(0, len(key), 2)]

    if len(key_bytes) < 2:
        raise MinomessDecodingError(f"Key {key!r} must contain at least a DIF and a VIF")

    dif = key_bytes[0]

    measurement_type = _FUNCTIONS[(dif & DIF_FUNCTION_BIT_MASK) >> DIF_FUNCTION_BIT_SHIFT]
    storage_number = (dif & DIF_STORAGE_NUMBER_BIT_MASK) >> DIF_STORAGE_NUMBER_BIT_SHIFT
    tariff = 0
    subunit = 0

    position = 1
    extension = dif & DIF_EXTENSION_BIT_MASK

    while extension:
        if position > DIFE_MAXIMUM_CHAIN_LENGTH:
            raise MinomessDecodingError(f"Key {key!r} has more than {DIFE_MAXIMUM_CHAIN_LENGTH} DIFEs")

        if position >= len(key_bytes):
            raise MinomessDecodingError(f"Key {key!r} ends inside the DIFE chain")

        dife = key_bytes[position]
        chain_index = position - 1

        storage_number |= (dife & DIFE_STORAGE_NUMBER_BIT_MASK) << (
            DIF_STORAGE_NUMBER_BIT_LENGTH + chain_index * DIFE_STORAGE_NUMBER_BIT_LENGTH
        )
        tariff |= ((dife & DIFE_TARIFF_BIT_MASK) >> DIFE_TARIFF_BIT_SHIFT) << (chain_index * DIFE_TARIFF_BIT_LENGTH)
        subunit |= ((dife & DIFE_SUBUNIT_BIT_MASK) >> DIFE_SUBUNIT_BIT_SHIFT) << (
            chain_index * DIFE_SUBUNIT_BIT_LENGTH
        )

        extension = dife & DIFE_EXTENSION_BIT_MASK
        position += 1

    if position >= len(key_bytes):
        raise MinomessDecodingError(f"Key {key!r} has no VIF")

    vif = key_bytes[position]
    vifes = tuple(key_bytes[position + 1 :])

    if len(vifes) > VIFE_MAXIMUM_CHAIN_LENGTH:
        raise MinomessDecodingError(f"Key {key!r} has more than {VIFE_MAXIMUM_CHAIN_LENGTH} VIFEs")

    return KeyCoordinates(
        data_field=dif & DIF_DATA_FIELD_BIT_MASK,
        measurement_type=measurement_type,
        storage_number=storage_number,
        tariff=tariff,
        subunit=subunit,
        vif=vif,
        vifes=vifes,
        vif_range=_classify_vif(vif, vifes),
    )


# =============================================================================
# Data Items
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class DataField:
    """One data item of a telegram.

    Attributes:
        key: DIF/DIFE/VIF/VIFE key in upper case hex
        raw_hex: Payload in telegram order (least significant byte first)
        offset: Byte offset of the payload in the telegram
        coordinates: Lookup coordinates parsed from the key
        scale: Scale factor (raw / scale = m³), None for non-volume items

    Usage:
        total = DataField.from_key("0C13", "59000000", offset=0x1B)
        total.scale  # 1000.0
        total.readable_hex  # "00000059"
    """

    key: str
    raw_hex: str
    offset: int = 0
    coordinates: KeyCoordinates = field(repr=False)
    scale: float | None = None

    def __post_init__(self) -> None:
        if self.scale is not None:
            check_scale(self.scale)

    @classmethod
    def from_key(cls, key: str, raw_hex: str, offset: int = 0, scale: float | None = None) -> DataField:
        """Create a data item, parsing the coordinates from its key.

        Args:
            key: DIF/DIFE/VIF/VIFE key in telegram order
            raw_hex: Payload in telegram order
            offset: Byte offset of the payload in the telegram
            scale: Explicit scale factor, derived from the VIF if omitted

        Raises:
            MinomessDecodingError: If the key cannot be parsed
            MinomessScaleError: If an explicit scale is not positive
        """
        key = key.upper()
        coordinates = parse_key(key)

        if scale is None:
            scale = vif_scale(coordinates.vif)

        return cls(key=key, raw_hex=raw_hex, offset=offset, coordinates=coordinates, scale=scale)

    @property
    def readable_hex(self) -> str:
        """Payload with the byte order reversed (most significant byte first)."""
        return to_readable_hex(self.raw_hex)

    @property
    def is_bcd(self) -> bool:
        """True if the DIF declares a BCD coded payload."""
        return self.coordinates.data_field in DIF_BCD_DATA_FIELDS

    @property
    def measurement_type(self) -> MeasurementType:
        return self.coordinates.measurement_type

    @property
    def storage_number(self) -> int:
        return self.coordinates.storage_number

    @property
    def tariff(self) -> int:
        return self.coordinates.tariff

    @property
    def subunit(self) -> int:
        return self.coordinates.subunit

    @property
    def vif_range(self) -> VIFRange:
        return self.coordinates.vif_range


# =============================================================================
# Field Lookup
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class FieldMatcher:
    """Selects a data item by coordinates or by exact key.

    When several items match, index selects the n-th one in telegram order
    (1 = first). A matcher with a key ignores all other coordinates.

    Usage:
        profile = FieldMatcher(
            measurement_type=MeasurementType.INSTANTANEOUS,
            vif_range=VIFRange.VOLUME,
            storage_number=8,
            index=2,
        ).find(fields)

        status = FieldMatcher.for_key("02FD17").find(fields)
    """

    measurement_type: MeasurementType = MeasurementType.INSTANTANEOUS
    vif_range: VIFRange | None = None
    storage_number: int = 0
    tariff: int = 0
    subunit: int = 0
    index: int = 1
    key: str | None = None

    def __post_init__(self) -> None:
        if self.index < 1:
            raise ValueError(f"Match index must be at least 1, got {self.index}")

    @classmethod
    def for_key(cls, key: str) -> FieldMatcher:
        return cls(key=key.upper())

    def matches(self, data_field: DataField) -> bool:
        if self.key is not None:
            return data_field.key == self.key

        return (
            data_field.measurement_type is self.measurement_type
            and data_field.vif_range is self.vif_range
            and data_field.storage_number == self.storage_number
            and data_field.tariff == self.tariff
            and data_field.subunit == self.subunit
        )

    def find(self, fields: Iterable[DataField]) -> DataField | None:
        """Return the index-th matching item, or None if there is none."""
        found = 0

        for data_field in fields:
            if self.matches(data_field):
                found += 1

                if found == self.index:
                    return data_field

        return None
