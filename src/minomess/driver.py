"""Record decoding for Zenner Minomess / SVA water meters.

The driver looks up the data items of one received record and decodes them
into a DecodedRecord:

    total_m3                            0C13      volume, storage 0
    target_m3                           8C0413    volume, storage 8 (wired: storage 1)
    target_date                         82046C    date, storage 8 (wired: storage 1)
    last_month_date                     82046C    date, storage 8
    total_consumption_last_month_m3     8C0413    1st volume, storage 8
    total_consumption_prev_N_month_m3   8D049313  2nd volume, storage 8 (profile)
    status                              02FD17    error flags

Every item is decoded on its own. A malformed item is logged and recorded in
DecodedRecord.errors, the remaining items are still decoded. Missing items are
skipped.

The target volume is read with the coding its DIF declares. Wireless telegrams
carry it as 8 digit BCD (8C0413), so "00000080" is 80000 m³. If the meter was
commissioned recently it holds FFFFFFFF, which is no valid BCD and leaves the
target unset. Wired telegrams carry a binary integer (4413), where FFFFFFFF
decodes to 4294967.295 m³. All other volumes are read as binary.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from .exceptions import MinomessError, MinomessScaleError
from .protocol.common import MeasurementType, VIFRange
from .protocol.data import decode_bcd, decode_date, hex_to_integer
from .protocol.field import DataField, FieldMatcher
from .protocol.profile import DEFAULT_PROFILE_LAYOUT, ProfileLayout, extract_monthly_profile
from .protocol.status import decode_status
from .protocol.value import ValueUnit, scale_quantity
from .registry import DriverInfo, DriverRegistry, LinkMode, MeterType

_LOGGER = logging.getLogger(__name__)

DRIVER_NAME = "minomess_sva"

STATUS_KEY = "02FD17"

HISTORY_STORAGE_NUMBER = 8  # Wireless telegrams keep the monthly values in storage 8
WIRED_HISTORY_STORAGE_NUMBER = 1  # Wired telegrams start their history at storage 1

# =============================================================================
# Field Matchers
# =============================================================================

_TOTAL = (FieldMatcher(vif_range=VIFRange.VOLUME),)

_TARGET = (
    FieldMatcher(vif_range=VIFRange.VOLUME, storage_number=HISTORY_STORAGE_NUMBER),
    FieldMatcher(vif_range=VIFRange.VOLUME, storage_number=WIRED_HISTORY_STORAGE_NUMBER),
)

_TARGET_DATE = (
    FieldMatcher(vif_range=VIFRange.DATE, storage_number=HISTORY_STORAGE_NUMBER),
    FieldMatcher(vif_range=VIFRange.DATE, storage_number=WIRED_HISTORY_STORAGE_NUMBER),
)

_LAST_MONTH_DATE = (FieldMatcher(vif_range=VIFRange.DATE, storage_number=HISTORY_STORAGE_NUMBER),)

_LAST_MONTH = (FieldMatcher(vif_range=VIFRange.VOLUME, storage_number=HISTORY_STORAGE_NUMBER),)

_PROFILE = (
    FieldMatcher(
        measurement_type=MeasurementType.INSTANTANEOUS,
        vif_range=VIFRange.VOLUME,
        storage_number=HISTORY_STORAGE_NUMBER,
        index=2,
    ),
)

_STATUS = (FieldMatcher.for_key(STATUS_KEY),)


# =============================================================================
# Decoded Record
# =============================================================================


class Annotation(NamedTuple):
    """Diagnostic note attached to a byte offset of the telegram."""

    offset: int
    text: str


@dataclass
class DecodedRecord:
    """Values decoded from one record. Volumes are in m³.

    Attributes:
        monthly: Sparse month index to volume mapping (1 = last completed month)
        annotations: Notes for the decoded values, in decoding order
        errors: Field name to error message for items that failed to decode
    """

    total_m3: float | None = None
    target_m3: float | None = None
    target_date: str | None = None
    last_month_date: str | None = None
    total_consumption_last_month_m3: float | None = None
    monthly: dict[int, float] = field(default_factory=dict)
    status: str | None = None
    annotations: list[Annotation] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    def numeric_values(self) -> dict[str, float]:
        """Named volumes that are present, e.g. total_consumption_prev_3_month_m3."""
        values = {
            "total_m3": self.total_m3,
            "target_m3": self.target_m3,
            "total_consumption_last_month_m3": self.total_consumption_last_month_m3,
        }

        for month, value in sorted(self.monthly.items()):
            values[f"total_consumption_prev_{month}_month_m3"] = value

        return {name: value for name, value in values.items() if value is not None}

    def string_values(self) -> dict[str, str]:
        values = {
            "target_date": self.target_date,
            "last_month_date": self.last_month_date,
            "status": self.status,
        }

        return {name: value for name, value in values.items() if value is not None}


# =============================================================================
# Driver
# =============================================================================


def _find(matchers: Iterable[FieldMatcher], fields: tuple[DataField, ...]) -> DataField | None:
    for matcher in matchers:
        data_field = matcher.find(fields)

        if data_field is not None:
            return data_field

    return None


class MinomessDriver:
    """Decodes Minomess records into DecodedRecord instances.

    The driver holds only immutable configuration and may be shared between
    threads.

    Usage:
        driver = MinomessDriver()
        record = driver.decode(
            [
                DataField.from_key("0C13", "59000000", offset=0x1B),
                DataField.from_key("02FD17", "0000", offset=0x63),
            ]
        )
        record.total_m3  # 0.089
        record.status  # "OK"
    """

    profile_layout: ProfileLayout
    status_separator: str

    def __init__(
        self,
        profile_layout: ProfileLayout = DEFAULT_PROFILE_LAYOUT,
        status_separator: str = " ",
    ) -> None:
        """Initialize driver.

        Args:
            profile_layout: Layout of the reverse compact profile register
            status_separator: Text placed between status flag names
        """
        self.profile_layout = profile_layout
        self.status_separator = status_separator

    def decode(self, fields: Iterable[DataField]) -> DecodedRecord:
        """Decode all known items of one record.

        Args:
            fields: Data items of the record in telegram order

        Returns:
            Freshly created DecodedRecord
        """
        fields = tuple(fields)
        record = DecodedRecord()

        self._decode_field(record, "total", _TOTAL, fields, self._decode_total)
        self._decode_field(record, "target", _TARGET, fields, self._decode_target)
        self._decode_field(record, "target_date", _TARGET_DATE, fields, self._decode_target_date)
        self._decode_field(record, "last_month_date", _LAST_MONTH_DATE, fields, self._decode_last_month_date)
        self._decode_field(record, "total_consumption_last_month", _LAST_MONTH, fields, self._decode_last_month)
        self._decode_field(record, "total_consumption_prev_month", _PROFILE, fields, self._decode_profile)
        self._decode_field(record, "status", _STATUS, fields, self._decode_status)

        return record

    def _decode_field(
        self,
        record: DecodedRecord,
        name: str,
        matchers: tuple[FieldMatcher, ...],
        fields: tuple[DataField, ...],
        decoder: Callable[[DecodedRecord, str, DataField], None],
    ) -> None:
        data_field = _find(matchers, fields)

        if data_field is None:
            _LOGGER.debug("No data item for %s", name)
            return

        _LOGGER.debug("Found key %s for %s at offset %d", data_field.key, name, data_field.offset)

        try:
            decoder(record, name, data_field)
        except MinomessError as e:
            _LOGGER.warning(
                "Failed to decode %s from key %s at offset %d: %s", name, data_field.key, data_field.offset, e
            )
            record.errors[name] = str(e)

    @staticmethod
    def _scale(data_field: DataField) -> float:
        if data_field.scale is None:
            raise MinomessScaleError(f"Data item {data_field.key} has no scale factor")

        return data_field.scale

    @classmethod
    def _volume(cls, record: DecodedRecord, name: str, data_field: DataField, raw: int | None = None) -> float:
        scale = cls._scale(data_field)

        if raw is None:
            raw = hex_to_integer(data_field.readable_hex)

        value = scale_quantity(raw, scale)

        _LOGGER.debug("%s raw %d scale %g value %g %s", name, raw, scale, value, ValueUnit.M3)

        record.annotations.append(Annotation(data_field.offset, f" ({name}: {value:f})"))

        return value

    def _decode_total(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        record.total_m3 = self._volume(record, name, data_field)

    def _decode_target(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        if not data_field.is_bcd:
            record.target_m3 = self._volume(record, name, data_field)
            return

        raw = decode_bcd(data_field.readable_hex)

        if raw is None:
            _LOGGER.debug("%s holds no valid BCD value: %s", name, data_field.readable_hex)
            return

        record.target_m3 = self._volume(record, name, data_field, raw)

    def _decode_last_month(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        record.total_consumption_last_month_m3 = self._volume(record, name, data_field)

    def _decode_target_date(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        record.target_date = decode_date(data_field.raw_hex)

    def _decode_last_month_date(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        record.last_month_date = decode_date(data_field.raw_hex)

    def _decode_profile(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        readings = extract_monthly_profile(data_field.readable_hex, self._scale(data_field), self.profile_layout)

        for month, value in readings:
            # extract_monthly_profile omits months without a value
            assert value is not None

            record.monthly[month] = value
            record.annotations.append(
                Annotation(data_field.offset, f" (total_consumption_prev_{month}_month: {value:f})")
            )

    def _decode_status(self, record: DecodedRecord, name: str, data_field: DataField) -> None:
        record.status = decode_status(hex_to_integer(data_field.readable_hex), self.status_separator)


# =============================================================================
# Registration
# =============================================================================


DRIVER_INFO = DriverInfo(
    name=DRIVER_NAME,
    meter_type=MeterType.WATER_METER,
    link_modes=(LinkMode.C1,),
    default_fields=(
        "name",
        "id",
        "total_m3",
        "target_m3",
        "target_date",
        "total_consumption_last_month_m3",
        "last_month_date",
        "total_consumption_prev_1_month_m3",
        "status",
        "timestamp",
    ),
    factory=MinomessDriver,
)


def register(registry: DriverRegistry) -> None:
    """Add the Minomess driver to a registry."""
    registry.register(DRIVER_INFO)
