"""Common types shared across protocol components.

This module contains the coordinates used to address a data item inside a
telegram: the DIF function field and the coarse classification of the VIF.

Reference: EN 13757-3:2018
"""

from enum import Enum, StrEnum


class MeasurementType(StrEnum):
    """DIF function field (bits 4-5).

    Reference: EN 13757-3:2018, Table 7
    """

    INSTANTANEOUS = "instantaneous"
    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    ERROR = "error"


class VIFRange(Enum):
    """Coarse VIF classification used for field lookup.

    Only the ranges the Minomess driver addresses are distinguished, every
    other VIF is reported as OTHER.
    """

    VOLUME = "volume"
    DATE = "date"
    ERROR_FLAGS = "error_flags"
    OTHER = "other"
