"""
pyMinomess: Decoder for Zenner Minomess / SVA wireless water meter records.

This library turns the data items of a received record into scaled volumes,
monthly consumption history, dates and status flags. Telegram reception and
decryption are left to the application.
"""

from __future__ import annotations

from .driver import DRIVER_INFO, Annotation, DecodedRecord, MinomessDriver, register
from .exceptions import MinomessDecodingError, MinomessError, MinomessRegistryError, MinomessScaleError
from .protocol.field import DataField, FieldMatcher
from .registry import DriverInfo, DriverRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Driver
    "DRIVER_INFO",
    "Annotation",
    "DecodedRecord",
    "MinomessDriver",
    "register",
    # Data items
    "DataField",
    "FieldMatcher",
    # Registry
    "DriverInfo",
    "DriverRegistry",
    # Exceptions
    "MinomessDecodingError",
    "MinomessError",
    "MinomessRegistryError",
    "MinomessScaleError",
]
