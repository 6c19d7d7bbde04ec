"""Driver registry.

Drivers describe themselves with a DriverInfo and are registered in a
DriverRegistry that the application creates at startup and passes to whoever
needs to look drivers up. There is no module-level registry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .exceptions import MinomessRegistryError


class MeterType(StrEnum):
    WATER_METER = "water"


class LinkMode(StrEnum):
    """Wireless M-Bus link modes (EN 13757-4)."""

    C1 = "C1"
    T1 = "T1"
    S1 = "S1"


@dataclass(frozen=True, kw_only=True)
class DriverInfo:
    """Static description of a meter driver.

    Attributes:
        name: Unique driver name
        meter_type: Kind of meter handled by the driver
        link_modes: Link modes the meter transmits in
        default_fields: Output fields shown when the user selects none
        factory: Creates a driver instance, keyword arguments are passed through
    """

    name: str
    meter_type: MeterType
    link_modes: tuple[LinkMode, ...] = ()
    default_fields: tuple[str, ...] = ()
    factory: Callable[..., Any] = field(repr=False, compare=False)


class DriverRegistry:
    """Name to DriverInfo mapping populated at startup."""

    _drivers: dict[str, DriverInfo]

    def __init__(self) -> None:
        self._drivers = {}

    def register(self, info: DriverInfo) -> None:
        """Add a driver.

        Raises:
            MinomessRegistryError: If a driver with the same name is registered
        """
        if info.name in self._drivers:
            raise MinomessRegistryError(f"Driver {info.name!r} is already registered")

        self._drivers[info.name] = info

    def get(self, name: str) -> DriverInfo:
        """Look a driver up by name.

        Raises:
            MinomessRegistryError: If no driver has this name
        """
        try:
            return self._drivers[name]
        except KeyError:
            raise MinomessRegistryError(f"Unknown driver {name!r}") from None

    def create(self, name: str, **kwargs: Any) -> Any:
        """Instantiate the named driver."""
        return self.get(name).factory(**kwargs)

    def __contains__(self, name: object) -> bool:
        return name in self._drivers

    def __iter__(self) -> Iterator[DriverInfo]:
        return iter(self._drivers.values())

    def __len__(self) -> int:
        return len(self._drivers)
