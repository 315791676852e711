"""Single one-wire temperature probe read at 12-bit resolution."""

from __future__ import annotations

import math
from typing import Protocol

RESOLUTION_BITS = 12


class OneWireTemperatureBus(Protocol):
    """One-wire bus with temperature probes attached."""

    def begin(self) -> None: ...

    def device_count(self) -> int: ...

    def device_address(self, index: int) -> bytes | None: ...

    def set_resolution(self, address: bytes, bits: int) -> None: ...

    def request_temperatures(self) -> None: ...

    def read_temperature_c(self, address: bytes) -> float: ...


class TemperatureSensor:
    """The first probe found on a one-wire bus."""

    def __init__(self, bus: OneWireTemperatureBus) -> None:
        self._bus = bus
        self._address: bytes | None = None
        self._ready = False

    def begin(self) -> bool:
        """Look for a probe and configure it; report whether one was found."""
        self._bus.begin()
        address = self._bus.device_address(0) if self._bus.device_count() >= 1 else None
        if not address:
            self._ready = False
            self._address = None
            return False
        self._address = bytes(address)
        self._bus.set_resolution(self._address, RESOLUTION_BITS)
        self._ready = True
        return True

    def temperature_c(self) -> float:
        """Temperature in degrees Celsius, or NaN when no probe is ready."""
        if not self._ready or self._address is None:
            return math.nan
        self._bus.request_temperatures()
        return float(self._bus.read_temperature_c(self._address))

    def sensor_id(self) -> str:
        """Probe address as upper-case hex, or an empty string when not ready."""
        if not self._ready or self._address is None:
            return ""
        return self._address[:8].hex().upper()

    def is_ready(self) -> bool:
        return self._ready