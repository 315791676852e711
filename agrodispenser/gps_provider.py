"""Validated access to the latest GPS fix."""

from __future__ import annotations

from dataclasses import dataclass

MIN_SATELLITES_NEEDED = 4
MAX_HDOP_TOLERATED = 25.0

_KNOTS_TO_KMPH = 1.852
_KNOTS_TO_MPS = 0.514444


@dataclass(frozen=True)
class Location:
    lat: float = 0.0
    lng: float = 0.0


@dataclass
class GPSReading:
    """Latest decoded GPS values; a field is None while it has no valid value."""

    latitude: float | None = None
    longitude: float | None = None
    speed_knots: float | None = None
    satellites: int | None = None
    hdop: float | None = None


class GPSProvider:
    """Reports position and speed only when the fix is good enough."""

    def __init__(self, reading: GPSReading | None = None) -> None:
        self.reading = reading if reading is not None else GPSReading()

    def is_valid(self) -> bool:
        r = self.reading
        return (
            r.latitude is not None
            and r.longitude is not None
            and r.speed_knots is not None
            and r.satellites is not None
            and r.satellites >= MIN_SATELLITES_NEEDED
            and r.hdop is not None
            and r.hdop <= MAX_HDOP_TOLERATED
        )

    def location(self) -> Location:
        """Current position, or (0, 0) when the fix is not valid."""
        if not self.is_valid():
            return Location()
        return Location(self.reading.latitude, self.reading.longitude)

    def speed(self, mps: bool = False) -> float:
        """Ground speed in km/h, or in m/s when ``mps``; 0 when the fix is not valid."""
        if not self.is_valid():
            return 0.0
        knots = self.reading.speed_knots
        return knots * (_KNOTS_TO_MPS if mps else _KNOTS_TO_KMPH)

    def satellite_count(self) -> int:
        return self.reading.satellites if self.reading.satellites is not None else 0