import pytest

from agrodispenser.gps_provider import (
    MAX_HDOP_TOLERATED,
    MIN_SATELLITES_NEEDED,
    GPSProvider,
    GPSReading,
    Location,
)


def good_reading(**overrides):
    values = dict(latitude=41.5, longitude=29.25, speed_knots=10.0, satellites=8, hdop=1.2)
    values.update(overrides)
    return GPSReading(**values)


def test_empty_reading_is_invalid():
    provider = GPSProvider()
    assert provider.is_valid() is False
    assert provider.location() == Location(0.0, 0.0)
    assert provider.speed() == 0.0
    assert provider.satellite_count() == 0


def test_valid_reading_reports_location():
    provider = GPSProvider(good_reading())
    assert provider.is_valid() is True
    assert provider.location() == Location(41.5, 29.25)
    assert provider.satellite_count() == 8


def test_speed_units_are_consistent():
    provider = GPSProvider(good_reading())
    kmph = provider.speed()
    mps = provider.speed(mps=True)
    assert kmph > mps > 0
    assert kmph / mps == pytest.approx(3.6, rel=1e-4)


def test_too_few_satellites_invalidates_but_count_is_reported():
    provider = GPSProvider(good_reading(satellites=MIN_SATELLITES_NEEDED - 1))
    assert provider.is_valid() is False
    assert provider.location() == Location()
    assert provider.speed(mps=True) == 0.0
    assert provider.satellite_count() == MIN_SATELLITES_NEEDED - 1


def test_hdop_limits():
    assert GPSProvider(good_reading(hdop=MAX_HDOP_TOLERATED)).is_valid() is True
    assert GPSProvider(good_reading(hdop=MAX_HDOP_TOLERATED + 0.1)).is_valid() is False
    assert GPSProvider(good_reading(hdop=None)).is_valid() is False


def test_missing_speed_invalidates():
    assert GPSProvider(good_reading(speed_knots=None)).is_valid() is False


def test_reading_updates_are_seen():
    reading = GPSReading()
    provider = GPSProvider(reading)
    assert provider.is_valid() is False
    reading.latitude, reading.longitude = 1.0, 2.0
    reading.speed_knots, reading.satellites, reading.hdop = 0.0, 5, 2.0
    assert provider.location() == Location(1.0, 2.0)