"""Driver for the ADS1115 16-bit analog-to-digital converter over I2C."""

from __future__ import annotations

import enum
import time
from typing import Protocol

DEFAULT_ADDRESS = 0x48

REG_CONVERSION = 0x00
REG_CONFIG = 0x01

OS_SINGLE = 0x8000
MODE_SINGLE = 0x0100
MODE_CONT = 0x0000
COMPARATOR_DISABLE = 0x0003

# Current-sense divider resistors (ohms) and sensor sensitivity (V/A).
R_TOP = 4700.0
R_BOTTOM = 1000.0
CS_SENSITIVITY = 0.010

_DIFFERENTIAL_MUX = {
    (0, 1): 0x0000,
    (0, 3): 0x1000,
    (1, 3): 0x2000,
    (2, 3): 0x3000,
}


class Gain(enum.Enum):
    """Programmable gain: (config bits, full-scale range in volts)."""

    FSR_6_144V = (0x0000, 6.144)
    FSR_4_096V = (0x0200, 4.096)
    FSR_2_048V = (0x0400, 2.048)
    FSR_1_024V = (0x0600, 1.024)
    FSR_0_512V = (0x0800, 0.512)
    FSR_0_256V = (0x0A00, 0.256)

    @property
    def bits(self) -> int:
        return self.value[0]

    @property
    def full_scale(self) -> float:
        return self.value[1]


class DataRate(enum.Enum):
    """Conversion rate in samples per second; the value is the config bits."""

    SPS_8 = 0x0000
    SPS_16 = 0x0020
    SPS_32 = 0x0040
    SPS_64 = 0x0060
    SPS_128 = 0x0080
    SPS_250 = 0x00A0
    SPS_475 = 0x00C0
    SPS_860 = 0x00E0


class I2CBus(Protocol):
    """Minimal I2C bus; both methods raise OSError when the transfer fails."""

    def write(self, address: int, data: bytes) -> None: ...

    def read(self, address: int, length: int) -> bytes: ...


class ADCReadError(OSError):
    """Raised when the converter cannot be configured or read."""


class ADS1115:
    """Single-shot reader for the four ADS1115 inputs."""

    conversion_delay = 0.01

    def __init__(self, bus: I2CBus, address: int = DEFAULT_ADDRESS) -> None:
        self.bus = bus
        self.address = address
        self.gain = Gain.FSR_2_048V
        self.data_rate = DataRate.SPS_128

    def fsr(self) -> float:
        """Full-scale range in volts for the current gain."""
        return self.gain.full_scale

    def build_config(self, mux: int) -> int:
        """Config register value for a single-shot conversion on ``mux``."""
        return (
            OS_SINGLE
            | mux
            | self.gain.bits
            | self.data_rate.bits_value
            | MODE_SINGLE
            | COMPARATOR_DISABLE
        ) if False else (
            OS_SINGLE | mux | self.gain.bits | self.data_rate.value | MODE_SINGLE | COMPARATOR_DISABLE
        )

    def _configure(self, mux: int) -> None:
        config = self.build_config(mux)
        try:
            self.bus.write(self.address, bytes([REG_CONFIG, config >> 8, config & 0xFF]))
        except OSError as exc:
            raise ADCReadError(f"configuring ADS1115 at 0x{self.address:02X} failed") from exc

    def _read_conversion(self) -> int:
        try:
            self.bus.write(self.address, bytes([REG_CONVERSION]))
            data = self.bus.read(self.address, 2)
        except OSError as exc:
            raise ADCReadError(f"reading ADS1115 at 0x{self.address:02X} failed") from exc
        if len(data) < 2:
            raise ADCReadError("short read from conversion register")
        return int.from_bytes(data[:2], "big", signed=True)

    def _convert(self, mux: int) -> int:
        self._configure(mux)
        if self.conversion_delay > 0:
            time.sleep(self.conversion_delay)
        return self._read_conversion()

    def read_single_ended(self, channel: int) -> int:
        """Raw signed reading of input ``channel`` (0-3) against ground."""
        if not 0 <= channel <= 3:
            raise ValueError(f"channel must be 0-3, got {channel}")
        return self._convert(0x4000 | (channel << 12))

    def read_differential(self, channel1: int, channel2: int) -> int:
        """Raw signed reading of ``channel1`` minus ``channel2``."""
        mux = _DIFFERENTIAL_MUX.get((channel1, channel2))
        if mux is None:
            raise ValueError(f"unsupported differential pair ({channel1}, {channel2})")
        return self._convert(mux)

    def read_voltage_single_ended(self, channel: int) -> float:
        return self.raw_to_voltage(self.read_single_ended(channel))

    def read_voltage_differential(self, channel1: int, channel2: int) -> float:
        return self.raw_to_voltage(self.read_differential(channel1, channel2))

    def raw_to_voltage(self, raw: int) -> float:
        return raw * self.fsr() / 32768.0

    def raw_to_current(self, raw: int) -> float:
        """Motor current in amps from a reading of the current-sense divider."""
        divider_factor = (R_TOP + R_BOTTOM) / R_BOTTOM
        return self.raw_to_voltage(raw) * divider_factor / CS_SENSITIVITY

    def map_raw_to_float(
        self,
        raw: int,
        conversion_factor: float = 1.0,
        raw_min: int = 0,
        raw_max: int = 32767,
    ) -> float:
        """Scale ``raw`` clamped to [raw_min, raw_max] onto [0, conversion_factor]."""
        if raw_max == raw_min:
            return 0.0
        raw = min(max(raw, raw_min), raw_max)
        return (raw - raw_min) / (raw_max - raw_min) * conversion_factor