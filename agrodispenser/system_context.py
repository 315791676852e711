"""Shared runtime state of the dispenser: channels, settings and task metrics."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .dispenser_channel import DispenserChannel

DEFAULT_BLE_DEVICE_NAME = "AgroFertilizer"
FIRMWARE_VERSION = "04.06.2025"
DEVICE_VERSION = "29.05.2025"


class SpeedSource(enum.IntEnum):
    SIM = 0
    GPS = 1


@dataclass
class SystemContext:
    """Settings and running totals shared by the command handlers and control loop."""

    left: DispenserChannel = field(default_factory=DispenserChannel)
    right: DispenserChannel = field(default_factory=DispenserChannel)

    speed_source: str = ""
    sim_speed: float = 0.0
    min_working_speed: float = 0.0
    auto_refresh_period: int = 0
    heartbeat_period: int = 0
    tank_level: float = 0.0

    liquid_consumed: float = 0.0
    area_completed: float = 0.0
    task_duration: int = 0
    distance_taken: int = 0
    client_in_work_zone: bool = False

    board_id: str = ""
    esp_id: str = ""
    ble_mac: str = ""

    def clear_task_metrics(self) -> None:
        """Reset duration, consumption, area and distance of the current task."""
        self.task_duration = 0
        self.liquid_consumed = 0.0
        self.area_completed = 0.0
        self.distance_taken = 0

    def increase_distance_taken(self, length: int) -> None:
        self.distance_taken += length

    def increase_liquid_consumed(self, value: float) -> None:
        self.liquid_consumed += value

    def increase_area_processed(self, value: float) -> None:
        self.area_completed += value

    def increment_task_duration(self) -> None:
        self.task_duration += 1

    def decrease_tank_level(self, value: float) -> None:
        self.tank_level -= value