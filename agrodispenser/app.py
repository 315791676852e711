"""Control loop of the dispenser and a command console entry point."""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from collections.abc import Sequence

from .ads1115 import ADCReadError, ADS1115
from .circular_buffer import CircularBuffer
from .command_handler import AppServices, CommandHandler
from .command_parser import CommandParser, ParseError
from .gps_provider import GPSProvider
from .motor_driver import MotorDriver
from .pi_controller import PIController
from .preferences import (
    DEFAULT_KI_VALUE,
    DEFAULT_KP_VALUE,
    PreferenceStore,
    SystemPreferences,
)
from .system_context import DEFAULT_BLE_DEVICE_NAME, SystemContext
from .text_server import TextServer
from .thermometer import TemperatureSensor

logger = logging.getLogger(__name__)

TASK_LOOP_UPDATE_FREQUENCY_HZ = 1
CONTROL_LOOP_UPDATE_FREQUENCY_HZ = 10
ADS1115_BUF_SIZE = 8
PI_OUTPUT_MIN = -100.0
PI_OUTPUT_MAX = 100.0
SENSOR_NOT_FOUND = "DS18B20 Not Found"

_RESET_REASONS = {
    1: "Vbat power on reset",
    3: "Software reset digital core",
    4: "Legacy watch dog reset digital core",
    5: "Deep Sleep reset digital core",
    6: "Reset by SLC module, reset digital core",
    7: "Timer Group0 Watch dog reset digital core",
    8: "Timer Group1 Watch dog reset digital core",
    9: "RTC Watch dog Reset digital core",
    10: "Instrusion tested to reset CPU",
    11: "Time Group reset CPU",
    12: "Software reset CPU",
    13: "RTC Watch dog Reset CPU",
    14: "for APP CPU, reset by PRO CPU",
    15: "Reset when the vdd voltage is not stable",
    16: "RTC Watch dog reset digital core and rtc module",
}


def reset_reason(code: int) -> str:
    """Description of a processor reset-reason code."""
    return _RESET_REASONS.get(code, "Unspecified error caused Reset")


class Dispenser:
    """Samples the converter and drives both motors from the PI controllers.

    Inputs 0 and 1 carry the position feedback, 2 and 3 the motor current sense.
    """

    def __init__(
        self,
        adc: ADS1115,
        motor1: MotorDriver,
        motor2: MotorDriver,
        services: AppServices,
    ) -> None:
        self.adc = adc
        self.motor1 = motor1
        self.motor2 = motor2
        self.services = services
        self.buffers = tuple(CircularBuffer(ADS1115_BUF_SIZE) for _ in range(4))
        self.dt = 1.0 / CONTROL_LOOP_UPDATE_FREQUENCY_HZ

    def sample_step(self) -> None:
        """Read every input once and add the readings to their buffers."""
        for channel, buffer in enumerate(self.buffers):
            try:
                buffer.push(self.adc.read_single_ended(channel))
            except ADCReadError as exc:
                logger.warning("Reading input %d failed: %s", channel, exc)

    def _averages(self) -> tuple[float, float, float, float]:
        raw = [buffer.average() for buffer in self.buffers]
        return (
            self.adc.raw_to_voltage(raw[0]),
            self.adc.raw_to_voltage(raw[1]),
            self.adc.raw_to_current(raw[2]),
            self.adc.raw_to_current(raw[3]),
        )

    def control_step(self) -> tuple[float, float]:
        """Run one control period; return the duties given to the two motors."""
        pos1, pos2, current1, current2 = self._averages()
        ctx = self.services.system_context
        duty1 = self.services.pi1.compute(ctx.left.target_flow_rate_per_daa, pos1, self.dt)
        duty2 = self.services.pi2.compute(ctx.right.target_flow_rate_per_daa, pos2, self.dt)

        self.motor1.set_speed(duty1)
        self.motor2.set_speed(duty2)

        self.motor1.check_stuck(current1)
        self.motor2.check_stuck(current2)
        return duty1, duty2

    def status_line(self) -> str:
        """Averaged readings, followed by a line for each stuck motor."""
        pos1, pos2, current1, current2 = self._averages()
        lines = [
            f"Pot1: {pos1:.4f} V | Pot2: {pos2:.4f} V | "
            f"Curr1: {current1:.4f} V | Curr2: {current2:.4f} V"
        ]
        if self.motor1.is_stuck:
            lines.append("MOTOR 1 STUCK!")
        if self.motor2.is_stuck:
            lines.append("MOTOR 2 STUCK!")
        return "\n".join(lines)


def _chip_id() -> str:
    node = uuid.getnode()
    return f"{node >> 32:x}{node & 0xFFFFFFFF:x}"


def _mac_address() -> str:
    return ":".join(f"{b:02X}" for b in uuid.getnode().to_bytes(6, "big"))


def _board_id(sensor: TemperatureSensor | None) -> str:
    if sensor is not None and sensor.is_ready():
        return sensor.sensor_id()
    return SENSOR_NOT_FOUND


def _build_services(store: PreferenceStore, name: str) -> AppServices:
    ctx = SystemContext()
    prefs = SystemPreferences(store)
    server = TextServer(store, name, sink=print)
    parser = CommandParser()
    pi1 = PIController(DEFAULT_KP_VALUE, DEFAULT_KI_VALUE, PI_OUTPUT_MIN, PI_OUTPUT_MAX)
    pi2 = PIController(DEFAULT_KP_VALUE, DEFAULT_KI_VALUE, PI_OUTPUT_MIN, PI_OUTPUT_MAX)
    services = AppServices(ctx, prefs, server, parser, GPSProvider(), pi1, pi2)

    ctx.esp_id = _chip_id()
    ctx.ble_mac = _mac_address()
    ctx.board_id = _board_id(None)
    logger.info("Chip ID: %s | BLE MAC: %s | Board ID: %s", ctx.esp_id, ctx.ble_mac, ctx.board_id)
    prefs.load(ctx, (pi1, pi2))
    return services


def main(argv: Sequence[str] | None = None) -> int:
    """Read commands line by line from standard input and print the replies."""
    arg_parser = argparse.ArgumentParser(description="Dispenser command console.")
    arg_parser.add_argument("--prefs", help="JSON file holding the stored settings")
    arg_parser.add_argument("--name", default=DEFAULT_BLE_DEVICE_NAME, help="default device name")
    args = arg_parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    services = _build_services(PreferenceStore(args.prefs), args.name)
    CommandHandler(services).register()
    server = services.text_server

    def on_write(message: str) -> None:
        logger.info("Received: %s", message)
        try:
            services.parser.dispatch(message)
        except ParseError:
            logger.warning("Invalid instruction: %s", message)
        except KeyError as exc:
            logger.warning("No handler for command: %s", exc.args[0])

    server.on_write = on_write
    server.on_read = lambda: "ESP32 says hi!"

    server.connect()
    for line in sys.stdin:
        text = line.rstrip("\r\n")
        if text:
            server.handle_write(text)
    server.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())