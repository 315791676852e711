"""Driver for an H-bridge motor controller with direction, PWM and diagnostic pins."""

from __future__ import annotations

import struct
from collections.abc import Callable

STUCK_CURRENT_THRESHOLD = 2.5
STUCK_DETECTION_COUNT = 5

PwmWrite = Callable[[int, int], None]
DigitalWrite = Callable[[int, bool], None]


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_DUTY_TO_PWM = _f32(2.55)


class MotorDriver:
    """Drives one motor through pin-writing callables supplied by the caller."""

    def __init__(
        self,
        ina_pin: int,
        inb_pin: int,
        pwm_pin: int,
        sel0_pin: int,
        pwm_write: PwmWrite,
        digital_write: DigitalWrite,
    ) -> None:
        self.ina_pin = ina_pin
        self.inb_pin = inb_pin
        self.pwm_pin = pwm_pin
        self.sel0_pin = sel0_pin
        self._pwm_write = pwm_write
        self._digital_write = digital_write
        self._stuck_counter = 0
        self._is_stuck = False

    @property
    def is_stuck(self) -> bool:
        return self._is_stuck

    def set_speed(self, duty: float) -> None:
        """Run at ``duty`` percent, -100 to 100; the sign selects the direction."""
        duty = max(-100, min(100, int(duty)))

        if duty > 0:
            self._digital_write(self.ina_pin, True)
            self._digital_write(self.inb_pin, False)
            self.select_diagnostic(True)
        elif duty < 0:
            self._digital_write(self.ina_pin, False)
            self._digital_write(self.inb_pin, True)
            self.select_diagnostic(False)
        else:
            self._digital_write(self.ina_pin, False)
            self._digital_write(self.inb_pin, False)

        pwm_value = 0 if duty == 0 else int(_f32(abs(duty) * _DUTY_TO_PWM))
        self._pwm_write(self.pwm_pin, pwm_value)

    def stop(self) -> None:
        """Let the motor coast: both direction inputs low."""
        self._digital_write(self.ina_pin, False)
        self._digital_write(self.inb_pin, False)
        self._pwm_write(self.pwm_pin, 0)

    def brake(self) -> None:
        """Brake to ground: both direction inputs high."""
        self._digital_write(self.ina_pin, True)
        self._digital_write(self.inb_pin, True)
        self._pwm_write(self.pwm_pin, 0)

    def check_stuck(self, current: float) -> bool:
        """Feed one current sample; stuck after enough consecutive high samples."""
        if current >= STUCK_CURRENT_THRESHOLD:
            self._stuck_counter += 1
            if self._stuck_counter >= STUCK_DETECTION_COUNT:
                self._is_stuck = True
                return True
        else:
            self._stuck_counter = 0
        self._is_stuck = False
        return False

    def select_diagnostic(self, sel0_state: bool) -> None:
        self._digital_write(self.sel0_pin, sel0_state)