"""Proportional-integral controller with output clamping and anti-windup."""

from __future__ import annotations


class PIController:
    """PI controller whose integral term is held inside the output limits."""

    def __init__(self, kp: float, ki: float, output_min: float, output_max: float) -> None:
        self.kp = kp
        self.ki = ki
        self.output_min = output_min
        self.output_max = output_max
        self.integral = 0.0

    def set_params(self, kp: float, ki: float) -> None:
        self.kp = kp
        self.ki = ki

    def compute(self, setpoint: float, measurement: float, dt: float) -> float:
        """Return the clamped control output for one step of ``dt`` seconds."""
        error = setpoint - measurement
        self.integral += error * dt

        if self.ki != 0.0:
            contribution = self.integral * self.ki
            if contribution > self.output_max:
                self.integral = self.output_max / self.ki
            elif contribution < self.output_min:
                self.integral = self.output_min / self.ki

        output = self.kp * error + self.ki * self.integral
        return min(max(output, self.output_min), self.output_max)

    def reset(self) -> None:
        """Clear the integral term."""
        self.integral = 0.0