import pytest

from agrodispenser.motor_driver import (
    STUCK_CURRENT_THRESHOLD,
    STUCK_DETECTION_COUNT,
    MotorDriver,
)

INA, INB, PWM, SEL = 25, 14, 26, 27


@pytest.fixture
def rig():
    digital = []
    pwm = []
    motor = MotorDriver(
        INA, INB, PWM, SEL,
        lambda pin, duty: pwm.append((pin, duty)),
        lambda pin, state: digital.append((pin, state)),
    )
    return motor, digital, pwm


def test_forward_full_speed(rig):
    motor, digital, pwm = rig
    motor.set_speed(100)
    assert digital == [(INA, True), (INB, False), (SEL, True)]
    assert pwm == [(PWM, 255)]


def test_reverse_full_speed(rig):
    motor, digital, pwm = rig
    motor.set_speed(-100)
    assert digital == [(INA, False), (INB, True), (SEL, False)]
    assert pwm == [(PWM, 255)]


def test_duty_is_clamped(rig):
    motor, _, pwm = rig
    motor.set_speed(200)
    motor.set_speed(-200)
    assert pwm == [(PWM, 255), (PWM, 255)]


def test_zero_duty_releases_without_diagnostic(rig):
    motor, digital, pwm = rig
    motor.set_speed(0)
    assert digital == [(INA, False), (INB, False)]
    assert pwm == [(PWM, 0)]


def test_pwm_monotonic_and_in_range(rig):
    motor, _, pwm = rig
    for duty in range(0, 101):
        motor.set_speed(duty)
    values = [value for _, value in pwm]
    assert values == sorted(values)
    assert all(0 <= value <= 255 for value in values)


def test_direction_symmetry(rig):
    motor, _, pwm = rig
    for duty in range(1, 101):
        motor.set_speed(duty)
        motor.set_speed(-duty)
    values = [value for _, value in pwm]
    assert values[0::2] == values[1::2]


def test_stop_and_brake(rig):
    motor, digital, pwm = rig
    motor.stop()
    motor.brake()
    assert digital == [(INA, False), (INB, False), (INA, True), (INB, True)]
    assert pwm == [(PWM, 0), (PWM, 0)]


def test_stuck_detection(rig):
    motor, _, _ = rig
    for _ in range(STUCK_DETECTION_COUNT - 1):
        assert motor.check_stuck(STUCK_CURRENT_THRESHOLD) is False
    assert motor.check_stuck(STUCK_CURRENT_THRESHOLD + 1) is True
    assert motor.is_stuck is True
    assert motor.check_stuck(STUCK_CURRENT_THRESHOLD + 1) is True


def test_low_current_resets_counter(rig):
    motor, _, _ = rig
    for _ in range(STUCK_DETECTION_COUNT - 1):
        motor.check_stuck(STUCK_CURRENT_THRESHOLD)
    assert motor.check_stuck(0.0) is False
    assert motor.check_stuck(STUCK_CURRENT_THRESHOLD) is False
    assert motor.is_stuck is False


def test_select_diagnostic(rig):
    motor, digital, _ = rig
    motor.select_diagnostic(True)
    assert digital == [(SEL, True)]