from agrodispenser.pi_controller import PIController


def test_proportional_only():
    pi = PIController(1.0, 0.0, -100.0, 100.0)
    assert pi.compute(7.0, 0.0, 0.1) == 7.0


def test_output_clamped_high_and_low():
    pi = PIController(25.0, 4.0, -100.0, 100.0)
    assert pi.compute(1000.0, 0.0, 1.0) == 100.0
    pi.reset()
    assert pi.compute(-1000.0, 0.0, 1.0) == -100.0


def test_anti_windup_holds_integral_at_limit():
    pi = PIController(0.0, 1.0, -10.0, 10.0)
    assert pi.compute(100.0, 0.0, 1.0) == 10.0
    assert pi.integral == 10.0
    # With zero error the held integral alone drives the output.
    assert pi.compute(0.0, 0.0, 1.0) == 10.0


def test_anti_windup_negative_side():
    pi = PIController(0.0, 2.0, -10.0, 10.0)
    pi.compute(-100.0, 0.0, 1.0)
    assert pi.integral == -5.0


def test_reset_clears_integral():
    pi = PIController(0.0, 1.0, -10.0, 10.0)
    pi.compute(5.0, 0.0, 1.0)
    pi.reset()
    assert pi.integral == 0.0
    assert pi.compute(0.0, 0.0, 1.0) == 0.0


def test_set_params():
    pi = PIController(25.0, 4.0, -100.0, 100.0)
    pi.set_params(3.0, 0.5)
    assert (pi.kp, pi.ki) == (3.0, 0.5)


def test_integral_accumulates_without_saturation():
    pi = PIController(0.0, 1.0, -100.0, 100.0)
    first = pi.compute(2.0, 0.0, 1.0)
    second = pi.compute(2.0, 0.0, 1.0)
    assert second > first
    assert second == 2 * first