import pytest

from agrodispenser.dispenser_channel import DispenserChannel, ErrorFlag, TaskState


def test_defaults():
    ch = DispenserChannel()
    assert ch.task_state is TaskState.STOPPED
    assert ch.task_state_name() == "Stopped"
    assert ch.flow_coeff == 1.0
    assert not ch.has_any_error()


@pytest.mark.parametrize(
    "path",
    [
        [TaskState.STARTED, TaskState.PAUSED, TaskState.RESUMING, TaskState.STARTED],
        [TaskState.STARTED, TaskState.STOPPED],
        [TaskState.STARTED, TaskState.PAUSED, TaskState.STOPPED],
        [TaskState.STARTED, TaskState.PAUSED, TaskState.RESUMING, TaskState.PAUSED],
        [TaskState.STARTED, TaskState.PAUSED, TaskState.RESUMING, TaskState.STOPPED],
    ],
)
def test_valid_transitions(path):
    ch = DispenserChannel()
    for state in path:
        assert ch.set_task_state(state) is True
        assert ch.task_state is state


@pytest.mark.parametrize(
    "prefix, target",
    [
        ([], TaskState.PAUSED),
        ([], TaskState.RESUMING),
        ([], TaskState.STOPPED),
        ([TaskState.STARTED], TaskState.RESUMING),
        ([TaskState.STARTED], TaskState.STARTED),
        ([TaskState.STARTED, TaskState.PAUSED], TaskState.STARTED),
    ],
)
def test_invalid_transitions_leave_state(prefix, target):
    ch = DispenserChannel()
    for state in prefix:
        ch.set_task_state(state)
    before = ch.task_state
    assert ch.set_task_state(target) is False
    assert ch.task_state is before


def test_task_active():
    ch = DispenserChannel()
    assert not ch.is_task_active()
    ch.set_task_state(TaskState.STARTED)
    assert ch.is_task_active()
    ch.set_task_state(TaskState.PAUSED)
    assert not ch.is_task_active()
    ch.set_task_state(TaskState.RESUMING)
    assert ch.is_task_active()
    assert ch.task_state_name() == "Resuming"


def test_error_flags():
    ch = DispenserChannel()
    ch.set_error(ErrorFlag.MOTOR1_STUCK)
    ch.set_error(ErrorFlag.BATTERY_LOW)
    assert ch.has_error(ErrorFlag.MOTOR1_STUCK)
    assert ch.has_error(ErrorFlag.BATTERY_LOW)
    assert not ch.has_error(ErrorFlag.MOTOR2_STUCK)
    ch.clear_error(ErrorFlag.MOTOR1_STUCK)
    assert not ch.has_error(ErrorFlag.MOTOR1_STUCK)
    assert ch.has_any_error()
    ch.clear_all_errors()
    assert not ch.has_any_error()
    assert ch.error_flags == ErrorFlag.NO_ERROR


def test_error_flag_bits_in_channel():
    ch = DispenserChannel()
    ch.set_error(ErrorFlag.LIQUID_TANK_EMPTY)
    ch.set_error(ErrorFlag.HARDWARE_ERROR)
    assert int(ch.error_flags) == (1 << 0) | (1 << 12)
    ch.clear_error(ErrorFlag.LIQUID_TANK_EMPTY)
    assert int(ch.error_flags) == 1 << 12