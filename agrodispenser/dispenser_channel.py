"""State of one dispensing channel: flow targets, task state and error flags."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

FLOW_ERROR_WARNING_THRESHOLD = 2.0


class ErrorFlag(enum.IntFlag):
    NO_ERROR = 0
    LIQUID_TANK_EMPTY = 1 << 0
    INSUFFICIENT_FLOW = 1 << 1
    FLOW_NOT_SETTLED = 1 << 2
    MOTOR1_STUCK = 1 << 3
    MOTOR2_STUCK = 1 << 4
    BATTERY_LOW = 1 << 5
    NO_SATELLITE_CONNECTED = 1 << 6
    INVALID_SATELLITE_INFO = 1 << 7
    INVALID_GPS_LOCATION = 1 << 8
    INVALID_GPS_SPEED = 1 << 9
    INVALID_PARAM_COUNT = 1 << 10
    MESSAGE_PARSE_ERROR = 1 << 11
    HARDWARE_ERROR = 1 << 12


class TaskState(enum.Enum):
    STOPPED = "Stopped"
    STARTED = "Started"
    PAUSED = "Paused"
    RESUMING = "Resuming"


_ALLOWED_TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.STOPPED: frozenset({TaskState.STARTED}),
    TaskState.STARTED: frozenset({TaskState.PAUSED, TaskState.STOPPED}),
    TaskState.PAUSED: frozenset({TaskState.RESUMING, TaskState.STOPPED}),
    TaskState.RESUMING: frozenset({TaskState.STARTED, TaskState.PAUSED, TaskState.STOPPED}),
}


@dataclass
class DispenserChannel:
    target_flow_rate_per_daa: float = 0.0
    target_flow_rate_per_min: float = 0.0
    real_flow_rate_per_daa: float = 0.0
    real_flow_rate_per_min: float = 0.0
    flow_coeff: float = 1.0
    error_flags: ErrorFlag = ErrorFlag.NO_ERROR
    _task_state: TaskState = field(default=TaskState.STOPPED, init=False, repr=False)

    @property
    def task_state(self) -> TaskState:
        return self._task_state

    def set_task_state(self, state: TaskState) -> bool:
        """Move to ``state`` if the transition is allowed; report whether it was."""
        if state in _ALLOWED_TRANSITIONS[self._task_state]:
            self._task_state = state
            return True
        logger.warning(
            "Invalid state transition: %s -> %s", self._task_state.value, state.value
        )
        return False

    def set_error(self, mask: int) -> None:
        self.error_flags = ErrorFlag(self.error_flags | mask)

    def clear_error(self, mask: int) -> None:
        self.error_flags = ErrorFlag(self.error_flags & ~mask)

    def clear_all_errors(self) -> None:
        self.error_flags = ErrorFlag.NO_ERROR

    def has_error(self, mask: int) -> bool:
        return (self.error_flags & mask) != 0

    def has_any_error(self) -> bool:
        return self.error_flags != 0

    def is_task_active(self) -> bool:
        return self._task_state in (TaskState.STARTED, TaskState.RESUMING)

    def task_state_name(self) -> str:
        return self._task_state.value