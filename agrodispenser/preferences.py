"""Persistent key-value settings and their mapping onto the system context."""

from __future__ import annotations

import enum
import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .pi_controller import PIController
from .system_context import SystemContext

DEFAULT_TARGET_RATE_KG_DAA = 20.0
DEFAULT_TARGET_FLOW_PER_MIN = 15.0
DEFAULT_FLOW_COEFF = 1.0
DEFAULT_MIN_WORKING_SPEED = 1.0
DEFAULT_AUTO_REFRESH_PERIOD = 4
DEFAULT_HEARTBEAT_PERIOD = 25
DEFAULT_SPEED_SOURCE = "GPS"
DEFAULT_TANK_INITIAL_LEVEL = 1000.0
DEFAULT_SIM_SPEED = 1.0
DEFAULT_KP_VALUE = 25.0
DEFAULT_KI_VALUE = 4.0

STORAGE_NAMESPACE = "UIData"


class PrefKey(enum.Enum):
    """Stored settings; the value is the name under which each is kept."""

    SPEED_SRC = "speedSrc"
    SIM_SPEED = "simSpeed"
    MIN_SPEED = "minSpeed"
    REFRESH = "refresh"
    HEARTBEAT = "heartbeat"
    TANK_LEVEL = "tankLevel"
    LEFT_RATE_DAA = "left_rateDaa"
    LEFT_RATE_MIN = "left_rateMin"
    LEFT_FLOW_COEFF = "left_flowCoeff"
    RIGHT_RATE_DAA = "right_rateDaa"
    RIGHT_RATE_MIN = "right_rateMin"
    RIGHT_FLOW_COEFF = "right_flowCoeff"
    PI_KP = "piKp"
    PI_KI = "piKi"


class PreferenceStore:
    """Namespaced key-value store, kept as JSON on disk or in memory when ``path`` is None."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._data: dict[str, dict[str, Any]] = {}
        if self._path is not None and self._path.exists():
            with self._path.open(encoding="utf-8") as fh:
                self._data = json.load(fh)

    def get(self, namespace: str, name: str, default: Any = None) -> Any:
        return self._data.get(namespace, {}).get(name, default)

    def put(self, namespace: str, name: str, value: Any) -> None:
        self._data.setdefault(namespace, {})[name] = value
        self._flush()

    def contains(self, namespace: str, name: str) -> bool:
        return name in self._data.get(namespace, {})

    def _flush(self) -> None:
        if self._path is None:
            return
        tmp = self._path.with_name(self._path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(self._data, fh, indent=2, sort_keys=True)
        os.replace(tmp, self._path)


class SystemPreferences:
    """Reads and writes the user settings of the dispenser."""

    def __init__(self, store: PreferenceStore) -> None:
        self._store = store

    @staticmethod
    def key_name(key: PrefKey) -> str:
        return key.value

    def _get(self, key: PrefKey, default: Any) -> Any:
        return self._store.get(STORAGE_NAMESPACE, key.value, default)

    def _put(self, key: PrefKey, value: Any) -> None:
        self._store.put(STORAGE_NAMESPACE, key.value, value)

    def load(self, ctx: SystemContext, controllers: Iterable[PIController] = ()) -> None:
        """Fill ``ctx`` and the PI gains of ``controllers`` from storage or defaults."""
        ctx.speed_source = self.get_string(PrefKey.SPEED_SRC, DEFAULT_SPEED_SOURCE)
        ctx.sim_speed = self.get_float(PrefKey.SIM_SPEED, DEFAULT_SIM_SPEED)
        ctx.min_working_speed = self.get_float(PrefKey.MIN_SPEED, DEFAULT_MIN_WORKING_SPEED)
        ctx.auto_refresh_period = self.get_int(PrefKey.REFRESH, DEFAULT_AUTO_REFRESH_PERIOD)
        ctx.heartbeat_period = self.get_int(PrefKey.HEARTBEAT, DEFAULT_HEARTBEAT_PERIOD)
        ctx.tank_level = self.get_float(PrefKey.TANK_LEVEL, DEFAULT_TANK_INITIAL_LEVEL)

        channels = (
            (ctx.left, PrefKey.LEFT_RATE_DAA, PrefKey.LEFT_RATE_MIN, PrefKey.LEFT_FLOW_COEFF),
            (ctx.right, PrefKey.RIGHT_RATE_DAA, PrefKey.RIGHT_RATE_MIN, PrefKey.RIGHT_FLOW_COEFF),
        )
        for channel, daa_key, min_key, coeff_key in channels:
            channel.target_flow_rate_per_daa = self.get_float(daa_key, DEFAULT_TARGET_RATE_KG_DAA)
            channel.target_flow_rate_per_min = self.get_float(min_key, DEFAULT_TARGET_FLOW_PER_MIN)
            channel.flow_coeff = self.get_float(coeff_key, DEFAULT_FLOW_COEFF)

        kp = self.get_float(PrefKey.PI_KP, DEFAULT_KP_VALUE)
        ki = self.get_float(PrefKey.PI_KI, DEFAULT_KI_VALUE)
        for controller in controllers:
            controller.kp = kp
            controller.ki = ki

    def save_context(self, ctx: SystemContext) -> None:
        """Store every context setting unconditionally."""
        self._put(PrefKey.SPEED_SRC, ctx.speed_source)
        self._put(PrefKey.SIM_SPEED, float(ctx.sim_speed))
        self._put(PrefKey.MIN_SPEED, float(ctx.min_working_speed))
        self._put(PrefKey.REFRESH, int(ctx.auto_refresh_period))
        self._put(PrefKey.HEARTBEAT, int(ctx.heartbeat_period))
        self._put(PrefKey.TANK_LEVEL, float(ctx.tank_level))
        self._put(PrefKey.LEFT_RATE_DAA, float(ctx.left.target_flow_rate_per_daa))
        self._put(PrefKey.LEFT_RATE_MIN, float(ctx.left.target_flow_rate_per_min))
        self._put(PrefKey.LEFT_FLOW_COEFF, float(ctx.left.flow_coeff))
        self._put(PrefKey.RIGHT_RATE_DAA, float(ctx.right.target_flow_rate_per_daa))
        self._put(PrefKey.RIGHT_RATE_MIN, float(ctx.right.target_flow_rate_per_min))
        self._put(PrefKey.RIGHT_FLOW_COEFF, float(ctx.right.flow_coeff))

    def get_int(self, key: PrefKey, default: int) -> int:
        return int(self._get(key, default))

    def get_float(self, key: PrefKey, default: float) -> float:
        return float(self._get(key, default))

    def get_string(self, key: PrefKey, default: str) -> str:
        return str(self._get(key, default))

    def save(self, key: PrefKey, value: str | int | float) -> None:
        """Store ``value`` under ``key`` only when it differs from what is stored.

        A missing string compares as "" and a missing float as 0.0, so those
        values are not written for a key that was never set.
        """
        if isinstance(value, str):
            if self._get(key, "") != value:
                self._put(key, value)
        elif isinstance(value, int) and not isinstance(value, bool):
            if not self._store.contains(STORAGE_NAMESPACE, key.value) or self._get(key, 0) != value:
                self._put(key, value)
        elif isinstance(value, float):
            if self._get(key, 0.0) != value:
                self._put(key, value)
        else:
            raise TypeError(f"unsupported preference type: {type(value).__name__}")