"""Handlers for the text commands a client sends to the dispenser."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .command_parser import CommandParser, ParamType, ParsedInstruction
from .dispenser_channel import TaskState
from .gps_provider import GPSProvider
from .pi_controller import PIController
from .preferences import DEFAULT_TANK_INITIAL_LEVEL, PrefKey, SystemPreferences
from .system_context import DEVICE_VERSION, FIRMWARE_VERSION, SystemContext
from .text_server import TextServer

logger = logging.getLogger(__name__)

CMD_SET_BLE_DEVICE_NAME = "setBLEDevName"
CMD_GET_DEVICE_INFO = "getDeviceInfo"
CMD_GET_SPEED_INFO = "getSpeedInfo"
CMD_GET_TASK_INFO = "getTaskInfo"

CMD_START_NEW_TASK = "startNewTask"
CMD_PAUSE_TASK = "pauseTask"
CMD_RESUME_TASK = "resumeTask"
CMD_END_TASK = "endTask"
CMD_SET_IN_WORK_ZONE = "setInWorkZone"

CMD_SET_TARGET_FLOW_RATE_DAA = "setTargetFlowRatePerDaa"
CMD_SET_TARGET_FLOW_RATE_MIN = "setTargetFlowRatePerMin"
CMD_SET_TANK_LEVEL = "setTankLevel"
CMD_SET_MEASURED_WEIGHT = "setMeasuredWeight"

CMD_SET_SPEED_SOURCE = "setSpeedSource"
CMD_SET_MIN_WORKING_SPEED = "setMinWorkingSpeed"
CMD_SET_SIM_SPEED = "setSimSpeed"

CMD_SET_AUTO_REFRESH_PERIOD = "setAutoRefresh"
CMD_SET_HEARTBEAT_PERIOD = "setHeartBeat"
CMD_GET_ERROR_INFO = "reportError"
CMD_SET_PI_KP = "setPIDKp"
CMD_SET_PI_KI = "setPIDKi"

CMD_REPORT_PID_PARAMS = "reportPIDParams"
CMD_REPORT_USER_PARAMS = "reportUserParams"

_REPORT_LIMIT = 511


@dataclass
class AppServices:
    """The collaborators the command handlers work on."""

    system_context: SystemContext
    prefs: SystemPreferences
    text_server: TextServer
    parser: CommandParser
    gps_provider: GPSProvider
    pi1: PIController
    pi2: PIController


class CommandHandler:
    """Carries out parsed commands against the application services."""

    def __init__(self, services: AppServices) -> None:
        self.services = services

    @property
    def _ctx(self) -> SystemContext:
        return self.services.system_context

    def _report(self, text: str) -> None:
        text = text[:_REPORT_LIMIT]
        logger.info("%s", text)
        self.services.text_server.notify(text)

    def register(self, parser: CommandParser | None = None) -> None:
        """Register every command with ``parser`` (the services' parser by default)."""
        parser = parser if parser is not None else self.services.parser
        table = {
            CMD_SET_BLE_DEVICE_NAME: self.set_ble_device_name,
            CMD_GET_DEVICE_INFO: self.get_device_info,
            CMD_GET_SPEED_INFO: self.get_speed_info,
            CMD_GET_TASK_INFO: self.get_task_info,
            CMD_START_NEW_TASK: self.start_new_task,
            CMD_PAUSE_TASK: self.pause_task,
            CMD_RESUME_TASK: self.resume_task,
            CMD_END_TASK: self.end_task,
            CMD_SET_IN_WORK_ZONE: self.set_in_work_zone,
            CMD_SET_TARGET_FLOW_RATE_DAA: self.set_target_flow_rate_per_daa,
            CMD_SET_TARGET_FLOW_RATE_MIN: self.set_target_flow_rate_per_min,
            CMD_SET_MEASURED_WEIGHT: self.set_measured_weight,
            CMD_SET_SPEED_SOURCE: self.set_speed_source,
            CMD_SET_MIN_WORKING_SPEED: self.set_min_working_speed,
            CMD_SET_SIM_SPEED: self.set_sim_speed,
            CMD_SET_TANK_LEVEL: self.set_tank_level,
            CMD_SET_AUTO_REFRESH_PERIOD: self.set_auto_refresh_period,
            CMD_SET_HEARTBEAT_PERIOD: self.set_heartbeat_period,
            CMD_GET_ERROR_INFO: self.get_error_info,
            CMD_SET_PI_KP: self.set_pi_kp,
            CMD_SET_PI_KI: self.set_pi_ki,
            CMD_REPORT_PID_PARAMS: self.report_pi_params,
            CMD_REPORT_USER_PARAMS: self.report_user_params,
        }
        for name, handler in table.items():
            parser.register(name, handler)

    def set_ble_device_name(self, instr: ParsedInstruction) -> None:
        if instr.post_param_type is ParamType.STRING:
            logger.info("New BLE Name = %s", instr.post_param)
            self.services.text_server.set_device_name(str(instr.post_param))

    def get_device_info(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        self._report(
            "{\n"
            '  "devInfo": {\n'
            f'    "bleName": "{self.services.text_server.device_name}",\n'
            f'    "devUUID": "{ctx.esp_id}",\n'
            f'    "dsUUID": "{ctx.board_id}",\n'
            f'    "bleMAC": "{ctx.ble_mac}",\n'
            f'    "fwVer": "{FIRMWARE_VERSION}",\n'
            f'    "devVer": "{DEVICE_VERSION}"\n'
            "  }\n"
            "}"
        )

    def get_speed_info(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        gps = self.services.gps_provider
        loc = gps.location()
        self._report(
            "{\n"
            '  "gpsInfo": {\n'
            f'    "spdSrc": "{ctx.speed_source}",\n'
            f'    "minSpd": {ctx.min_working_speed:.2f},\n'
            f'    "simSpd": {ctx.sim_speed:.2f},\n'
            f'    "gpsSpd": {gps.speed():.2f},\n'
            f'    "lat": {loc.lat:.6f},\n'
            f'    "lng": {loc.lng:.6f},\n'
            f'    "sats": {gps.satellite_count()}\n'
            "  }\n"
            "}"
        )

    def get_task_info(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        left = ctx.left
        self._report(
            "{\n"
            '  "taskInfo": {\n'
            f'    "flowDaaSet": {left.target_flow_rate_per_daa:.2f},\n'
            f'    "flowMinSet": {left.target_flow_rate_per_min:.2f},\n'
            f'    "flowDaaReal": {left.real_flow_rate_per_daa:.2f},\n'
            f'    "flowMinReal": {left.real_flow_rate_per_min:.2f},\n'
            f'    "tankLevel": {int(ctx.tank_level)},\n'
            f'    "areaDone": {ctx.area_completed:.2f},\n'
            f'    "duration": {int(ctx.task_duration)},\n'
            f'    "consumed": {ctx.liquid_consumed:.2f}\n'
            "  }\n"
            "}"
        )

    def report_pi_params(self, instr: ParsedInstruction) -> None:
        pi = self.services.pi1
        self._report(
            "{\n"
            '  "piInfo": {\n'
            f'    "piKp": {pi.kp:.2f},\n'
            f'    "piKi": {pi.ki:.2f},\n'
            "  }\n"
            "}"
        )

    def start_new_task(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        ctx.tank_level = self.services.prefs.get_float(
            PrefKey.TANK_LEVEL, DEFAULT_TANK_INITIAL_LEVEL
        )
        ctx.clear_task_metrics()
        ctx.left.clear_all_errors()
        ctx.left.set_task_state(TaskState.STARTED)

    def pause_task(self, instr: ParsedInstruction) -> None:
        self._ctx.left.set_task_state(TaskState.PAUSED)

    def resume_task(self, instr: ParsedInstruction) -> None:
        self._ctx.left.set_task_state(TaskState.RESUMING)

    def end_task(self, instr: ParsedInstruction) -> None:
        self._ctx.left.set_task_state(TaskState.STOPPED)

    def set_in_work_zone(self, instr: ParsedInstruction) -> None:
        if instr.post_param_type is ParamType.INT:
            self._ctx.client_in_work_zone = instr.post_param > 0
        if self._ctx.client_in_work_zone:
            self.get_task_info(instr)

    def _save_left_rates(self) -> None:
        # The per-daa key receives the per-minute target and vice versa.
        left = self._ctx.left
        prefs = self.services.prefs
        prefs.save(PrefKey.LEFT_RATE_DAA, float(left.target_flow_rate_per_min))
        prefs.save(PrefKey.LEFT_RATE_MIN, float(left.target_flow_rate_per_daa))

    def set_target_flow_rate_per_daa(self, instr: ParsedInstruction) -> None:
        left = self._ctx.left
        if instr.post_param_type is ParamType.FLOAT:
            left.target_flow_rate_per_daa = float(instr.post_param)
            left.target_flow_rate_per_min = 0.0
            self._save_left_rates()
        self.services.text_server.notify_value(
            CMD_SET_TARGET_FLOW_RATE_DAA, float(left.target_flow_rate_per_daa)
        )

    def set_target_flow_rate_per_min(self, instr: ParsedInstruction) -> None:
        left = self._ctx.left
        if instr.post_param_type is ParamType.FLOAT:
            left.target_flow_rate_per_min = float(instr.post_param)
            left.target_flow_rate_per_daa = 0.0
            self._save_left_rates()
        self.services.text_server.notify_value(
            CMD_SET_TARGET_FLOW_RATE_MIN, float(left.target_flow_rate_per_min)
        )

    def set_measured_weight(self, instr: ParsedInstruction) -> None:
        """Accept a measured weight; the dispenser has no use for it and ignores it."""
        logger.debug("Measured weight ignored: %s", instr.post_param)

    def set_speed_source(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        if instr.post_param_type is ParamType.STRING:
            ctx.speed_source = str(instr.post_param)
            self.services.prefs.save(PrefKey.SPEED_SRC, ctx.speed_source)
        self.services.text_server.notify_string(CMD_SET_SPEED_SOURCE, ctx.speed_source)

    def set_min_working_speed(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        if instr.post_param_type is ParamType.FLOAT:
            ctx.min_working_speed = float(instr.post_param)
            self.services.prefs.save(PrefKey.MIN_SPEED, ctx.min_working_speed)
        self.services.text_server.notify_value(
            CMD_SET_MIN_WORKING_SPEED, float(ctx.min_working_speed)
        )

    def set_sim_speed(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        if instr.post_param_type is ParamType.FLOAT:
            ctx.sim_speed = float(instr.post_param)
            self.services.prefs.save(PrefKey.SIM_SPEED, ctx.sim_speed)
        self.services.text_server.notify_value(CMD_SET_SIM_SPEED, float(ctx.sim_speed))

    def set_tank_level(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        if instr.post_param_type is ParamType.INT:
            ctx.tank_level = float(instr.post_param)
            self.services.prefs.save(PrefKey.TANK_LEVEL, ctx.tank_level)
        self.services.text_server.notify_value(CMD_SET_TANK_LEVEL, float(ctx.tank_level))

    def set_auto_refresh_period(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        if instr.post_param_type is ParamType.INT:
            ctx.auto_refresh_period = int(instr.post_param)
            self.services.prefs.save(PrefKey.REFRESH, ctx.auto_refresh_period)
        self.services.text_server.notify_value(
            CMD_SET_AUTO_REFRESH_PERIOD, int(ctx.auto_refresh_period)
        )

    def set_heartbeat_period(self, instr: ParsedInstruction) -> None:
        ctx = self._ctx
        if instr.post_param_type is ParamType.INT:
            ctx.heartbeat_period = int(instr.post_param)
            self.services.prefs.save(PrefKey.HEARTBEAT, ctx.heartbeat_period)
        self.services.text_server.notify_value(
            CMD_SET_HEARTBEAT_PERIOD, int(ctx.heartbeat_period)
        )

    def get_error_info(self, instr: ParsedInstruction) -> None:
        """Report the error flags of the left channel as an integer bit mask."""
        self.services.text_server.notify_value(
            CMD_GET_ERROR_INFO, int(self._ctx.left.error_flags)
        )

    def _set_pi_gain(self, instr: ParsedInstruction, attr: str, key: PrefKey, cmd: str) -> None:
        pi1, pi2 = self.services.pi1, self.services.pi2
        if instr.post_param_type is ParamType.FLOAT:
            value = float(instr.post_param)
            setattr(pi1, attr, value)
            setattr(pi2, attr, value)
            self.services.prefs.save(key, float(getattr(pi1, attr)))
        self.services.text_server.notify_value(cmd, float(getattr(pi1, attr)))

    def set_pi_kp(self, instr: ParsedInstruction) -> None:
        self._set_pi_gain(instr, "kp", PrefKey.PI_KP, CMD_SET_PI_KP)

    def set_pi_ki(self, instr: ParsedInstruction) -> None:
        self._set_pi_gain(instr, "ki", PrefKey.PI_KI, CMD_SET_PI_KI)

    def report_user_params(self, instr: ParsedInstruction) -> None:
        """Report the user-adjustable settings as a JSON document."""
        ctx = self._ctx
        left = ctx.left
        self._report(
            "{\n"
            '  "userParams": {\n'
            f'    "spdSrc": "{ctx.speed_source}",\n'
            f'    "minSpd": {ctx.min_working_speed:.2f},\n'
            f'    "simSpd": {ctx.sim_speed:.2f},\n'
            f'    "refresh": {int(ctx.auto_refresh_period)},\n'
            f'    "heartbeat": {int(ctx.heartbeat_period)},\n'
            f'    "tankLevel": {int(ctx.tank_level)},\n'
            f'    "flowDaaSet": {left.target_flow_rate_per_daa:.2f},\n'
            f'    "flowMinSet": {left.target_flow_rate_per_min:.2f}\n'
            "  }\n"
            "}"
        )