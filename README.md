# agrodispenser

Control logic for a two-channel fertilizer dispenser. The package holds the
parts that decide what the machine does. The hardware sits behind small
interfaces that you supply.

| Module | What it holds |
| --- | --- |
| `circular_buffer` | `CircularBuffer`: the last *n* 16-bit samples with a running sum and a truncated integer average. |
| `pi_controller` | `PIController`: proportional-integral control with output clamping and anti-windup on the integral. |
| `ads1115` | `ADS1115`: config words, single-ended and differential reads over an `I2CBus`, and raw-to-voltage, raw-to-current and range mapping. Failed transfers raise `ADCReadError`. `Gain` and `DataRate` select the range and rate. |
| `motor_driver` | `MotorDriver`: direction, PWM duty (-100 to 100 mapped to 0–255), stop, brake and stuck detection (5 consecutive samples at or above 2.5 A), through pin-write callables. |
| `dispenser_channel` | `DispenserChannel`: flow targets and measurements, `ErrorFlag` bits and the `TaskState` machine (Stopped → Started ⇄ Paused → Resuming …). |
| `command_parser` | `parse_instruction` and `CommandParser`: the text protocol (`name`, `name=value`, `nameN=value`). Bad input raises `ParseError`; an unknown command raises `KeyError`. |
| `system_context` | `SystemContext`: settings and running task totals shared by the handlers and the control loop. |
| `preferences` | `PreferenceStore` (JSON file or in memory) and `SystemPreferences`, which load settings with defaults and save them only when they change. |
| `gps_provider` | `GPSReading` and `GPSProvider`: position and speed, reported only with at least 4 satellites and an HDOP of at most 25. |
| `text_server` | `TextServer`: device name, outgoing notifications and double-buffered incoming writes. |
| `command_handler` | `AppServices` and `CommandHandler`: the handlers for every command. |
| `thermometer` | `TemperatureSensor`: the first probe on a one-wire bus you supply, at 12-bit resolution. |
| `app` | `Dispenser` (sampling and control steps, status line), `reset_reason` and the `main` console. |

## Installation

```
pip install .
```

Only the Python standard library is needed, on Python 3.10 or later.

## Examples

A rolling average of samples:

```python
from agrodispenser.circular_buffer import CircularBuffer

window = CircularBuffer(8)
for sample in (10, 20, 30):
    window.push(sample)
print(window.average())   # 20
print(len(window))        # 3
```

A PI controller whose output is clamped to ±100:

```python
from agrodispenser.pi_controller import PIController

pi = PIController(25.0, 4.0, -100.0, 100.0)
duty = pi.compute(20.0, 0.0, 0.1)   # 100.0, clamped
pi.reset()
```

Parsing and dispatching text commands:

```python
from agrodispenser.command_parser import CommandParser, parse_instruction

print(parse_instruction("setPIDKp=2.5").post_param)   # 2.5

parser = CommandParser()
parser.register("setTankLevel", lambda instr: print(instr.post_param))
parser.dispatch("setTankLevel=500")   # prints 500
```

Moving a channel through its task states:

```python
from agrodispenser.dispenser_channel import DispenserChannel, TaskState

channel = DispenserChannel()
channel.set_task_state(TaskState.STARTED)   # True
channel.set_task_state(TaskState.RESUMING)  # False: not allowed from Started
print(channel.task_state_name())            # Started
```

## Command console

The `agrodispenser` command reads commands from standard input, one per line,
and prints each reply on standard output. Warnings, such as an unknown or
malformed command, go to standard error.

```
agrodispenser --prefs settings.json --name MyDispenser
```

- `--prefs FILE`: JSON file the settings are loaded from and saved to. Without it, settings live in memory for the run only.
- `--name NAME`: device name used when none is stored (default `AgroFertilizer`).

Commands it understands:

`setBLEDevName`, `getDeviceInfo`, `getSpeedInfo`, `getTaskInfo`,
`startNewTask`, `pauseTask`, `resumeTask`, `endTask`, `setInWorkZone`,
`setTargetFlowRatePerDaa`, `setTargetFlowRatePerMin`, `setTankLevel`,
`setMeasuredWeight`, `setSpeedSource`, `setMinWorkingSpeed`, `setSimSpeed`,
`setAutoRefresh`, `setHeartBeat`, `reportError`, `setPIDKp`, `setPIDKi`,
`reportPIDParams`, `reportUserParams`.

For example, `setTankLevel=500` replies `setTankLevel=500.00`, and
`getTaskInfo` replies with a JSON document of the task totals.

## What it does not do

- There is no radio link. `TextServer` passes notifications to a callable and
  takes writes through `handle_write`; the console uses standard input and output.
- No hardware is reached directly. `ADS1115`, `MotorDriver` and
  `TemperatureSensor` work through the bus objects and pin-write callables you
  give them.
- GPS sentences are not decoded. `GPSProvider` reports from a `GPSReading` that
  you fill in.
- The console answers commands only. It does not run the control loop, and its
  board ID is always `DS18B20 Not Found`. To run the motors, create a
  `Dispenser` and call `sample_step` and `control_step` on your own schedule.

## Tests

```
pip install .[test]
pytest
```