import math

import pytest

from agrodispenser.command_parser import (
    CommandParser,
    ParamType,
    ParseError,
    parse_instruction,
)


def test_plain_command():
    instr = parse_instruction("pauseTask")
    assert instr.command == "pauseTask"
    assert instr.pre_param_type is ParamType.NONE
    assert instr.post_param_type is ParamType.NONE


def test_int_assignment():
    instr = parse_instruction("setTankLevel=500")
    assert instr.command == "setTankLevel"
    assert instr.post_param_type is ParamType.INT
    assert instr.post_param == 500
    assert instr.pre_param_type is ParamType.NONE


def test_float_assignment():
    instr = parse_instruction("setPIDKp=1.5")
    assert instr.command == "setPIDKp"
    assert instr.post_param_type is ParamType.FLOAT
    assert instr.post_param == 1.5


def test_indexed_int():
    instr = parse_instruction("setX2=3")
    assert instr.command == "setX"
    assert instr.pre_param_type is ParamType.INT
    assert instr.pre_param == 2
    assert instr.post_param_type is ParamType.INT
    assert instr.post_param == 3


def test_indexed_float():
    instr = parse_instruction("setX2=3.5")
    assert (instr.command, instr.pre_param, instr.post_param) == ("setX", 2, 3.5)
    assert instr.post_param_type is ParamType.FLOAT


def test_string_value():
    instr = parse_instruction("setSpeedSource=GPS")
    assert instr.command == "setSpeedSource"
    assert instr.post_param_type is ParamType.STRING
    assert instr.post_param == "GPS"


def test_comma_stops_float():
    instr = parse_instruction("setSimSpeed=1,5")
    assert instr.post_param_type is ParamType.FLOAT
    assert instr.post_param == 1.0


def test_negative_int():
    instr = parse_instruction("setTankLevel=-20")
    assert instr.post_param == -20


def test_nan_float():
    instr = parse_instruction("setSimSpeed=nan.")
    assert instr.command == "setSimSpeed"
    assert instr.post_param_type is ParamType.FLOAT
    assert math.isnan(instr.post_param) is True


def test_string_value_truncated():
    instr = parse_instruction("name=" + "x" * 40)
    assert instr.post_param == "x" * 31


def test_unparseable_assignment_falls_back_to_whole_text():
    instr = parse_instruction("=5")
    assert instr.command == "=5"
    assert instr.post_param_type is ParamType.NONE


def test_empty_rejected():
    with pytest.raises(ParseError):
        parse_instruction("")


def test_long_plain_command_rejected():
    with pytest.raises(ParseError):
        parse_instruction("a" * 40)


def test_dispatch_calls_handler():
    received = []
    parser = CommandParser()
    parser.register("setTankLevel", received.append)
    parser.register("pauseTask", received.append)
    instr = parser.dispatch("setTankLevel=42")
    assert received == [instr]
    assert received[0].post_param == 42
    assert "pauseTask" in parser
    assert "missing" not in parser


def test_dispatch_unknown_command():
    parser = CommandParser()
    with pytest.raises(KeyError):
        parser.dispatch("nothing=1")


def test_dispatch_invalid_instruction():
    parser = CommandParser()
    with pytest.raises(ParseError):
        parser.dispatch("")