"""Parsing and dispatch of short text commands such as ``setPIDKp=1.5``."""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

MAX_COMMAND_STRLEN = 32
_FIELD_WIDTH = MAX_COMMAND_STRLEN - 1
_WHITESPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?"
)
_DEC_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


class ParamType(enum.Enum):
    NONE = "none"
    INT = "int"
    FLOAT = "float"
    STRING = "string"


ParamValue = Union[int, float, str, None]


@dataclass(frozen=True)
class ParsedInstruction:
    command: str
    pre_param_type: ParamType = ParamType.NONE
    pre_param: int = 0
    post_param_type: ParamType = ParamType.NONE
    post_param: ParamValue = None


class ParseError(ValueError):
    """Raised when a command line cannot be parsed."""


CommandHandler = Callable[[ParsedInstruction], Any]


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def _scan_set(text: str, pos: int, accept: Callable[[str], bool]) -> tuple[str, int] | None:
    end = pos
    while end < len(text) and end - pos < _FIELD_WIDTH and accept(text[end]):
        end += 1
    if end == pos:
        return None
    return text[pos:end], end


def _scan_int(text: str, pos: int) -> tuple[int, int] | None:
    pos = _skip_ws(text, pos)
    match = _INT_RE.match(text, pos)
    if match is None:
        return None
    return int(match.group()), match.end()


def _scan_float(text: str, pos: int) -> tuple[float, int] | None:
    pos = _skip_ws(text, pos)
    match = _HEX_FLOAT_RE.match(text, pos)
    if match is not None:
        return float.fromhex(match.group()), match.end()
    match = _DEC_FLOAT_RE.match(text, pos)
    if match is None:
        return None
    return float(match.group()), match.end()


def _expect(text: str, pos: int, char: str) -> int | None:
    if pos < len(text) and text[pos] == char:
        return pos + 1
    return None


def _not_digit(char: str) -> bool:
    return char not in _DIGITS


def _not_equals(char: str) -> bool:
    return char != "="


def _indexed(
    text: str, scan_value: Callable[[str, int], tuple[Any, int] | None]
) -> tuple[str, int, Any] | None:
    name = _scan_set(text, 0, _not_digit)
    if name is None:
        return None
    command, pos = name
    index = _scan_int(text, pos)
    if index is None:
        return None
    pre, pos = index
    after = _expect(text, pos, "=")
    if after is None:
        return None
    value = scan_value(text, after)
    if value is None:
        return None
    return command, pre, value[0]


def _assigned(
    text: str, scan_value: Callable[[str, int], tuple[Any, int] | None]
) -> tuple[str, Any] | None:
    name = _scan_set(text, 0, _not_equals)
    if name is None:
        return None
    command, pos = name
    after = _expect(text, pos, "=")
    if after is None:
        return None
    value = scan_value(text, after)
    if value is None:
        return None
    return command, value[0]


def _scan_line(text: str, pos: int) -> tuple[str, int] | None:
    return _scan_set(text, pos, lambda char: char != "\n")


def _parse_typed(text: str, scan_value, kind: ParamType) -> ParsedInstruction | None:
    indexed = _indexed(text, scan_value)
    if indexed is not None:
        command, pre, value = indexed
        return ParsedInstruction(command, ParamType.INT, pre, kind, value)
    assigned = _assigned(text, scan_value)
    if assigned is not None:
        command, value = assigned
        return ParsedInstruction(command, post_param_type=kind, post_param=value)
    return None


def parse_instruction(text: str) -> ParsedInstruction:
    """Parse ``name``, ``name=value`` or ``nameN=value`` into an instruction."""
    if not text:
        raise ParseError("empty instruction")

    if "=" in text:
        if "." in text or "," in text:
            parsed = _parse_typed(text, _scan_float, ParamType.FLOAT)
        else:
            parsed = _parse_typed(text, _scan_int, ParamType.INT)
            if parsed is None:
                assigned = _assigned(text, _scan_line)
                if assigned is not None:
                    command, value = assigned
                    parsed = ParsedInstruction(
                        command, post_param_type=ParamType.STRING, post_param=value
                    )
        if parsed is not None:
            logger.debug("Parsed: %s", parsed)
            return parsed

    if len(text) < MAX_COMMAND_STRLEN:
        parsed = ParsedInstruction(text)
        logger.debug("Parsed: %s", parsed)
        return parsed

    raise ParseError(f"invalid instruction: {text!r}")


class CommandParser:
    """Registry of named handlers that receive parsed instructions."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def register(self, name: str, handler: CommandHandler) -> None:
        self._handlers[name] = handler

    def dispatch(self, text: str) -> ParsedInstruction:
        """Parse ``text`` and call the matching handler.

        Raises ParseError for malformed input and KeyError for unknown commands.
        """
        logger.debug("Received: %s", text)
        instr = parse_instruction(text)
        handler = self._handlers.get(instr.command)
        if handler is None:
            raise KeyError(instr.command)
        handler(instr)
        return instr

    def __contains__(self, name: object) -> bool:
        return name in self._handlers