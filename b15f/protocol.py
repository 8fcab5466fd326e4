from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Final

BAUD: Final[int] = 57600
MSG_OK: Final[int] = 0xFF
DEFAULT_TIMEOUT: Final[float] = 5.0

ANALOG_MAX: Final[int] = 1023
ANALOG_CHANNELS: Final[int] = 8


class Request(IntEnum):
    """
    Request opcodes understood by the B15F firmware.
    Opcodes 0, 2-4, 9, 13 and 16+ exist on the board but are not issued here.
    """
    TEST = 1
    DIGITAL_WRITE_0 = 5
    DIGITAL_WRITE_1 = 6
    DIGITAL_READ_0 = 7
    DIGITAL_READ_1 = 8
    ANALOG_WRITE_0 = 10
    ANALOG_WRITE_1 = 11
    ANALOG_READ = 12
    PWM_SET_FREQ = 14
    PWM_SET_VALUE = 15


class Port(IntEnum):
    """Digital/analog output port selector."""
    PORT0 = 0
    PORT1 = 1


@dataclass(frozen=True)
class Command:
    """
    Fixed framing of one request kind.
    Fields:
        opcode: first byte on the wire
        request_len: payload bytes following the opcode
        response_len: bytes the board answers with
    """
    opcode: Request
    request_len: int
    response_len: int


COMMANDS: Dict[Request, Command] = {
    cmd.opcode: cmd
    for cmd in (
        Command(Request.TEST, 1, 2),
        Command(Request.DIGITAL_WRITE_0, 1, 1),
        Command(Request.DIGITAL_WRITE_1, 1, 1),
        Command(Request.DIGITAL_READ_0, 0, 1),
        Command(Request.DIGITAL_READ_1, 0, 1),
        Command(Request.ANALOG_WRITE_0, 2, 1),
        Command(Request.ANALOG_WRITE_1, 2, 1),
        Command(Request.ANALOG_READ, 1, 2),
        Command(Request.PWM_SET_FREQ, 4, 1),
        Command(Request.PWM_SET_VALUE, 1, 1),
    )
}

_DIGITAL_WRITE: Final = {Port.PORT0: Request.DIGITAL_WRITE_0, Port.PORT1: Request.DIGITAL_WRITE_1}
_DIGITAL_READ: Final = {Port.PORT0: Request.DIGITAL_READ_0, Port.PORT1: Request.DIGITAL_READ_1}
_ANALOG_WRITE: Final = {Port.PORT0: Request.ANALOG_WRITE_0, Port.PORT1: Request.ANALOG_WRITE_1}


def to_port(port: int) -> Port:
    """
    Coerce a port selector.
    Raises:
        ValueError: If port is not 0 or 1
    """
    try:
        return Port(port)
    except ValueError:
        raise ValueError(f"port must be 0 or 1, got {port!r}") from None


def digital_write_request(port: int) -> Request:
    return _DIGITAL_WRITE[to_port(port)]


def digital_read_request(port: int) -> Request:
    return _DIGITAL_READ[to_port(port)]


def analog_write_request(port: int) -> Request:
    return _ANALOG_WRITE[to_port(port)]


def reverse_bits(value: int) -> int:
    """Mirror the bit order of a byte (bit 0 <-> bit 7)."""
    out = 0
    for _ in range(8):
        out = (out << 1) | (value & 1)
        value >>= 1
    return out
