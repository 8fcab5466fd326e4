"""
Request/response codec for the B15F command set.

Every command is one synchronous round trip: opcode plus fixed-size payload
out, flush, then a fixed-size answer back. Nothing is retried here.
"""

from __future__ import annotations

import logging
import random
import struct

from .errors import BoardError
from .protocol import (
    ANALOG_CHANNELS,
    ANALOG_MAX,
    COMMANDS,
    MSG_OK,
    Request,
    analog_write_request,
    digital_read_request,
    digital_write_request,
    reverse_bits,
)
from .transport import Transport

logger = logging.getLogger(__name__)


def _check_u8(name: str, value: int) -> int:
    if not (0 <= value <= 0xFF):
        raise ValueError(f"{name} out of range (u8): {value}")
    return value


def encode_request(opcode: Request, payload: bytes = b"") -> bytes:
    """
    Frame a request as opcode followed by its payload.
    Raises:
        ValueError: If the payload length does not match the command
    """
    cmd = COMMANDS[opcode]
    if len(payload) != cmd.request_len:
        raise ValueError(
            f"{opcode.name} takes {cmd.request_len} payload byte(s), got {len(payload)}"
        )
    return bytes((int(opcode),)) + bytes(payload)


def transact(transport: Transport, opcode: Request, payload: bytes = b"") -> bytes:
    """
    Perform one round trip and return the raw response.
    Args:
        transport: Open transport
        opcode: Request to issue
        payload: Request payload (length fixed per opcode)
    Returns:
        bytes: Exactly COMMANDS[opcode].response_len bytes
    Raises:
        serial.SerialException / OSError: On any transport failure
    """
    request = encode_request(opcode, payload)
    transport.write_all(request)
    transport.flush()
    response = transport.read_exact(COMMANDS[opcode].response_len)
    logger.debug("%s: tx=%s rx=%s", opcode.name, request.hex(), response.hex())
    return response


def check_status(status: int) -> None:
    if status != MSG_OK:
        raise BoardError()


def encode_analog_value(value: int) -> bytes:
    if not (0 <= value <= ANALOG_MAX):
        raise ValueError(f"analog write value must be between 0 and {ANALOG_MAX}, got {value}")
    return int(value).to_bytes(2, "little")


def encode_analog_channel(channel: int) -> bytes:
    if not (0 <= channel < ANALOG_CHANNELS):
        raise ValueError(f"analog read channel must be between 0 and {ANALOG_CHANNELS - 1}, got {channel}")
    return bytes((channel,))


def encode_frequency(frequency: float) -> bytes:
    try:
        return struct.pack("<f", frequency)
    except (struct.error, OverflowError):
        raise ValueError(f"PWM frequency {frequency} does not fit a 32-bit float") from None


def decode_digital(response: bytes) -> int:
    # The board shifts bits out LSB-first.
    return reverse_bits(response[0])


def decode_analog(response: bytes) -> int:
    return int.from_bytes(response[:2], "little")


def decode_test(response: bytes, token: int) -> bool:
    """
    Validate a handshake response.
    Returns:
        bool: True if the board echoed token
    Raises:
        BoardError: If the status byte is not MSG_OK
    """
    check_status(response[0])
    return response[1] == token


def test(transport: Transport, token: int | None = None) -> bool:
    """Send a random byte and check that the board echoes it back."""
    if token is None:
        token = random.getrandbits(8)
    _check_u8("token", token)
    response = transact(transport, Request.TEST, bytes((token,)))
    return decode_test(response, token)


def digital_write(transport: Transport, port: int, value: int) -> None:
    opcode = digital_write_request(port)
    payload = bytes((_check_u8("value", value),))
    check_status(transact(transport, opcode, payload)[0])


def digital_read(transport: Transport, port: int) -> int:
    opcode = digital_read_request(port)
    return decode_digital(transact(transport, opcode))


def analog_write(transport: Transport, port: int, value: int) -> None:
    opcode = analog_write_request(port)
    payload = encode_analog_value(value)
    check_status(transact(transport, opcode, payload)[0])


def analog_read(transport: Transport, channel: int) -> int:
    payload = encode_analog_channel(channel)
    # No status byte: the board always answers with a reading.
    return decode_analog(transact(transport, Request.ANALOG_READ, payload))


def set_pwm_frequency(transport: Transport, frequency: float) -> int:
    """
    Set the PWM frequency in Hz.
    Returns:
        int: The raw byte the board answers with, uninterpreted
    Raises:
        ValueError: If frequency does not fit a 32-bit float
    """
    return transact(transport, Request.PWM_SET_FREQ, encode_frequency(frequency))[0]


def set_pwm_value(transport: Transport, value: int) -> None:
    payload = bytes((_check_u8("value", value),))
    check_status(transact(transport, Request.PWM_SET_VALUE, payload)[0])

