from __future__ import annotations

import logging
from typing import Optional

from . import codec
from .errors import BoardError, DeviceNotSupportedError
from .protocol import BAUD, DEFAULT_TIMEOUT
from .transport import SerialTransport, Transport

logger = logging.getLogger(__name__)


class B15F:
    """
    Session with one B15F board.

    A session only exists after the board passed the echo handshake. It owns
    its transport until close(); calls are not thread-safe.

    Usage::

        with B15F.open_port("/dev/ttyUSB0") as board:
            board.digital_write(Port.PORT0, 0xAA)
            value = board.analog_read(3)
    """

    _transport: Transport

    def __init__(self, transport: Transport, port_name: Optional[str] = None) -> None:
        """
        Wrap an open transport and verify the board behind it.
        Args:
            transport: Open transport
            port_name: Endpoint name, for messages only
        Raises:
            DeviceNotSupportedError: If the handshake answer is wrong
            serial.SerialException / OSError: On transport failure
        """
        self._transport = transport
        self._port_name = port_name
        try:
            passed = codec.test(transport)
        except BoardError:
            passed = False
        if not passed:
            raise DeviceNotSupportedError(port_name)
        logger.info("B15F board ready%s", f" on {port_name}" if port_name else "")

    @classmethod
    def open_port(cls, port_name: str, timeout: float = DEFAULT_TIMEOUT) -> "B15F":
        """
        Open a board by endpoint name.
        Raises:
            serial.SerialException: If the port cannot be opened or fails mid-handshake
            DeviceNotSupportedError: If something other than a B15F answered
        """
        transport = SerialTransport(port_name, baudrate=BAUD, timeout=timeout)
        try:
            return cls(transport, port_name=port_name)
        except Exception:
            transport.close()
            raise

    @classmethod
    def instance(cls, timeout: float = DEFAULT_TIMEOUT) -> "B15F":
        """
        Find the first B15F among the host's serial ports.
        Raises:
            DeviceNotFoundError: If no port yields a working board
        """
        from .discovery import discover

        return discover(timeout=timeout)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def port_name(self) -> Optional[str]:
        return self._port_name

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "B15F":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"B15F(port_name={self._port_name!r})"

    def test(self) -> bool:
        """
        Run the echo self-test.
        Returns:
            bool: True if the board echoed the random byte
        Raises:
            BoardError: If the board reported failure
        """
        return codec.test(self._transport)

    def digital_write(self, port: int, value: int) -> None:
        """
        Drive a digital output port.
        Args:
            port: Port.PORT0 or Port.PORT1
            value: Byte to output
        Raises:
            ValueError: If port or value is out of range (nothing is sent)
            BoardError: If the board reported failure
        """
        codec.digital_write(self._transport, port, value)

    def digital_read(self, port: int) -> int:
        """
        Read a digital input port.
        Returns:
            int: Input byte, bit 0 being pin 0
        """
        return codec.digital_read(self._transport, port)

    def analog_write(self, port: int, value: int) -> None:
        """
        Set a DAC output.
        Args:
            port: Port.PORT0 or Port.PORT1
            value: 10-bit value, 0-1023
        Raises:
            ValueError: If port or value is out of range (nothing is sent)
            BoardError: If the board reported failure
        """
        codec.analog_write(self._transport, port, value)

    def analog_read(self, channel: int) -> int:
        """
        Read an ADC channel.
        Args:
            channel: Channel 0-7
        Returns:
            int: Raw 10-bit reading
        Raises:
            ValueError: If channel is out of range (nothing is sent)
        """
        return codec.analog_read(self._transport, channel)

    def set_pwm_frequency(self, frequency: float) -> int:
        """
        Set the PWM frequency.
        Args:
            frequency: Frequency in Hz, sent as a 32-bit float
        Returns:
            int: The raw byte the board answers with, uninterpreted
        Raises:
            ValueError: If frequency does not fit a 32-bit float (nothing is sent)
        """
        return codec.set_pwm_frequency(self._transport, frequency)

    def set_pwm_value(self, value: int) -> None:
        """
        Set the PWM duty value.
        Args:
            value: Duty byte, 0-255
        Raises:
            ValueError: If value is out of range (nothing is sent)
            BoardError: If the board reported failure
        """
        codec.set_pwm_value(self._transport, value)
