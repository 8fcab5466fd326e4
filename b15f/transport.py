from __future__ import annotations

import logging
from typing import Protocol

import serial

from .protocol import BAUD, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Blocking byte channel the command codec talks through."""

    def write_all(self, data: bytes) -> None: ...
    def read_exact(self, size: int) -> bytes: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class SerialTransport:
    """
    Transport over a pyserial port.
    Features:
        - write_all() keeps writing until the whole request is out
        - read_exact() treats a short read as a timeout
        - close() may be called more than once
    """

    _serial: serial.Serial

    def __init__(self, port: str, baudrate: int = BAUD, timeout: float = DEFAULT_TIMEOUT, **serial_kwargs) -> None:
        """
        Open the serial port.
        Args:
            port (str): Serial port name (e.g. /dev/ttyUSB0, COM3)
            baudrate (int): Baud rate
            timeout (float): Read and write timeout in seconds
            serial_kwargs: Additional serial.Serial arguments
        Raises:
            serial.SerialException: If the port cannot be opened
        """
        self._serial = serial.Serial(port=port, baudrate=baudrate, timeout=timeout, write_timeout=timeout, **serial_kwargs)
        self.name = port
        logger.debug("Opened %s at %d baud (timeout %.1fs)", port, baudrate, timeout)

    def write_all(self, data: bytes) -> None:
        view = memoryview(bytes(data))
        while view:
            written = self._serial.write(view)
            if not written:
                raise serial.SerialTimeoutException(f"write to {self.name} made no progress")
            view = view[written:]

    def read_exact(self, size: int) -> bytes:
        """
        Read exactly size bytes.
        Raises:
            serial.SerialTimeoutException: If the read timeout elapses first
        """
        data = bytearray()
        while len(data) < size:
            chunk = self._serial.read(size - len(data))
            if not chunk:
                raise serial.SerialTimeoutException(
                    f"read from {self.name} timed out ({len(data)}/{size} bytes)"
                )
            data += chunk
        return bytes(data)

    def flush(self) -> None:
        self._serial.flush()

    def close(self) -> None:
        if self._serial.is_open:
            self._serial.close()
            logger.debug("Closed %s", self.name)

    def __enter__(self) -> "SerialTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_transport(port: str, baudrate: int = BAUD, timeout: float = DEFAULT_TIMEOUT) -> SerialTransport:
    return SerialTransport(port, baudrate=baudrate, timeout=timeout)
