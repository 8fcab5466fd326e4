"""
Error types raised by the B15F driver.

Transport failures (open, write, read, flush, timeout) are not wrapped: they
surface as pyserial's ``serial.SerialException`` or ``OSError``. Out-of-range
arguments raise ``ValueError`` before anything is sent.
"""

from __future__ import annotations


class B15FError(Exception):
    """Base class for protocol-level outcomes."""


class BoardError(B15FError):
    """The board answered with a status byte other than MSG_OK."""

    def __init__(self) -> None:
        super().__init__("board responded with error")


class DeviceNotSupportedError(B15FError):
    """An endpoint answered the handshake, but not like a B15F does."""

    def __init__(self, port_name: str | None = None) -> None:
        msg = "device not supported"
        if port_name:
            msg += f" on {port_name}"
        super().__init__(msg)
        self.port_name = port_name


class DeviceNotFoundError(B15FError):
    """Discovery exhausted every candidate endpoint."""

    def __init__(self) -> None:
        super().__init__("device not found")
