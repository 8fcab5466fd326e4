"""
Auto-discovery of a B15F board among the host's serial ports.

Ports are probed one at a time, USB first, then PCI, Bluetooth and anything
else. The first port that opens and passes the echo handshake wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterable, List, Optional

import serial  # type: ignore
from serial.tools import list_ports  # type: ignore

from .board import B15F
from .errors import B15FError, DeviceNotFoundError
from .protocol import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class PortType(IntEnum):
    """Connection type of a serial port; the value is its probe priority."""
    USB = 0
    PCI = 1
    BLUETOOTH = 2
    UNKNOWN = 3


@dataclass(frozen=True)
class Candidate:
    name: str
    port_type: PortType = PortType.UNKNOWN


def classify_port(info) -> PortType:
    """
    Classify a pyserial ListPortInfo.
    Args:
        info: Entry from serial.tools.list_ports.comports()
    Returns:
        PortType: Connection type used for ordering
    """
    hwid = (getattr(info, "hwid", None) or "").upper()
    if getattr(info, "vid", None) is not None or hwid.startswith("USB"):
        return PortType.USB
    if getattr(info, "subsystem", None) == "pci" or hwid.startswith("PCI"):
        return PortType.PCI
    text = " ".join(
        (getattr(info, "device", None) or "", getattr(info, "description", None) or "", hwid)
    ).lower()
    if "bluetooth" in text or "bthenum" in text or "rfcomm" in text:
        return PortType.BLUETOOTH
    return PortType.UNKNOWN


def get_available_ports() -> List[Candidate]:
    """List serial ports visible to the host, in enumeration order."""
    return [Candidate(info.device, classify_port(info)) for info in list_ports.comports()]


def sort_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Order candidates by priority; equal priorities keep enumeration order."""
    ordered = sorted(candidates, key=lambda c: int(c.port_type))
    for c in ordered:
        logger.debug("[Discover] Port priority: %s -> %d", c.name, int(c.port_type))
    return ordered


class AutoDiscovery:
    """Sequential probe of serial ports for a B15F board."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        list_endpoints: Optional[Callable[[], Iterable[Candidate]]] = None,
        open_board: Optional[Callable[[str, float], B15F]] = None,
    ):
        """
        Args:
            timeout: Read timeout per candidate in seconds
            list_endpoints: Port enumerator (default: get_available_ports)
            open_board: Opens and verifies one port (default: B15F.open_port)
        """
        self.timeout = timeout
        self._list_endpoints = list_endpoints or get_available_ports
        self._open_board = open_board or B15F.open_port

    def candidates(self) -> List[Candidate]:
        return sort_candidates(self._list_endpoints())

    def _probe(self, candidate: Candidate) -> Optional[B15F]:
        logger.debug("[Discover] Check for B15 board on %s", candidate.name)
        try:
            return self._open_board(candidate.name, self.timeout)
        except (B15FError, serial.SerialException, OSError) as e:
            logger.debug("[Discover] Failed on %s: %s", candidate.name, e)
            return None

    def run(self) -> B15F:
        """
        Probe candidates in priority order.
        Returns:
            B15F: Session on the first port that passed the handshake
        Raises:
            DeviceNotFoundError: If every candidate failed
        """
        for candidate in self.candidates():
            board = self._probe(candidate)
            if board is not None:
                logger.info("[Discover] Choose B15 board on %s", candidate.name)
                return board
        raise DeviceNotFoundError()


def discover(timeout: float = DEFAULT_TIMEOUT) -> B15F:
    """Find and open the first B15F board; raises DeviceNotFoundError."""
    return AutoDiscovery(timeout=timeout).run()
