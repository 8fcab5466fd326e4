"""B15F board driver.

Host-side driver for the B15F I/O board over pyserial: digital and analog
I/O, PWM and board auto-discovery.
"""

__all__ = [
    "B15F",
    "B15FError",
    "BoardError",
    "DeviceNotFoundError",
    "DeviceNotSupportedError",
    "Port",
    "SerialTransport",
    "Transport",
    "discover",
    "get_available_ports",
]

__version__ = "0.1.0"

from .board import B15F
from .errors import B15FError, BoardError, DeviceNotFoundError, DeviceNotSupportedError
from .protocol import Port
from .transport import SerialTransport, Transport
from .discovery import discover, get_available_ports
