from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import mock

import serial  # type: ignore

from b15f import B15F, DeviceNotFoundError, DeviceNotSupportedError
from b15f.discovery import (
    AutoDiscovery,
    Candidate,
    PortType,
    classify_port,
    get_available_ports,
    sort_candidates,
)

from fakes import FakeTransport


def _info(device, vid=None, hwid="n/a", description="n/a", subsystem=None):
    return SimpleNamespace(device=device, vid=vid, hwid=hwid, description=description, subsystem=subsystem)


class TestOrdering(unittest.TestCase):
    def test_priority_values(self):
        self.assertEqual(
            [int(t) for t in (PortType.USB, PortType.PCI, PortType.BLUETOOTH, PortType.UNKNOWN)],
            [0, 1, 2, 3],
        )

    def test_stable_sort(self):
        candidates = [
            Candidate("ttyS0", PortType.UNKNOWN),
            Candidate("ttyUSB1", PortType.USB),
            Candidate("rfcomm0", PortType.BLUETOOTH),
            Candidate("ttyUSB0", PortType.USB),
        ]
        ordered = sort_candidates(candidates)
        self.assertEqual(
            [c.name for c in ordered], ["ttyUSB1", "ttyUSB0", "rfcomm0", "ttyS0"]
        )

    def test_classify(self):
        self.assertEqual(classify_port(_info("/dev/ttyUSB0", vid=0x0403)), PortType.USB)
        self.assertEqual(classify_port(_info("COM4", hwid="USB VID:PID=2341:0043")), PortType.USB)
        self.assertEqual(classify_port(_info("/dev/ttyS4", subsystem="pci")), PortType.PCI)
        self.assertEqual(classify_port(_info("COM1", hwid="PCI\\VEN_8086&DEV_9D3D")), PortType.PCI)
        self.assertEqual(classify_port(_info("/dev/rfcomm0")), PortType.BLUETOOTH)
        self.assertEqual(
            classify_port(_info("COM9", hwid="BTHENUM\\{00001101-0000-1000-8000-00805F9B34FB}")),
            PortType.BLUETOOTH,
        )
        self.assertEqual(classify_port(_info("/dev/ttyS0", subsystem="pnp")), PortType.UNKNOWN)

    @mock.patch("b15f.discovery.list_ports.comports")
    def test_get_available_ports(self, mock_comports):
        mock_comports.return_value = [_info("/dev/ttyS0"), _info("/dev/ttyACM0", vid=0x2341)]
        self.assertEqual(
            get_available_ports(),
            [Candidate("/dev/ttyS0", PortType.UNKNOWN), Candidate("/dev/ttyACM0", PortType.USB)],
        )


class TestAutoDiscovery(unittest.TestCase):
    def _discovery(self, candidates, outcomes):
        """outcomes maps a port name to an exception or a FakeTransport."""
        probed = []

        def open_board(name, timeout):
            probed.append(name)
            outcome = outcomes[name]
            if isinstance(outcome, Exception):
                raise outcome
            return B15F(outcome, port_name=name)

        return AutoDiscovery(timeout=0.1, list_endpoints=lambda: candidates, open_board=open_board), probed

    def test_first_success_in_priority_order(self):
        candidates = [
            Candidate("ttyS0", PortType.UNKNOWN),
            Candidate("usb-a", PortType.USB),
            Candidate("bt", PortType.BLUETOOTH),
            Candidate("usb-b", PortType.USB),
        ]
        outcomes = {
            "usb-a": serial.SerialException("permission denied"),
            "usb-b": FakeTransport(handshake="mismatch"),
            "bt": FakeTransport(),
            "ttyS0": FakeTransport(),
        }
        discovery, probed = self._discovery(candidates, outcomes)
        board = discovery.run()
        self.assertEqual(board.port_name, "bt")
        self.assertEqual(probed, ["usb-a", "usb-b", "bt"])

    def test_io_errors_skipped(self):
        candidates = [Candidate("a", PortType.USB), Candidate("b", PortType.USB)]
        outcomes = {
            "a": FakeTransport(handshake=None),  # silent device: read timeout
            "b": FakeTransport(),
        }
        discovery, probed = self._discovery(candidates, outcomes)
        self.assertEqual(discovery.run().port_name, "b")
        self.assertEqual(probed, ["a", "b"])

    def test_not_found_when_all_fail(self):
        candidates = [Candidate("a", PortType.USB), Candidate("b", PortType.PCI)]
        outcomes = {
            "a": DeviceNotSupportedError("a"),
            "b": OSError("no such device"),
        }
        discovery, probed = self._discovery(candidates, outcomes)
        with self.assertRaises(DeviceNotFoundError):
            discovery.run()
        self.assertEqual(probed, ["a", "b"])

    def test_not_found_without_ports(self):
        discovery, probed = self._discovery([], {})
        with self.assertRaises(DeviceNotFoundError):
            discovery.run()
        self.assertEqual(probed, [])

    @mock.patch("b15f.board.SerialTransport")
    @mock.patch("b15f.discovery.list_ports.comports")
    def test_instance_uses_open_port(self, mock_comports, mock_transport):
        mock_comports.return_value = [_info("/dev/ttyS0"), _info("/dev/ttyUSB0", vid=0x0403)]
        mock_transport.return_value = FakeTransport()
        board = B15F.instance(timeout=1.0)
        self.assertEqual(board.port_name, "/dev/ttyUSB0")
        mock_transport.assert_called_once_with("/dev/ttyUSB0", baudrate=57600, timeout=1.0)


if __name__ == "__main__":
    unittest.main()
