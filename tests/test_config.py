from __future__ import annotations

import logging

from b15f.config import get_serial_config, load_config
from b15f.protocol import DEFAULT_TIMEOUT


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "absent.toml"))
    assert cfg == {}
    assert get_serial_config(cfg) == (None, DEFAULT_TIMEOUT)


def test_serial_section(tmp_path):
    path = tmp_path / "b15f.toml"
    path.write_text('[serial]\nport = "/dev/ttyUSB3"\ntimeout = 0.5\n', encoding="utf-8")
    assert get_serial_config(load_config(str(path))) == ("/dev/ttyUSB3", 0.5)


def test_invalid_toml_gives_defaults(tmp_path, caplog):
    path = tmp_path / "b15f.toml"
    path.write_text("[serial\nport = ", encoding="utf-8")
    assert load_config(str(path)) == {}
    assert "Failed to read config" in caplog.text


def test_invalid_timeout_falls_back():
    assert get_serial_config({"serial": {"timeout": "soon"}}) == (None, DEFAULT_TIMEOUT)


def test_empty_port_means_discover():
    assert get_serial_config({"serial": {"port": ""}})[0] is None


def test_missing_file_is_not_a_warning(tmp_path, caplog):
    load_config(str(tmp_path / "absent.toml"))
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_negative_timeout_falls_back(caplog):
    assert get_serial_config({"serial": {"timeout": -2}}) == (None, DEFAULT_TIMEOUT)
    assert "Invalid serial.timeout" in caplog.text
