from __future__ import annotations

import logging
from typing import Optional, Tuple

try:  # Python 3.11+
    import tomllib as _toml
except ImportError:  # pragma: no cover
    import tomli as _toml  # type: ignore

from .protocol import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "b15f.toml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load configuration from a TOML file; empty dict if missing or invalid."""
    try:
        with open(config_path, "rb") as f:
            return _toml.load(f)
    except FileNotFoundError:
        logger.debug("Config file %s not found, using defaults", config_path)
        return {}
    except (OSError, _toml.TOMLDecodeError) as e:
        logger.warning("Failed to read config %s: %s. Using default values.", config_path, e)
        return {}


def get_serial_config(config: dict) -> Tuple[Optional[str], float]:
    """
    Extract serial settings.
    Returns:
        (port, timeout): port is None when it should be auto-discovered
    """
    serial_cfg = config.get("serial", {})
    port = serial_cfg.get("port") or None
    try:
        timeout = float(serial_cfg.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        timeout = -1.0
    if timeout < 0:
        logger.warning("Invalid serial.timeout %r, using %.1f", serial_cfg.get("timeout"), DEFAULT_TIMEOUT)
        timeout = DEFAULT_TIMEOUT
    return (str(port) if port is not None else None), timeout
