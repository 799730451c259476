"""BLE heart rate decoder, rolling history and WebSocket relay."""

from .ble import HeartRateMonitor, scan_hr_devices
from .config import Config, load_config
from .decoder import decode_heart_rate
from .history import DEFAULT_CAPACITY, HeartRateHistory
from .log import setup_logging
from .server import HeartRateServer
from .session import HeartRateSession

__all__ = [
    "decode_heart_rate",
    "HeartRateHistory",
    "DEFAULT_CAPACITY",
    "HeartRateSession",
    "HeartRateMonitor",
    "scan_hr_devices",
    "Config",
    "load_config",
    "setup_logging",
    "HeartRateServer",
]
