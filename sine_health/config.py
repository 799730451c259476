"""Configuration file loading and defaults."""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .history import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8765
    broadcast_timeout: float = 0.5
    log_level: str = "INFO"
    log_samples: bool = False


@dataclass
class BLEConfig:
    scan_timeout: float = 5.0
    reconnect_min: float = 1.0
    reconnect_max: float = 30.0
    poll_interval: float = 0.0  # 0 = notifications only


@dataclass
class DeviceConfig:
    address: str = ""
    name_filter: str = ""


@dataclass
class HistoryConfig:
    capacity: int = DEFAULT_CAPACITY


@dataclass
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    ble: BLEConfig = field(default_factory=BLEConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)


def config_paths() -> list[Path]:
    """Config file locations, highest priority first."""
    return [
        Path("./config.toml"),
        Path.home() / ".config" / "sine-health" / "config.toml",
    ]


def load_config() -> Config:
    """Load config from file, with defaults for missing values."""
    for path in config_paths():
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
                logger.debug("Loaded config from %s", path)
                return _parse_config(data)
            except tomllib.TOMLDecodeError as e:
                logger.warning("Failed to parse config '%s': %s. Using defaults.", path, e)
                return Config()

    return Config()


def _parse_config(data: dict) -> Config:
    """Parse TOML dict into Config dataclass.

    Uses dataclass defaults for missing values.
    """
    return Config(
        server=ServerConfig(**data.get("server", {})),
        ble=BLEConfig(**data.get("ble", {})),
        device=DeviceConfig(**data.get("device", {})),
        history=HistoryConfig(**data.get("history", {})),
    )
