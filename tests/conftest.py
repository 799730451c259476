"""Shared test fixtures for sine_health tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from sine_health.session import HeartRateSession
from tests.helpers import make_hr_packet


@pytest.fixture
def hr_packet_simple() -> bytes:
    """Simple 8-bit BPM packet (72 bpm)."""
    return make_hr_packet(72)


@pytest.fixture
def hr_packet_16bit() -> bytes:
    """16-bit BPM packet (180 bpm)."""
    return make_hr_packet(180, is_16bit=True)


@pytest.fixture
def hr_packet_full() -> bytes:
    """Packet with all optional fields populated."""
    return make_hr_packet(
        150,
        is_16bit=True,
        sensor_contact=True,
        energy=1500,
        rr_intervals=[800, 850],
    )


@pytest.fixture
def session() -> HeartRateSession:
    """Session with a small history for eviction tests."""
    return HeartRateSession(capacity=3)


@pytest.fixture
def mock_bleak_client():
    """Create a connected mock BleakClient."""
    client = AsyncMock()
    client.is_connected = True
    client.read_gatt_char = AsyncMock(return_value=bytearray(b"TestDevice"))
    return client


@pytest.fixture
def mock_ble_device():
    """Create a mock BLEDevice."""
    device = MagicMock()
    device.address = "AA:BB:CC:DD:EE:FF"
    device.name = "HR Monitor"
    return device


@pytest.fixture
def mock_advertisement_data():
    """Create mock AdvertisementData with HR service UUID."""
    from bleak.uuids import normalize_uuid_str

    adv = MagicMock()
    adv.service_uuids = [normalize_uuid_str("180D")]
    return adv


@pytest.fixture
def mock_websocket():
    """Create a mock WebSocket connection."""
    ws = AsyncMock()
    ws.send = AsyncMock()
    ws.close = AsyncMock()
    return ws


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample config dict as would be parsed from TOML."""
    return {
        "server": {
            "host": "0.0.0.0",
            "port": 9000,
            "broadcast_timeout": 1.0,
            "log_level": "DEBUG",
            "log_samples": True,
        },
        "ble": {
            "scan_timeout": 10.0,
            "reconnect_min": 2.0,
            "reconnect_max": 60.0,
            "poll_interval": 1.0,
        },
        "device": {
            "address": "11:22:33:44:55:66",
            "name_filter": "Polar",
        },
        "history": {
            "capacity": 60,
        },
    }


@pytest.fixture
def partial_config_dict() -> dict:
    """Partial config dict with some values missing."""
    return {
        "server": {"port": 8080},
        "ble": {"scan_timeout": 3.0},
    }
