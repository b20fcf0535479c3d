"""Pytest fixtures for heatbar tests."""

import pytest
import sys
from pathlib import Path
from typing import List


def pytest_configure(config):
    """Register custom pytest marks."""
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.heatbar.models import RenderConfig
from src.heatbar.registry import HeatRegistry, HeatSample


class FakeSocket:
    """Stand-in for an opened scapy socket."""

    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def render_config() -> RenderConfig:
    """Default layout config: 16-column addresses, 150k bytes per full bar."""
    return RenderConfig(
        max_bytes=150000,
        max_heat=1000000,
        max_heat_display=1000000,
        decay_rate=500,
        decay_interval=0.5,
        address_column_width=16,
        separator=" | ",
    )


@pytest.fixture
def registry() -> HeatRegistry:
    """Fresh registry with the default clamp."""
    return HeatRegistry(max_heat=1000000)


@pytest.fixture
def sample_snapshot() -> List[HeatSample]:
    """Mixed snapshot: ties, IPv6 and an address over max_bytes."""
    return [
        HeatSample("10.0.0.2", 50000.0),
        HeatSample("192.168.1.10", 200000.0),
        HeatSample("10.0.0.1", 50000.0),
        HeatSample("fe80::1c2a:3bff:fe4d:5e6f", 1200.0),
        HeatSample("8.8.8.8", 0.0),
    ]


@pytest.fixture
def fake_socket() -> FakeSocket:
    return FakeSocket()
