import sys
from pathlib import Path

import pytest
import yaml

# Make the src layout importable without installing the package
src_dir = Path(__file__).parent.parent.absolute() / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from pnpcontrol.core.config import SystemConfig, TimingConfig
from pnpcontrol.hardware.mock import MockPnPHardware
from pnpcontrol.placement.models import PlacementItem, PlacementQueue


@pytest.fixture
def config():
    """Default configuration with no delay between ticks"""
    return SystemConfig(timing=TimingConfig(poll_rate_hz=0))


@pytest.fixture
def hardware():
    """Simulated machine that is always ready"""
    return MockPnPHardware()


@pytest.fixture
def make_item():
    """Factory for placement items"""

    def _make_item(
        designation="R1",
        feeder=2,
        x=10.0,
        y=20.0,
        theta=0.0,
        value=100.0,
        footprint="0805",
    ):
        return PlacementItem(
            designation=designation,
            footprint=footprint,
            value=value,
            x_target=x,
            y_target=y,
            theta_target=theta,
            feeder=feeder,
        )

    return _make_item


@pytest.fixture
def make_queue(make_item):
    """Factory for queues of ``n`` items, optionally with per-item feeders"""

    def _make_queue(n, feeders=None):
        feeders = feeders or [4] * n
        return PlacementQueue(
            make_item(
                designation=f"C{i}",
                feeder=feeders[i],
                x=100.0 + 10 * i,
                y=50.0 + 5 * i,
                theta=90.0,
            )
            for i in range(n)
        )

    return _make_queue


@pytest.fixture
def centroid_file(tmp_path):
    """Write a centroid file and return its path"""

    def _write(data, name="centroid.yaml"):
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.dump(data, f)
        return path

    return _write
