"""Machine interface and simulated machine"""

from .base import PnPHardware, PhotoDirection
from .mock import MockPnPHardware, create_hardware

__all__ = [
    "PnPHardware",
    "PhotoDirection",
    "MockPnPHardware",
    "create_hardware",
]
