"""Pick and place machine controller"""

from .core import SystemConfig, SystemDefaults
from .hardware import MockPnPHardware, PnPHardware, PhotoDirection
from .placement import OperationMode, PlacementItem, PlacementQueue, load_centroid_file
from .sequencer import AutoSequencer, ManualSequencer, SequencerRunner, SequencerState

__version__ = "0.1.0"

__all__ = [
    "SystemConfig",
    "SystemDefaults",
    "PnPHardware",
    "MockPnPHardware",
    "PhotoDirection",
    "OperationMode",
    "PlacementItem",
    "PlacementQueue",
    "load_centroid_file",
    "ManualSequencer",
    "AutoSequencer",
    "SequencerRunner",
    "SequencerState",
]
