"""Core components: configuration, errors and loop timing"""

from .config import (
    SystemConfig,
    SystemDefaults,
    MachineConfig,
    TimingConfig,
    ApiConfig,
)
from .exceptions import (
    PnPError,
    ValidationError,
    ConfigurationError,
    SequencerError,
    CentroidFileError,
    CentroidFileStatus,
)
from .timing import TickTiming

__all__ = [
    # Configuration
    "SystemConfig",
    "SystemDefaults",
    "MachineConfig",
    "TimingConfig",
    "ApiConfig",
    # Timing
    "TickTiming",
    # Exceptions
    "PnPError",
    "ValidationError",
    "ConfigurationError",
    "SequencerError",
    "CentroidFileError",
    "CentroidFileStatus",
]
