from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, Tuple, Union
import logging

import numpy as np
import yaml

from .exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class SystemDefaults:
    """Machine constants for the pick and place head and its feeders"""

    # Control loop
    POLL_LOOP_RATE: ClassVar[int] = 20  # ticks per second

    # Capacity limits
    NUMBER_OF_FEEDERS: ClassVar[int] = 10
    MAX_NUMBER_OF_COMPONENTS_TO_PLACE: ClassVar[int] = 100
    NUMBER_OF_NOZZLES: ClassVar[int] = 3

    # Nozzles, indexed 0..2 from left to right
    MANUAL_NOZZLE: ClassVar[int] = 0
    NOZZLE_NAMES: ClassVar[Tuple[str, ...]] = ("left", "centre", "right")
    NOZZLE_OFFSETS: ClassVar[Tuple[float, ...]] = (20.0, 0.0, -20.0)

    # Fixed stations (mm)
    ORIGIN: ClassVar[Tuple[float, float]] = (0.0, 0.0)
    CAMERA_POSITION: ClassVar[Tuple[float, float]] = (-100.0, 100.0)
    FEEDER_POSITIONS: ClassVar[Tuple[Tuple[float, float], ...]] = tuple(
        (25.0 * i, 250.0) for i in range(10)
    )

    # API defaults
    DEFAULT_API_HOST: ClassVar[str] = "127.0.0.1"
    DEFAULT_API_PORT: ClassVar[int] = 8000

    @classmethod
    def get_all_defaults(cls) -> Dict[str, Any]:
        """Get all scalar machine constants as a dictionary"""
        return {
            name: value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, (int, float, str, bool))
        }


@dataclass
class MachineConfig:
    """Gantry, feeder and nozzle geometry"""

    feeder_positions: np.ndarray = field(
        default_factory=lambda: np.array(SystemDefaults.FEEDER_POSITIONS, dtype=float)
    )
    camera_position: Tuple[float, float] = SystemDefaults.CAMERA_POSITION
    origin: Tuple[float, float] = SystemDefaults.ORIGIN
    nozzle_offsets: Tuple[float, ...] = SystemDefaults.NOZZLE_OFFSETS
    manual_nozzle: int = SystemDefaults.MANUAL_NOZZLE

    def __post_init__(self):
        self.feeder_positions = np.asarray(self.feeder_positions, dtype=float)
        self.camera_position = tuple(float(v) for v in self.camera_position)
        self.origin = tuple(float(v) for v in self.origin)
        self.nozzle_offsets = tuple(float(v) for v in self.nozzle_offsets)

    def validate(self) -> None:
        """Validate machine geometry"""
        expected = (SystemDefaults.NUMBER_OF_FEEDERS, 2)
        if self.feeder_positions.shape != expected:
            raise ValidationError(
                f"Feeder table must have shape {expected}, got {self.feeder_positions.shape}"
            )
        if not np.all(np.isfinite(self.feeder_positions)):
            raise ValidationError("Feeder coordinates must be finite")
        if len(self.camera_position) != 2 or len(self.origin) != 2:
            raise ValidationError("Camera position and origin must be (x, y) pairs")
        if len(self.nozzle_offsets) != SystemDefaults.NUMBER_OF_NOZZLES:
            raise ValidationError(
                f"Expected {SystemDefaults.NUMBER_OF_NOZZLES} nozzle offsets, "
                f"got {len(self.nozzle_offsets)}"
            )
        if not 0 <= self.manual_nozzle < SystemDefaults.NUMBER_OF_NOZZLES:
            raise ValidationError(
                f"Manual nozzle must be between 0 and {SystemDefaults.NUMBER_OF_NOZZLES - 1}"
            )

    def feeder_position(self, feeder: int) -> Tuple[float, float]:
        """Return the (x, y) pick position of a tape feeder"""
        if not 0 <= feeder < len(self.feeder_positions):
            raise ValidationError(f"Unknown tape feeder {feeder}")
        x, y = self.feeder_positions[feeder]
        return float(x), float(y)


@dataclass
class TimingConfig:
    """Control loop timing"""

    poll_rate_hz: float = SystemDefaults.POLL_LOOP_RATE
    tick_interval_ms: float = field(init=False)  # Calculated in post_init

    def __post_init__(self):
        """Initialize calculated fields"""
        # A zero rate means "no delay", which tests use to drive ticks directly
        self.tick_interval_ms = 1000 / self.poll_rate_hz if self.poll_rate_hz else 0.0

    def validate(self) -> None:
        """Validate loop timing"""
        if self.poll_rate_hz < 0:
            raise ValidationError("Poll rate must not be negative")
        if self.poll_rate_hz > 1000:
            raise ValidationError("Poll rate must not exceed 1000 Hz")


@dataclass
class ApiConfig:
    """Status API settings"""

    enabled: bool = False
    host: str = SystemDefaults.DEFAULT_API_HOST
    port: int = SystemDefaults.DEFAULT_API_PORT

    def validate(self) -> None:
        """Validate API settings"""
        if not 1024 <= self.port <= 65535:
            raise ValidationError("API port must be between 1024 and 65535")


@dataclass
class SystemConfig:
    """Main controller configuration"""

    machine: MachineConfig = field(default_factory=MachineConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    def __post_init__(self):
        """Validate entire configuration"""
        try:
            self.machine.validate()
            self.timing.validate()
            self.api.validate()
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    @classmethod
    def create_default(cls) -> "SystemConfig":
        """Create default configuration"""
        return cls()

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SystemConfig":
        """Load configuration overrides from a YAML file"""
        path = Path(path)
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        config = cls.create_default()
        config.update(data)
        logger.info(f"Configuration loaded from {path}")
        return config

    def update(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values"""
        try:
            if "machine" in updates:
                self.machine = MachineConfig(**updates["machine"])
            if "timing" in updates:
                self.timing = TimingConfig(**updates["timing"])
            if "api" in updates:
                self.api = ApiConfig(**updates["api"])
        except TypeError as e:
            raise ValidationError(f"Unknown configuration key: {e}") from e

        # Revalidate after updates
        self.__post_init__()
