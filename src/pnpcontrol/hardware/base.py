from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, Optional


class PhotoDirection(IntEnum):
    """Camera capture direction"""

    UP = 0  # component seen from below, gives the pick (rotation) error
    DOWN = 1  # board seen from above, gives the preplace (x, y) error


class PnPHardware(ABC):
    """Abstract base class for the pick and place machine.

    Every call returns immediately. Completion of the last motion or nozzle
    action is reported through :meth:`is_ready`.
    """

    @abstractmethod
    def is_ready(self) -> bool:
        """True when the last issued instruction has completed"""
        pass

    @abstractmethod
    def set_target_pos(self, x: float, y: float) -> None:
        """Move the gantry to an absolute position"""
        pass

    @abstractmethod
    def amend_pos(self, x: float, y: float) -> None:
        """Correct the gantry position before placement"""
        pass

    @abstractmethod
    def lower_nozzle(self, nozzle: int) -> None:
        pass

    @abstractmethod
    def raise_nozzle(self, nozzle: int) -> None:
        pass

    @abstractmethod
    def apply_vacuum(self, nozzle: int) -> None:
        pass

    @abstractmethod
    def release_vacuum(self, nozzle: int) -> None:
        pass

    @abstractmethod
    def rotate_nozzle(self, nozzle: int, angle: float) -> None:
        pass

    @abstractmethod
    def take_photo(self, direction: PhotoDirection) -> None:
        pass

    @abstractmethod
    def get_pick_error_theta(self, nozzle: int) -> float:
        """Rotation error of the component held by a nozzle, 0 when none"""
        pass

    @abstractmethod
    def get_preplace_error_x(self) -> float:
        pass

    @abstractmethod
    def get_preplace_error_y(self) -> float:
        pass

    @abstractmethod
    def poll_key(self) -> Optional[str]:
        """Next buffered operator key, or None"""
        pass

    @abstractmethod
    def is_quit_requested(self) -> bool:
        pass

    @abstractmethod
    def current_time(self) -> float:
        """Machine time in seconds, for reporting"""
        pass

    @abstractmethod
    def sleep(self, duration_ms: float) -> None:
        pass

    @abstractmethod
    def get_state(self) -> Dict[str, Any]:
        """Get current machine state"""
        pass
