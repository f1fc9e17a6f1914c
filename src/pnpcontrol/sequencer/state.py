"""Sequencer states and the bookkeeping records they act on."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple

from ..core.config import SystemDefaults
from ..core.exceptions import SequencerError
from ..hardware.base import PnPHardware


class SequencerState(Enum):
    """Sequencer states, shared by manual and autonomous mode"""

    HOME = auto()
    MOVE_TO_FEEDER = auto()
    WAIT = auto()
    LOWER_NOZZLE = auto()
    PICK_COMPONENT = auto()
    RAISE_COMPONENT = auto()
    MOVE_TO_CAMERA = auto()
    TAKE_UP_PHOTO = auto()
    MOVE_TO_PCB = auto()
    TAKE_DOWN_PHOTO = auto()
    ROTATE = auto()
    ADJUST = auto()
    LOWER_COMPONENT = auto()
    PLACE_COMPONENT = auto()
    RAISE_HEAD = auto()
    COMPLETED = auto()


class CommandKind(Enum):
    """Machine instructions, valued by the PnPHardware method that performs them"""

    SET_TARGET_POS = "set_target_pos"
    AMEND_POS = "amend_pos"
    LOWER_NOZZLE = "lower_nozzle"
    RAISE_NOZZLE = "raise_nozzle"
    APPLY_VACUUM = "apply_vacuum"
    RELEASE_VACUUM = "release_vacuum"
    ROTATE_NOZZLE = "rotate_nozzle"
    TAKE_PHOTO = "take_photo"


NOZZLE_COMMANDS = frozenset(
    {
        CommandKind.LOWER_NOZZLE,
        CommandKind.RAISE_NOZZLE,
        CommandKind.APPLY_VACUUM,
        CommandKind.RELEASE_VACUUM,
        CommandKind.ROTATE_NOZZLE,
    }
)


@dataclass(frozen=True)
class HardwareCommand:
    """A single instruction issued to the machine"""

    kind: CommandKind
    args: Tuple[Any, ...] = ()

    @property
    def is_actuation(self) -> bool:
        """Motion and nozzle instructions; camera captures only sense"""
        return self.kind is not CommandKind.TAKE_PHOTO

    @property
    def nozzle(self) -> Optional[int]:
        return self.args[0] if self.kind in NOZZLE_COMMANDS else None

    def apply(self, hardware: PnPHardware) -> None:
        getattr(hardware, self.kind.value)(*self.args)

    def __str__(self) -> str:
        return f"{self.kind.value}({', '.join(str(a) for a in self.args)})"


@dataclass
class CorrectionState:
    """Correction progress for the component held by one nozzle"""

    rotation_error: float = 0.0
    x_error: float = 0.0
    y_error: float = 0.0
    picked: bool = False
    rotated: bool = False
    adjusted: bool = False
    camera_visited: bool = False

    @property
    def needs_rotation(self) -> bool:
        return self.rotation_error != 0

    @property
    def needs_adjustment(self) -> bool:
        return self.x_error != 0 or self.y_error != 0

    @property
    def ready_to_place(self) -> bool:
        return self.picked and self.rotated and self.adjusted

    def clear(self) -> None:
        """Forget everything about the previous component"""
        self.rotation_error = 0.0
        self.x_error = 0.0
        self.y_error = 0.0
        self.picked = False
        self.rotated = False
        self.adjusted = False
        self.camera_visited = False


@dataclass
class NozzleSlot:
    """One physical nozzle with its occupancy and correction record"""

    index: int
    occupied: bool = False
    component: Optional[int] = None
    correction: CorrectionState = field(default_factory=CorrectionState)

    @property
    def name(self) -> str:
        return SystemDefaults.NOZZLE_NAMES[self.index]

    def load(self, component: int) -> None:
        if self.occupied:
            raise SequencerError(
                f"Nozzle {self.index} ({self.name}) already holds component {self.component}"
            )
        self.occupied = True
        self.component = component
        self.correction.picked = True

    def release(self) -> None:
        self.occupied = False
        self.component = None
        self.correction.clear()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "occupied": self.occupied,
            "component": self.component,
            "rotation_error": self.correction.rotation_error,
            "rotated": self.correction.rotated,
            "adjusted": self.correction.adjusted,
        }


@dataclass
class SequencerProgress:
    """Monotonic progress counters"""

    placed_count: int = 0
    picked_count: int = 0

    @property
    def count(self) -> int:
        """Components fully placed (manual mode naming)"""
        return self.placed_count

    @property
    def in_flight(self) -> int:
        """Components picked but not yet placed"""
        return self.picked_count - self.placed_count

    def snapshot(self) -> Dict[str, int]:
        return {
            "placed_count": self.placed_count,
            "picked_count": self.picked_count,
            "in_flight": self.in_flight,
        }


@dataclass(frozen=True)
class TickEvent:
    """Inputs sampled at the start of a tick"""

    key: Optional[str]
    ready: bool
    time: float


@dataclass(frozen=True)
class Transition:
    """Outcome of a satisfied guard"""

    target: SequencerState
    description: str


@dataclass(frozen=True)
class TickResult:
    """What one tick did"""

    previous: SequencerState
    state: SequencerState
    commands: Tuple[HardwareCommand, ...] = ()
    description: Optional[str] = None  # set only when a transition fired
    key: Optional[str] = None
    message: Optional[str] = None  # operator report without a transition

    @property
    def transitioned(self) -> bool:
        return self.description is not None
