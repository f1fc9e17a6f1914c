from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple
import logging
import time

from ..core.config import SystemDefaults
from ..core.exceptions import ConfigurationError
from .base import PhotoDirection, PnPHardware

logger = logging.getLogger(__name__)

QUIT_KEYS = ("q", "Q")


@dataclass
class NozzleHardwareState:
    """Physical state of one nozzle"""

    lowered: bool = False
    vacuum: bool = False
    angle: float = 0.0


@dataclass
class MachineState:
    """Current state of the simulated machine"""

    x: float = 0.0
    y: float = 0.0
    nozzles: List[NozzleHardwareState] = field(
        default_factory=lambda: [
            NozzleHardwareState() for _ in range(SystemDefaults.NUMBER_OF_NOZZLES)
        ]
    )
    photos_taken: int = 0


class MockPnPHardware(PnPHardware):
    """Simulated pick and place machine for development without hardware.

    Every actuation keeps the machine busy for ``settle_polls`` readiness
    polls. Operator keys are scripted with :meth:`press`; a ``q`` key raises
    the quit flag instead of being delivered.

    The clock is simulated and advances only through :meth:`sleep`. With
    ``realtime`` set, :meth:`sleep` also blocks for the requested duration
    so an interactive run is paced like the real machine.
    """

    def __init__(
        self,
        settle_polls: int = 0,
        pick_errors: Optional[Dict[int, float]] = None,
        preplace_error: Tuple[float, float] = (0.0, 0.0),
        keys: Iterable[str] = (),
        realtime: bool = False,
    ):
        self.settle_polls = settle_polls
        self.realtime = realtime
        self.pick_errors: Dict[int, float] = dict(pick_errors or {})
        self.preplace_error = preplace_error
        self.held = False

        self._state = MachineState()
        self._busy = 0
        self._keys: Deque[str] = deque(keys)
        self._preplace_queue: Deque[Tuple[float, float]] = deque()
        self._measured_preplace = (0.0, 0.0)
        self._quit = False
        self._time = 0.0

        # (name, args) of every instruction and measurement, in call order
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        logger.info(
            f"Initialized mock pick and place machine "
            f"(settle_polls={settle_polls}, realtime={realtime})"
        )

    # ---- scripting helpers ----
    def press(self, *keys: str) -> None:
        """Queue operator key presses"""
        self._keys.extend(keys)

    def queue_preplace_errors(self, *errors: Tuple[float, float]) -> None:
        """Errors returned by successive downward photos"""
        self._preplace_queue.extend(errors)

    def request_quit(self) -> None:
        self._quit = True

    def command_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        logger.debug(f"mock {name}{args}")

    def _actuate(self, name: str, *args: Any) -> None:
        self._record(name, *args)
        self._busy = self.settle_polls

    # ---- PnPHardware ----
    def is_ready(self) -> bool:
        if self.held:
            return False
        if self._busy > 0:
            self._busy -= 1
            return False
        return True

    def set_target_pos(self, x: float, y: float) -> None:
        self._state.x, self._state.y = x, y
        self._actuate("set_target_pos", x, y)

    def amend_pos(self, x: float, y: float) -> None:
        self._state.x, self._state.y = x, y
        self._actuate("amend_pos", x, y)

    def lower_nozzle(self, nozzle: int) -> None:
        self._state.nozzles[nozzle].lowered = True
        self._actuate("lower_nozzle", nozzle)

    def raise_nozzle(self, nozzle: int) -> None:
        self._state.nozzles[nozzle].lowered = False
        self._actuate("raise_nozzle", nozzle)

    def apply_vacuum(self, nozzle: int) -> None:
        self._state.nozzles[nozzle].vacuum = True
        self._actuate("apply_vacuum", nozzle)

    def release_vacuum(self, nozzle: int) -> None:
        self._state.nozzles[nozzle].vacuum = False
        self._actuate("release_vacuum", nozzle)

    def rotate_nozzle(self, nozzle: int, angle: float) -> None:
        self._state.nozzles[nozzle].angle = angle
        self._actuate("rotate_nozzle", nozzle, angle)

    def take_photo(self, direction: PhotoDirection) -> None:
        direction = PhotoDirection(direction)
        if direction == PhotoDirection.DOWN:
            if self._preplace_queue:
                self._measured_preplace = self._preplace_queue.popleft()
            else:
                self._measured_preplace = self.preplace_error
        self._state.photos_taken += 1
        self._record("take_photo", direction)

    def get_pick_error_theta(self, nozzle: int) -> float:
        self._record("get_pick_error_theta", nozzle)
        return self.pick_errors.get(nozzle, 0.0)

    def get_preplace_error_x(self) -> float:
        self._record("get_preplace_error_x")
        return self._measured_preplace[0]

    def get_preplace_error_y(self) -> float:
        self._record("get_preplace_error_y")
        return self._measured_preplace[1]

    def poll_key(self) -> Optional[str]:
        while self._keys:
            key = self._keys.popleft()
            if key in QUIT_KEYS:
                self._quit = True
                continue
            return key
        return None

    def is_quit_requested(self) -> bool:
        return self._quit

    def current_time(self) -> float:
        return self._time

    def sleep(self, duration_ms: float) -> None:
        if self.realtime and duration_ms > 0:
            time.sleep(duration_ms / 1000)
        self._time += duration_ms / 1000

    def get_state(self) -> Dict[str, Any]:
        """Get current machine state"""
        return {
            "x": self._state.x,
            "y": self._state.y,
            "nozzles": [
                {"lowered": n.lowered, "vacuum": n.vacuum, "angle": n.angle}
                for n in self._state.nozzles
            ],
            "photos_taken": self._state.photos_taken,
            "busy": self._busy > 0 or self.held,
            "is_mock": True,
        }


def create_hardware(config: Dict[str, Any]) -> PnPHardware:
    """Factory function to create the machine interface"""
    hardware_type = config.get("type", "mock")

    if hardware_type == "mock":
        return MockPnPHardware(
            settle_polls=config.get("settle_polls", 0),
            pick_errors=config.get("pick_errors"),
            preplace_error=tuple(config.get("preplace_error", (0.0, 0.0))),
            keys=config.get("keys", ()),
            realtime=config.get("realtime", False),
        )
    else:
        raise ConfigurationError(f"Unknown hardware type: {hardware_type}")
