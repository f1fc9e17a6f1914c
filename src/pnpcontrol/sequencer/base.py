"""Tick-driven sequencer base class.

Each tick samples one :class:`TickEvent`, looks up the handler for the
current state in a dispatch table and lets it fire at most one transition.
Handlers issue machine instructions through :meth:`Sequencer._issue`, which
allows a single motion or nozzle instruction per tick.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, ClassVar, Dict, List, Optional

from ..core.config import SystemConfig
from ..core.exceptions import SequencerError
from ..hardware.base import PnPHardware
from ..placement.models import OperationMode, PlacementItem, PlacementQueue
from .state import (
    CommandKind,
    HardwareCommand,
    SequencerProgress,
    SequencerState,
    TickEvent,
    TickResult,
    Transition,
)

logger = logging.getLogger(__name__)

Handler = Callable[[TickEvent], Optional[Transition]]


class Sequencer(ABC):
    """Finite-state machine that sequences one placement run"""

    mode: ClassVar[OperationMode]
    reads_keys: ClassVar[bool] = False

    def __init__(
        self,
        hardware: PnPHardware,
        queue: PlacementQueue,
        config: Optional[SystemConfig] = None,
    ):
        self.hardware = hardware
        self.queue = queue
        self.config = config or SystemConfig.create_default()
        self.machine = self.config.machine

        self.state = SequencerState.HOME
        self.progress = SequencerProgress()

        self._issued: List[HardwareCommand] = []
        self._message: Optional[str] = None

        self._handlers = self._build_handlers()
        missing = set(SequencerState) - set(self._handlers)
        if missing:
            names = ", ".join(sorted(s.name for s in missing))
            raise SequencerError(f"{type(self).__name__} has no handler for {names}")

    @abstractmethod
    def _build_handlers(self) -> Dict[SequencerState, Handler]:
        """Map every state to its guard/action handler"""
        pass

    @abstractmethod
    def announce(self) -> None:
        """Report the run parameters before the first tick"""
        pass

    @property
    def total(self) -> int:
        return len(self.queue)

    @property
    def is_finished(self) -> bool:
        return self.state is SequencerState.COMPLETED

    def current_item(self) -> Optional[PlacementItem]:
        """Component selected by the placed count, None once exhausted"""
        if self.queue.is_exhausted(self.progress.placed_count):
            return None
        return self.queue[self.progress.placed_count]

    def tick(self) -> TickResult:
        """Sample inputs and apply at most one transition"""
        key = None
        if self.reads_keys or self.state is SequencerState.COMPLETED:
            key = self.hardware.poll_key()
            if key is not None:
                key = key.lower()

        event = TickEvent(
            key=key,
            ready=self.hardware.is_ready(),
            time=self.hardware.current_time(),
        )

        previous = self.state
        self._issued = []
        self._message = None

        transition = self._handlers[self.state](event)
        if transition is not None:
            self.state = transition.target
            logger.info(
                f"Time: {event.time:7.2f}  New state: {self.state.name:<16} "
                f"{transition.description}"
            )
        elif key is not None and self._message is None:
            logger.debug(f"Key '{key}' ignored in state {self.state.name}")

        return TickResult(
            previous=previous,
            state=self.state,
            commands=tuple(self._issued),
            description=transition.description if transition else None,
            key=key,
            message=self._message,
        )

    def get_state(self) -> Dict:
        """Snapshot for reporting"""
        return {
            "mode": self.mode.value,
            "state": self.state.name,
            "total": self.total,
            "finished": self.is_finished,
            **self.progress.snapshot(),
        }

    def _issue(self, kind: CommandKind, *args) -> HardwareCommand:
        command = HardwareCommand(kind, args)
        if command.is_actuation and any(c.is_actuation for c in self._issued):
            raise SequencerError(
                f"Second instruction {command} in one tick from state {self.state.name}"
            )
        command.apply(self.hardware)
        self._issued.append(command)
        return command

    def _report(self, message: str, level: int = logging.INFO) -> None:
        """Operator message that does not accompany a transition"""
        self._message = message
        logger.log(level, f"Time: {self.hardware.current_time():7.2f}  {message}")
