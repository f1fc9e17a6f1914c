import logging
import threading
from typing import Any, Dict, Optional

from ..core.config import SystemConfig
from ..core.timing import TickTiming
from ..hardware.base import PnPHardware
from ..placement.models import OperationMode, PlacementQueue
from .auto import AutoSequencer
from .base import Sequencer
from .manual import ManualSequencer

logger = logging.getLogger(__name__)

SEQUENCERS = {
    OperationMode.MANUAL: ManualSequencer,
    OperationMode.AUTO: AutoSequencer,
}


def create_sequencer(
    mode: OperationMode,
    hardware: PnPHardware,
    queue: PlacementQueue,
    config: Optional[SystemConfig] = None,
) -> Sequencer:
    """Build the sequencer for an operation mode"""
    return SEQUENCERS[OperationMode(mode)](hardware, queue, config)


class SequencerRunner:
    """Bounded-rate loop around one sequencer.

    The quit signal is checked at the top of every tick; once the
    sequencer completes, the loop keeps ticking (idling in COMPLETED)
    until quit is requested unless ``stop_on_complete`` is set.

    A tick and a state snapshot never overlap: both hold ``_state_lock``,
    so readers on other threads (the status API) see the state between
    ticks, never halfway through one.
    """

    def __init__(
        self,
        hardware: PnPHardware,
        queue: PlacementQueue,
        mode: OperationMode,
        config: Optional[SystemConfig] = None,
    ):
        self.config = config or SystemConfig.create_default()
        self.hardware = hardware
        self.sequencer = create_sequencer(mode, hardware, queue, self.config)
        self.timing = TickTiming(hardware.current_time)
        self._quit_event = threading.Event()
        self._running = False
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def request_quit(self) -> None:
        """Ask the loop to stop after the current tick"""
        logger.info("Quit requested")
        self._quit_event.set()

    def quit_requested(self) -> bool:
        return self._quit_event.is_set() or self.hardware.is_quit_requested()

    def run(self, max_ticks: Optional[int] = None, stop_on_complete: bool = False) -> Dict[str, Any]:
        """Run until quit, completion (optional) or the tick limit"""
        interval_ms = self.config.timing.tick_interval_ms
        self._running = True
        self.timing.reset()
        self.sequencer.announce()

        try:
            while not self.quit_requested():
                with self._state_lock:
                    self.sequencer.tick()
                    self.timing.update()

                if stop_on_complete and self.sequencer.is_finished:
                    break
                if max_ticks is not None and self.timing.tick_count >= max_ticks:
                    logger.warning(f"Stopping after tick limit of {max_ticks}")
                    break

                self.hardware.sleep(interval_ms)
        finally:
            self._running = False

        logger.info(
            f"Run ended in state {self.sequencer.state.name} after "
            f"{self.timing.tick_count} ticks"
        )
        return self.get_state()

    def get_state(self) -> Dict[str, Any]:
        """Complete runner state, taken between ticks"""
        with self._state_lock:
            return {
                "running": self._running,
                "quit_requested": self.quit_requested(),
                "sequencer": self.sequencer.get_state(),
                "timing": self.timing.get_metrics(),
                "hardware": self.hardware.get_state(),
            }
