"""Manual and autonomous placement sequencers"""

from .state import (
    SequencerState,
    CommandKind,
    HardwareCommand,
    CorrectionState,
    NozzleSlot,
    SequencerProgress,
    TickEvent,
    TickResult,
    Transition,
)
from .base import Sequencer
from .manual import ManualSequencer
from .auto import AutoSequencer
from .runner import SequencerRunner, create_sequencer

__all__ = [
    # States and records
    "SequencerState",
    "CommandKind",
    "HardwareCommand",
    "CorrectionState",
    "NozzleSlot",
    "SequencerProgress",
    "TickEvent",
    "TickResult",
    "Transition",
    # Sequencers
    "Sequencer",
    "ManualSequencer",
    "AutoSequencer",
    # Running
    "SequencerRunner",
    "create_sequencer",
]
