from typing import List, Optional

from pydantic import BaseModel


# Base Models
class BaseResponse(BaseModel):
    """Base response model"""

    status: str
    message: str


class NozzleStatus(BaseModel):
    """State of one nozzle in autonomous mode"""

    index: int
    name: str
    occupied: bool
    component: Optional[int] = None
    rotation_error: float = 0.0
    rotated: bool = False
    adjusted: bool = False


class SequencerStatus(BaseModel):
    """Sequencer progress"""

    mode: str
    state: str
    total: int
    finished: bool
    placed_count: int
    picked_count: int
    in_flight: int
    nozzle_index: Optional[int] = None
    pass_loaded: Optional[bool] = None
    nozzles: List[NozzleStatus] = []


class TimingMetrics(BaseModel):
    """Control loop timing"""

    tick_count: int
    elapsed_s: float
    avg_interval_ms: float
    min_interval_ms: float
    max_interval_ms: float
    tick_rate_hz: float


class RunnerStatus(BaseModel):
    """Complete controller state"""

    running: bool
    quit_requested: bool
    sequencer: SequencerStatus
    timing: TimingMetrics
