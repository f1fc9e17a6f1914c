"""REST interface for sequencer status"""

from .app import init_app
from .models import BaseResponse, NozzleStatus, SequencerStatus, TimingMetrics, RunnerStatus

__all__ = [
    # Application
    "init_app",
    # Models
    "BaseResponse",
    "NozzleStatus",
    "SequencerStatus",
    "TimingMetrics",
    "RunnerStatus",
]
