"""Tick rate bookkeeping for the control loop.

Intervals are measured on the machine clock (``PnPHardware.current_time``),
so the reported rate is the one the sequencer actually observes, whether
the machine is real or simulated.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Optional


@dataclass
class TickTiming:
    """Rolling tick statistics sampled from a clock in seconds"""

    clock: Callable[[], float]
    window: int = 60
    tick_count: int = 0
    first_tick: Optional[float] = None
    last_tick: Optional[float] = None
    intervals_ms: Deque[float] = field(init=False)

    def __post_init__(self):
        self.intervals_ms = deque(maxlen=self.window)

    def reset(self) -> None:
        self.tick_count = 0
        self.first_tick = None
        self.last_tick = None
        self.intervals_ms.clear()

    def update(self) -> None:
        """Record one tick at the current clock reading"""
        now = self.clock()
        if self.last_tick is None:
            self.first_tick = now
        else:
            self.intervals_ms.append((now - self.last_tick) * 1000)
        self.last_tick = now
        self.tick_count += 1

    @property
    def elapsed_s(self) -> float:
        if self.first_tick is None:
            return 0.0
        return self.last_tick - self.first_tick

    def get_metrics(self) -> Dict[str, float]:
        """Interval statistics over the window and the resulting rate"""
        metrics = {
            "tick_count": self.tick_count,
            "elapsed_s": self.elapsed_s,
            "avg_interval_ms": 0.0,
            "min_interval_ms": 0.0,
            "max_interval_ms": 0.0,
            "tick_rate_hz": 0.0,
        }
        if self.intervals_ms:
            avg = sum(self.intervals_ms) / len(self.intervals_ms)
            metrics.update(
                avg_interval_ms=avg,
                min_interval_ms=min(self.intervals_ms),
                max_interval_ms=max(self.intervals_ms),
                tick_rate_hz=1000 / avg if avg > 0 else 0.0,
            )
        return metrics
