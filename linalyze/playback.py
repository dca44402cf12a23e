"""
Auto-solve driver.

Precomputes the elimination steps for a matrix and feeds their operations
into a ``TimelineStateMachine`` one at a time, either on demand
(``advance``) or at a fixed cadence (``play``).  The cadence is
``step_delay_ms / speed``.  Stopping half way leaves the timeline at the
last applied step.
"""

import logging
import time
from typing import Callable, Optional

from linalyze.elimination import gauss_jordan_steps
from linalyze.models import SolverConfig, SolverStep
from linalyze.timeline import TimelineStateMachine

logger = logging.getLogger(__name__)


class AutoSolver:

    def __init__(self, timeline: TimelineStateMachine,
                 config: Optional[SolverConfig] = None,
                 step_delay_ms: int = 1200, speed: float = 1.0):
        if speed <= 0:
            raise ValueError("Playback speed must be positive.")
        self.timeline = timeline
        self.config = config or SolverConfig()
        self.step_delay_ms = step_delay_ms
        self.speed = speed
        self.steps: tuple[SolverStep, ...] = ()
        self._cursor = 0
        self.is_playing = False

    @property
    def interval(self) -> float:
        """Seconds between two steps during playback."""
        return self.step_delay_ms / self.speed / 1000.0

    @property
    def remaining(self) -> int:
        return len(self.steps) - self._cursor

    @property
    def is_solving(self) -> bool:
        return self.remaining > 0

    def start(self, matrix=None) -> None:
        """Reset the timeline to *matrix* (default: its initial matrix) and precompute."""
        if matrix is None:
            matrix = self.timeline.initial_matrix
        self.timeline.reset(matrix)
        self.steps = tuple(gauss_jordan_steps(matrix, self.config))
        self._cursor = 0
        logger.info("auto-solve prepared %d steps", len(self.steps))

    def advance(self) -> Optional[SolverStep]:
        """Apply the next step to the timeline; ``None`` once exhausted."""
        if self._cursor >= len(self.steps):
            self.is_playing = False
            return None
        step = self.steps[self._cursor]
        self._cursor += 1
        self.timeline.apply_step(step)
        return step

    def play(self, on_step: Optional[Callable[[SolverStep], None]] = None,
             sleep: Callable[[float], None] = time.sleep) -> int:
        """Advance until exhausted or paused; returns the number of steps played."""
        self.is_playing = True
        played = 0
        while self.is_playing:
            step = self.advance()
            if step is None:
                break
            played += 1
            if on_step:
                on_step(step)
            if self.remaining and self.is_playing:
                sleep(self.interval)
        return played

    def pause(self) -> None:
        self.is_playing = False

    def stop(self) -> None:
        self.is_playing = False
        self.steps = ()
        self._cursor = 0
