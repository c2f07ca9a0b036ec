"""Schedule runner: drives fixed sub-steps from a variable host frame."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sim_clock.clock import SimulationClock
from sim_clock.config import RunnerConfig

logger = logging.getLogger(__name__)


class ScheduleRunner:
    """Feeds wall time into the clock and runs the step callback.

    Work per host frame is capped by a wall-clock budget. When the callback
    is too slow to keep up, the runner stops early and lets the (clamped)
    overstep carry the remaining debt into the next frame, so the simulation
    falls behind real time instead of stalling the host.
    """

    def __init__(
        self,
        clock: SimulationClock,
        max_exec_time_s: float | None = None,
        *,
        time_source: Callable[[], float] | None = None,
    ) -> None:
        self.clock = clock
        if max_exec_time_s is None:
            max_exec_time_s = clock.fixed_step_s
        if max_exec_time_s <= 0.0:
            raise ValueError(f"max_exec_time_s must be positive, got {max_exec_time_s!r}")
        self.max_exec_time_s = max_exec_time_s
        self._time_source = time_source or time.perf_counter
        self.budget_exhausted_count = 0

    @classmethod
    def from_config(
        cls,
        clock: SimulationClock,
        config: RunnerConfig,
        *,
        time_source: Callable[[], float] | None = None,
    ) -> ScheduleRunner:
        return cls(clock, config.max_exec_time_s, time_source=time_source)

    def advance(self, wall_delta_s: float, step_fn: Callable[[], object]) -> int:
        """Run one host frame worth of sub-steps. Returns the number executed."""
        clock = self.clock
        clock.accumulate(wall_delta_s)

        start = self._time_source()
        steps = 0
        while clock.try_consume_step():
            step_fn()
            steps += 1
            if self._time_source() - start >= self.max_exec_time_s:
                if clock.overstep_ns >= clock.fixed_step_ns:
                    self.budget_exhausted_count += 1
                    logger.debug(
                        "Step budget of %.4fs exhausted after %d steps; carrying %.4fs",
                        self.max_exec_time_s,
                        steps,
                        min(clock.overstep_ns, clock.max_overstep_ns) / 1e9,
                    )
                break

        clock.clamp_overstep()
        return steps
