"""Fixed-timestep simulation clock.

The clock turns variable wall-clock deltas into a whole number of fixed
sub-steps. Unspent virtual time is kept as *overstep* and carried over to
the next host frame, capped so that a stall (debugger pause, slow frame)
never forces an unbounded burst of catch-up steps.

Durations are kept as integer nanoseconds so that ``elapsed`` is always an
exact multiple of the fixed step. Float seconds are accepted at the edges.
"""

import math
from dataclasses import dataclass
from enum import Enum

from sim_clock.config import ClockConfig

NANOS_PER_SECOND = 1_000_000_000

# Same ceiling as a u64-seconds duration; used as the fast-forward sentinel.
MAX_DURATION_NS = (2**64 - 1) * NANOS_PER_SECOND + (NANOS_PER_SECOND - 1)


def seconds_to_ns(seconds: float) -> int:
    """Convert float seconds to nanoseconds, saturating at both ends."""
    if math.isnan(seconds) or seconds <= 0.0:
        return 0
    if math.isinf(seconds):
        return MAX_DURATION_NS
    return min(round(seconds * NANOS_PER_SECOND), MAX_DURATION_NS)


class ModeKind(str, Enum):
    PAUSED = "paused"
    ONE_TICK = "one_tick"
    RUNNING = "running"


@dataclass(frozen=True)
class ClockMode:
    """Operating mode of the clock. ``speed`` is only meaningful when running."""

    kind: ModeKind
    speed: float = 0.0

    @classmethod
    def paused(cls) -> "ClockMode":
        return cls(ModeKind.PAUSED)

    @classmethod
    def one_tick(cls) -> "ClockMode":
        return cls(ModeKind.ONE_TICK)

    @classmethod
    def running(cls, speed: float = 1.0) -> "ClockMode":
        return cls(ModeKind.RUNNING, float(speed))

    @property
    def is_paused(self) -> bool:
        return self.kind is ModeKind.PAUSED

    @property
    def is_one_tick(self) -> bool:
        return self.kind is ModeKind.ONE_TICK

    @property
    def is_running(self) -> bool:
        return self.kind is ModeKind.RUNNING

    @property
    def is_fast_forward(self) -> bool:
        return self.is_running and math.isinf(self.speed) and self.speed > 0

    def __str__(self) -> str:
        if self.is_running:
            return f"running({self.speed:g}x)"
        return self.kind.value


DEFAULT_MODE = ClockMode.running(1.0)


class SimulationClock:
    """Virtual time, mode state machine and overstep accounting."""

    def __init__(self, fixed_step_s: float = 0.015625, overstep_cap_steps: int = 3):
        self.fixed_step_ns = seconds_to_ns(fixed_step_s)
        if self.fixed_step_ns <= 0:
            raise ValueError(f"fixed_step_s must be positive, got {fixed_step_s!r}")
        self.overstep_cap_steps = max(1, int(overstep_cap_steps))
        self.mode = DEFAULT_MODE
        self.previous_running_mode = DEFAULT_MODE
        self.overstep_ns = 0
        self.elapsed_ns = 0
        self.step_count = 0

    @classmethod
    def from_config(cls, config: ClockConfig) -> "SimulationClock":
        return cls(
            fixed_step_s=config.fixed_step_s,
            overstep_cap_steps=config.overstep_cap_steps,
        )

    # -- mode commands -------------------------------------------------------

    def set_mode(self, mode: ClockMode) -> None:
        """Switch mode, remembering the last running mode for ``resume``."""
        if mode.is_running:
            self.previous_running_mode = mode
        self.mode = mode

    def pause(self) -> None:
        self.set_mode(ClockMode.paused())

    def resume(self) -> None:
        self.set_mode(self.previous_running_mode)

    def step(self) -> None:
        """Request exactly one sub-step, then pause."""
        self.set_mode(ClockMode.one_tick())

    def run(self, speed: float = 1.0) -> None:
        self.set_mode(ClockMode.running(speed))

    def fast_forward(self) -> None:
        """Run as many sub-steps as the runner's budget allows."""
        self.run(math.inf)

    def reset(self) -> None:
        """Back to start-up defaults. Step size and cap are kept."""
        self.mode = DEFAULT_MODE
        self.previous_running_mode = DEFAULT_MODE
        self.overstep_ns = 0
        self.elapsed_ns = 0
        self.step_count = 0

    # -- per-frame accounting ------------------------------------------------

    def accumulate(self, wall_delta_s: float) -> None:
        """Add ``wall_delta_s * speed`` of virtual time while running."""
        if not self.mode.is_running:
            return
        speed = self.mode.speed
        if not speed > 0.0:
            return
        if self.mode.is_fast_forward:
            self.overstep_ns = MAX_DURATION_NS
            return
        delta_ns = seconds_to_ns(wall_delta_s * speed)
        self.overstep_ns = min(self.overstep_ns + delta_ns, MAX_DURATION_NS)

    def try_consume_step(self) -> bool:
        """Take one fixed step of virtual time if available."""
        if self.mode.is_paused:
            return False
        if self.mode.is_one_tick:
            # bypasses set_mode, previous_running_mode stays as is
            self.mode = ClockMode.paused()
            self.overstep_ns = 0
        elif self.overstep_ns >= self.fixed_step_ns:
            self.overstep_ns -= self.fixed_step_ns
        else:
            return False
        self.elapsed_ns += self.fixed_step_ns
        self.step_count += 1
        return True

    def clamp_overstep(self) -> None:
        """Bound the catch-up debt carried into the next frame."""
        self.overstep_ns = min(self.overstep_ns, self.max_overstep_ns)

    # -- read-only views -----------------------------------------------------

    @property
    def max_overstep_ns(self) -> int:
        return self.fixed_step_ns * self.overstep_cap_steps

    @property
    def fixed_step_s(self) -> float:
        return self.fixed_step_ns / NANOS_PER_SECOND

    @property
    def overstep_s(self) -> float:
        return self.overstep_ns / NANOS_PER_SECOND

    @property
    def elapsed_s(self) -> float:
        return self.elapsed_ns / NANOS_PER_SECOND

    @property
    def elapsed_human_readable(self) -> str:
        """Format elapsed virtual time as H:MM:SS:mmm."""
        total_seconds, remainder_ns = divmod(self.elapsed_ns, NANOS_PER_SECOND)
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        millis = remainder_ns // 1_000_000
        return f"{hours:01d}:{minutes:02d}:{seconds:02d}:{millis:03d}"
