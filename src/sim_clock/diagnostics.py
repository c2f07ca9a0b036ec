"""Throughput diagnostic: measured sub-steps per second over recent frames."""

from collections import deque

from sim_clock.clock import ClockMode


class ThroughputDiagnostic:
    """Rolling window of steps-per-second samples, oldest evicted first."""

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity!r}")
        self._samples: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def record(self, steps_executed: int, host_frame_duration_s: float) -> float | None:
        """Add one frame's sample. Degenerate (zero-length) frames are skipped."""
        if not host_frame_duration_s > 0.0:
            return None
        sample = steps_executed / host_frame_duration_s
        self._samples.append(sample)
        return sample

    def average(self) -> float | None:
        if not self._samples:
            return None
        return sum(self._samples) / len(self._samples)

    def latest(self) -> float | None:
        if not self._samples:
            return None
        return self._samples[-1]

    @property
    def samples(self) -> list[float]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)


class SpeedReadout:
    """Actual simulation speed relative to real time, as shown on the toolbar.

    The measured rate is compared against the nominal ``1 / fixed_step``.
    Readings within 5% of the requested speed snap to it, and the larger of
    the last two measurements is used so the display does not flicker.
    """

    SNAP_TOLERANCE = 0.95

    def __init__(self) -> None:
        self._last_measured = 0.0

    def update(self, mode: ClockMode, fixed_step_s: float, measured_rate: float | None) -> float:
        if not mode.is_running:
            return 0.0
        measured = measured_rate or 0.0
        actual = max(self._last_measured, measured)
        self._last_measured = measured

        expected = 1.0 / fixed_step_s
        factor = actual / expected
        if factor > mode.speed * self.SNAP_TOLERANCE:
            factor = mode.speed
        return factor
