"""Host-side orchestration: clock, runner, diagnostics, scene, audit."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from sim_clock.clock import SimulationClock
from sim_clock.config import SimConfig
from sim_clock.diagnostics import SpeedReadout, ThroughputDiagnostic
from sim_clock.models.ball import BallScene
from sim_clock.runner import ScheduleRunner
from sim_clock.telemetry import AuditLog, FrameReport, TelemetryBuffer

logger = logging.getLogger(__name__)


class Simulator:
    """Drives a fixed-step scene from host frames and applies commands.

    Frames and commands share one lock, so a command is always applied
    strictly before or after a whole ``frame()``, never in the middle of a
    sub-step loop.
    """

    def __init__(
        self,
        config: SimConfig | None = None,
        step_fn: Callable[[], object] | None = None,
        *,
        time_source: Callable[[], float] | None = None,
    ):
        self.config = config or SimConfig()
        self._time_source = time_source or time.perf_counter
        self.clock = SimulationClock.from_config(self.config.clock)
        self.runner = ScheduleRunner.from_config(
            self.clock, self.config.runner, time_source=self._time_source
        )
        self.diagnostic = ThroughputDiagnostic(capacity=self.config.diagnostics.window)
        self.speed_readout = SpeedReadout()
        self.scene = BallScene(self.config.scene)
        self._step_fn = step_fn or self._step_scene
        self.telemetry = TelemetryBuffer(maxlen=self.config.telemetry_maxlen)
        self.audit_log = AuditLog(maxlen=self.config.audit_maxlen)
        self.speed_factor = 0.0
        self._frame_index = 0
        self._lock = threading.RLock()
        self._running = False
        self._run_thread: threading.Thread | None = None
        self._frame_interval_real_s = self.config.host.frame_interval_s

    def _step_scene(self) -> None:
        self.scene.step(self.clock.fixed_step_s)

    # -- host frames ---------------------------------------------------------

    def frame(
        self, wall_delta_s: float, host_frame_duration_s: float | None = None
    ) -> FrameReport:
        """Run one host frame: sub-steps, then the throughput sample."""
        if host_frame_duration_s is None:
            host_frame_duration_s = wall_delta_s
        with self._lock:
            steps = self.runner.advance(wall_delta_s, self._step_fn)
            self.diagnostic.record(steps, host_frame_duration_s)
            average = self.diagnostic.average()
            self.speed_factor = self.speed_readout.update(
                self.clock.mode, self.clock.fixed_step_s, average
            )
            report = FrameReport(
                frame_index=self._frame_index,
                wall_delta_s=wall_delta_s,
                steps=steps,
                mode=self.clock.mode,
                elapsed_s=self.clock.elapsed_s,
                overstep_s=self.clock.overstep_s,
                steps_per_second=average,
                speed_factor=self.speed_factor,
            )
            self._frame_index += 1
            self.telemetry.append(report)
        return report

    def host_frame(self, last: float) -> float:
        """Measure the real time since ``last`` and run a frame on it.

        The simulation is fed at most ``max_frame_delta_s``; the throughput
        sample uses the full real duration. Returns the new ``last``.
        """
        now = self._time_source()
        real_delta = max(0.0, now - last)
        self.frame(
            min(real_delta, self.config.host.max_frame_delta_s),
            host_frame_duration_s=real_delta,
        )
        return now

    def _run_loop(self) -> None:
        """Background thread: one frame per interval while _running."""
        last = self._time_source()
        while self._running:
            time.sleep(self._frame_interval_real_s)
            try:
                last = self.host_frame(last)
            except Exception:
                logger.exception("Step callback failed; stopping host loop")
                self._running = False
                raise

    def start_continuous(self, frame_interval_real_s: float | None = None) -> bool:
        """Start the background host loop. Returns False if already running."""
        if self._running:
            return False
        if frame_interval_real_s is not None:
            self._frame_interval_real_s = frame_interval_real_s
        self._running = True
        self._run_thread = threading.Thread(target=self._run_loop, daemon=True)
        self._run_thread.start()
        logger.info("Host loop started (%.4fs per frame)", self._frame_interval_real_s)
        return True

    def stop_continuous(self) -> bool:
        """Stop the background host loop. Returns False if not running."""
        if not self._running:
            return False
        self._running = False
        if self._run_thread:
            self._run_thread.join(timeout=2)
            self._run_thread = None
        logger.info("Host loop stopped after %d frames", self._frame_index)
        return True

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def lock(self) -> threading.RLock:
        """Held during frames and commands; re-entrant."""
        return self._lock

    @property
    def frame_count(self) -> int:
        return self._frame_index

    # -- commands ------------------------------------------------------------

    def _command(
        self,
        action: str,
        apply: Callable[[], None],
        params: dict[str, Any] | None = None,
        source: str = "api",
    ) -> None:
        with self._lock:
            apply()
            self.audit_log.record(
                timestamp=self.clock.elapsed_s,
                action=action,
                params=params,
                source=source,
            )

    def pause(self, source: str = "api") -> None:
        self._command("pause", self.clock.pause, source=source)

    def resume(self, source: str = "api") -> None:
        self._command("resume", self.clock.resume, source=source)

    def step(self, source: str = "api") -> None:
        self._command("step", self.clock.step, source=source)

    def run(self, speed: float = 1.0, source: str = "api") -> None:
        self._command("run", lambda: self.clock.run(speed), {"speed": speed}, source)

    def fast_forward(self, source: str = "api") -> None:
        self._command("fast_forward", self.clock.fast_forward, source=source)

    def reset(self, paused: bool = False, source: str = "api") -> None:
        """Restart: clock back to defaults and the scene back to its drop.

        With ``paused`` the clock is frozen right after the reset. The frame
        history is cleared; throughput samples age out of the window.
        """

        def apply() -> None:
            self.clock.reset()
            self.scene.reset()
            self.telemetry.clear()
            if paused:
                self.clock.pause()

        self._command("reset", apply, {"paused": paused}, source)
        logger.info("Simulation reset (paused=%s)", paused)
