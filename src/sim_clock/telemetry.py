"""In-memory frame telemetry ringbuffer, command audit log, and serialisers."""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from sim_clock.clock import ClockMode, SimulationClock


def _finite_or_none(value: float | None) -> float | None:
    """JSON has no infinity; infinite and NaN values become null."""
    if value is None or not math.isfinite(value):
        return None
    return value


def mode_to_dict(mode: ClockMode) -> dict[str, Any]:
    return {
        "kind": mode.kind.value,
        "speed": _finite_or_none(mode.speed) if mode.is_running else None,
        "fast_forward": mode.is_fast_forward,
        "label": str(mode),
    }


def clock_state_to_dict(clock: SimulationClock) -> dict[str, Any]:
    """Serialize the clock to a JSON-serialisable dict."""
    return {
        "mode": mode_to_dict(clock.mode),
        "previous_running_mode": mode_to_dict(clock.previous_running_mode),
        "fixed_step_s": clock.fixed_step_s,
        "overstep_s": clock.overstep_s,
        "max_overstep_s": clock.max_overstep_ns / 1e9,
        "elapsed_s": clock.elapsed_s,
        "elapsed": clock.elapsed_human_readable,
        "step_count": clock.step_count,
    }


@dataclass
class FrameReport:
    """What happened during one host frame."""

    frame_index: int
    wall_delta_s: float
    steps: int
    mode: ClockMode
    elapsed_s: float
    overstep_s: float
    steps_per_second: float | None = None
    speed_factor: float = 0.0


def frame_report_to_dict(report: FrameReport) -> dict[str, Any]:
    return {
        "frame_index": report.frame_index,
        "wall_delta_s": report.wall_delta_s,
        "steps": report.steps,
        "mode": mode_to_dict(report.mode),
        "elapsed_s": report.elapsed_s,
        "overstep_s": report.overstep_s,
        "steps_per_second": _finite_or_none(report.steps_per_second),
        "speed_factor": _finite_or_none(report.speed_factor),
    }


@dataclass
class AuditEntry:
    """Record of a command applied to the clock."""

    timestamp: float  # virtual elapsed seconds when the command was applied
    action: str  # e.g. "pause", "run", "reset"
    params: dict[str, Any] = field(default_factory=dict)
    source: str = "api"  # "api", "ui", "keyboard", "host"


class AuditLog:
    """Append-only log of all commands issued to the simulator."""

    def __init__(self, maxlen: int = 1000):
        self._entries: deque[AuditEntry] = deque(maxlen=maxlen)

    def record(
        self,
        timestamp: float,
        action: str,
        params: dict[str, Any] | None = None,
        source: str = "api",
    ) -> AuditEntry:
        entry = AuditEntry(
            timestamp=timestamp,
            action=action,
            params=params or {},
            source=source,
        )
        self._entries.append(entry)
        return entry

    def get_last_n(self, n: int = 50) -> list[dict[str, Any]]:
        entries = list(self._entries)[-n:] if n > 0 else []
        return [
            {
                "timestamp": e.timestamp,
                "action": e.action,
                "params": {k: _json_safe(v) for k, v in e.params.items()},
                "source": e.source,
            }
            for e in entries
        ]

    def __len__(self) -> int:
        return len(self._entries)


def _json_safe(value: Any) -> Any:
    if isinstance(value, float):
        return _finite_or_none(value)
    return value


class TelemetryBuffer:
    """Ring buffer of per-frame reports."""

    def __init__(self, maxlen: int = 600):
        self._buffer: deque[FrameReport] = deque(maxlen=maxlen)

    def append(self, report: FrameReport) -> None:
        self._buffer.append(report)

    def get_latest(self) -> FrameReport | None:
        if not self._buffer:
            return None
        return self._buffer[-1]

    def get_last_n(self, n: int) -> list[FrameReport]:
        if n <= 0:
            return []
        return list(self._buffer)[-n:]

    def clear(self) -> None:
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)
