"""Fixed-timestep simulation clock, schedule runner and throughput diagnostic."""

from sim_clock.clock import ClockMode, ModeKind, SimulationClock
from sim_clock.config import SimConfig
from sim_clock.diagnostics import SpeedReadout, ThroughputDiagnostic
from sim_clock.runner import ScheduleRunner

__all__ = [
    "ClockMode",
    "ModeKind",
    "ScheduleRunner",
    "SimConfig",
    "SimulationClock",
    "SpeedReadout",
    "ThroughputDiagnostic",
]
