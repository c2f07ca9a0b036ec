"""All tuneable clock, runner and host-loop parameters."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class ClockConfig(BaseModel):
    """Simulation clock parameters."""

    fixed_step_s: float = Field(default=0.015625, gt=0.0)
    overstep_cap_steps: int = Field(default=3, ge=1)


class RunnerConfig(BaseModel):
    """Schedule runner parameters.

    ``max_exec_time_s`` is the wall-clock budget spent on sub-steps per host
    frame. ``None`` means one fixed step worth of wall time.
    """

    max_exec_time_s: float | None = Field(default=None, gt=0.0)


class DiagnosticsConfig(BaseModel):
    """Throughput diagnostic parameters."""

    window: int = Field(default=10, ge=1)


class HostLoopConfig(BaseModel):
    """Background host loop parameters."""

    frame_interval_s: float = Field(default=1.0 / 60.0, gt=0.0)
    max_frame_delta_s: float = Field(default=0.25, gt=0.0)


class SceneConfig(BaseModel):
    """Bouncing-ball demo scene parameters."""

    gravity: float = -9.81
    ball_radius: float = Field(default=0.5, gt=0.0)
    start_height: float = 4.0
    restitution: float = Field(default=0.9, ge=0.0, le=1.0)


class SimConfig(BaseModel):
    """Complete simulator configuration."""

    clock: ClockConfig = Field(default_factory=ClockConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    host: HostLoopConfig = Field(default_factory=HostLoopConfig)
    scene: SceneConfig = Field(default_factory=SceneConfig)
    telemetry_maxlen: int = Field(default=600, ge=1)
    audit_maxlen: int = Field(default=1000, ge=1)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SimConfig":
        """Load config from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    @classmethod
    def from_env(cls) -> "SimConfig":
        """Load config from the file named by ``SIM_CLOCK_CONFIG``, if set."""
        import os

        config_path = os.getenv("SIM_CLOCK_CONFIG")
        if config_path:
            return cls.from_yaml(config_path)
        return cls()
