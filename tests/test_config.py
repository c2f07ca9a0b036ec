"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from sim_clock.clock import SimulationClock
from sim_clock.config import ClockConfig, SimConfig


def test_defaults():
    config = SimConfig()
    assert config.clock.fixed_step_s == 0.015625
    assert config.clock.overstep_cap_steps == 3
    assert config.runner.max_exec_time_s is None
    assert config.diagnostics.window == 10


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "clock:\n"
        "  fixed_step_s: 0.01\n"
        "  overstep_cap_steps: 5\n"
        "diagnostics:\n"
        "  window: 4\n"
    )
    config = SimConfig.from_yaml(path)
    assert config.clock.fixed_step_s == 0.01
    assert config.clock.overstep_cap_steps == 5
    assert config.diagnostics.window == 4
    assert config.scene.restitution == 0.9


def test_from_yaml_missing_file_uses_defaults(tmp_path):
    config = SimConfig.from_yaml(tmp_path / "nope.yaml")
    assert config == SimConfig()


def test_from_yaml_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert SimConfig.from_yaml(path) == SimConfig()


def test_from_env(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("runner:\n  max_exec_time_s: 0.05\n")
    monkeypatch.setenv("SIM_CLOCK_CONFIG", str(path))
    assert SimConfig.from_env().runner.max_exec_time_s == 0.05


def test_from_env_unset(monkeypatch):
    monkeypatch.delenv("SIM_CLOCK_CONFIG", raising=False)
    assert SimConfig.from_env() == SimConfig()


@pytest.mark.parametrize(
    "data",
    [
        {"clock": {"fixed_step_s": 0}},
        {"clock": {"overstep_cap_steps": 0}},
        {"diagnostics": {"window": 0}},
        {"runner": {"max_exec_time_s": -1}},
        {"scene": {"restitution": 1.5}},
    ],
)
def test_invalid_values_rejected(data):
    with pytest.raises(ValidationError):
        SimConfig.model_validate(data)


def test_clock_from_config():
    clock = SimulationClock.from_config(ClockConfig(fixed_step_s=0.01, overstep_cap_steps=2))
    assert clock.fixed_step_ns == 10_000_000
    assert clock.max_overstep_ns == 20_000_000
