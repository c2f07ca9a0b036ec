"""Tests for the schedule runner's step loop and execution budget."""

import pytest

from sim_clock.clock import SimulationClock
from sim_clock.config import RunnerConfig
from sim_clock.runner import ScheduleRunner

STEP_S = 0.015625


def _counter():
    calls = []

    def step_fn():
        calls.append(len(calls))

    return calls, step_fn


def test_budget_defaults_to_one_fixed_step(fake_time):
    runner = ScheduleRunner(SimulationClock(), time_source=fake_time)
    assert runner.max_exec_time_s == pytest.approx(STEP_S)


def test_from_config_uses_explicit_budget(fake_time):
    runner = ScheduleRunner.from_config(
        SimulationClock(), RunnerConfig(max_exec_time_s=0.1), time_source=fake_time
    )
    assert runner.max_exec_time_s == 0.1


def test_invalid_budget_rejected():
    with pytest.raises(ValueError):
        ScheduleRunner(SimulationClock(), max_exec_time_s=0.0)


def test_sixty_hz_frames_carry_remainder(fake_time):
    """At 60 Hz each frame runs one step and the remainder builds up."""
    clock = SimulationClock()
    runner = ScheduleRunner(clock, time_source=fake_time)
    calls, step_fn = _counter()

    total = 0
    for _ in range(60):
        total += runner.advance(1 / 60, step_fn)

    # 60 frames of 1/60 s hold 64 whole steps of 1/64 s, minus rounding.
    assert total in (63, 64)
    assert len(calls) == total
    assert clock.elapsed_ns == total * clock.fixed_step_ns


def test_fast_steps_drain_all_available_time(fake_time):
    clock = SimulationClock()
    runner = ScheduleRunner(clock, time_source=fake_time)
    calls, step_fn = _counter()

    steps = runner.advance(4 * STEP_S, step_fn)

    assert steps == 4
    assert clock.overstep_ns == 0


def test_backpressure_runs_one_slow_step(fake_time):
    """A step slower than the budget runs once and leaves the debt clamped."""
    clock = SimulationClock()
    runner = ScheduleRunner(clock, time_source=fake_time)

    def slow_step():
        fake_time.advance(0.05)

    steps = runner.advance(1.0, slow_step)

    assert steps == 1
    assert clock.overstep_ns == 3 * clock.fixed_step_ns
    assert runner.budget_exhausted_count == 1

    # The carried debt is paid off one step per frame.
    assert runner.advance(0.0, slow_step) == 1
    assert clock.overstep_ns == 2 * clock.fixed_step_ns


def test_budget_bounds_fast_forward(fake_time):
    """Fast-forward runs until the wall budget is spent, then clamps."""
    clock = SimulationClock()
    clock.fast_forward()
    runner = ScheduleRunner(clock, time_source=fake_time)

    def step_fn():
        fake_time.advance(0.005)

    steps = runner.advance(1 / 60, step_fn)

    # 5 ms per step against a 15.625 ms budget: the 4th step crosses it.
    assert steps == 4
    assert clock.overstep_ns == 3 * clock.fixed_step_ns


def test_one_tick_runs_callback_exactly_once(fake_time):
    """step() then one advance() runs the callback once and pauses."""
    clock = SimulationClock()
    runner = ScheduleRunner(clock, time_source=fake_time)
    calls, step_fn = _counter()
    runner.advance(0.01, step_fn)

    clock.step()
    steps = runner.advance(1.0, step_fn)

    assert steps == 1
    assert clock.mode.is_paused
    assert clock.overstep_ns == 0
    assert runner.advance(1.0, step_fn) == 0


def test_paused_frames_run_nothing(fake_time):
    clock = SimulationClock()
    clock.pause()
    runner = ScheduleRunner(clock, time_source=fake_time)
    calls, step_fn = _counter()

    for _ in range(10):
        assert runner.advance(1 / 60, step_fn) == 0
    assert calls == []
    assert clock.elapsed_ns == 0


def test_step_exception_propagates(fake_time):
    clock = SimulationClock()
    runner = ScheduleRunner(clock, time_source=fake_time)

    def broken():
        raise RuntimeError("physics exploded")

    with pytest.raises(RuntimeError, match="physics exploded"):
        runner.advance(STEP_S, broken)
