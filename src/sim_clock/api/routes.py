"""REST API routes for the simulation clock."""

import math
from typing import Any

from fastapi import APIRouter, HTTPException

from sim_clock.controls import BUTTONS, ControlButton, active_button, press
from sim_clock.telemetry import clock_state_to_dict, frame_report_to_dict

router = APIRouter()

# Simulator instance - set by main.py
_simulator: Any = None


def set_simulator(sim: Any) -> None:
    """Inject the simulator instance."""
    global _simulator
    _simulator = sim


def get_sim() -> Any:
    if _simulator is None:
        raise HTTPException(500, "Simulator not initialised")
    return _simulator


def _status(sim: Any) -> dict:
    with sim.lock:
        result = clock_state_to_dict(sim.clock)
        result["active_button"] = active_button(sim.clock.mode).value
        result["steps_per_second"] = sim.diagnostic.average()
        result["speed_factor"] = sim.speed_factor if math.isfinite(sim.speed_factor) else None
    return result


# --- Clock commands ---


@router.get("/clock/status")
def clock_status() -> dict:
    """Mode, virtual elapsed time, overstep and measured rate."""
    return _status(get_sim())


@router.post("/clock/pause")
def clock_pause() -> dict:
    sim = get_sim()
    sim.pause()
    return _status(sim)


@router.post("/clock/resume")
def clock_resume() -> dict:
    """Return to the last running speed."""
    sim = get_sim()
    sim.resume()
    return _status(sim)


@router.post("/clock/step")
def clock_step() -> dict:
    """Run exactly one sub-step on the next frame, then pause."""
    sim = get_sim()
    sim.step()
    return _status(sim)


@router.post("/clock/run")
def clock_run(speed: float = 1.0) -> dict:
    """Run at ``speed`` times real time."""
    if math.isnan(speed) or speed < 0:
        raise HTTPException(400, f"Invalid speed: {speed}")
    sim = get_sim()
    sim.run(speed)
    return _status(sim)


@router.post("/clock/fast_forward")
def clock_fast_forward() -> dict:
    """Run as many sub-steps as the per-frame budget allows."""
    sim = get_sim()
    sim.fast_forward()
    return _status(sim)


# --- Toolbar ---


@router.get("/controls")
def get_controls() -> dict:
    """Toolbar buttons with tooltip, key binding and highlight state."""
    sim = get_sim()
    active = active_button(sim.clock.mode)
    return {
        "buttons": [
            {
                "button": info.button.value,
                "tooltip": info.tooltip,
                "key": info.key,
                "active": info.button is active,
            }
            for info in BUTTONS
        ]
    }


@router.post("/controls/{button}")
def press_control(button: str) -> dict:
    """Press a toolbar button."""
    try:
        control = ControlButton(button)
    except ValueError:
        raise HTTPException(404, f"Unknown button: {button}")
    sim = get_sim()
    press(sim, control, source="api")
    return _status(sim)


# --- Host frames ---


@router.post("/sim/frame")
def sim_frame(wall_delta_s: float = 1.0 / 60.0, n: int = 1) -> dict:
    """Feed n host frames of wall_delta_s each."""
    if math.isnan(wall_delta_s) or math.isinf(wall_delta_s) or wall_delta_s < 0:
        raise HTTPException(400, f"Invalid wall_delta_s: {wall_delta_s}")
    if n < 1:
        raise HTTPException(400, f"n must be at least 1, got {n}")
    sim = get_sim()
    reports = [sim.frame(wall_delta_s) for _ in range(n)]
    return {
        "frames_advanced": n,
        "steps": sum(r.steps for r in reports),
        "clock": _status(sim),
    }


@router.post("/sim/start")
def sim_start(frame_interval_s: float | None = None) -> dict:
    """Start the background host loop."""
    if frame_interval_s is not None and not frame_interval_s > 0:
        raise HTTPException(400, f"Invalid frame_interval_s: {frame_interval_s}")
    sim = get_sim()
    ok = sim.start_continuous(frame_interval_real_s=frame_interval_s)
    return {
        "ok": ok,
        "running": sim.is_running,
        "message": "Started" if ok else "Already running",
    }


@router.post("/sim/stop")
def sim_stop() -> dict:
    """Stop the background host loop."""
    sim = get_sim()
    ok = sim.stop_continuous()
    return {
        "ok": ok,
        "running": sim.is_running,
        "message": "Stopped" if ok else "Was not running",
    }


@router.get("/sim/status")
def sim_status() -> dict:
    """Whether the host loop is running."""
    sim = get_sim()
    return {
        "running": sim.is_running,
        "frame_count": sim.frame_count,
        "step_count": sim.clock.step_count,
    }


@router.post("/sim/reset")
def sim_reset(paused: bool = False) -> dict:
    """Restart clock and scene."""
    sim = get_sim()
    sim.reset(paused=paused)
    return {"ok": True, "clock": _status(sim)}


@router.get("/sim/config")
def sim_config() -> dict:
    """Return current SimConfig."""
    return get_sim().config.model_dump()


# --- Diagnostics ---


@router.get("/diagnostics")
def get_diagnostics() -> dict:
    """Measured sub-steps per second over the rolling window."""
    sim = get_sim()
    with sim.lock:
        diag = sim.diagnostic
        return {
            "average": diag.average(),
            "latest": diag.latest(),
            "samples": diag.samples,
            "capacity": diag.capacity,
            "expected": 1.0 / sim.clock.fixed_step_s,
            "budget_exhausted_count": sim.runner.budget_exhausted_count,
        }


@router.get("/telemetry/history")
def get_telemetry_history(last_n: int = 60) -> dict:
    """Last N host frame reports."""
    sim = get_sim()
    return {
        "history": [frame_report_to_dict(r) for r in sim.telemetry.get_last_n(last_n)]
    }


@router.get("/audit")
def get_audit_log(last_n: int = 50) -> dict:
    """Recent commands applied to the clock."""
    sim = get_sim()
    return {"entries": sim.audit_log.get_last_n(last_n)}


@router.get("/scene")
def get_scene() -> dict:
    """Current state of the demo scene."""
    sim = get_sim()
    with sim.lock:
        state = sim.scene.snapshot()
    return {
        "position": list(state.position),
        "velocity": list(state.velocity),
        "bounces": state.bounces,
        "steps": state.steps,
    }
