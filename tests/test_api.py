"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from sim_clock.config import SimConfig
from sim_clock.main import create_app


@pytest.fixture
def client():
    app = create_app(SimConfig())
    return TestClient(app)


def test_get_clock_status(client):
    """GET /clock/status returns the default running state."""
    resp = client.get("/clock/status")
    assert resp.status_code == 200
    data = resp.json()
    assert data["mode"]["kind"] == "running"
    assert data["mode"]["speed"] == 1.0
    assert data["fixed_step_s"] == 0.015625
    assert data["elapsed"] == "0:00:00:000"
    assert data["active_button"] == "play"
    assert data["steps_per_second"] is None


def test_pause_resume_round_trip(client):
    client.post("/clock/run?speed=2.5")
    assert client.post("/clock/pause").json()["mode"]["kind"] == "paused"
    data = client.post("/clock/resume").json()
    assert data["mode"] == {
        "kind": "running",
        "speed": 2.5,
        "fast_forward": False,
        "label": "running(2.5x)",
    }


def test_fast_forward_serialises_without_infinity(client):
    resp = client.post("/clock/fast_forward")
    assert resp.status_code == 200
    mode = resp.json()["mode"]
    assert mode["speed"] is None
    assert mode["fast_forward"] is True
    assert resp.json()["active_button"] == "fast_forward"


def test_run_rejects_negative_speed(client):
    resp = client.post("/clock/run?speed=-1")
    assert resp.status_code == 400


def test_frame_advances_clock(client):
    """POST /sim/frame feeds host frames and advances virtual time."""
    resp = client.post("/sim/frame?wall_delta_s=0.03125&n=4")
    assert resp.status_code == 200
    data = resp.json()
    assert data["frames_advanced"] == 4
    assert data["steps"] == 8
    assert data["clock"]["step_count"] == 8
    assert data["clock"]["elapsed_s"] == pytest.approx(0.125)
    assert data["clock"]["steps_per_second"] == pytest.approx(64.0)


def test_frame_rejects_negative_delta(client):
    assert client.post("/sim/frame?wall_delta_s=-0.1").status_code == 400
    assert client.post("/sim/frame?n=0").status_code == 400


def test_step_then_frame(client):
    client.post("/clock/step")
    data = client.post("/sim/frame?wall_delta_s=1.0").json()
    assert data["steps"] == 1
    assert data["clock"]["mode"]["kind"] == "paused"


def test_controls_listing(client):
    data = client.get("/controls").json()
    buttons = {b["button"]: b for b in data["buttons"]}
    assert list(buttons) == ["restart", "pause", "step", "play", "fast_forward"]
    assert buttons["play"]["active"]
    assert buttons["pause"]["key"] == "space"


def test_press_control(client):
    assert client.post("/controls/pause").json()["mode"]["kind"] == "paused"
    assert client.post("/controls/pause").json()["mode"]["kind"] == "running"


def test_press_unknown_control_returns_404(client):
    assert client.post("/controls/rewind").status_code == 404


def test_reset(client):
    client.post("/sim/frame?wall_delta_s=0.5")
    data = client.post("/sim/reset?paused=true").json()
    assert data["ok"]
    assert data["clock"]["elapsed_s"] == 0.0
    assert data["clock"]["mode"]["kind"] == "paused"


def test_diagnostics_and_history(client):
    client.post("/sim/frame?wall_delta_s=0.015625&n=3")
    diag = client.get("/diagnostics").json()
    assert diag["samples"] == [64.0, 64.0, 64.0]
    assert diag["expected"] == 64.0
    assert diag["capacity"] == 10
    history = client.get("/telemetry/history?last_n=2").json()["history"]
    assert [h["frame_index"] for h in history] == [1, 2]


def test_audit_and_scene(client):
    client.post("/clock/pause")
    entries = client.get("/audit").json()["entries"]
    assert entries[-1]["action"] == "pause"
    scene = client.get("/scene").json()
    assert scene["position"][1] == 4.0


def test_sim_status_and_config(client):
    status = client.get("/sim/status").json()
    assert status == {"running": False, "frame_count": 0, "step_count": 0}
    config = client.get("/sim/config").json()
    assert config["clock"]["overstep_cap_steps"] == 3
