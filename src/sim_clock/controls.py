"""Toolbar control surface: buttons, key bindings and toggle semantics.

Buttons, in toolbar order: restart, pause, step, play, fast-forward. Play
and fast-forward act as toggles against pause, and the pause button
resumes the last running speed when pressed while paused.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sim_clock.clock import ClockMode

if TYPE_CHECKING:
    from sim_clock.simulator import Simulator


class ControlButton(str, Enum):
    RESTART = "restart"
    PAUSE = "pause"
    STEP = "step"
    PLAY = "play"
    FAST_FORWARD = "fast_forward"


@dataclass(frozen=True)
class ButtonInfo:
    button: ControlButton
    tooltip: str
    key: str | None = None


BUTTONS: tuple[ButtonInfo, ...] = (
    ButtonInfo(ControlButton.RESTART, "Restart simulation from the beginning"),
    ButtonInfo(ControlButton.PAUSE, "Pause simulation", key="space"),
    ButtonInfo(ControlButton.STEP, "Run one simulation step", key="/"),
    ButtonInfo(ControlButton.PLAY, "Run simulation with normal speed"),
    ButtonInfo(ControlButton.FAST_FORWARD, "Fast-Forward simulation with maximum speed"),
)

KEY_BINDINGS: dict[str, ControlButton] = {
    info.key: info.button for info in BUTTONS if info.key is not None
}

NORMAL_SPEED = ClockMode.running(1.0)
MAX_SPEED = ClockMode.running(math.inf)


def active_button(mode: ClockMode) -> ControlButton:
    """Button to highlight for the current mode."""
    if mode.is_paused:
        return ControlButton.PAUSE
    if mode.is_one_tick:
        return ControlButton.STEP
    if mode.speed == 1.0:
        return ControlButton.PLAY
    return ControlButton.FAST_FORWARD


def press(sim: Simulator, button: ControlButton | str, source: str = "ui") -> ClockMode:
    """Apply a button press to the simulator and return the resulting mode."""
    button = ControlButton(button)
    with sim.lock:
        _apply(sim, button, sim.clock.mode, source)
        return sim.clock.mode


def _apply(sim: Simulator, button: ControlButton, mode: ClockMode, source: str) -> None:
    if button is ControlButton.RESTART:
        sim.reset(paused=True, source=source)
    elif button is ControlButton.PAUSE:
        if mode.is_paused:
            sim.resume(source=source)
        else:
            sim.pause(source=source)
    elif button is ControlButton.STEP:
        sim.step(source=source)
    elif button is ControlButton.PLAY:
        if mode == NORMAL_SPEED:
            sim.pause(source=source)
        else:
            sim.run(1.0, source=source)
    elif button is ControlButton.FAST_FORWARD:
        if mode == MAX_SPEED:
            sim.pause(source=source)
        else:
            sim.fast_forward(source=source)


def press_key(sim: Simulator, key: str) -> ClockMode | None:
    """Handle a key press. Unbound keys are ignored and return None."""
    button = KEY_BINDINGS.get(key.lower())
    if button is None:
        return None
    return press(sim, button, source="keyboard")
