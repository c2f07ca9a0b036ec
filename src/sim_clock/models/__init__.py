"""Simulation scenes driven by the fixed-step runner."""

from sim_clock.models.ball import BallScene, BallState

__all__ = [
    "BallScene",
    "BallState",
]
