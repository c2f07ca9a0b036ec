"""Bouncing-ball scene: a sphere dropped onto a flat ground plane.

Integrated with semi-implicit Euler once per fixed sub-step. Contact with
the ground reflects the vertical velocity scaled by the restitution
coefficient.
"""

from dataclasses import dataclass

import numpy as np

from sim_clock.config import SceneConfig


@dataclass
class BallState:
    """Snapshot of the ball after a step."""

    position: tuple[float, float, float]
    velocity: tuple[float, float, float]
    bounces: int
    steps: int

    @property
    def height(self) -> float:
        return self.position[1]


class BallScene:
    """Single rigid ball under gravity, bouncing on the plane y = 0."""

    # Below this rebound speed the ball is considered resting.
    REST_SPEED = 0.5

    def __init__(self, config: SceneConfig | None = None):
        self.config = config or SceneConfig()
        self._gravity = np.array([0.0, self.config.gravity, 0.0])
        self.reset()

    def reset(self) -> None:
        """Put the ball back at its drop height, at rest."""
        self._position = np.array([0.0, self.config.start_height, 0.0])
        self._velocity = np.zeros(3)
        self._bounces = 0
        self._steps = 0

    def step(self, dt: float) -> BallState:
        """Advance the scene by one fixed sub-step of ``dt`` seconds."""
        radius = self.config.ball_radius
        self._velocity = self._velocity + self._gravity * dt
        self._position = self._position + self._velocity * dt

        if self._position[1] < radius:
            self._position[1] = radius
            if self._velocity[1] < 0.0:
                rebound = -self._velocity[1] * self.config.restitution
                if rebound > self.REST_SPEED:
                    self._velocity[1] = rebound
                    self._bounces += 1
                else:
                    self._velocity[1] = 0.0

        self._steps += 1
        return self.snapshot()

    def snapshot(self) -> BallState:
        return BallState(
            position=tuple(float(v) for v in self._position),
            velocity=tuple(float(v) for v in self._velocity),
            bounces=self._bounces,
            steps=self._steps,
        )
