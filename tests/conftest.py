"""Pytest configuration: make sim_clock importable and provide shared fixtures."""

import os
import sys

import pytest

# Add src/ to sys.path so `import sim_clock` works without an install.
_src_dir = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "src",
)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


class FakeTime:
    """Manually advanced monotonic time source."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()
