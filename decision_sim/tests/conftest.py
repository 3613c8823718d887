import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from decision_sim.config import SimulatorConfig
from decision_sim.engine.noise import NoisePolicy


class ScriptedSource:
    """Uniform source replaying a fixed sequence of draws."""

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self._values[self.calls % len(self._values)]
        self.calls += 1
        return value


@pytest.fixture()
def seeded_source() -> random.Random:
    return random.Random(20251018)


@pytest.fixture()
def simulator_config() -> SimulatorConfig:
    return SimulatorConfig(
        iterations=2000,
        noise_policy=NoisePolicy.FIXED,
        noise_multiplier=2.0,
        log_cap=15,
        stable_log_sample=5,
        critical_drop=20.0,
    )


@pytest.fixture()
def anyio_backend() -> str:  # pragma: no cover - restrict to asyncio for anyio plugin
    return "asyncio"


@pytest.fixture()
def scripted_source():
    return ScriptedSource
