"""Gaussian noise generation via the Box-Muller transform."""

from __future__ import annotations

from enum import Enum
import math
from typing import List, Protocol

import numpy as np

from .errors import InvalidRequestError


class NoisePolicy(str, Enum):
    """How a user facing noise level becomes a standard deviation.

    ``fixed``
        ``std = noise_level * multiplier``; the spread ignores the size of
        the baseline value.
    ``relative``
        ``std = |baseline| * noise_level / 100``; the noise level is read as
        a percentage of the baseline.
    """

    FIXED = "fixed"
    RELATIVE = "relative"

    @classmethod
    def parse(cls, raw: "str | NoisePolicy") -> "NoisePolicy":
        if isinstance(raw, NoisePolicy):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError as exc:
            raise InvalidRequestError(
                f"Unknown noise policy '{raw}'",
                context={"noise_policy": raw, "supported": [policy.value for policy in cls]},
            ) from exc

    def std_dev(self, baseline_value: float, noise_level: float, multiplier: float) -> float:
        if self is NoisePolicy.RELATIVE:
            return abs(baseline_value) * (noise_level / 100.0)
        return noise_level * multiplier


class UniformSource(Protocol):
    """Anything exposing ``random() -> float`` in ``[0, 1)``.

    :class:`numpy.random.Generator` and :class:`random.Random` both qualify,
    which lets tests swap in a seeded or scripted stream.
    """

    def random(self) -> float:  # pragma: no cover - protocol
        ...


def default_source(seed: int | None = None) -> UniformSource:
    """Return a fresh numpy generator; unseeded calls get an independent stream."""

    return np.random.default_rng(seed)


class GaussianNoise:
    """Draw Normal(mean, std_dev**2) samples from a uniform source."""

    def __init__(self, source: UniformSource | None = None) -> None:
        self._source = source if source is not None else default_source()

    def _uniform(self) -> float:
        # log(0) is undefined, so exact zeros are redrawn.
        value = 0.0
        while value == 0.0:
            value = float(self._source.random())
        return value

    def sample(self, mean: float, std_dev: float) -> float:
        if not math.isfinite(mean):
            raise ValueError(f"Noise mean must be finite, got {mean!r}")
        if not math.isfinite(std_dev) or std_dev < 0:
            raise ValueError(f"Noise standard deviation must be finite and >= 0, got {std_dev!r}")
        u = self._uniform()
        v = self._uniform()
        z = math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
        return mean + std_dev * z

    def samples(self, mean: float, std_dev: float, count: int) -> List[float]:
        return [self.sample(mean, std_dev) for _ in range(count)]


__all__ = ["GaussianNoise", "NoisePolicy", "UniformSource", "default_source"]
