import math
import random

import pytest

from decision_sim.engine.errors import InvalidRequestError
from decision_sim.engine.noise import GaussianNoise, NoisePolicy


def test_box_muller_redraws_zero_and_applies_transform(scripted_source):
    # u = exp(-0.5) gives a radius of 1; v = 0.5 gives cos(pi) = -1.
    source = scripted_source([0.0, math.exp(-0.5), 0.0, 0.5])
    noise = GaussianNoise(source)

    value = noise.sample(10.0, 2.0)

    assert value == pytest.approx(8.0)
    assert source.calls == 4


def test_zero_std_dev_returns_mean(seeded_source):
    noise = GaussianNoise(seeded_source)
    assert all(noise.sample(142.0, 0.0) == 142.0 for _ in range(100))


def test_standard_normal_moments():
    noise = GaussianNoise(random.Random(42))
    draws = noise.samples(0.0, 1.0, 20000)

    mean = sum(draws) / len(draws)
    variance = sum((value - mean) ** 2 for value in draws) / len(draws)

    assert abs(mean) < 0.05
    assert abs(math.sqrt(variance) - 1.0) < 0.05
    assert all(math.isfinite(value) for value in draws)


def test_default_source_produces_finite_values():
    noise = GaussianNoise()
    assert all(math.isfinite(noise.sample(0.0, 3.0)) for _ in range(500))


@pytest.mark.parametrize("std_dev", [-1.0, float("inf"), float("nan")])
def test_invalid_std_dev_is_rejected(std_dev, seeded_source):
    with pytest.raises(ValueError):
        GaussianNoise(seeded_source).sample(0.0, std_dev)


def test_noise_policies():
    assert NoisePolicy.FIXED.std_dev(140.0, 3.0, 2.0) == pytest.approx(6.0)
    assert NoisePolicy.RELATIVE.std_dev(700.0, 5.0, 2.0) == pytest.approx(35.0)
    assert NoisePolicy.RELATIVE.std_dev(-200.0, 10.0, 2.0) == pytest.approx(20.0)
    assert NoisePolicy.parse("Relative") is NoisePolicy.RELATIVE
    with pytest.raises(InvalidRequestError):
        NoisePolicy.parse("logarithmic")
