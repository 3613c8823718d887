"""Monte Carlo orchestration for decision stability runs."""

from __future__ import annotations

import logging
import math
from typing import Dict, List

import numpy as np

from ..config import DEFAULT_SIMULATOR_CONFIG, SimulatorConfig
from ..engine.noise import GaussianNoise, UniformSource, default_source
from ..engine.rules import evaluate
from .models import SimulationReport, SimulationRequest, TrialOutcome
from .narrative import impact_statement, reflection_for


LOGGER = logging.getLogger(__name__)


def _format_percent(value: float) -> str:
    return f"{value:.1f}%"


def _summarise(values: np.ndarray) -> Dict[str, float]:
    return {
        "mean": float(np.mean(values)),
        "std": float(np.std(values)),
        "min": float(np.min(values)),
        "max": float(np.max(values)),
        "p05": float(np.percentile(values, 5)),
        "p95": float(np.percentile(values, 95)),
    }


class MonteCarloRunner:
    """Perturb a baseline input and measure how often the decision flips.

    The runner keeps no state between calls.  When no ``source`` is injected
    every :meth:`run` draws from a fresh numpy generator.
    """

    def __init__(
        self,
        config: SimulatorConfig | None = None,
        source: UniformSource | None = None,
    ) -> None:
        self.config = config or DEFAULT_SIMULATOR_CONFIG
        self._source = source

    def run(self, request: SimulationRequest) -> SimulationReport:
        rule = request.rule
        baseline = evaluate(rule, request.baseline_value)
        baseline_decision = baseline.decision
        opposite = rule.opposite(baseline_decision)

        std_dev = request.std_dev
        LOGGER.debug(
            "Noise std dev %.4f (policy=%s, level=%s, multiplier=%s)",
            std_dev,
            request.noise_policy.value,
            request.noise_level,
            request.noise_multiplier,
        )
        noise = GaussianNoise(self._source if self._source is not None else default_source())

        log_cap = self.config.log_cap
        stable_cap = min(self.config.stable_log_sample, log_cap)
        histogram: Dict[int, int] = {}
        flipped: List[TrialOutcome] = []
        stable: List[TrialOutcome] = []
        values = np.empty(request.iterations, dtype=float)
        flip_count = 0

        for index in range(request.iterations):
            simulated = request.baseline_value + noise.sample(0.0, std_dev)
            decision = evaluate(rule, simulated).decision
            is_flip = decision != baseline_decision

            bucket = math.floor(simulated + 0.5)
            histogram[bucket] = histogram.get(bucket, 0) + 1
            values[index] = simulated

            if is_flip:
                flip_count += 1
                if len(flipped) < log_cap:
                    flipped.append(TrialOutcome(index + 1, simulated, decision, True))
            elif len(stable) < stable_cap:
                stable.append(TrialOutcome(index + 1, simulated, decision, False))

        sample_logs = (flipped + stable)[:log_cap]

        stability = (1.0 - flip_count / request.iterations) * 100.0
        flip_percent = 100.0 - stability
        probabilities = {
            baseline_decision: _format_percent(stability),
            opposite: _format_percent(flip_percent),
        }

        LOGGER.info(
            "Stability run finished: scenario=%s iterations=%d stability=%.2f%% flips=%d",
            rule.kind.value,
            request.iterations,
            stability,
            flip_count,
        )

        return SimulationReport(
            scenario=rule.kind.value,
            baseline_value=request.baseline_value,
            baseline_decision=baseline_decision,
            threshold=baseline.threshold,
            operator=rule.operator.value,
            iterations=request.iterations,
            noise_level=request.noise_level,
            noise_policy=request.noise_policy.value,
            noise_std_dev=std_dev,
            flip_count=flip_count,
            stability_percent=stability,
            flip_percent=flip_percent,
            distribution=dict(sorted(histogram.items())),
            probabilities=probabilities,
            sample_logs=sample_logs,
            reflection=reflection_for(stability),
            impact_statement=impact_statement(stability, self.config.critical_drop),
            value_summary=_summarise(values),
        )


__all__ = ["MonteCarloRunner"]
