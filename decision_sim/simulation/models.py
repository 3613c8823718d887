"""Request, trial and report containers for the Monte Carlo runner."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Dict, List, Mapping

from ..engine.errors import InvalidRequestError
from ..engine.noise import NoisePolicy
from ..engine.rules import ScenarioRule


@dataclass(frozen=True)
class SimulationRequest:
    """Input payload for one stability run.

    Validation happens at construction so a request that exists is one the
    runner can execute to completion.
    """

    rule: ScenarioRule
    baseline_value: float
    noise_level: float
    iterations: int = 5000
    noise_policy: NoisePolicy = NoisePolicy.FIXED
    noise_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int) or self.iterations <= 0:
            raise InvalidRequestError(
                "iterations must be a positive integer",
                context={"iterations": self.iterations},
            )
        for name in ("baseline_value", "noise_level", "noise_multiplier"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                raise InvalidRequestError(f"{name} must be a finite number", context={name: value})
        if self.noise_level < 0:
            raise InvalidRequestError("noise_level must be >= 0", context={"noise_level": self.noise_level})
        if self.noise_multiplier < 0:
            raise InvalidRequestError(
                "noise_multiplier must be >= 0",
                context={"noise_multiplier": self.noise_multiplier},
            )

    @property
    def std_dev(self) -> float:
        return self.noise_policy.std_dev(self.baseline_value, self.noise_level, self.noise_multiplier)


@dataclass(frozen=True)
class TrialOutcome:
    trial: int
    simulated_value: float
    decision: str
    is_flip: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trial": self.trial,
            "simulated_value": round(self.simulated_value, 2),
            "decision": self.decision,
            "is_flip": self.is_flip,
        }


@dataclass(frozen=True)
class SimulationReport:
    """Aggregated result of a stability run."""

    scenario: str
    baseline_value: float
    baseline_decision: str
    threshold: float
    operator: str
    iterations: int
    noise_level: float
    noise_policy: str
    noise_std_dev: float
    flip_count: int
    stability_percent: float
    flip_percent: float
    distribution: Dict[int, int]
    probabilities: Dict[str, str]
    sample_logs: List[TrialOutcome]
    reflection: str
    impact_statement: str
    value_summary: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping of the report."""

        return {
            "scenario": self.scenario,
            "baseline_value": self.baseline_value,
            "baseline_decision": self.baseline_decision,
            "threshold": self.threshold,
            "operator": self.operator,
            "iterations": self.iterations,
            "noise_level": self.noise_level,
            "noise_policy": self.noise_policy,
            "noise_std_dev": self.noise_std_dev,
            "flip_count": self.flip_count,
            "stability_percent": self.stability_percent,
            "flip_percent": self.flip_percent,
            "distribution": {str(key): count for key, count in self.distribution.items()},
            "probabilities": dict(self.probabilities),
            "sample_logs": [entry.to_dict() for entry in self.sample_logs],
            "reflection": self.reflection,
            "impact_statement": self.impact_statement,
            "value_summary": dict(self.value_summary),
        }


__all__ = ["SimulationReport", "SimulationRequest", "TrialOutcome"]
