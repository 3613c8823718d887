"""Pydantic schemas used by the public API surface.

Field names are snake_case in Python and camelCase on the wire, matching the
payloads produced by the browser client.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..engine.rules import ScenarioRule
from ..simulation import SimulationReport, TrialOutcome


class ErrorPayload(BaseModel):
    """Standard error envelope returned by API endpoints."""

    code: str = Field(..., description="Machine readable error identifier")
    message: str = Field(..., description="Human readable explanation")
    context: Dict[str, Any] = Field(default_factory=dict, description="Additional context")


class CustomRules(BaseModel):
    """Threshold rule supplied for the ``custom`` scenario.

    Display-only keys sent by the browser form (``title``, ``variableName``)
    are ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    threshold: float
    operator: str = Field(..., description="One of '>', '>=', '<', '<='")
    true_label: str = Field(..., alias="trueLabel", min_length=1)
    false_label: str = Field(..., alias="falseLabel", min_length=1)

    def as_rule_fields(self) -> Dict[str, Any]:
        return {
            "threshold": self.threshold,
            "operator": self.operator,
            "trueLabel": self.true_label,
            "falseLabel": self.false_label,
        }


class SimulationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenario_type: Literal["medical", "loan", "custom"] | None = Field(
        default=None,
        alias="scenarioType",
        description="Scenario to evaluate; defaults to 'medical' when omitted",
    )
    inputs: Dict[str, float] | None = Field(
        default=None,
        description="Per-scenario inputs: systolicBP, creditScore or customValue",
    )
    baseline_value: float | None = Field(default=None, alias="baselineValue")
    uncertainty_level: float = Field(..., alias="uncertaintyLevel", ge=0.0)
    custom_rules: CustomRules | None = Field(default=None, alias="customRules")
    iterations: int | None = Field(default=None, gt=0, le=200_000)
    noise_policy: Literal["fixed", "relative"] | None = Field(default=None, alias="noisePolicy")
    noise_multiplier: float | None = Field(default=None, alias="noiseMultiplier", ge=0.0)

    def resolved_inputs(self) -> Dict[str, float] | float | None:
        if self.inputs:
            return self.inputs
        return self.baseline_value


class TrialLog(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    value: float
    outcome: str
    is_flip: bool = Field(..., alias="isFlip")

    @classmethod
    def from_domain(cls, outcome: TrialOutcome) -> "TrialLog":
        return cls(
            id=outcome.trial,
            value=round(outcome.simulated_value, 2),
            outcome=outcome.decision,
            is_flip=outcome.is_flip,
        )


class SimulationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenario: str
    baseline_value: float = Field(..., alias="baselineValue")
    baseline_decision: str = Field(..., alias="baselineDecision")
    threshold: float
    operator: str
    iterations: int
    noise_level: float = Field(..., alias="noiseLevel")
    noise_policy: str = Field(..., alias="noisePolicy")
    noise_std_dev: float = Field(..., alias="noiseStdDev")
    flip_count: int = Field(..., alias="flipCount")
    stability_percent: float = Field(..., alias="stabilityPercent", ge=0.0, le=100.0)
    flip_percent: float = Field(..., alias="flipPercent", ge=0.0, le=100.0)
    stability: str = Field(..., description="Stability score formatted as a percentage string")
    distribution: Dict[int, int]
    probabilities: Dict[str, str]
    logs: List[TrialLog]
    reflection: str
    impact_statement: str = Field(..., alias="impactStatement")
    value_summary: Dict[str, float] = Field(default_factory=dict, alias="valueSummary")

    @classmethod
    def from_domain(cls, report: SimulationReport) -> "SimulationResponse":
        return cls(
            scenario=report.scenario,
            baseline_value=report.baseline_value,
            baseline_decision=report.baseline_decision,
            threshold=report.threshold,
            operator=report.operator,
            iterations=report.iterations,
            noise_level=report.noise_level,
            noise_policy=report.noise_policy,
            noise_std_dev=report.noise_std_dev,
            flip_count=report.flip_count,
            stability_percent=report.stability_percent,
            flip_percent=report.flip_percent,
            stability=f"{report.stability_percent:.2f}%",
            distribution=dict(report.distribution),
            probabilities=dict(report.probabilities),
            logs=[TrialLog.from_domain(entry) for entry in report.sample_logs],
            reflection=report.reflection,
            impact_statement=report.impact_statement,
            value_summary=dict(report.value_summary),
        )


class ScenarioDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenario: str
    input_key: str = Field(..., alias="inputKey")
    threshold: float
    operator: str
    true_label: str = Field(..., alias="trueLabel")
    false_label: str = Field(..., alias="falseLabel")

    @classmethod
    def from_domain(cls, rule: ScenarioRule) -> "ScenarioDescriptor":
        return cls(**rule.describe())


class ScenarioCatalogResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenarios: List[ScenarioDescriptor]
    operators: List[str]
    noise_policy: str = Field(..., alias="noisePolicy")
    noise_multiplier: float = Field(..., alias="noiseMultiplier")
    iterations: int


__all__ = [
    "CustomRules",
    "ErrorPayload",
    "ScenarioCatalogResponse",
    "ScenarioDescriptor",
    "SimulationRequest",
    "SimulationResponse",
    "TrialLog",
]
