"""Translate loose caller payloads into validated simulation requests."""

from __future__ import annotations

from typing import Any, Mapping

from ..config import DEFAULT_SIMULATOR_CONFIG, SimulatorConfig
from ..engine.errors import InvalidRequestError
from ..engine.noise import NoisePolicy, UniformSource
from ..engine.rules import ScenarioKind, resolve_rule
from .models import SimulationReport, SimulationRequest
from .runner import MonteCarloRunner


def _coerce_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise InvalidRequestError(f"{field_name} must be numeric", context={field_name: value})
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"{field_name} must be numeric", context={field_name: value}) from exc


def _baseline_from_inputs(kind: ScenarioKind, inputs: Any) -> float:
    if inputs is None:
        raise InvalidRequestError("A baseline input value is required", context={"missing": ["inputs"]})
    if isinstance(inputs, Mapping):
        for key in (kind.input_key, "baselineValue", "baseline_value"):
            if inputs.get(key) is not None:
                return _coerce_number(inputs[key], key)
        raise InvalidRequestError(
            f"inputs must provide '{kind.input_key}' for the {kind.value} scenario",
            context={"missing": [kind.input_key]},
        )
    return _coerce_number(inputs, "baselineValue")


def build_request(
    scenario_type: str | ScenarioKind | None,
    inputs: Any,
    noise_level: Any,
    custom_rules: Mapping[str, Any] | None = None,
    *,
    iterations: int | None = None,
    noise_policy: str | NoisePolicy | None = None,
    noise_multiplier: float | None = None,
    config: SimulatorConfig | None = None,
) -> SimulationRequest:
    """Validate a caller payload and return a :class:`SimulationRequest`.

    ``inputs`` is either the baseline value itself or a mapping holding the
    scenario's input key (``systolicBP``, ``creditScore`` or ``customValue``).
    Required fields are never defaulted; only the scenario type falls back to
    ``medical`` when it is absent.
    """

    config = config or DEFAULT_SIMULATOR_CONFIG
    kind = ScenarioKind.parse(scenario_type)
    rule = resolve_rule(kind, custom_rules)
    baseline_value = _baseline_from_inputs(kind, inputs)
    if noise_level is None:
        raise InvalidRequestError("A noise level is required", context={"missing": ["uncertaintyLevel"]})
    level = _coerce_number(noise_level, "uncertaintyLevel")
    policy = NoisePolicy.parse(noise_policy) if noise_policy is not None else config.noise_policy
    multiplier = (
        _coerce_number(noise_multiplier, "noiseMultiplier")
        if noise_multiplier is not None
        else config.noise_multiplier
    )
    return SimulationRequest(
        rule=rule,
        baseline_value=baseline_value,
        noise_level=level,
        iterations=config.iterations if iterations is None else iterations,
        noise_policy=policy,
        noise_multiplier=multiplier,
    )


def simulate(
    scenario_type: str | ScenarioKind | None,
    inputs: Any,
    noise_level: Any,
    custom_rules: Mapping[str, Any] | None = None,
    *,
    iterations: int | None = None,
    noise_policy: str | NoisePolicy | None = None,
    noise_multiplier: float | None = None,
    config: SimulatorConfig | None = None,
    source: UniformSource | None = None,
) -> SimulationReport:
    """Build a request from a loose payload and run it in one call."""

    request = build_request(
        scenario_type,
        inputs,
        noise_level,
        custom_rules,
        iterations=iterations,
        noise_policy=noise_policy,
        noise_multiplier=noise_multiplier,
        config=config,
    )
    return MonteCarloRunner(config=config, source=source).run(request)


__all__ = ["build_request", "simulate"]
