"""FastAPI router exposing the stability simulator."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ..config import DEFAULT_SIMULATOR_CONFIG, SimulatorConfig
from ..engine.errors import InvalidRequestError
from ..engine.rules import BUILTIN_RULES, ComparisonOperator
from ..simulation import MonteCarloRunner, build_request
from ..telemetry import TelemetryManager
from . import schemas


LOGGER = logging.getLogger(__name__)


@dataclass
class ServiceRegistry:
    """Container bundling service layer dependencies for the API."""

    config: SimulatorConfig = field(default_factory=lambda: DEFAULT_SIMULATOR_CONFIG)
    runner: MonteCarloRunner | None = None
    telemetry: TelemetryManager | None = None

    def __post_init__(self) -> None:
        if self.runner is None:
            self.runner = MonteCarloRunner(config=self.config)

    def configure(
        self,
        *,
        config: SimulatorConfig | None = None,
        runner: MonteCarloRunner | None = None,
        telemetry: TelemetryManager | None = None,
    ) -> None:
        if config is not None:
            self.config = config
        if runner is not None:
            self.runner = runner
        elif config is not None:
            self.runner = MonteCarloRunner(config=self.config)
        if telemetry is not None:
            self.telemetry = telemetry


services = ServiceRegistry()


def configure_services(
    *,
    config: SimulatorConfig | None = None,
    runner: MonteCarloRunner | None = None,
    telemetry: TelemetryManager | None = None,
) -> None:
    """Configure the shared service registry used by API routes."""

    services.configure(config=config, runner=runner, telemetry=telemetry)


def get_services() -> ServiceRegistry:
    return services


def _http_error(status_code: int, code: str, message: str, *, context: Dict[str, object] | None = None) -> HTTPException:
    payload = schemas.ErrorPayload(code=code, message=message, context=context or {})
    return HTTPException(status_code=status_code, detail=payload.model_dump())


router = APIRouter()


@router.post("/api/simulate", response_model=schemas.SimulationResponse)
def run_simulation(
    request: schemas.SimulationRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.SimulationResponse:
    scenario = request.scenario_type or "medical"
    LOGGER.info("Received request: %s simulation, level %s", scenario, request.uncertainty_level)
    custom_rules = request.custom_rules.as_rule_fields() if request.custom_rules is not None else None
    try:
        engine_request = build_request(
            scenario,
            request.resolved_inputs(),
            request.uncertainty_level,
            custom_rules,
            iterations=request.iterations,
            noise_policy=request.noise_policy,
            noise_multiplier=request.noise_multiplier,
            config=svc.config,
        )
    except InvalidRequestError as exc:
        raise _http_error(
            status.HTTP_400_BAD_REQUEST,
            "invalid_request",
            exc.message,
            context=exc.context,
        ) from exc
    report = svc.runner.run(engine_request)
    if svc.telemetry is not None:
        svc.telemetry.record_run(report)
    return schemas.SimulationResponse.from_domain(report)


@router.get("/api/scenarios", response_model=schemas.ScenarioCatalogResponse)
def list_scenarios(svc: ServiceRegistry = Depends(get_services)) -> schemas.ScenarioCatalogResponse:
    """Describe the built-in rules so clients can render scenario pickers."""

    return schemas.ScenarioCatalogResponse(
        scenarios=[schemas.ScenarioDescriptor.from_domain(rule) for rule in BUILTIN_RULES.values()],
        operators=[member.value for member in ComparisonOperator],
        noise_policy=svc.config.noise_policy.value,
        noise_multiplier=svc.config.noise_multiplier,
        iterations=svc.config.iterations,
    )


__all__ = ["configure_services", "get_services", "router", "ServiceRegistry"]
