"""Configuration helpers for the simulator and its service wrappers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import math
import os

from .engine.noise import NoisePolicy


def _parse_positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        parsed = int(raw)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _parse_positive_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed) or parsed <= 0.0:
        return default
    return parsed


@dataclass(slots=True)
class SimulatorConfig:
    """Build-time constants for the Monte Carlo runner.

    ``noise_policy`` and ``noise_multiplier`` decide how a noise level turns
    into a standard deviation (see :class:`~decision_sim.engine.noise.NoisePolicy`).
    Requests may override both; these values are the defaults.
    """

    iterations: int = 5000
    noise_policy: NoisePolicy = NoisePolicy.FIXED
    noise_multiplier: float = 2.0
    log_cap: int = 15
    stable_log_sample: int = 5
    critical_drop: float = 20.0

    def __post_init__(self) -> None:
        if self.stable_log_sample > self.log_cap:
            self.stable_log_sample = self.log_cap

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "SIMULATOR_",
    ) -> "SimulatorConfig":
        """Parse simulator settings; malformed values fall back to defaults."""

        env = env or os.environ
        defaults = cls()

        raw_policy = env.get(f"{prefix}NOISE_POLICY")
        noise_policy = defaults.noise_policy
        if raw_policy:
            try:
                noise_policy = NoisePolicy(raw_policy.strip().lower())
            except ValueError:
                noise_policy = defaults.noise_policy

        return cls(
            iterations=_parse_positive_int(env.get(f"{prefix}ITERATIONS"), defaults.iterations),
            noise_policy=noise_policy,
            noise_multiplier=_parse_positive_float(env.get(f"{prefix}NOISE_MULTIPLIER"), defaults.noise_multiplier),
            log_cap=_parse_positive_int(env.get(f"{prefix}LOG_CAP"), defaults.log_cap),
            stable_log_sample=_parse_positive_int(env.get(f"{prefix}STABLE_LOG_SAMPLE"), defaults.stable_log_sample),
            critical_drop=_parse_positive_float(env.get(f"{prefix}CRITICAL_DROP"), defaults.critical_drop),
        )


@dataclass(slots=True)
class TelemetryConfig:
    """Runtime configuration for the OTLP/HTTP (protobuf) exporters."""

    enabled: bool = False
    service_name: str = "decision-sim-api"
    environment: str = "development"
    exporter_endpoint: Optional[str] = None
    sampling_ratio: float = 0.1
    capture_metrics: bool = True
    capture_traces: bool = True

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "OTEL_",
    ) -> "TelemetryConfig":
        """Construct a configuration object from environment variables."""

        env = env or os.environ
        enabled_raw = env.get(f"{prefix}ENABLED") or env.get("ENABLE_TELEMETRY")
        enabled = False
        if enabled_raw is not None:
            enabled = str(enabled_raw).strip().lower() not in {"0", "false", "no"}
        endpoint = env.get(f"{prefix}EXPORTER_OTLP_ENDPOINT") or env.get("OTEL_EXPORTER_OTLP_ENDPOINT")
        service_name = env.get(f"{prefix}SERVICE_NAME") or env.get("SERVICE_NAME") or "decision-sim-api"
        environment_name = env.get(f"{prefix}ENVIRONMENT") or env.get("DEPLOYMENT_ENV", "development")

        def _parse_ratio(raw: str | None, default: float) -> float:
            if raw is None:
                return default
            try:
                parsed = float(raw)
            except (TypeError, ValueError):
                return default
            if parsed <= 0.0:
                return 0.0
            if parsed >= 1.0:
                return 1.0
            return parsed

        sampling_ratio = _parse_ratio(
            env.get(f"{prefix}SAMPLING_RATIO") or env.get("OTEL_TRACES_SAMPLER_ARG"),
            0.1,
        )
        capture_metrics = env.get(f"{prefix}CAPTURE_METRICS", "1").lower() not in {"0", "false", "no"}
        capture_traces = env.get(f"{prefix}CAPTURE_TRACES", "1").lower() not in {"0", "false", "no"}

        return cls(
            enabled=enabled or bool(endpoint),
            service_name=service_name,
            environment=environment_name,
            exporter_endpoint=endpoint,
            sampling_ratio=sampling_ratio,
            capture_metrics=capture_metrics,
            capture_traces=capture_traces,
        )


DEFAULT_SIMULATOR_CONFIG = SimulatorConfig.from_env()
DEFAULT_TELEMETRY_CONFIG = TelemetryConfig.from_env()
