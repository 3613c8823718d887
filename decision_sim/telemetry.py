"""OpenTelemetry bootstrap utilities for the decision simulator API."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .config import TelemetryConfig

LOGGER = logging.getLogger(__name__)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from fastapi import FastAPI

    from .simulation import SimulationReport


@dataclass
class TelemetryManager:
    """Configure tracing/metrics exporters and record per-run instruments.

    Every hook is a no-op until :meth:`configure` succeeds, so the API and the
    tests run unchanged when the SDK is missing or telemetry is disabled.
    """

    config: TelemetryConfig
    _shutdown_hooks: List[Callable[[], None]] = field(default_factory=list)
    _instrument_fastapi: Optional[Callable[["FastAPI"], None]] = None
    _run_counter: Any = None
    _stability_histogram: Any = None
    _enabled: bool = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def configure(self) -> None:
        if not self.config.enabled:
            LOGGER.debug("Telemetry disabled by configuration")
            return
        if not self.config.capture_traces and not self.config.capture_metrics:
            LOGGER.debug("Telemetry enabled but no signals selected")
            return
        try:
            from opentelemetry import metrics, trace
            from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
            from opentelemetry.sdk.resources import Resource
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry.exporter.otlp.proto.http.metric_exporter import (
                OTLPMetricExporter,
            )
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        except ImportError:
            LOGGER.warning("OpenTelemetry SDK not available; telemetry disabled")
            return

        resource = Resource.create(
            {
                "service.name": self.config.service_name,
                "deployment.environment": self.config.environment,
            }
        )
        if self.config.capture_traces:
            sampler = TraceIdRatioBased(max(min(self.config.sampling_ratio, 1.0), 0.0))
            provider = TracerProvider(resource=resource, sampler=sampler)
            try:
                span_exporter = OTLPSpanExporter(endpoint=self.config.exporter_endpoint)
                provider.add_span_processor(BatchSpanProcessor(span_exporter))
                LOGGER.info("OpenTelemetry tracing configured (endpoint=%s)", self.config.exporter_endpoint)
                self._shutdown_hooks.append(provider.shutdown)
                trace.set_tracer_provider(provider)
            except Exception as exc:  # pragma: no cover - exporter wiring
                LOGGER.warning("Failed to initialise OTLP span exporter: %s", exc)
        if self.config.capture_metrics:
            try:
                metric_exporter = OTLPMetricExporter(endpoint=self.config.exporter_endpoint)
                reader = PeriodicExportingMetricReader(metric_exporter)
                meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
                metrics.set_meter_provider(meter_provider)
                meter = metrics.get_meter("decision_sim")
                self._run_counter = meter.create_counter(
                    "decision_sim.runs",
                    description="Completed stability runs",
                )
                self._stability_histogram = meter.create_histogram(
                    "decision_sim.stability_percent",
                    unit="%",
                    description="Stability score per run",
                )
                LOGGER.info("OpenTelemetry metrics configured (endpoint=%s)", self.config.exporter_endpoint)
                self._shutdown_hooks.append(meter_provider.shutdown)  # type: ignore[arg-type]
            except Exception as exc:  # pragma: no cover - exporter wiring
                LOGGER.warning("Failed to initialise OTLP metric exporter: %s", exc)

        # Instrument FastAPI lazily; the caller passes the app instance.
        self._instrument_fastapi = FastAPIInstrumentor().instrument_app  # type: ignore[attr-defined]
        self._enabled = True

    def instrument_app(self, app: "FastAPI") -> None:
        if not getattr(self, "_instrument_fastapi", None):
            return
        try:
            self._instrument_fastapi(app)
        except Exception as exc:  # pragma: no cover - instrumentation failure
            LOGGER.warning("Failed to instrument FastAPI: %s", exc)

    def record_run(self, report: "SimulationReport") -> None:
        """Emit run counters for a finished report when metrics are active."""

        if self._run_counter is None or self._stability_histogram is None:
            return
        attributes = {"scenario": report.scenario, "noise_policy": report.noise_policy}
        self._run_counter.add(1, attributes)
        self._stability_histogram.record(report.stability_percent, attributes)

    def shutdown(self) -> None:
        for hook in reversed(self._shutdown_hooks):
            try:
                hook()
            except Exception:  # pragma: no cover - best effort cleanup
                LOGGER.debug("Telemetry shutdown hook failed", exc_info=True)


def configure_telemetry(config: TelemetryConfig) -> TelemetryManager:
    manager = TelemetryManager(config=config)
    manager.configure()
    return manager
