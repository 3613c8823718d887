"""FastAPI application entrypoint for the Decision Stability Simulator."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import configure_services, router as api_router
from .config import DEFAULT_SIMULATOR_CONFIG, DEFAULT_TELEMETRY_CONFIG
from .simulation import MonteCarloRunner
from .telemetry import configure_telemetry


API_DESCRIPTION = """
The Decision Stability API injects Gaussian noise into the input of a
deterministic threshold rule and reports how often the decision flips.
The service exposes endpoints to:

* run a Monte Carlo stability simulation (`/api/simulate`)
* list the built-in scenarios and the active noise policy (`/api/scenarios`)

Use the OpenAPI schema for complete request/response examples.
"""


telemetry = configure_telemetry(DEFAULT_TELEMETRY_CONFIG)


app = FastAPI(title="Decision Stability API", description=API_DESCRIPTION, version=__version__)
telemetry.instrument_app(app)


origins = os.environ.get("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


configure_services(
    config=DEFAULT_SIMULATOR_CONFIG,
    runner=MonteCarloRunner(config=DEFAULT_SIMULATOR_CONFIG),
    telemetry=telemetry,
)


app.include_router(api_router)


@app.get("/")
def read_root() -> dict[str, str]:
    """Basic health check used by the frontend shell."""

    return {"status": "ok", "version": __version__}


@app.get("/health")
def health() -> dict[str, str]:
    """Alias of :func:`read_root` for compatibility with uptime monitors."""

    return {"status": "ok", "version": __version__}


__all__ = ["app"]
