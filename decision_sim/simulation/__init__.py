"""Monte Carlo stability simulation.

The :mod:`decision_sim.simulation` package wires the pure primitives from
:mod:`decision_sim.engine` into a full run: baseline evaluation, repeated
noisy re-evaluation and the reduction into a :class:`SimulationReport`.
:func:`simulate` is the single entry point used by the HTTP layer and the CLI.
"""

from .builder import build_request, simulate
from .models import SimulationReport, SimulationRequest, TrialOutcome
from .narrative import impact_statement, reflection_for
from .runner import MonteCarloRunner

__all__ = [
    "MonteCarloRunner",
    "SimulationReport",
    "SimulationRequest",
    "TrialOutcome",
    "build_request",
    "impact_statement",
    "reflection_for",
    "simulate",
]
