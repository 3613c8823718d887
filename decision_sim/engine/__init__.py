"""
decision_sim.engine
===================

Core primitives for the decision stability simulator.  The package keeps the
two pure building blocks of a Monte Carlo run apart from the orchestration
layer in :mod:`decision_sim.simulation`:

``rules``
    Scenario rules (medical, loan, custom) and the evaluator that maps a
    single input value to a binary decision label.  Scenario dispatch goes
    through :class:`~decision_sim.engine.rules.ScenarioKind` rather than
    string comparisons at each call site.

``noise``
    A Box-Muller Gaussian sampler built on an injectable uniform source so
    tests can replace the default numpy generator with a seeded stream.

Neither module holds mutable state between calls; both are safe to share
across requests.
"""

from .errors import InvalidRequestError, SimulationError
from .noise import GaussianNoise, NoisePolicy, UniformSource, default_source
from .rules import (
    BUILTIN_RULES,
    ComparisonOperator,
    Evaluation,
    LOAN_RULE,
    MEDICAL_RULE,
    ScenarioKind,
    ScenarioRule,
    custom_rule,
    evaluate,
    resolve_rule,
)

__all__ = [
    "BUILTIN_RULES",
    "ComparisonOperator",
    "Evaluation",
    "GaussianNoise",
    "InvalidRequestError",
    "LOAN_RULE",
    "MEDICAL_RULE",
    "NoisePolicy",
    "ScenarioKind",
    "ScenarioRule",
    "SimulationError",
    "UniformSource",
    "custom_rule",
    "default_source",
    "evaluate",
    "resolve_rule",
]
