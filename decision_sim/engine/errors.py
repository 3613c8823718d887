"""Exception types shared by the rule evaluator and the Monte Carlo runner."""

from __future__ import annotations


class SimulationError(Exception):
    """Raised when the simulator cannot evaluate a payload."""


class InvalidRequestError(SimulationError, ValueError):
    """Raised when a simulation request is missing fields or out of domain.

    ``context`` carries the offending field names so the API layer can echo
    them back in its error envelope.
    """

    def __init__(self, message: str, *, context: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


__all__ = ["InvalidRequestError", "SimulationError"]
