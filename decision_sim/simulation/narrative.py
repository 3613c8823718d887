"""Narrative text derived from a stability score."""

from __future__ import annotations

ROBUST_CUTOFF = 95.0
MODERATE_CUTOFF = 70.0

ROBUST_REFLECTION = "The system is robust. Chaos has little effect here."
MODERATE_REFLECTION = "Uncertainty is creeping in. The edge cases are dangerous."
ENTROPY_REFLECTION = "Entropy dominates. The decision is no longer deterministic."


def reflection_for(stability_percent: float) -> str:
    """Map a stability score onto one of three fixed bands.

    ``> 95`` is robust, ``(70, 95]`` is moderate instability and anything at
    or below 70 is treated as maximum entropy.
    """

    if stability_percent > ROBUST_CUTOFF:
        return ROBUST_REFLECTION
    if stability_percent > MODERATE_CUTOFF:
        return MODERATE_REFLECTION
    return ENTROPY_REFLECTION


def impact_statement(stability_percent: float, critical_drop: float = 20.0) -> str:
    """Describe the drop from the ideal, noise-free outcome."""

    drop = max(0.0, 100.0 - stability_percent)
    if drop == 0.0:
        return "No drop from the ideal outcome: every noisy trial matched the baseline decision."
    if drop < critical_drop:
        return (
            f"Moderate impact: noise lowered reliability by {drop:.1f} percentage points "
            "from the ideal 100%."
        )
    return (
        f"Critical impact: noise lowered reliability by {drop:.1f} percentage points "
        f"from the ideal 100%, beyond the {critical_drop:.0f}-point tolerance."
    )


__all__ = ["impact_statement", "reflection_for"]
