"""Decision Stability Simulator: Monte Carlo flip analysis for threshold rules."""

__version__ = "2025.10.18"
