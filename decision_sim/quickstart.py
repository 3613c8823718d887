"""Command-line helper for running stability simulations locally."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

from .config import DEFAULT_SIMULATOR_CONFIG
from .engine.errors import InvalidRequestError
from .engine.noise import NoisePolicy, default_source
from .engine.rules import BUILTIN_RULES, ComparisonOperator, ScenarioKind
from .simulation import simulate


@dataclass(frozen=True)
class Preset:
    """Describe a ready-made scenario for the quickstart CLI."""

    scenario: ScenarioKind
    value: float
    noise_level: float
    description: str
    custom_rules: Mapping[str, Any] = field(default_factory=dict)


_PRESETS: Dict[str, Preset] = {
    "borderline_patient": Preset(
        scenario=ScenarioKind.MEDICAL,
        value=142.0,
        noise_level=3.0,
        description="Systolic BP of 142 mmHg, just above the 140 mmHg high-risk cutoff.",
    ),
    "loan_cutoff": Preset(
        scenario=ScenarioKind.LOAN,
        value=705.0,
        noise_level=3.0,
        description="Credit score of 705, five points clear of the 700 approval line.",
    ),
    "speeding_ticket": Preset(
        scenario=ScenarioKind.CUSTOM,
        value=62.0,
        noise_level=2.0,
        description="Radar reading of 62 mph against a 60 mph ticket threshold.",
        custom_rules={"threshold": 60, "operator": ">", "trueLabel": "Ticket", "falseLabel": "Safe"},
    ),
}


class QuickstartError(Exception):
    """Raised when the quickstart helper receives invalid input."""


def available_presets() -> Mapping[str, Preset]:
    """Return the preset configurations shipped with the CLI."""

    return dict(_PRESETS)


def run_quickstart(
    scenario: str = "medical",
    value: float | None = None,
    noise_level: float | None = None,
    *,
    custom_rules: Mapping[str, Any] | None = None,
    iterations: int | None = None,
    noise_policy: str | None = None,
    noise_multiplier: float | None = None,
    seed: int | None = None,
) -> Dict[str, Any]:
    """Execute a simulation locally and return the report as a plain mapping."""

    source = default_source(seed) if seed is not None else None
    try:
        report = simulate(
            scenario,
            value,
            noise_level,
            custom_rules,
            iterations=iterations,
            noise_policy=noise_policy,
            noise_multiplier=noise_multiplier,
            source=source,
        )
    except InvalidRequestError as exc:
        raise QuickstartError(exc.message) from exc
    return report.to_dict()


def summarise_quickstart(payload: Mapping[str, Any], *, max_logs: int = 5) -> str:
    """Create a human-readable summary of a stability run."""

    lines = [
        f"Scenario: {payload['scenario']} (threshold {payload['operator']} {payload['threshold']:g})",
        f"Baseline decision: {payload['baseline_decision']} at {payload['baseline_value']:g}",
        f"Noise: level {payload['noise_level']:g}, policy {payload['noise_policy']}, "
        f"std dev {payload['noise_std_dev']:.2f}",
        f"Stability: {payload['stability_percent']:.2f}% over {payload['iterations']} trials",
        "Probabilities:",
    ]
    for label, share in payload["probabilities"].items():
        lines.append(f"  • {label}: {share}")
    lines.append(f"Reflection: {payload['reflection']}")
    lines.append(f"Impact: {payload['impact_statement']}")

    logs = payload.get("sample_logs", [])
    if logs:
        lines.append("\nSample trials:")
        for entry in logs[: max(1, max_logs)]:
            status = "FLIPPED" if entry["is_flip"] else "stable"
            lines.append(f"  #{entry['trial']}: {entry['simulated_value']:.2f} -> {entry['decision']} ({status})")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Measure how often noise flips a threshold decision.")
    parser.add_argument("--preset", choices=sorted(_PRESETS), default=None, help="Start from a built-in scenario")
    parser.add_argument(
        "--scenario",
        choices=[kind.value for kind in ScenarioKind],
        default=None,
        help="Scenario type (defaults to the preset's, otherwise medical)",
    )
    parser.add_argument("--value", type=float, default=None, help="Baseline input value")
    parser.add_argument("--noise", type=float, default=None, help="Noise (uncertainty) level")
    parser.add_argument("--threshold", type=float, default=None, help="Custom rule threshold")
    parser.add_argument(
        "--operator",
        choices=[member.value for member in ComparisonOperator],
        default=None,
        help="Custom rule comparison operator",
    )
    parser.add_argument("--true-label", default=None, help="Custom rule label when the comparison holds")
    parser.add_argument("--false-label", default=None, help="Custom rule label when it does not")
    parser.add_argument("--iterations", type=int, default=None, help="Number of Monte Carlo trials")
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in NoisePolicy],
        default=None,
        help="How the noise level maps to a standard deviation",
    )
    parser.add_argument("--multiplier", type=float, default=None, help="Multiplier for the fixed noise policy")
    parser.add_argument("--seed", type=int, default=None, help="Seed the random stream for a repeatable run")
    parser.add_argument("--logs", type=int, default=5, help="How many sample trials to display in the summary")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON report instead of a summary")
    parser.add_argument("--output", type=Path, default=None, help="Also write the JSON report to this file")
    parser.add_argument("--list-presets", action="store_true", help="List built-in presets and exit")
    parser.add_argument("--list-scenarios", action="store_true", help="List built-in scenario rules and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _custom_rules_from_args(args: argparse.Namespace, base: Mapping[str, Any]) -> Dict[str, Any]:
    rules = dict(base)
    if args.threshold is not None:
        rules["threshold"] = args.threshold
    if args.operator is not None:
        rules["operator"] = args.operator
    if args.true_label is not None:
        rules["trueLabel"] = args.true_label
    if args.false_label is not None:
        rules["falseLabel"] = args.false_label
    return rules


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        lines = ["Available presets:"]
        for name in sorted(_PRESETS):
            lines.append(f"  • {name}: {_PRESETS[name].description}")
        print("\n".join(lines))
        return 0

    if args.list_scenarios:
        lines = ["Built-in scenarios:"]
        for rule in BUILTIN_RULES.values():
            lines.append(
                f"  • {rule.kind.value}: {rule.kind.input_key} {rule.operator.value} {rule.threshold:g} "
                f"-> {rule.true_label} / {rule.false_label}"
            )
        lines.append(
            f"Noise policy: {DEFAULT_SIMULATOR_CONFIG.noise_policy.value} "
            f"(multiplier {DEFAULT_SIMULATOR_CONFIG.noise_multiplier:g})"
        )
        print("\n".join(lines))
        return 0

    preset = _PRESETS[args.preset] if args.preset else None
    scenario = args.scenario or (preset.scenario.value if preset else ScenarioKind.MEDICAL.value)
    value = args.value if args.value is not None else (preset.value if preset else None)
    noise_level = args.noise if args.noise is not None else (preset.noise_level if preset else None)
    custom_rules = None
    if scenario == ScenarioKind.CUSTOM.value:
        custom_rules = _custom_rules_from_args(args, preset.custom_rules if preset else {})

    try:
        payload = run_quickstart(
            scenario,
            value,
            noise_level,
            custom_rules=custom_rules,
            iterations=args.iterations,
            noise_policy=args.policy,
            noise_multiplier=args.multiplier,
            seed=args.seed,
        )
    except QuickstartError as exc:
        parser.error(str(exc))
        return 2

    if args.output is not None:
        args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        print(summarise_quickstart(payload, max_logs=args.logs))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
