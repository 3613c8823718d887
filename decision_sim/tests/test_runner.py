import random

import pytest

from decision_sim.config import SimulatorConfig
from decision_sim.engine.errors import InvalidRequestError
from decision_sim.engine.noise import NoisePolicy
from decision_sim.engine.rules import LOAN_RULE, MEDICAL_RULE, custom_rule
from decision_sim.simulation import MonteCarloRunner, SimulationRequest


def _run(config, source, **kwargs):
    return MonteCarloRunner(config=config, source=source).run(SimulationRequest(**kwargs))


def test_medical_borderline_without_noise_is_fully_stable(simulator_config, seeded_source):
    report = _run(simulator_config, seeded_source, rule=MEDICAL_RULE, baseline_value=142.0, noise_level=0.0, iterations=500)

    assert report.baseline_decision == "High Risk"
    assert report.stability_percent == 100.0
    assert report.flip_percent == 0.0
    assert report.flip_count == 0
    assert report.distribution == {142: 500}
    assert report.value_summary["min"] == report.value_summary["max"] == 142.0
    assert report.probabilities == {"High Risk": "100.0%", "Healthy": "0.0%"}
    assert all(not entry.is_flip for entry in report.sample_logs)
    assert all(entry.simulated_value == 142.0 for entry in report.sample_logs)
    assert report.impact_statement.startswith("No drop")


def test_loan_below_cutoff_is_rejected(simulator_config, seeded_source):
    report = _run(simulator_config, seeded_source, rule=LOAN_RULE, baseline_value=650.0, noise_level=0.0, iterations=100)

    assert report.baseline_decision == "Rejected"
    assert set(report.probabilities) == {"Rejected", "Approved"}


def test_custom_ticket_scenario(simulator_config, seeded_source):
    rule = custom_rule(60, ">", "Ticket", "Safe")
    report = _run(simulator_config, seeded_source, rule=rule, baseline_value=65.0, noise_level=0.0, iterations=100)

    assert report.baseline_decision == "Ticket"
    assert report.stability_percent == 100.0
    assert report.threshold == 60.0
    assert report.operator == ">"


def test_high_noise_near_threshold_flips(simulator_config, seeded_source):
    report = _run(
        simulator_config,
        seeded_source,
        rule=MEDICAL_RULE,
        baseline_value=140.5,
        noise_level=10.0,
        iterations=5000,
        noise_policy=NoisePolicy.FIXED,
        noise_multiplier=2.0,
    )

    assert 0.0 < report.stability_percent < 100.0
    assert report.noise_std_dev == pytest.approx(20.0)
    assert report.stability_percent + report.flip_percent == pytest.approx(100.0)
    assert sum(report.distribution.values()) == 5000
    assert list(report.distribution) == sorted(report.distribution)
    assert report.reflection == "Entropy dominates. The decision is no longer deterministic."
    assert report.impact_statement.startswith("Critical impact")


def test_probabilities_match_counts(simulator_config, seeded_source):
    report = _run(simulator_config, seeded_source, rule=LOAN_RULE, baseline_value=705.0, noise_level=3.0, iterations=1000)

    assert set(report.probabilities) == {report.baseline_decision, LOAN_RULE.opposite(report.baseline_decision)}
    expected_flip = report.flip_count / 1000 * 100
    assert report.flip_percent == pytest.approx(expected_flip)
    assert report.probabilities["Rejected"] == f"{expected_flip:.1f}%"


def test_sample_logs_put_flips_first(simulator_config, seeded_source):
    report = _run(simulator_config, seeded_source, rule=MEDICAL_RULE, baseline_value=141.0, noise_level=2.0, iterations=2000)

    logs = report.sample_logs
    assert 0 < len(logs) <= simulator_config.log_cap
    flags = [entry.is_flip for entry in logs]
    assert flags == sorted(flags, reverse=True)
    flipped = [entry for entry in logs if entry.is_flip]
    stable = [entry for entry in logs if not entry.is_flip]
    assert [entry.trial for entry in flipped] == sorted(entry.trial for entry in flipped)
    assert len(stable) <= simulator_config.stable_log_sample
    if report.flip_count >= simulator_config.log_cap:
        assert len(flipped) == simulator_config.log_cap
    assert all(entry.decision == "Healthy" for entry in flipped)


def test_sample_logs_backfill_with_stable_trials(seeded_source):
    config = SimulatorConfig(iterations=100, log_cap=4, stable_log_sample=3)
    report = _run(config, seeded_source, rule=MEDICAL_RULE, baseline_value=200.0, noise_level=1.0, iterations=100)

    assert report.flip_count == 0
    assert [entry.trial for entry in report.sample_logs] == [1, 2, 3]


def test_relative_policy_scales_with_baseline(simulator_config, seeded_source):
    report = _run(
        simulator_config,
        seeded_source,
        rule=LOAN_RULE,
        baseline_value=700.0,
        noise_level=5.0,
        iterations=200,
        noise_policy=NoisePolicy.RELATIVE,
    )

    assert report.noise_policy == "relative"
    assert report.noise_std_dev == pytest.approx(35.0)


def test_runs_without_injected_source(simulator_config):
    report = MonteCarloRunner(config=simulator_config).run(
        SimulationRequest(rule=MEDICAL_RULE, baseline_value=150.0, noise_level=1.0, iterations=300)
    )
    assert sum(report.distribution.values()) == 300


def test_seeded_runs_repeat():
    config = SimulatorConfig(iterations=500)
    request = SimulationRequest(rule=MEDICAL_RULE, baseline_value=141.0, noise_level=3.0, iterations=500)
    first = MonteCarloRunner(config=config, source=random.Random(5)).run(request)
    second = MonteCarloRunner(config=config, source=random.Random(5)).run(request)
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize(
    "overrides",
    [
        {"iterations": 0},
        {"iterations": -5},
        {"baseline_value": float("nan")},
        {"baseline_value": float("inf")},
        {"noise_level": float("inf")},
        {"noise_level": -1.0},
        {"noise_multiplier": float("nan")},
    ],
)
def test_invalid_requests_fail_fast(overrides):
    payload = {"rule": MEDICAL_RULE, "baseline_value": 140.0, "noise_level": 1.0, "iterations": 10}
    payload.update(overrides)
    with pytest.raises(InvalidRequestError):
        SimulationRequest(**payload)


def test_report_serialises_to_plain_mapping(simulator_config, seeded_source):
    report = _run(simulator_config, seeded_source, rule=MEDICAL_RULE, baseline_value=139.0, noise_level=1.0, iterations=50)
    payload = report.to_dict()

    assert payload["scenario"] == "medical"
    assert sum(payload["distribution"].values()) == 50
    assert all(isinstance(key, str) for key in payload["distribution"])
    assert set(payload["sample_logs"][0]) == {"trial", "simulated_value", "decision", "is_flip"}


@pytest.mark.parametrize(
    ("baseline", "bucket"),
    [(142.5, 143), (141.5, 142), (-2.5, -2), (-3.5, -3), (139.49, 139)],
)
def test_histogram_rounds_half_values_up(simulator_config, seeded_source, baseline, bucket):
    report = _run(simulator_config, seeded_source, rule=MEDICAL_RULE, baseline_value=baseline, noise_level=0.0, iterations=10)

    assert report.distribution == {bucket: 10}
