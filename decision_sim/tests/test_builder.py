import pytest

from decision_sim.engine.errors import InvalidRequestError
from decision_sim.engine.noise import NoisePolicy
from decision_sim.engine.rules import ScenarioKind
from decision_sim.simulation import build_request, simulate


def test_scenario_defaults_to_medical(simulator_config):
    request = build_request(None, {"systolicBP": 142}, 3.0, config=simulator_config)

    assert request.rule.kind is ScenarioKind.MEDICAL
    assert request.baseline_value == 142.0
    assert request.iterations == simulator_config.iterations
    assert request.noise_policy is NoisePolicy.FIXED
    assert request.std_dev == pytest.approx(6.0)


def test_inputs_may_be_a_bare_number(simulator_config):
    request = build_request("loan", 650, "2.5", config=simulator_config)
    assert request.baseline_value == 650.0
    assert request.noise_level == 2.5


def test_overrides_take_precedence_over_config(simulator_config):
    request = build_request(
        "loan",
        {"creditScore": 720},
        4.0,
        iterations=123,
        noise_policy="relative",
        noise_multiplier=1.5,
        config=simulator_config,
    )
    assert request.iterations == 123
    assert request.noise_policy is NoisePolicy.RELATIVE
    assert request.noise_multiplier == 1.5


@pytest.mark.parametrize(
    ("scenario", "inputs", "noise", "custom", "missing"),
    [
        ("medical", None, 1.0, None, "inputs"),
        ("loan", {"systolicBP": 700}, 1.0, None, "creditScore"),
        ("medical", {"systolicBP": 140}, None, None, "uncertaintyLevel"),
        ("custom", {"customValue": 65}, 1.0, None, "customRules"),
        ("custom", {"customValue": 65}, 1.0, {"threshold": 60, "operator": ">", "trueLabel": "Ticket"}, "falseLabel"),
    ],
)
def test_missing_required_fields(scenario, inputs, noise, custom, missing, simulator_config):
    with pytest.raises(InvalidRequestError) as excinfo:
        build_request(scenario, inputs, noise, custom, config=simulator_config)
    assert missing in excinfo.value.context["missing"]


def test_non_numeric_values_are_rejected(simulator_config):
    with pytest.raises(InvalidRequestError):
        build_request("medical", {"systolicBP": "high"}, 1.0, config=simulator_config)
    with pytest.raises(InvalidRequestError):
        build_request("medical", {"systolicBP": 140}, True, config=simulator_config)
    with pytest.raises(InvalidRequestError):
        build_request("medical", {"systolicBP": float("nan")}, 1.0, config=simulator_config)


def test_simulate_runs_custom_scenario(simulator_config, seeded_source):
    report = simulate(
        "custom",
        {"customValue": 65},
        0,
        {"threshold": 60, "operator": ">", "trueLabel": "Ticket", "falseLabel": "Safe"},
        config=simulator_config,
        source=seeded_source,
    )
    assert report.baseline_decision == "Ticket"
    assert report.probabilities == {"Ticket": "100.0%", "Safe": "0.0%"}


def test_simulate_five_thousand_trials(simulator_config, seeded_source):
    report = simulate("medical", 141, 3, iterations=5000, config=simulator_config, source=seeded_source)
    assert sum(report.distribution.values()) == 5000
    assert report.iterations == 5000
