import pytest

from decision_sim.simulation import impact_statement, reflection_for


@pytest.mark.parametrize(
    ("stability", "expected"),
    [
        (100.0, "robust"),
        (95.01, "robust"),
        (95.0, "creeping"),
        (70.01, "creeping"),
        (70.0, "Entropy"),
        (12.0, "Entropy"),
    ],
)
def test_reflection_bands(stability, expected):
    assert expected in reflection_for(stability)


def test_impact_statement_tiers():
    assert impact_statement(100.0).startswith("No drop")
    assert impact_statement(90.0).startswith("Moderate impact")
    assert "10.0 percentage points" in impact_statement(90.0)
    assert impact_statement(80.0).startswith("Critical impact")
    assert impact_statement(85.0, critical_drop=10.0).startswith("Critical impact")
