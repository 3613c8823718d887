"""End-to-end smoke test that exercises the public API routes."""

from __future__ import annotations

from pathlib import Path
import sys

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from decision_sim.main import app


def _simulate_payloads() -> list[dict[str, object]]:
    return [
        {"scenarioType": "medical", "inputs": {"systolicBP": 142}, "uncertaintyLevel": 3},
        {"scenarioType": "loan", "inputs": {"creditScore": 700}, "uncertaintyLevel": 5},
        {
            "scenarioType": "custom",
            "inputs": {"customValue": 62},
            "uncertaintyLevel": 2,
            "customRules": {"threshold": 60, "operator": ">", "trueLabel": "Ticket", "falseLabel": "Safe"},
        },
    ]


def main() -> None:
    with TestClient(app) as client:
        health = client.get("/health")
        health.raise_for_status()

        catalog = client.get("/api/scenarios")
        catalog.raise_for_status()
        assert catalog.json()["scenarios"], "Scenario catalogue is empty"

        for payload in _simulate_payloads():
            simulation = client.post("/api/simulate", json=payload)
            simulation.raise_for_status()
            data = simulation.json()
            assert data["baselineDecision"], "Simulation returned no baseline decision"
            assert sum(data["distribution"].values()) == data["iterations"], "Histogram does not cover every trial"
            assert len(data["probabilities"]) == 2, "Probabilities must hold exactly two labels"
            print(f"{payload['scenarioType']}: {data['baselineDecision']} stability={data['stability']}")

        rejected = client.post(
            "/api/simulate",
            json={"scenarioType": "custom", "inputs": {"customValue": 1}, "uncertaintyLevel": 1},
        )
        assert rejected.status_code == 400, "Custom scenario without rules should be rejected"


if __name__ == "__main__":
    main()
