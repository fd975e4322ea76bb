# tests/test_api.py
"""
HTTP tests for mortgage_calc_web/app.py using the Flask test client.
"""

from __future__ import annotations


def test_calculate_returns_results(client, standard_loan):
    response = client.post("/api/mortgage/calculate", json=standard_loan)

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    results = body["results"]
    assert results["emi"] == 34_713
    assert results["principalAmount"] == 4_000_000
    assert results["loanToValue"] == 80.0
    assert results["downPaymentPercentage"] == 20.0
    assert results["totalInterest"] == results["totalAmount"] - 4_000_000
    assert len(results["amortizationSchedule"]) == 12
    assert results["amortizationSchedule"][0] == {
        "month": 1,
        "emi": 34_713,
        "principal": 6_380,
        "interest": 28_333,
        "balance": 3_993_620,
    }
    assert results["summary"] == {
        "monthlyPayment": 34_713,
        "totalPayments": 240,
        "totalCost": results["totalAmount"],
        "interestPaid": results["totalInterest"],
        "principalPaid": 4_000_000,
    }


def test_calculate_without_property_price_has_null_ratios(client, zero_rate_loan):
    response = client.post("/api/mortgage/calculate", json=zero_rate_loan)

    results = response.get_json()["results"]
    assert results["emi"] == 10_000
    assert results["totalInterest"] == 0
    assert results["loanToValue"] is None
    assert results["downPaymentPercentage"] is None


def test_calculate_lists_every_invalid_field(client):
    response = client.post(
        "/api/mortgage/calculate", json={"loanAmount": 0, "interestRate": -1, "loanTenure": 0}
    )

    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert [e["field"] for e in errors] == ["loanAmount", "interestRate", "loanTenure"]
    assert all(e["message"] for e in errors)


def test_calculate_with_non_json_body_reports_missing_fields(client):
    response = client.post("/api/mortgage/calculate", data="loanAmount=5", content_type="text/plain")

    assert response.status_code == 400
    assert {e["field"] for e in response.get_json()["errors"]} == {"loanAmount", "interestRate", "loanTenure"}


def test_calculate_rejects_tenure_beyond_the_maximum(client):
    for tenure in (1e30, 100_000_000):
        response = client.post(
            "/api/mortgage/calculate", json={"loanAmount": 100_000, "interestRate": 5, "loanTenure": tenure}
        )

        assert response.status_code == 400
        assert response.get_json()["errors"] == [
            {"field": "loanTenure", "message": "Loan tenure must not exceed 50 years"}
        ]


def test_calculate_with_negligible_rate_matches_zero_rate(client):
    response = client.post(
        "/api/mortgage/calculate", json={"loanAmount": 100_000, "interestRate": 1e-27, "loanTenure": 20}
    )

    assert response.status_code == 200
    results = response.get_json()["results"]
    assert results["emi"] == 417
    assert results["totalInterest"] == 0


def test_compare_rejects_scenario_with_huge_tenure(client):
    response = client.post(
        "/api/mortgage/compare",
        json={"scenarios": [{"loanAmount": 100_000, "interestRate": 5, "loanTenure": 1e30}]},
    )

    assert response.status_code == 400
    assert response.get_json()["errors"][0]["field"] == "scenarios[0].loanTenure"


def test_compare_returns_scenarios_in_order(client):
    response = client.post(
        "/api/mortgage/compare",
        json={
            "scenarios": [
                {"name": "Bank A", "loanAmount": 4_000_000, "interestRate": 8.5, "loanTenure": 20},
                {"loanAmount": 1_200_000, "interestRate": 0, "loanTenure": 10},
            ]
        },
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    first, second = body["comparisons"]
    assert first["scenarioId"] == 1
    assert first["name"] == "Bank A"
    assert first["emi"] == 34_713
    assert first["interestRate"] == 8.5
    assert first["tenure"] == 20
    assert second == {
        "scenarioId": 2,
        "name": "Scenario 2",
        "emi": 10_000,
        "totalInterest": 0,
        "totalAmount": 1_200_000,
        "interestRate": 0,
        "tenure": 10,
    }


def test_compare_requires_scenarios_list(client):
    for body in ({}, {"scenarios": "nope"}):
        response = client.post("/api/mortgage/compare", json=body)

        assert response.status_code == 400
        assert response.get_json() == {"success": False, "message": "Scenarios array is required"}


def test_compare_rejects_batch_with_invalid_scenario(client):
    response = client.post(
        "/api/mortgage/compare",
        json={
            "scenarios": [
                {"loanAmount": 4_000_000, "interestRate": 8.5, "loanTenure": 20},
                {"loanAmount": 4_000_000, "interestRate": 8.5},
            ]
        },
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body["success"] is False
    assert body["errors"] == [{"field": "scenarios[1].loanTenure", "message": "Loan tenure is required"}]


def test_saved_scenarios_round_trip(client, standard_loan):
    assert client.get("/api/mortgage/scenarios").get_json()["scenarios"] == []

    created = client.post("/api/mortgage/scenarios", json={**standard_loan, "name": "Flat in town"})
    assert created.status_code == 201
    saved = created.get_json()["scenario"]
    assert saved["name"] == "Flat in town"
    assert saved["request"]["loanAmount"] == 4_000_000
    assert saved["results"]["emi"] == 34_713

    listed = client.get("/api/mortgage/scenarios").get_json()["scenarios"]
    assert [s["id"] for s in listed] == [saved["id"]]

    assert client.delete(f"/api/mortgage/scenarios/{saved['id']}").status_code == 200
    assert client.delete(f"/api/mortgage/scenarios/{saved['id']}").status_code == 404
    assert client.get("/api/mortgage/scenarios").get_json()["scenarios"] == []


def test_saved_scenarios_are_private_to_each_browser(app, client, zero_rate_loan):
    client.post("/api/mortgage/scenarios", json=zero_rate_loan)
    other = app.test_client()

    assert other.get("/api/mortgage/scenarios").get_json()["scenarios"] == []
    assert len(client.get("/api/mortgage/scenarios").get_json()["scenarios"]) == 1


def test_saved_scenario_can_be_fetched_by_id(app, client, standard_loan):
    saved = client.post("/api/mortgage/scenarios", json={**standard_loan, "name": "Flat in town"}).get_json()[
        "scenario"
    ]

    response = client.get(f"/api/mortgage/scenarios/{saved['id']}")

    assert response.status_code == 200
    assert response.get_json() == {"success": True, "scenario": saved}
    assert app.test_client().get(f"/api/mortgage/scenarios/{saved['id']}").status_code == 404


def test_fetching_unknown_saved_scenario_returns_404(client):
    response = client.get("/api/mortgage/scenarios/missing")

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "Scenario not found"}


def test_saving_invalid_scenario_is_rejected(client):
    response = client.post("/api/mortgage/scenarios", json={"loanAmount": -1, "interestRate": 5, "loanTenure": 5})

    assert response.status_code == 400
    assert response.get_json()["errors"][0]["field"] == "loanAmount"
    assert client.get("/api/mortgage/scenarios").get_json()["scenarios"] == []


def test_clear_saved_scenarios(client, zero_rate_loan):
    client.post("/api/mortgage/scenarios", json=zero_rate_loan)
    client.post("/api/mortgage/scenarios", json=zero_rate_loan)

    response = client.delete("/api/mortgage/scenarios")

    assert response.get_json() == {"success": True, "removed": 2}
    assert client.get("/api/mortgage/scenarios").get_json()["scenarios"] == []


def test_health(client):
    body = client.get("/api/health").get_json()

    assert body["status"] == "ok"
    assert body["timestamp"]


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.get_json() == {"message": "Route not found"}


def test_wrong_method_returns_json_error(client):
    response = client.get("/api/mortgage/calculate")

    assert response.status_code == 405
    assert "message" in response.get_json()
