# Test type: API integration
# Validation: endpoint contracts for portfolio, animal, caretaker, report (monthly, expenses, health), sale and performance APIs
# Command: pytest -q

from fastapi.testclient import TestClient

from conftest import scenario_payload
from herdbook.main import app


client = TestClient(app)


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_portfolio_summary_endpoint():
    response = client.post("/herdbook/v1/portfolio:summary", json=scenario_payload())
    assert response.status_code == 200
    payload = response.json()
    assert payload["totalInvestment"] == 20000.0
    assert payload["totalRevenue"] == 18000.0
    assert payload["totalExpenses"] == 3500.0
    assert payload["netProfit"] == -5500.0
    assert payload["profitMargin"] == -30.56
    assert payload["roi"] == -27.5
    assert payload["averageProfitPerSale"] == 5500.0
    assert payload["caretakerPayout"] == 1100.0
    assert payload["ownerEarnings"] == -6600.0
    assert payload["herd"] == {
        "total": 3,
        "active": 2,
        "sold": 1,
        "deceased": 0,
        "caretakers": 2,
    }


def test_portfolio_summary_with_range():
    body = scenario_payload()
    body.update({"start": "2024-06-01", "end": "2024-06-30"})

    response = client.post("/herdbook/v1/portfolio:summary", json=body)
    assert response.status_code == 200
    payload = response.json()
    assert payload["totalInvestment"] == 0.0
    assert payload["totalRevenue"] == 18000.0
    assert payload["roi"] == 0.0


def test_empty_portfolio_summary():
    response = client.post("/herdbook/v1/portfolio:summary", json={})
    assert response.status_code == 200
    payload = response.json()
    assert payload["netProfit"] == 0.0
    assert payload["profitMargin"] == 0.0
    assert payload["roi"] == 0.0


def test_combined_portfolio_endpoint():
    response = client.post(
        "/herdbook/v1/portfolio:combine",
        json={"businesses": [scenario_payload(), scenario_payload("monthly", 300)]},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["totalInvestment"] == 40000.0
    assert payload["ownerEarnings"] == -12100.0
    assert payload["herd"]["total"] == 6


def test_animal_profit_endpoint():
    response = client.post("/herdbook/v1/animals/A:profit", json=scenario_payload())
    assert response.status_code == 200
    assert response.json() == {
        "animalId": "A",
        "status": "Sold",
        "salePrice": 18000.0,
        "purchasePrice": 10000.0,
        "costs": {"specific": 1000.0, "sharedShare": 1000.0, "health": 500.0, "total": 2500.0},
        "profit": 5500.0,
        "returnPct": 55.0,
    }


def test_animal_profit_unknown_animal_is_404():
    response = client.post("/herdbook/v1/animals/nope:profit", json=scenario_payload())
    assert response.status_code == 404


def test_sold_animal_without_price_is_409():
    body = scenario_payload()
    del body["animals"][0]["salePrice"]

    response = client.post("/herdbook/v1/portfolio:summary", json=body)
    assert response.status_code == 409
    assert "no sale price" in response.json()["detail"]


def test_unknown_payment_model_is_400():
    response = client.post(
        "/herdbook/v1/caretakers:roster", json=scenario_payload("weekly", 5)
    )
    assert response.status_code == 400
    assert "Unknown payment model" in response.json()["detail"]


def test_caretaker_earnings_endpoint():
    response = client.post("/herdbook/v1/caretakers/C:earnings", json=scenario_payload())
    assert response.status_code == 200
    assert response.json() == {
        "caretakerId": "C",
        "name": "Chidi",
        "paymentModel": "percentage",
        "goatsAssigned": 2,
        "goatsActive": 1,
        "goatsManaged": 1,
        "earnings": 1100.0,
        "averageEarningsPerSale": 1100.0,
    }


def test_caretaker_roster_endpoint():
    response = client.post(
        "/herdbook/v1/caretakers:roster", json=scenario_payload("fixed_per_sale", 750)
    )
    assert response.status_code == 200
    payload = response.json()
    assert [entry["earnings"] for entry in payload["caretakers"]] == [750.0, 0.0]
    assert payload["totalEarnings"] == 750.0


def test_monthly_report_endpoint():
    body = scenario_payload()
    body["referenceDate"] = "2024-07-10"

    response = client.post("/herdbook/v1/reports:monthly", json=body)
    assert response.status_code == 200
    months = response.json()["months"]
    assert len(months) == 12
    assert months[0]["label"] == "Aug"
    assert months[0]["periodStart"] == "2023-08-01"
    assert months[-1]["label"] == "Jul"
    assert months[-1]["periodEnd"] == "2024-07-31"
    assert months[-1]["cumulativeProfit"] == -5500.0
    assert months[10]["revenue"] == 18000.0


def test_monthly_report_rejects_bad_dates_and_windows():
    body = scenario_payload()
    body["referenceDate"] = "July 2024"
    assert client.post("/herdbook/v1/reports:monthly", json=body).status_code == 400

    body["referenceDate"] = "2024-07-10"
    body["windowMonths"] = 13
    assert client.post("/herdbook/v1/reports:monthly", json=body).status_code == 422


def test_expense_report_endpoint():
    response = client.post("/herdbook/v1/reports:expenses", json=scenario_payload())
    assert response.status_code == 200
    assert response.json() == {
        "categories": [
            {"category": "Feed", "amount": 1000.0},
            {"category": "Transport", "amount": 2000.0},
        ],
        "total": 3000.0,
    }


def test_health_report_endpoint():
    response = client.post("/herdbook/v1/reports:health", json=scenario_payload())
    assert response.status_code == 200
    assert response.json() == {
        "types": [{"type": "Vaccination", "records": 1, "cost": 500.0}],
        "totalRecords": 1,
        "totalHealthCosts": 500.0,
    }


def test_health_report_endpoint_with_range():
    body = scenario_payload()
    body.update({"start": "2024-05-01", "end": "2024-12-31"})

    response = client.post("/herdbook/v1/reports:health", json=body)
    assert response.status_code == 200
    assert response.json() == {"types": [], "totalRecords": 0, "totalHealthCosts": 0.0}


def test_sale_quote_endpoint():
    body = scenario_payload()
    body["salePrice"] = 9000

    response = client.post("/herdbook/v1/animals/D:quote", json=body)
    assert response.status_code == 200
    payload = response.json()
    assert payload["netProfit"] == 3000.0
    assert payload["caretakerShare"] == 600.0
    assert payload["ownerShare"] == 2400.0


def test_sell_endpoint_returns_sold_animal():
    body = scenario_payload()
    body["animals"][1]["tagNumber"] = "GT-002"
    body.update({"salePrice": 7000, "saleDate": "2024-09-01"})

    response = client.post("/herdbook/v1/animals/B:sell", json=body)
    assert response.status_code == 200
    payload = response.json()
    assert payload["animal"]["status"] == "Sold"
    assert payload["animal"]["salePrice"] == 7000.0
    assert payload["animal"]["saleDate"] == "2024-09-01"
    assert payload["animal"]["tagNumber"] == "GT-002"
    assert payload["quote"]["netProfit"] == 1000.0


def test_sell_endpoint_rejects_sold_animal():
    body = scenario_payload()
    body.update({"salePrice": 7000, "saleDate": "2024-09-01"})

    response = client.post("/herdbook/v1/animals/A:sell", json=body)
    assert response.status_code == 409


def test_suggest_price_endpoint():
    body = scenario_payload()
    body["asOf"] = "2024-08-01"

    response = client.post("/herdbook/v1/animals/D:suggest-price", json=body)
    assert response.status_code == 200
    assert response.json() == {"animalId": "D", "suggestedPrice": 5500.0}


def test_performance_endpoint():
    client.get("/health")
    response = client.get("/herdbook/v1/performance")
    assert response.status_code == 200
    payload = response.json()
    assert payload["time"].endswith(" ms")
    assert payload["memory"].endswith(" MB")
    assert payload["threads"] >= 1
