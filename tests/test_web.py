# tests/test_web.py
import pytest

from emi_calc_web.app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_healthz(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}


def test_defaults(client):
    data = client.get("/api/defaults").get_json()
    assert data["loan_amount"] == 2_500_000
    assert data["tenure_unit"] == "years"
    assert data["limits"]["tenure_months"] == {"min": 1, "max": 360}
    assert data["max_comparison_options"] == 4


def test_emi_json(client):
    resp = client.post("/api/emi", json={"principal": 2500000, "rate": 8.5, "tenure": 20, "tenure_unit": "years"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["emi"] == pytest.approx(21695.58)
    assert data["total_interest"] == pytest.approx(2706939.20)


def test_emi_form_data(client):
    resp = client.post("/api/emi", data={"principal": "25l", "rate": "8.5", "tenure": "240"})
    assert resp.status_code == 200
    assert resp.get_json()["tenure_months"] == 240


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"principal": 0, "rate": 8.5, "tenure": 240}, "Principal"),
        ({"principal": 2500000, "rate": -1, "tenure": 240}, "negative"),
        ({"principal": 2500000, "rate": 8.5}, "Missing field: tenure"),
        ({"principal": 2500000, "rate": 8.5, "tenure": "ten"}, "ten"),
    ],
)
def test_emi_rejects_bad_input(client, payload, message):
    resp = client.post("/api/emi", json=payload)
    assert resp.status_code == 400
    assert message in resp.get_json()["error"]


def test_prepayment(client):
    resp = client.post(
        "/api/prepayment",
        json={"principal": 2500000, "rate": 8.5, "tenure": 240, "strategy": "monthly", "amount": 5000},
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["result"]["emi"] == pytest.approx(21695.58)
    assert data["prepayment"]["months_to_payoff"] == 155
    assert data["prepayment"]["status"] == "paid_off"
    assert "schedule" not in data["prepayment"]


def test_prepayment_yearly_with_schedule(client):
    resp = client.post(
        "/api/prepayment",
        json={
            "principal": 2500000,
            "rate": 8.5,
            "tenure": 240,
            "strategy": "yearly",
            "amount": 5000,
            "include_schedule": True,
        },
    )
    data = resp.get_json()["prepayment"]
    assert data["amount"] == 60000
    assert len(data["schedule"]) == data["months_to_payoff"] == 157


def test_prepayment_unknown_strategy(client):
    resp = client.post(
        "/api/prepayment",
        json={"principal": 2500000, "rate": 8.5, "tenure": 240, "strategy": "weekly", "amount": 5000},
    )
    assert resp.status_code == 400
    assert "strategy" in resp.get_json()["error"]


def test_compare(client):
    resp = client.post(
        "/api/compare",
        json={
            "options": [
                {"name": "Option A", "principal": 2500000, "rate": 8.5, "tenure": 20, "tenure_unit": "years"},
                {"principal": 2500000, "rate": 9, "tenure": 15, "tenure_unit": "years"},
            ]
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()
    a, b = data["options"]
    assert b["name"] == "Option B"
    assert a["lowest_emi"] and not b["lowest_emi"]
    assert b["lowest_total"] and not a["lowest_total"]
    assert data["lowest_interest"] == pytest.approx(2064198.80)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"options": []},
        {"options": ["A"]},
        {"options": [{"principal": 1, "rate": 1, "tenure": 1}] * 5},
    ],
)
def test_compare_rejects_bad_input(client, payload):
    assert client.post("/api/compare", json=payload).status_code == 400


def test_emi_rejects_numeric_tenure_unit(client):
    resp = client.post("/api/emi", json={"principal": 2500000, "rate": 8.5, "tenure": 20, "tenure_unit": 5})
    assert resp.status_code == 400
    assert "Tenure unit" in resp.get_json()["error"]


def test_compare_requires_a_json_body(client):
    resp = client.post("/api/compare", data={"principal": "2500000", "rate": "8.5", "tenure": "240"})
    assert resp.status_code == 400
    assert "JSON" in resp.get_json()["error"]


def test_main_falls_back_to_warning_on_unknown_log_level(monkeypatch):
    from emi_calc_web import app as web

    levels = []

    def fake_configure_logging(level=None):
        levels.append(level)
        if level is None:
            raise ValueError("Unknown log level: CHATTY")
        return level

    monkeypatch.setattr(web, "configure_logging", fake_configure_logging)
    monkeypatch.setattr(web.app, "run", lambda **kwargs: None)
    web.main()
    assert levels == [None, "WARNING"]
