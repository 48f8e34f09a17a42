from __future__ import annotations

import pytest


def test_create_and_list_recurring_rules(client, demo_user):
    res = client.post(
        "/api/recurring-rules",
        json={
            "label": "  Milk delivery ",
            "default_amount": 3.5,
            "unit": "L",
            "frequency": "weekly",
            "weekday_or_day": 2,
            "auto_create": True,
            "match_heuristics": {"category_label": "Groceries"},
        },
    )
    assert res.status_code == 201, res.json()
    rule = res.json()
    assert rule["label"] == "Milk delivery"
    assert rule["user_id"] == demo_user.id
    assert rule["default_amount"] == pytest.approx(3.5)
    assert rule["active"] is True
    assert rule["last_applied_date"] is None

    client.post("/api/recurring-rules", json={"label": "Rent", "frequency": "monthly", "default_amount": 1200})
    client.post("/api/recurring-rules", json={"label": "Bus pass", "frequency": "monthly"})

    listed = client.get("/api/recurring-rules").json()
    assert [(r["frequency"], r["label"]) for r in listed] == [
        ("monthly", "Bus pass"),
        ("monthly", "Rent"),
        ("weekly", "Milk delivery"),
    ]


@pytest.mark.parametrize(
    "payload",
    [
        {"label": "", "frequency": "weekly"},
        {"label": "   ", "frequency": "weekly"},
        {"label": "Water", "frequency": "hourly"},
        {"label": "Water", "frequency": "weekly", "default_amount": -4},
        {"label": "Water", "frequency": "weekly", "weekday_or_day": 40},
    ],
)
def test_create_recurring_rule_validation(client, payload):
    res = client.post("/api/recurring-rules", json=payload)
    assert res.status_code == 422


def test_rules_do_not_affect_candidate_detection(client):
    rule = client.post("/api/recurring-rules", json={"label": "Groceries", "frequency": "weekly"}).json()
    ids = []
    for day in ("2024-01-01", "2024-01-08"):
        res = client.post(
            "/api/expenses",
            json={"date": f"{day}T10:00:00", "amount": 80, "category_label": "Groceries", "rule_id": rule["id"]},
        )
        ids.append(res.json()["id"])
    body = client.get("/api/expenses/recurring-candidates").json()
    assert set(body["ids"]) == set(ids)
