from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from spendtrack import models
from spendtrack.core.deps import get_current_user
from spendtrack.main import app


def _post_expense(client, **overrides):
    payload = {
        "date": "2024-01-01T09:00:00",
        "amount": 100,
        "category_label": "Groceries",
    }
    payload.update(overrides)
    res = client.post("/api/expenses", json=payload)
    assert res.status_code == 201, res.json()
    return res.json()


def _seed_weekly(db_session, user_id: int, start: datetime, amounts, category="Groceries"):
    rows = []
    for i, amount in enumerate(amounts):
        exp = models.Expense(
            user_id=user_id,
            date=start + timedelta(days=7 * i),
            amount=Decimal(str(amount)),
            category_label=category,
        )
        db_session.add(exp)
        rows.append(exp)
    db_session.commit()
    return [r.id for r in rows]


def test_create_and_list_expenses(client, demo_user):
    first = _post_expense(client, note="  weekly shop  ")
    assert first["user_id"] == demo_user.id
    assert first["note"] == "weekly shop"
    assert first["language_tag"] == "en"
    assert isinstance(first["id"], str) and first["id"]

    _post_expense(client, date="2024-01-05T18:00:00", amount=42.5, category_label="Dining")

    res = client.get("/api/expenses")
    assert res.status_code == 200
    body = res.json()
    assert [item["category_label"] for item in body["items"]] == ["Dining", "Groceries"]
    assert body["totals"]["spent"] == pytest.approx(142.5)


def test_create_expense_defaults_and_items(client):
    res = client.post(
        "/api/expenses",
        json={
            "amount": 30,
            "category": "Pharmacy",
            "items": [{"name": "Vitamins", "quantity": 2, "unit": "box", "amount": 30}],
        },
    )
    assert res.status_code == 201, res.json()
    created = res.json()
    assert created["category_label"] == "Pharmacy"
    assert created["items"] == [{"name": "Vitamins", "quantity": 2.0, "unit": "box", "amount": 30.0}]
    assert created["date"] is not None


def test_create_expense_normalizes_aware_date(client):
    created = _post_expense(client, date="2024-03-01T09:00:00+09:00")
    assert created["date"].startswith("2024-03-01T00:00:00")


@pytest.mark.parametrize("amount", [-1, "abc"])
def test_create_expense_rejects_bad_amount(client, amount):
    res = client.post("/api/expenses", json={"amount": amount})
    assert res.status_code == 422


def test_create_expense_with_unknown_rule(client):
    res = client.post("/api/expenses", json={"amount": 10, "rule_id": "missing"})
    assert res.status_code == 404


def test_list_filters_by_window_kind_and_query(client):
    rule = client.post("/api/recurring-rules", json={"label": "Gym", "frequency": "monthly"}).json()
    _post_expense(client, date="2024-01-02T08:00:00", amount=30, category_label="Fitness", rule_id=rule["id"])
    _post_expense(client, date="2024-01-10T08:00:00", amount=12, category_label="Coffee", note="Oat latte")
    _post_expense(client, date="2024-02-01T08:00:00", amount=55, category_label="Groceries")

    january = client.get("/api/expenses", params={"start": "2024-01-01", "end": "2024-01-31"}).json()
    assert {i["category_label"] for i in january["items"]} == {"Fitness", "Coffee"}
    assert january["totals"]["spent"] == pytest.approx(42)

    linked = client.get("/api/expenses", params={"kind": "recurring"}).json()
    assert [i["category_label"] for i in linked["items"]] == ["Fitness"]

    unlinked = client.get("/api/expenses", params={"kind": "new"}).json()
    assert {i["category_label"] for i in unlinked["items"]} == {"Coffee", "Groceries"}

    searched = client.get("/api/expenses", params={"q": "LATTE"}).json()
    assert [i["category_label"] for i in searched["items"]] == ["Coffee"]

    bad_kind = client.get("/api/expenses", params={"kind": "sometimes"})
    assert bad_kind.status_code == 422


def test_delete_expense(client):
    created = _post_expense(client)
    res = client.delete(f"/api/expenses/{created['id']}")
    assert res.status_code == 204
    assert client.get("/api/expenses").json()["items"] == []

    again = client.delete(f"/api/expenses/{created['id']}")
    assert again.status_code == 404


def test_recurring_candidates_default_window(client, db_session, demo_user):
    weekly = _seed_weekly(db_session, demo_user.id, datetime(2024, 1, 1, 9), [100, 105, 98])
    _seed_weekly(db_session, demo_user.id, datetime(2024, 1, 3, 9), [40], category="Dining")
    monthly = [
        _post_expense(client, date="2024-01-01T00:00:00", amount=1200, category_label="Rent")["id"],
        _post_expense(client, date="2024-02-01T00:00:00", amount=1200, category_label="Rent")["id"],
    ]

    res = client.get("/api/expenses/recurring-candidates")
    assert res.status_code == 200, res.json()
    body = res.json()
    assert body["ids"] == sorted(weekly)
    assert body["count"] == 3
    assert body["params"] == {
        "min_gap_days": 5,
        "max_gap_days": 9,
        "max_amount_ratio": 0.1,
        "amount_bucket_width": 100,
    }

    monthly_res = client.get(
        "/api/expenses/recurring-candidates",
        params={"min_gap_days": 25, "max_gap_days": 35},
    ).json()
    assert set(monthly_res["ids"]) == set(monthly)


def test_recurring_candidates_respects_date_window(client, db_session, demo_user):
    ids = _seed_weekly(db_session, demo_user.id, datetime(2024, 1, 1, 9), [100, 100, 100])
    res = client.get(
        "/api/expenses/recurring-candidates",
        params={"start": "2024-01-05", "end": "2024-01-31"},
    ).json()
    assert set(res["ids"]) == set(ids[1:])


def test_recurring_candidates_invalid_params(client):
    res = client.get("/api/expenses/recurring-candidates", params={"min_gap_days": 10, "max_gap_days": 2})
    assert res.status_code == 400

    res = client.get("/api/expenses/recurring-candidates", params={"amount_bucket_width": 0})
    assert res.status_code == 422


def test_recurring_candidates_scoped_to_current_user(client, db_session, demo_user):
    other = models.User(email="other@example.com", is_active=True)
    db_session.add(other)
    db_session.commit()
    mine = _seed_weekly(db_session, demo_user.id, datetime(2024, 1, 1, 9), [100, 100])
    theirs = _seed_weekly(db_session, other.id, datetime(2024, 1, 1, 9), [100, 100])

    assert set(client.get("/api/expenses/recurring-candidates").json()["ids"]) == set(mine)

    app.dependency_overrides[get_current_user] = lambda: other
    try:
        res = client.get("/api/expenses/recurring-candidates").json()
        assert set(res["ids"]) == set(theirs)
        assert client.delete(f"/api/expenses/{mine[0]}").status_code == 404
    finally:
        app.dependency_overrides.pop(get_current_user, None)
