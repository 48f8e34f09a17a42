from __future__ import annotations


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_current_user_is_created_on_demand(client, db_session):
    from spendtrack import models

    db_session.query(models.User).delete()
    db_session.commit()

    res = client.post("/api/expenses", json={"amount": 5, "date": "2024-05-01T00:00:00"})
    assert res.status_code == 201, res.json()
    user = db_session.query(models.User).one()
    assert user.email == "demo@example.com"
    assert res.json()["user_id"] == user.id
