from __future__ import annotations

from datetime import date, datetime


# --- Memos ---

def test_memos_sorted_open_first_then_priority(client, db, auth_headers):
    client.get("/api/memos", headers=auth_headers)

    sql, _ = db.find("FROM memos")[0]
    assert "is_completed ASC, FIELD(priority, 'high', 'medium', 'low'), created_at DESC" in sql


def test_create_memo_defaults_to_medium_priority(client, db, auth_headers):
    db.on("INSERT INTO memos", lastrowid=3)
    db.on("SELECT * FROM memos WHERE id", rows=[{"id": 3, "task_name": "Call GP", "priority": "medium"}])

    response = client.post("/api/memos", headers=auth_headers, json={"task_name": "Call GP"})

    assert response.status_code == 201
    _, params = db.find("INSERT INTO memos")[0]
    assert params["priority"] == "medium"


def test_create_memo_rejects_unknown_priority(client, auth_headers):
    response = client.post("/api/memos", headers=auth_headers, json={"task_name": "x", "priority": "urgent"})
    assert response.status_code == 400


def test_completing_memo_sets_completed_at(client, db, auth_headers):
    db.on("UPDATE memos", rowcount=1)
    db.on("UPDATE memos", rowcount=1)

    client.put("/api/memos/3/status", headers=auth_headers, json={"is_completed": True})
    client.put("/api/memos/3/status", headers=auth_headers, json={"is_completed": False})

    (_, done), (_, reopened) = db.find("UPDATE memos")
    assert isinstance(done["completed_at"], datetime)
    assert reopened["completed_at"] is None


def test_delete_missing_memo_is_404(client, auth_headers):
    response = client.delete("/api/memos/3", headers=auth_headers)
    assert response.status_code == 404


def test_memo_search_with_empty_query_is_empty(client, db, auth_headers):
    response = client.get("/api/memos/history/search", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == []
    assert db.executed == []


# --- Periods ---

def test_predict_uses_history(client, db, auth_headers):
    db.on("SELECT start_date, end_date FROM menstrual_records", rows=[
        {"start_date": date(2024, 1, 1), "end_date": date(2024, 1, 5)},
        {"start_date": date(2024, 1, 29), "end_date": date(2024, 2, 2)},
    ])

    response = client.get("/api/periods/predict", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["nextPeriodStartDate"] == "2024-02-26"


def test_predict_with_no_history(client, auth_headers):
    response = client.get("/api/periods/predict", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["nextPeriodStartDate"] is None


def test_create_period_applies_defaults(client, db, auth_headers, user_id):
    db.on("INSERT INTO menstrual_records", lastrowid=8)

    response = client.post("/api/periods", headers=auth_headers, json={"start_date": "2024-03-01"})

    assert response.status_code == 201
    assert response.json() == {
        "id": 8,
        "user_id": user_id,
        "start_date": "2024-03-01",
        "end_date": None,
        "pain_level": "none",
        "flow_volume": "normal",
        "notes": None,
        "color": None,
        "state": None,
    }


def test_update_period_writes_only_sent_fields(client, db, auth_headers):
    db.on("UPDATE menstrual_records", rowcount=1)

    response = client.put("/api/periods/8", headers=auth_headers, json={"end_date": "2024-03-05", "notes": "ok"})

    assert response.status_code == 200
    sql, params = db.find("UPDATE menstrual_records")[0]
    assert "SET end_date = :end_date, notes = :notes WHERE" in sql
    assert params["end_date"] == date(2024, 3, 5)
    assert "pain_level" not in params


def test_update_period_can_clear_end_date(client, db, auth_headers):
    db.on("UPDATE menstrual_records", rowcount=1)

    response = client.put("/api/periods/8", headers=auth_headers, json={"end_date": None})

    assert response.status_code == 200
    _, params = db.find("UPDATE menstrual_records")[0]
    assert params["end_date"] is None


def test_update_period_without_fields_is_400(client, auth_headers):
    response = client.put("/api/periods/8", headers=auth_headers, json={})
    assert response.status_code == 400


def test_update_missing_period_is_404(client, db, auth_headers):
    response = client.put("/api/periods/8", headers=auth_headers, json={"notes": "x"})
    assert response.status_code == 404


# --- Sex logs ---

def test_sex_log_insert_returns_201(client, db, auth_headers):
    db.on("INSERT INTO sex_logs", lastrowid=6)

    response = client.post("/api/sex", headers=auth_headers, json={"log_date": "2024-03-01"})

    assert response.status_code == 201
    assert response.json()["id"] == 6


def test_sex_log_update_returns_200(client, db, auth_headers):
    db.on("SELECT id FROM sex_logs", rows=[{"id": 6}])

    response = client.post(
        "/api/sex", headers=auth_headers, json={"log_date": "2024-03-01", "protection_method": "condom"}
    )

    assert response.status_code == 200
    _, params = db.find("UPDATE sex_logs")[0]
    assert params == {"method": "condom", "id": 6}
    assert not db.find("INSERT INTO sex_logs")


def test_sex_log_requires_date(client, auth_headers):
    response = client.post("/api/sex", headers=auth_headers, json={})
    assert response.status_code == 400


def test_delete_sex_log_by_date(client, db, auth_headers):
    db.on("DELETE FROM sex_logs", rowcount=1)

    assert client.delete("/api/sex/2024-03-01", headers=auth_headers).status_code == 200
    assert client.delete("/api/sex/2024-03-02", headers=auth_headers).status_code == 404


# --- Stool ---

def test_stool_range_needs_both_dates(client, db, auth_headers):
    client.get("/api/stool?startDate=2024-03-01", headers=auth_headers)
    client.get("/api/stool?startDate=2024-03-01&endDate=2024-03-31", headers=auth_headers)

    (first, _), (second, params) = db.find("FROM stool_logs")
    assert "BETWEEN" not in first
    assert first.endswith("ORDER BY log_date DESC, id DESC")
    assert params["end"] == date(2024, 3, 31)


def test_stool_summary(client, db, auth_headers):
    db.on("COUNT(id) AS count", rows=[{"day": "2024-03-01", "count": 2}, {"day": "2024-03-03", "count": 1}])

    response = client.get("/api/stool/summary?startDate=2024-03-01&endDate=2024-03-31", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"2024-03-01": 2, "2024-03-03": 1}


def test_stool_summary_requires_dates(client, auth_headers):
    response = client.get("/api/stool/summary?startDate=2024-03-01", headers=auth_headers)
    assert response.status_code == 400


def test_update_missing_stool_log_is_404(client, db, auth_headers):
    response = client.put("/api/stool/4", headers=auth_headers, json={"log_date": "2024-03-01", "stool_type": "4"})
    assert response.status_code == 404


def test_update_stool_log_returns_row(client, db, auth_headers):
    db.on("UPDATE stool_logs", rowcount=1)
    db.on("SELECT * FROM stool_logs WHERE id", rows=[{"id": 4, "stool_type": "4"}])

    response = client.put("/api/stool/4", headers=auth_headers, json={"log_date": "2024-03-01", "stool_type": "4"})

    assert response.status_code == 200
    assert response.json() == {"id": 4, "stool_type": "4"}


def test_delete_stool_log(client, db, auth_headers):
    db.on("DELETE FROM stool_logs", rowcount=1)

    assert client.delete("/api/stool/4", headers=auth_headers).status_code == 204
    assert client.delete("/api/stool/4", headers=auth_headers).status_code == 404


# --- Weight ---

def test_recent_weights_are_returned_oldest_first(client, db, auth_headers):
    db.on("FROM weight_logs", rows=[{"id": 3, "weight": 70.1}, {"id": 2, "weight": 70.5}])
    db.on("SELECT height_cm FROM users", rows=[{"height_cm": 175.0}])

    response = client.get("/api/weight", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "weights": [{"id": 2, "weight": 70.5}, {"id": 3, "weight": 70.1}],
        "height": 175.0,
    }
    sql, _ = db.find("FROM weight_logs")[0]
    assert sql.endswith("LIMIT 15")


def test_add_weight_requires_positive_value(client, auth_headers):
    response = client.post(
        "/api/weight", headers=auth_headers, json={"weight": -1, "log_datetime": "2024-03-01T08:00:00"}
    )
    assert response.status_code == 400


def test_add_weight(client, db, auth_headers):
    db.on("INSERT INTO weight_logs", lastrowid=9)

    response = client.post(
        "/api/weight", headers=auth_headers, json={"weight": 70.2, "log_datetime": "2024-03-01 08:00"}
    )

    assert response.status_code == 201
    _, params = db.find("INSERT INTO weight_logs")[0]
    assert params["logged_at"] == datetime(2024, 3, 1, 8, 0)


def test_weight_history_requires_range(client, auth_headers):
    response = client.get("/api/weight/history?start_datetime=2024-03-01", headers=auth_headers)
    assert response.status_code == 400


def test_height_must_be_positive_number(client, db, auth_headers):
    assert client.put("/api/weight/height", headers=auth_headers, json={"height": "abc"}).status_code == 400
    assert client.put("/api/weight/height", headers=auth_headers, json={"height": 0}).status_code == 400

    response = client.put("/api/weight/height", headers=auth_headers, json={"height": "172.5"})

    assert response.status_code == 200
    _, params = db.find("UPDATE users SET height_cm")[0]
    assert params["height"] == 172.5
