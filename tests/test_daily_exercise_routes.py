from __future__ import annotations

from datetime import date


def test_create_item_validates_type(client, db, auth_headers):
    response = client.post(
        "/api/daily-logs/items", headers=auth_headers, json={"item_name": "Water", "item_type": "weekly"}
    )
    assert response.status_code == 400


def test_create_item_returns_the_stored_row(client, db, auth_headers, user_id):
    db.on("INSERT INTO daily_items", lastrowid=4)
    db.on("SELECT * FROM daily_items WHERE id", rows=[{
        "id": 4,
        "user_id": user_id,
        "item_name": "Water",
        "item_type": "daily",
        "status": None,
        "created_at": "2024-05-01 08:30:00",
    }])

    response = client.post(
        "/api/daily-logs/items", headers=auth_headers, json={"item_name": " Water ", "item_type": "daily"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 4
    assert body["item_type"] == "daily"
    assert body["user_id"] == user_id
    assert body["created_at"] == "2024-05-01 08:30:00"
    _, insert_params = db.find("INSERT INTO daily_items")[0]
    assert insert_params["item_name"] == "Water"
    _, select_params = db.find("SELECT * FROM daily_items WHERE id")[0]
    assert select_params == {"id": 4}


def test_delete_item_removes_its_logs(client, db, auth_headers, user_id):
    db.on("SELECT item_name FROM daily_items", rows=[{"item_name": "Water"}])

    response = client.delete("/api/daily-logs/items/4", headers=auth_headers)

    assert response.status_code == 200
    _, params = db.find("DELETE FROM daily_logs")[0]
    assert params == {"uid": user_id, "item_name": "Water"}
    assert db.find("DELETE FROM daily_items")
    assert db.commits == 1


def test_delete_unknown_item_is_404(client, db, auth_headers):
    response = client.delete("/api/daily-logs/items/4", headers=auth_headers)

    assert response.status_code == 404
    assert not db.find("DELETE FROM daily_logs")


def test_only_one_time_items_can_be_completed(client, db, auth_headers):
    db.on("UPDATE daily_items SET status = 'completed'", rowcount=0)

    response = client.put("/api/daily-logs/items/4/complete", headers=auth_headers)

    assert response.status_code == 404
    sql, _ = db.find("UPDATE daily_items")[0]
    assert "item_type = 'one-time'" in sql


def test_save_log_upserts(client, db, auth_headers):
    response = client.post(
        "/api/daily-logs/logs",
        headers=auth_headers,
        json={"log_date": "2024-05-01", "item_name": "Water", "status": "done"},
    )

    assert response.status_code == 201
    sql, params = db.find("INSERT INTO daily_logs")[0]
    assert "ON DUPLICATE KEY UPDATE" in sql
    assert params["day"] == date(2024, 5, 1)


def test_history_search_rejects_empty_query(client, auth_headers):
    response = client.get("/api/daily-logs/history/search?q=%20", headers=auth_headers)
    assert response.status_code == 400


def test_exercise_search_requires_both_dates(client, auth_headers):
    response = client.get("/api/exercise/search?startDate=2024-05-01", headers=auth_headers)
    assert response.status_code == 400


def test_exercise_search_includes_the_whole_end_day(client, db, auth_headers):
    db.on("FROM exercise_logs", rows=[{"log_date": "2024-05-03", "exercise_name": "Run"}])

    response = client.get(
        "/api/exercise/search?startDate=2024-05-01&endDate=2024-05-03&exerciseName=run",
        headers=auth_headers,
    )

    assert response.status_code == 200
    sql, params = db.find("FROM exercise_logs")[0]
    assert "log_date BETWEEN :start AND :end" in sql
    assert params["start"] == date(2024, 5, 1)
    assert params["end"] == date(2024, 5, 3)
    assert params["pattern"] == "%run%"


def test_exercise_search_accepts_the_last_representable_day(client, db, auth_headers):
    response = client.get(
        "/api/exercise/search?startDate=9999-12-01&endDate=9999-12-31",
        headers=auth_headers,
    )

    assert response.status_code == 200
    _, params = db.find("FROM exercise_logs")[0]
    assert params["end"] == date(9999, 12, 31)


def test_exercise_month_summary_for_the_last_supported_month(client, db, auth_headers):
    response = client.get("/api/exercise/summary/9999/12", headers=auth_headers)

    assert response.status_code == 200
    _, params = db.find("SELECT DISTINCT DATE_FORMAT")[0]
    assert params["last_day"] == date(9999, 12, 31)


def test_exercise_month_summary(client, db, auth_headers):
    db.on("SELECT DISTINCT DATE_FORMAT", rows=[{"log_date": "2024-02-03"}, {"log_date": "2024-02-29"}])

    response = client.get("/api/exercise/summary/2024/2", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == ["2024-02-03", "2024-02-29"]
    _, params = db.find("SELECT DISTINCT DATE_FORMAT")[0]
    assert params["last_day"] == date(2024, 2, 29)


def test_exercise_month_summary_rejects_bad_month(client, auth_headers):
    response = client.get("/api/exercise/summary/2024/13", headers=auth_headers)
    assert response.status_code == 400


def test_create_exercise_rejects_negative_duration(client, auth_headers):
    response = client.post(
        "/api/exercise",
        headers=auth_headers,
        json={"log_date": "2024-05-01", "exercise_name": "Run", "duration_minutes": -5},
    )
    assert response.status_code == 400


def test_create_exercise(client, db, auth_headers, user_id):
    db.on("INSERT INTO exercise_logs", lastrowid=11)

    response = client.post(
        "/api/exercise",
        headers=auth_headers,
        json={"log_date": "2024-05-01", "exercise_name": "Run", "duration_minutes": 30},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 11
    assert body["user_id"] == user_id
    assert body["duration_minutes"] == 30
