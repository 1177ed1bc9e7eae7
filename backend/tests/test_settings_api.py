from __future__ import annotations


def test_defaults_before_anything_is_saved(client) -> None:
    body = client.get("/api/settings").json()

    assert body["focus_minutes"] == 25
    assert body["short_break_minutes"] == 5
    assert body["long_break_minutes"] == 15
    assert body["long_break_interval"] == 4
    assert body["auto_start_breaks"] is True
    assert body["auto_start_focus"] is False
    assert body["daily_goal_minutes"] == 120


def test_save_and_reload(client) -> None:
    current = client.get("/api/settings").json()

    saved = client.put("/api/settings", json={**current, "focus_minutes": 50})

    assert saved.status_code == 200
    assert client.get("/api/settings").json()["focus_minutes"] == 50


def test_invalid_settings_are_422(client) -> None:
    assert client.put("/api/settings", json={"focus_minutes": 0}).status_code == 422
