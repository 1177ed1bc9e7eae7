def test_health_endpoint_returns_ok(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_generated_and_returned(client) -> None:
    response = client.get("/health")

    assert response.headers.get("X-Request-Id")


def test_request_id_echoed_from_header(client) -> None:
    response = client.get("/health", headers={"X-Request-Id": "req-42"})

    assert response.headers.get("X-Request-Id") == "req-42"


def test_api_responses_are_not_cacheable(seeded_client) -> None:
    api_response = seeded_client.get("/api/goals")
    health_response = seeded_client.get("/health")

    assert "no-store" in api_response.headers["Cache-Control"]
    assert api_response.headers["Pragma"] == "no-cache"
    assert "Cache-Control" not in health_response.headers
