"""HTTP transport tests for the /events routes."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from infrastructure.persistence import InMemoryEventRepository, StorageError

CREATED = {
    "date": "2024-05-01T12:00:00Z",
    "statusCode": 201,
    "statusMessage": "Created",
}


@pytest.mark.unit
class TestCreateEvent:
    def test_create_returns_generated_id(self, client):
        response = client.post("/events", json=CREATED)

        assert response.status_code == 201
        assert response.headers["content-type"] == "application/json"
        body = response.json()
        assert body["id"] == "id-1"
        assert body["statusCode"] == 201
        assert body["statusMessage"] == "Created"

    def test_missing_date_is_invalid_body(self, client):
        response = client.post("/events", json={"statusCode": 200})

        assert response.status_code == 400
        body = response.json()
        assert body["title"] == "Invalid Body"
        assert body["instance"] == "/events"

    def test_malformed_json(self, client):
        response = client.post(
            "/events", content="{bad", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["title"] == "Invalid JSON"

    def test_wrong_field_type(self, client):
        response = client.post("/events", json={**CREATED, "statusCode": "201"})

        assert response.status_code == 400
        assert response.json()["title"] == "Invalid JSON"


@pytest.mark.unit
class TestGetEvent:
    def test_round_trip(self, client):
        created = client.post("/events", json=CREATED).json()

        response = client.get(f"/events/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_unknown_id(self, client):
        response = client.get("/events/unknown-id")

        assert response.status_code == 404
        assert response.json()["instance"] == "/events/unknown-id"

    def test_expired_event_is_absent(self, client, fixed_now):
        past = int((fixed_now - timedelta(hours=1)).timestamp())
        client.put("/events/old", json={**CREATED, "expiration": past})

        assert client.get("/events/old").status_code == 404

    def test_empty_id(self, client):
        response = client.get("/events/")

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing event ID in URL"


@pytest.mark.unit
class TestReplaceEvent:
    def test_put_uses_path_id(self, client):
        response = client.put("/events/abc", json={**CREATED, "id": "ignored"})

        assert response.status_code == 201
        assert response.json()["id"] == "abc"

    def test_put_replaces_whole_record(self, client):
        client.put(
            "/events/abc", json={**CREATED, "metadata": {"source": "probe"}}
        )
        client.put("/events/abc", json={"date": CREATED["date"], "statusCode": 200})

        body = client.get("/events/abc").json()
        assert body["statusCode"] == 200
        assert body["statusMessage"] == ""
        assert "metadata" not in body

    @pytest.mark.parametrize("content", ["", "{bad", '{"statusCode": 1}'])
    def test_empty_id_is_bad_request_whatever_the_body(self, client, content):
        response = client.put("/events/", content=content)

        assert response.status_code == 400
        assert response.json()["title"] == "Bad Request"


@pytest.mark.unit
class TestDeleteEvent:
    def test_delete_existing(self, client):
        client.put("/events/abc", json=CREATED)

        response = client.delete("/events/abc")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get("/events/abc").status_code == 404

    def test_delete_unknown(self, client):
        response = client.delete("/events/unknown-id")

        assert response.status_code == 404
        assert response.json()["title"] == "Not Found"


@pytest.mark.unit
class TestListEvents:
    def test_boundaries_are_inclusive(self, client):
        client.put("/events/a", json={**CREATED, "statusCode": 200})

        response = client.get(
            "/events",
            params={
                "from": "2024-05-01T12:00:00Z",
                "to": "2024-05-01T13:00:00Z",
                "statusCode": "200",
            },
        )

        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == ["a"]

    def test_defaults_to_last_hour_and_status_zero(self, client):
        client.put("/events/a", json={**CREATED, "statusCode": 0})

        assert [e["id"] for e in client.get("/events").json()] == ["a"]

    def test_first_value_wins_for_repeated_parameters(self, client):
        client.put("/events/a", json={**CREATED, "statusCode": 500})

        response = client.get("/events?statusCode=500&statusCode=200")

        assert [e["id"] for e in response.json()] == ["a"]

    def test_invalid_parameter(self, client):
        response = client.get("/events", params={"from": "last tuesday"})

        assert response.status_code == 400
        body = response.json()
        assert body["title"] == "Invalid Body"
        assert body["detail"].startswith("parameter {from} invalid")
        assert body["instance"] == "/events"

    def test_empty_result(self, client):
        response = client.get("/events")

        assert response.status_code == 200
        assert response.text == "[]"


@pytest.mark.unit
class TestErrors:
    def test_storage_failure_is_problem_details(self, make_app, make_events_handler, clock):
        class BrokenRepository(InMemoryEventRepository):
            def get(self, ctx, event_id):
                raise StorageError("unable to get item from dynamodb, timeout")

        handler = make_events_handler(
            repository=BrokenRepository(ttl=timedelta(minutes=1), clock=clock)
        )

        response = TestClient(make_app(handler)).get("/events/abc")

        assert response.status_code == 500
        assert response.json() == {
            "type": "about:blank",
            "status": 500,
            "title": "Internal Server Error",
            "detail": "unable to get item from dynamodb, timeout",
            "instance": "/events/abc",
            "code": "STORAGE_ERROR",
        }

    def test_unknown_route(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["detail"] == "Route not found"

    def test_method_not_allowed(self, client):
        response = client.patch("/events/abc")

        assert response.status_code == 405
        assert response.json()["detail"] == "method PATCH is not supported"

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/events/abc", headers={"X-Correlation-ID": "req-1"})

        assert response.headers["x-correlation-id"] == "req-1"

    def test_correlation_id_is_generated(self, client):
        assert client.get("/health").headers["x-correlation-id"]
