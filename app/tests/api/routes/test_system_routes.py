import pytest
from fastapi.testclient import TestClient


@pytest.mark.unit
class TestSystemRoutes:
    def test_health_is_plain_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.text == "OK"
        assert response.headers["content-type"] == "text/plain; charset=utf-8"

    def test_health_never_touches_storage(self, make_app, make_events_handler):
        class Untouchable:
            def __getattr__(self, name):
                raise AssertionError(f"repository.{name} called")

        client = TestClient(make_app(make_events_handler(repository=Untouchable())))

        assert client.get("/health").status_code == 200

    def test_version(self, client):
        response = client.get("/version")

        assert response.status_code == 200
        assert response.json() == {"version": "abc123"}
