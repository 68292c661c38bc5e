import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from phonebook.metrics import Metrics


def _scrape(client) -> str:
    r = client.get("/metrics")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    return r.text


def test_request_duration_is_recorded(client):
    client.get("/api/contacts")
    text = _scrape(client)
    assert 'http_request_duration_seconds_count{method="GET",route="/api/contacts",status_code="200"} 1.0' in text


def test_scrape_endpoint_is_not_timed(client):
    _scrape(client)
    text = _scrape(client)
    assert 'route="/metrics"' not in text


def test_database_operations_are_labelled(client):
    payload = {"firstName": "Test", "lastName": "User", "phoneNumber": "1234567890", "address": "123 Test St"}
    created = client.post("/api/contacts", json=payload).json()
    client.get("/api/contacts")
    client.get("/api/contacts/search?query=Test")
    client.put(f"/api/contacts/{created['id']}", json=payload)
    client.delete(f"/api/contacts/{created['id']}")

    text = _scrape(client)
    for op in ("add contacts", "find contacts", "search contact", "edit contact", "delete contact"):
        assert f'database_operation_duration_seconds_count{{operation="{op}"}} 1.0' in text


def test_not_found_is_counted_as_error(client):
    client.delete(f"/api/contacts/{ObjectId()}")
    text = _scrape(client)
    assert 'http_request_errors_total{method="DELETE",route="/api/contacts/{contact_id}",status_code="404"} 1.0' in text
    # not-found still went through the database
    assert 'database_operation_duration_seconds_count{operation="delete contact"} 1.0' in text


def test_validation_failure_is_counted_as_error(client):
    client.post("/api/contacts", json={})
    text = _scrape(client)
    assert 'http_request_errors_total{method="POST",route="/api/contacts",status_code="400"} 1.0' in text
    assert 'operation="add contacts"' not in text


def test_successful_requests_are_not_errors(client):
    client.get("/api/contacts")
    text = _scrape(client)
    assert 'http_request_errors_total{method="GET"' not in text


def test_unmatched_path_uses_raw_path(client):
    client.get("/nope")
    text = _scrape(client)
    assert 'http_request_errors_total{method="GET",route="/nope",status_code="404"} 1.0' in text


def test_unhandled_exception_is_recorded_as_500(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/boom")
        assert r.status_code == 500
        assert r.json() == {"error": "Something broke!"}
        text = _scrape(c)
    assert 'http_request_errors_total{method="GET",route="/boom",status_code="500"} 1.0' in text


def test_render_failure_returns_500(client, metrics, monkeypatch):
    def broken():
        raise RuntimeError("registry exploded")

    monkeypatch.setattr(metrics, "render", broken)
    r = client.get("/metrics")
    assert r.status_code == 500
    assert r.json() == {"error": "registry exploded"}


def test_default_collectors_are_registered():
    m = Metrics()
    text = m.render().decode()
    assert "http_request_duration_seconds" in text
    assert "python_info" in text


def test_observe_request_counts_errors_only_from_400():
    m = Metrics(default_collectors=False)
    m.observe_request("GET", "/x", 399, 0.01)
    m.observe_request("GET", "/x", 400, 0.01)
    assert m.registry.get_sample_value(
        "http_request_errors_total", {"method": "GET", "route": "/x", "status_code": "400"}
    ) == 1.0
    assert m.registry.get_sample_value(
        "http_request_errors_total", {"method": "GET", "route": "/x", "status_code": "399"}
    ) is None
    assert m.registry.get_sample_value(
        "http_request_duration_seconds_count", {"method": "GET", "route": "/x", "status_code": "399"}
    ) == 1.0


def test_time_db_records_on_failure():
    m = Metrics(default_collectors=False)
    with pytest.raises(ValueError):
        with m.time_db("find contacts"):
            raise ValueError("boom")
    assert m.registry.get_sample_value(
        "database_operation_duration_seconds_count", {"operation": "find contacts"}
    ) == 1.0
