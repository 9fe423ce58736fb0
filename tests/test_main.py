"""
Tests for the application shell: health endpoints and request IDs.
"""

import json
import logging

from fastapi.testclient import TestClient

from tti_admissions.core.logging import JsonFormatter, RequestIDFilter, request_id_ctx
from tti_admissions.main import app

# No context manager: the lifespan (Redis/DB connections) is not started
client = TestClient(app)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_ready_without_redis():
    response = client.get("/ready")
    assert response.json() == {"status": "ready", "redis": "disabled"}


def test_request_id_is_echoed():
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated():
    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_json_log_format_includes_request_id():
    record = logging.LogRecord("tti", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    token = request_id_ctx.set("req-9")
    try:
        RequestIDFilter().filter(record)
    finally:
        request_id_ctx.reset(token)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-9"


def test_module_routes_are_mounted():
    paths = {route.path for route in app.routes}

    assert "/api/v1/admissions" in paths
    assert "/api/v1/admissions/{admission_id}/head-approve" in paths
    assert "/api/v1/admissions/{admission_id}/schedule-interview" in paths
    assert "/api/v1/admissions/views/{view}" in paths
    assert "/api/v1/audit-logs" in paths
    assert "/api/v1/notifications/{notification_id}/read" in paths
