"""Tests for normalized error responses."""

from fastapi import APIRouter
from fastapi.testclient import TestClient

from privacy_relay.core.errors import ValidationError
from privacy_relay.main import create_app


def test_validation_error_has_standard_shape(client):
    resp = client.post("/check-pro", json={})
    assert resp.status_code == 400
    body = resp.json()
    rid = resp.headers.get("x-request-id")
    assert body["error"] == "Missing email"
    assert body["code"] == "validation_error"
    assert body["isPro"] is False
    assert body["request_id"] == rid


def test_malformed_json_is_400_not_422(client):
    resp = client.post("/analyze", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"
    assert "error" in resp.json()


def test_unknown_route_is_json_404(client):
    resp = client.get("/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"
    assert resp.json()["request_id"] == resp.headers.get("x-request-id")


def test_unexpected_exception_is_json_500(settings):
    app = create_app(settings)
    router = APIRouter()

    @router.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    app.include_router(router)
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal server error"
    assert body["code"] == "internal_error"
    assert "kaboom" not in resp.text


def test_payload_fields_do_not_override_error(settings):
    app = create_app(settings)
    router = APIRouter()

    @router.get("/shadow")
    async def shadow():
        raise ValidationError("Missing email", payload={"error": "shadowed", "isPro": False})

    app.include_router(router)
    resp = TestClient(app).get("/shadow")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing email"
    assert resp.json()["isPro"] is False
