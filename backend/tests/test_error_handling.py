# ruff: noqa

from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from starlette.requests import Request

from crm_backend.core.error_handling import (
    REQUEST_ID_HEADER,
    _error_payload,
    _get_request_id,
    install_error_handling,
)


def _app_with(route_setup) -> TestClient:
    app = FastAPI()
    install_error_handling(app)
    route_setup(app)
    return TestClient(app, raise_server_exceptions=False)


def test_validation_error_carries_request_id():
    def routes(app: FastAPI) -> None:
        @app.get("/top")
        def top(limit: int) -> dict[str, int]:
            return {"limit": limit}

    resp = _app_with(routes).get("/top?limit=ten")

    assert resp.status_code == 422
    body = resp.json()
    assert isinstance(body["detail"], list)
    assert body["request_id"]
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_validation_error_with_raw_bytes_body_is_json_safe():
    class Payload(BaseModel):
        title: str

    def routes(app: FastAPI) -> None:
        @app.post("/tasks")
        def create(payload: Payload) -> dict[str, str]:
            return {"title": payload.title}

    resp = _app_with(routes).post(
        "/tasks",
        content=b"not-json",
        headers={"content-type": "text/plain"},
    )

    assert resp.status_code == 422
    assert isinstance(resp.json()["detail"], list)


def test_http_exception_keeps_status_and_detail():
    def routes(app: FastAPI) -> None:
        @app.get("/cron")
        def cron() -> None:
            raise HTTPException(status_code=503, detail="Cron secret is not configured")

    resp = _app_with(routes).get("/cron")

    assert resp.status_code == 503
    body = resp.json()
    assert body["detail"] == "Cron secret is not configured"
    assert resp.headers.get(REQUEST_ID_HEADER) == body["request_id"]


def test_unhandled_exception_is_hidden_behind_500():
    def routes(app: FastAPI) -> None:
        @app.get("/boom")
        def boom() -> None:
            raise RuntimeError("database password is hunter2")

    resp = _app_with(routes).get("/boom")

    assert resp.status_code == 500
    body = resp.json()
    assert body["detail"] == "Internal Server Error"
    assert "hunter2" not in resp.text
    assert body["request_id"]


def test_response_validation_error_returns_500():
    class Out(BaseModel):
        score: int = Field(ge=0, le=100)

    def routes(app: FastAPI) -> None:
        @app.get("/score", response_model=Out)
        def score() -> dict[str, int]:
            return {"score": 500}

    resp = _app_with(routes).get("/score")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal Server Error"


def test_incoming_request_id_is_reused_and_trimmed():
    def routes(app: FastAPI) -> None:
        @app.get("/ok")
        def ok() -> dict[str, bool]:
            return {"ok": True}

    resp = _app_with(routes).get("/ok", headers={REQUEST_ID_HEADER: "  req-42  "})

    assert resp.status_code == 200
    assert resp.headers.get(REQUEST_ID_HEADER) == "req-42"


def test_oversized_incoming_request_id_is_replaced():
    def routes(app: FastAPI) -> None:
        @app.get("/ok")
        def ok() -> dict[str, bool]:
            return {"ok": True}

    resp = _app_with(routes).get("/ok", headers={REQUEST_ID_HEADER: "x" * 500})

    assert resp.status_code == 200
    echoed = resp.headers.get(REQUEST_ID_HEADER)
    assert echoed and echoed != "x" * 500


def test_get_request_id_generates_and_stores_when_missing():
    req = Request({"type": "http", "headers": [], "state": {}})

    first = _get_request_id(req)

    assert first
    assert _get_request_id(req) == first


def test_get_request_id_replaces_non_string_state():
    req = Request({"type": "http", "headers": [], "state": {"request_id": 123}})

    assert isinstance(_get_request_id(req), str)


def test_error_payload_shape():
    assert _error_payload(detail="x", request_id="req-1") == {"detail": "x", "request_id": "req-1"}
