# ruff: noqa: INP001
"""Liveness and readiness probes on the assembled application."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from crm_backend.core.error_handling import REQUEST_ID_HEADER
from crm_backend.main import app


@pytest.mark.parametrize("path", ["/health", "/healthz", "/readyz"])
def test_probe_endpoints_report_ok(path: str) -> None:
    resp = TestClient(app).get(path)

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.headers.get(REQUEST_ID_HEADER)


def test_priority_and_cron_routes_are_mounted() -> None:
    paths = {route.path for route in app.routes}

    assert "/api/v1/priority/recalculate" in paths
    assert "/api/v1/priority/top" in paths
    assert "/api/v1/priority/today" in paths
    assert "/api/v1/cron/priority-recalc" in paths
