"""App-level routes and the JSON error envelope for plain HTTP errors."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_unknown_route_uses_short_error_code(client):
    resp = client.get("/no-such-route")
    assert resp.status_code == 404
    body = resp.get_json()
    assert body["ok"] is False
    assert body["error"] == "not_found"
    assert body["message"]


def test_wrong_method_uses_short_error_code(client):
    resp = client.patch("/health")
    assert resp.status_code == 405
    assert resp.get_json()["error"] == "method_not_allowed"
