"""Testes dos endpoints de health e readiness."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from starlette.requests import Request

from api.routes.health.router import health_check, readiness_check
from app.commands import CommandRegistry


def _build_request_with_state(state: SimpleNamespace) -> Request:
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/ready",
        "raw_path": b"/ready",
        "query_string": b"",
        "headers": [],
        "app": SimpleNamespace(state=state),
    }

    async def _receive() -> dict[str, object]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, _receive)


@pytest.mark.asyncio
async def test_health_reports_service_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SERVICE_NAME", "meu-bot")

    response = await health_check()

    assert response.status == "healthy"
    assert response.service == "meu-bot"


@pytest.mark.asyncio
async def test_readiness_returns_not_ready_without_runtime() -> None:
    request = _build_request_with_state(SimpleNamespace())

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 503
    assert payload["status"] == "not_ready"
    assert payload["checks"]["interaction_use_case"]["error"] == "not_configured"
    assert payload["checks"]["command_registry"]["error"] == "not_configured"


@pytest.mark.asyncio
async def test_readiness_requires_frozen_registry() -> None:
    request = _build_request_with_state(
        SimpleNamespace(interaction_use_case=object(), command_registry=CommandRegistry())
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 503
    assert payload["checks"]["command_registry"]["error"] == "not_frozen"


@pytest.mark.asyncio
async def test_readiness_ok_when_wired() -> None:
    registry = CommandRegistry()
    registry.freeze()
    request = _build_request_with_state(
        SimpleNamespace(interaction_use_case=object(), command_registry=registry)
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload["status"] == "ready"
    assert payload["checks"]["interaction_use_case"] == {"status": "ok", "error": None}
