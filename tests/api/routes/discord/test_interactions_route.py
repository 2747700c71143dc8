"""Testes da rota de webhook de interações."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from starlette.requests import Request

from api.routes.discord import webhook
from app.commands import CommandRegistry
from app.coordinators.interactions import FollowupCoordinator, InteractionDispatcher
from app.domain.responses import MessagePayload
from app.observability import get_correlation_id
from app.use_cases.interactions import ProcessInteractionUseCase
from tests.fakes.signing import command_payload, encode, ping_payload, signed_headers


def _build_request(
    *,
    body: bytes,
    headers: dict[str, str] | None = None,
    state: SimpleNamespace | None = None,
) -> Request:
    header_items = headers or {}
    raw_headers = [(k.lower().encode("utf-8"), v.encode("utf-8")) for k, v in header_items.items()]
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "path": "/interactions",
        "raw_path": b"/interactions",
        "query_string": b"",
        "headers": raw_headers,
        "app": SimpleNamespace(state=state or SimpleNamespace()),
    }
    sent = False

    async def _receive() -> dict[str, object]:
        nonlocal sent
        if sent:
            return {"type": "http.request", "body": b"", "more_body": False}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, _receive)


@pytest.fixture
def state(keypair, fake_http) -> SimpleNamespace:
    _, public_hex = keypair
    registry = CommandRegistry()

    @registry.command("ping", "Pong")
    async def ping(ctx) -> None:
        await ctx.send_message("pong", ephemeral=True)

    @registry.command("cat", "Foto")
    async def cat(ctx) -> None:
        await ctx.send_message(MessagePayload(content="gato").add_file("cat.png", b"PNGDATA"))

    dispatcher = InteractionDispatcher(registry, FollowupCoordinator(fake_http))
    return SimpleNamespace(
        interaction_use_case=ProcessInteractionUseCase(public_key=public_hex, dispatcher=dispatcher)
    )


@pytest.mark.asyncio
async def test_signed_ping_returns_pong_json(state, keypair) -> None:
    private_key, _ = keypair
    body = encode(ping_payload())
    request = _build_request(body=body, headers=signed_headers(private_key, body), state=state)

    response = await webhook.receive_interaction(request)

    assert response.status_code == 200
    assert response.media_type == "application/json"
    assert response.body == b'{"type":1}'


@pytest.mark.asyncio
async def test_command_response_body(state, keypair) -> None:
    private_key, _ = keypair
    body = encode(command_payload("ping"))
    request = _build_request(body=body, headers=signed_headers(private_key, body), state=state)

    response = await webhook.receive_interaction(request)

    assert response.status_code == 200
    assert response.body == b'{"type":4,"data":{"content":"pong","flags":64}}'


@pytest.mark.asyncio
async def test_response_with_file_is_multipart(state, keypair) -> None:
    private_key, _ = keypair
    body = encode(command_payload("cat"))
    request = _build_request(body=body, headers=signed_headers(private_key, body), state=state)

    response = await webhook.receive_interaction(request)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert b'name="payload_json"' in response.body
    assert b'"attachments":[{"id":0,"filename":"cat.png"}]' in response.body
    assert b'name="files[0]"; filename="cat.png"' in response.body
    assert b"PNGDATA" in response.body


@pytest.mark.asyncio
async def test_invalid_signature_is_401_plain_text(state) -> None:
    body = encode(ping_payload())
    headers = {"X-Signature-Ed25519": "00" * 64, "X-Signature-Timestamp": "1700000000"}
    request = _build_request(body=body, headers=headers, state=state)

    response = await webhook.receive_interaction(request)

    assert response.status_code == 401
    assert response.body == b"Unauthorized"


@pytest.mark.asyncio
async def test_signed_malformed_body_is_400(state, keypair) -> None:
    private_key, _ = keypair
    body = b'{"id": "1"}'
    request = _build_request(body=body, headers=signed_headers(private_key, body), state=state)

    response = await webhook.receive_interaction(request)

    assert response.status_code == 400
    assert response.body == b"Bad Request"


@pytest.mark.asyncio
async def test_missing_use_case_is_503() -> None:
    request = _build_request(body=encode(ping_payload()))

    response = await webhook.receive_interaction(request)

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_correlation_id_is_scoped_to_request(state) -> None:
    request = _build_request(
        body=b"{}",
        headers={"X-Correlation-Id": "req-1"},
        state=state,
    )

    await webhook.receive_interaction(request)

    assert get_correlation_id() == ""
