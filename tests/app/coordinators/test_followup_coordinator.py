"""Testes da janela de token e da ordenação de follow-ups."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from app.coordinators.interactions import FollowupCoordinator
from app.domain.responses import MessagePayload
from utils.errors import TokenExpiredError, ValidationError


class Clock:
    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def coordinator(fake_http, clock: Clock) -> FollowupCoordinator:
    return FollowupCoordinator(fake_http, token_ttl_seconds=900, now=clock)


@pytest.mark.asyncio
async def test_followup_inside_window(coordinator, fake_http) -> None:
    coordinator.open("tok", interaction_id="1")

    message = await coordinator.send_followup("tok", "olá")

    assert message["content"] == "olá"
    assert fake_http.operations("tok") == ["followup_create"]
    assert coordinator.get_state("tok").followups_sent == 1


@pytest.mark.asyncio
async def test_ephemeral_followup_payload(coordinator, fake_http) -> None:
    coordinator.open("tok")

    await coordinator.send_followup("tok", MessagePayload.text("psiu", ephemeral=True))

    assert fake_http.calls[0].payload == {"content": "psiu", "flags": 64}


@pytest.mark.asyncio
async def test_window_counts_from_receipt(coordinator, clock: Clock) -> None:
    coordinator.open("tok", issued_at=clock() - timedelta(seconds=899))

    await coordinator.edit_original("tok", "ainda dá")
    clock.advance(1)

    with pytest.raises(TokenExpiredError, match="interaction_token_expired"):
        await coordinator.send_followup("tok", "tarde demais")
    assert coordinator.get_state("tok") is None


@pytest.mark.asyncio
async def test_unknown_token_is_expired(coordinator, fake_http) -> None:
    with pytest.raises(TokenExpiredError, match="unknown_interaction_token"):
        await coordinator.send_followup("never-opened", "x")

    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_token_rejected_by_platform_closes_window(coordinator, fake_http) -> None:
    coordinator.open("tok")
    fake_http.failures["followup_create"] = TokenExpiredError("invalid_interaction_token")

    with pytest.raises(TokenExpiredError):
        await coordinator.send_followup("tok", "x")

    assert coordinator.get_state("tok") is None


@pytest.mark.asyncio
async def test_invalid_message_never_reaches_network(coordinator, fake_http) -> None:
    coordinator.open("tok")

    with pytest.raises(ValidationError):
        await coordinator.send_followup("tok", MessagePayload())

    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_same_token_sends_in_call_order(coordinator, fake_http) -> None:
    coordinator.open("tok")
    fake_http.delays["message_edit"] = 0.05

    await asyncio.gather(
        coordinator.edit_original("tok", "primeiro"),
        coordinator.send_followup("tok", "segundo"),
        coordinator.send_followup("tok", "terceiro"),
    )

    assert fake_http.operations("tok") == ["message_edit", "followup_create", "followup_create"]
    assert [call.payload["content"] for call in fake_http.calls] == [
        "primeiro",
        "segundo",
        "terceiro",
    ]


@pytest.mark.asyncio
async def test_different_tokens_do_not_block_each_other(coordinator, fake_http) -> None:
    coordinator.open("slow")
    coordinator.open("fast")
    fake_http.delays["message_edit"] = 0.05

    await asyncio.gather(
        coordinator.edit_original("slow", "a"),
        coordinator.send_followup("fast", "b"),
    )

    assert [call.token for call in fake_http.calls] == ["fast", "slow"]


@pytest.mark.asyncio
async def test_edit_and_delete_followup(coordinator, fake_http) -> None:
    coordinator.open("tok")

    created = await coordinator.send_followup("tok", "v1")
    await coordinator.edit_followup("tok", created["id"], "v2")
    await coordinator.get_original("tok")
    await coordinator.delete_followup("tok", created["id"])
    await coordinator.delete_original("tok")

    assert fake_http.operations("tok") == [
        "followup_create",
        "message_edit",
        "message_get",
        "message_delete",
        "message_delete",
    ]
    assert fake_http.calls[1].message_id == created["id"]
    assert fake_http.calls[-1].message_id == "@original"


def test_open_is_idempotent(coordinator, clock: Clock) -> None:
    first = coordinator.open("tok")
    clock.advance(10)

    assert coordinator.open("tok") is first
    assert coordinator.is_open("tok")


def test_prune_expired(coordinator, clock: Clock) -> None:
    coordinator.open("old")
    clock.advance(600)
    coordinator.open("new")
    clock.advance(301)

    assert coordinator.prune_expired() == 1
    assert coordinator.get_state("old") is None
    assert coordinator.is_open("new")


@pytest.mark.asyncio
async def test_send_initial_response_posts_callback(coordinator, fake_http) -> None:
    await coordinator.send_initial_response("900", "tok", {"type": 5, "data": {"flags": 0}})

    assert fake_http.calls[0].operation == "callback"
    assert fake_http.calls[0].message_id == "900"


@pytest.mark.asyncio
async def test_get_followup_by_id(coordinator, fake_http) -> None:
    coordinator.open("tok")

    created = await coordinator.send_followup("tok", "v1")
    fetched = await coordinator.get_followup("tok", created["id"])

    assert fetched == {"id": created["id"]}
    assert fake_http.operations("tok") == ["followup_create", "message_get"]
    assert fake_http.calls[1].message_id == created["id"]


@pytest.mark.asyncio
async def test_get_followup_after_window_is_expired(coordinator, clock: Clock, fake_http) -> None:
    coordinator.open("tok")
    clock.advance(901)

    with pytest.raises(TokenExpiredError):
        await coordinator.get_followup("tok", "55")
    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_files_travel_with_followup_and_edit(coordinator, fake_http) -> None:
    coordinator.open("tok")
    report = MessagePayload(content="relatório").add_file("r.csv", b"a,b")

    await coordinator.send_followup("tok", report)
    await coordinator.edit_original("tok", MessagePayload().keep_attachment("77"))

    create, edit = fake_http.calls
    assert [file.filename for file in create.files] == ["r.csv"]
    assert create.payload["attachments"] == [{"id": 0, "filename": "r.csv"}]
    assert edit.files == ()
    assert edit.payload == {"attachments": [{"id": "77"}]}
