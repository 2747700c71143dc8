"""Testes do dispatcher: roteamento, prazo interno e falhas de handler."""

from __future__ import annotations

import asyncio

import pytest

from api.normalizers.discord import decode_interaction_payload
from app.commands import CommandRegistry, CustomIdRouter
from app.constants.discord import OptionType
from app.coordinators.interactions import FollowupCoordinator, InteractionDispatcher
from app.domain.commands import OptionSchema
from app.domain.responses import MessagePayload
from fsm import InteractionState
from tests.fakes.signing import (
    autocomplete_payload,
    command_payload,
    component_payload,
    modal_payload,
    ping_payload,
)
from utils.errors import (
    AlreadyRespondedError,
    CommandNotFoundError,
    DecodeError,
    HandlerError,
    NotDispatchableError,
    RoutingError,
    TokenExpiredError,
)

FAILURE_TEXT = "Falhou"
FAILURE_BODY = {"type": 4, "data": {"content": FAILURE_TEXT, "flags": 64}}


class RecordingReporter:
    def __init__(self) -> None:
        self.reports: list[tuple[BaseException, str]] = []

    async def report(self, error: BaseException, interaction) -> None:
        self.reports.append((error, interaction.id))


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def router() -> CustomIdRouter:
    return CustomIdRouter()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def make_dispatcher(fake_http, registry, router, reporter):
    def factory(deadline: float = 0.05) -> InteractionDispatcher:
        return InteractionDispatcher(
            registry,
            FollowupCoordinator(fake_http),
            components=router,
            error_reporter=reporter,
            soft_deadline_seconds=deadline,
            handler_error_message=FAILURE_TEXT,
        )

    return factory


@pytest.mark.asyncio
async def test_ping_is_answered_without_lookup(make_dispatcher) -> None:
    result = await make_dispatcher().dispatch(decode_interaction_payload(ping_payload()))

    assert result.payload == {"type": 1}
    assert result.state is InteractionState.RESPONDED


class TestDirectResponse:
    @pytest.mark.asyncio
    async def test_fast_handler_response_is_http_body(self, registry, make_dispatcher, fake_http):
        @registry.command("ping", "Pong")
        async def ping(ctx) -> None:
            await ctx.send_message("pong")

        dispatcher = make_dispatcher()
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("ping")))
        await dispatcher.background.drain()

        assert result.payload == {"type": 4, "data": {"content": "pong"}}
        assert result.auto_deferred is False
        assert result.error is None
        assert fake_http.calls == []

    @pytest.mark.asyncio
    async def test_second_initial_response_is_rejected(self, registry, make_dispatcher):
        raised: list[Exception] = []

        @registry.command("twice", "Duas vezes")
        async def twice(ctx) -> None:
            await ctx.send_message("um")
            try:
                await ctx.defer()
            except AlreadyRespondedError as exc:
                raised.append(exc)

        dispatcher = make_dispatcher()
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("twice")))
        await dispatcher.background.drain()

        assert result.payload["type"] == 4
        assert len(raised) == 1

    @pytest.mark.asyncio
    async def test_subcommand_receives_typed_args(self, registry, make_dispatcher):
        seen: dict = {}

        @registry.command(
            "ban",
            "Bane",
            parent=("admin", "user"),
            options=(OptionSchema("days", OptionType.INTEGER, "Dias", required=True),),
        )
        async def ban(ctx) -> None:
            seen.update(ctx.args)
            seen["path"] = ctx.definition.path
            await ctx.send_message("ok", ephemeral=True)

        payload = command_payload(
            "admin",
            [
                {
                    "name": "user",
                    "type": 2,
                    "options": [
                        {
                            "name": "ban",
                            "type": 1,
                            "options": [{"name": "days", "type": 4, "value": 7}],
                        }
                    ],
                }
            ],
        )
        result = await make_dispatcher().dispatch(decode_interaction_payload(payload))

        assert seen == {"days": 7, "path": ("admin", "user", "ban")}
        assert result.payload == {"type": 4, "data": {"content": "ok", "flags": 64}}

    @pytest.mark.asyncio
    async def test_component_handler_gets_remainder(self, router, make_dispatcher):
        seen: list[str] = []

        @router.route("vote")
        async def vote(ctx) -> None:
            seen.append(ctx.remainder)
            await ctx.update_message("Votado")

        result = await make_dispatcher().dispatch(
            decode_interaction_payload(component_payload("vote/yes"))
        )

        assert seen == ["yes"]
        assert result.payload == {"type": 7, "data": {"content": "Votado"}}

    @pytest.mark.asyncio
    async def test_modal_fields_reach_handler(self, router, make_dispatcher):
        @router.route("feedback")
        async def feedback(ctx) -> None:
            await ctx.send_message(f"Recebido: {ctx.fields['title']}", ephemeral=True)

        result = await make_dispatcher().dispatch(
            decode_interaction_payload(modal_payload("feedback", {"title": "Bug"}))
        )

        assert result.payload["data"]["content"] == "Recebido: Bug"

    @pytest.mark.asyncio
    async def test_autocomplete_choices(self, registry, make_dispatcher):
        async def suggest(ctx) -> None:
            await ctx.autocomplete([(f"{ctx.focused_value}-1", "a"), ("outro", "b")])

        @registry.command(
            "search",
            "Busca",
            options=(OptionSchema("query", OptionType.STRING, "Consulta", autocomplete=True),),
            autocomplete=suggest,
        )
        async def search(ctx) -> None:
            await ctx.send_message("ok")

        payload = autocomplete_payload(
            "search", [{"name": "query", "type": 3, "value": "ab", "focused": True}]
        )
        result = await make_dispatcher().dispatch(decode_interaction_payload(payload))

        assert result.payload == {
            "type": 8,
            "data": {"choices": [{"name": "ab-1", "value": "a"}, {"name": "outro", "value": "b"}]},
        }


class TestSoftDeadline:
    @pytest.mark.asyncio
    async def test_slow_command_is_auto_deferred_and_edited(
        self, registry, make_dispatcher, fake_http
    ):
        @registry.command("slow", "Lento")
        async def slow(ctx) -> None:
            await asyncio.sleep(0.2)
            await ctx.send_message("pronto")

        dispatcher = make_dispatcher()
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("slow")))

        assert result.payload == {"type": 5, "data": {"flags": 0}}
        assert result.auto_deferred is True
        assert result.state is InteractionState.DEFERRED

        await dispatcher.background.drain()

        assert fake_http.operations() == ["message_edit"]
        assert fake_http.calls[0].message_id == "@original"
        assert fake_http.calls[0].payload == {"content": "pronto"}

    @pytest.mark.asyncio
    async def test_slow_component_gets_deferred_update(self, router, make_dispatcher, fake_http):
        @router.route("refresh")
        async def refresh(ctx) -> None:
            await asyncio.sleep(0.2)
            await ctx.update_message("atualizado")

        dispatcher = make_dispatcher()
        result = await dispatcher.dispatch(
            decode_interaction_payload(component_payload("refresh"))
        )
        await dispatcher.background.drain()

        assert result.payload == {"type": 6}
        assert fake_http.calls[0].payload == {"content": "atualizado"}

    @pytest.mark.asyncio
    async def test_slow_autocomplete_returns_empty_choices(self, registry, make_dispatcher):
        async def suggest(ctx) -> None:
            await asyncio.sleep(0.2)

        @registry.command(
            "search",
            "Busca",
            options=(OptionSchema("query", OptionType.STRING, "Consulta", autocomplete=True),),
            autocomplete=suggest,
        )
        async def search(ctx) -> None:
            return None

        payload = autocomplete_payload(
            "search", [{"name": "query", "type": 3, "value": "", "focused": True}]
        )
        dispatcher = make_dispatcher()
        result = await dispatcher.dispatch(decode_interaction_payload(payload))
        await dispatcher.background.drain()

        assert result.payload == {"type": 8, "data": {"choices": []}}

    @pytest.mark.asyncio
    async def test_explicit_defer_then_followup(self, registry, make_dispatcher, fake_http):
        @registry.command("report", "Relatório")
        async def report(ctx) -> None:
            await ctx.defer(ephemeral=True)
            await asyncio.sleep(0.01)
            await ctx.edit_original("feito")
            await ctx.send_followup("extra")

        dispatcher = make_dispatcher(deadline=1.0)
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("report")))
        await dispatcher.background.drain()

        assert result.payload == {"type": 5, "data": {"flags": 64}}
        assert result.auto_deferred is False
        assert fake_http.operations() == ["message_edit", "followup_create"]

    @pytest.mark.asyncio
    async def test_second_message_after_auto_defer_is_rejected(
        self, registry, make_dispatcher, fake_http
    ):
        rejected: list[str] = []

        @registry.command("twice", "Duas respostas")
        async def twice(ctx) -> None:
            await asyncio.sleep(0.1)
            await ctx.send_message("um")
            for attempt in (
                lambda: ctx.send_message("dois"),
                lambda: ctx.update_message("tres"),
                lambda: ctx.defer(),
                lambda: ctx.show_modal("form", "Form", []),
            ):
                try:
                    await attempt()
                except AlreadyRespondedError:
                    rejected.append("already_responded")

        dispatcher = make_dispatcher(deadline=0.02)
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("twice")))
        await dispatcher.background.drain()

        assert result.auto_deferred is True
        assert fake_http.operations() == ["message_edit"]
        assert fake_http.calls[0].payload == {"content": "um"}
        assert rejected == ["already_responded"] * 4

    @pytest.mark.asyncio
    async def test_defer_after_auto_defer_is_ignored(self, registry, make_dispatcher, fake_http):
        @registry.command("lazy", "Defer tardio")
        async def lazy(ctx) -> None:
            await asyncio.sleep(0.1)
            await ctx.defer()
            await ctx.send_message("ok")

        dispatcher = make_dispatcher(deadline=0.02)
        await dispatcher.dispatch(decode_interaction_payload(command_payload("lazy")))
        await dispatcher.background.drain()

        assert fake_http.operations() == ["message_edit"]


class TestHandlerFailures:
    @pytest.mark.asyncio
    async def test_error_before_response_becomes_generic_message(
        self, registry, make_dispatcher, reporter
    ):
        @registry.command("boom", "Explode")
        async def boom(ctx) -> None:
            raise RuntimeError("segredo interno")

        dispatcher = make_dispatcher()
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("boom")))
        await dispatcher.background.drain()

        assert result.payload == FAILURE_BODY
        assert isinstance(result.error, HandlerError)
        assert isinstance(result.error.__cause__, RuntimeError)
        assert "segredo" not in str(result.payload)
        assert reporter.reports == []

    @pytest.mark.asyncio
    async def test_error_after_defer_edits_original(
        self, registry, make_dispatcher, fake_http, reporter
    ):
        @registry.command("late", "Falha tardia")
        async def late(ctx) -> None:
            await ctx.defer()
            await asyncio.sleep(0.01)
            raise RuntimeError("x")

        dispatcher = make_dispatcher(deadline=1.0)
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("late")))
        await dispatcher.background.drain()

        assert result.payload == {"type": 5, "data": {"flags": 0}}
        assert fake_http.calls[0].payload == {"content": FAILURE_TEXT, "flags": 64}
        assert [type(error) for error, _ in reporter.reports] == [RuntimeError]

    @pytest.mark.asyncio
    async def test_undelivered_failure_marks_interaction_failed(
        self, registry, make_dispatcher, fake_http
    ):
        contexts: list = []
        fake_http.failures["message_edit"] = TokenExpiredError("invalid_interaction_token")

        @registry.command("late", "Falha tardia")
        async def late(ctx) -> None:
            contexts.append(ctx)
            await ctx.defer()
            raise RuntimeError("x")

        dispatcher = make_dispatcher(deadline=1.0)
        await dispatcher.dispatch(decode_interaction_payload(command_payload("late")))
        await dispatcher.background.drain()

        assert contexts[0].state is InteractionState.FAILED

    @pytest.mark.asyncio
    async def test_handler_returning_without_response(self, registry, make_dispatcher):
        @registry.command("silent", "Silêncio")
        async def silent(ctx) -> None:
            return None

        result = await make_dispatcher().dispatch(
            decode_interaction_payload(command_payload("silent"))
        )

        assert result.payload == FAILURE_BODY
        assert "handler_returned_without_response" in str(result.error)

    @pytest.mark.asyncio
    async def test_autocomplete_failure_returns_empty_choices(self, registry, make_dispatcher):
        async def suggest(ctx) -> None:
            raise ValueError("x")

        @registry.command(
            "search",
            "Busca",
            options=(OptionSchema("query", OptionType.STRING, "Consulta", autocomplete=True),),
            autocomplete=suggest,
        )
        async def search(ctx) -> None:
            return None

        payload = autocomplete_payload(
            "search", [{"name": "query", "type": 3, "value": "", "focused": True}]
        )
        result = await make_dispatcher().dispatch(decode_interaction_payload(payload))

        assert result.payload == {"type": 8, "data": {"choices": []}}


class TestRouting:
    @pytest.mark.asyncio
    async def test_unknown_command(self, make_dispatcher) -> None:
        with pytest.raises(CommandNotFoundError):
            await make_dispatcher().dispatch(decode_interaction_payload(command_payload("nope")))

    @pytest.mark.asyncio
    async def test_unknown_component_prefix(self, make_dispatcher) -> None:
        with pytest.raises(RoutingError):
            await make_dispatcher().dispatch(decode_interaction_payload(component_payload("x/1")))

    @pytest.mark.asyncio
    async def test_component_without_router(self, fake_http, registry) -> None:
        dispatcher = InteractionDispatcher(registry, FollowupCoordinator(fake_http))

        with pytest.raises(RoutingError, match="custom_id_router_not_configured"):
            await dispatcher.dispatch(decode_interaction_payload(component_payload("x")))

    @pytest.mark.asyncio
    async def test_autocomplete_without_handler(self, registry, make_dispatcher) -> None:
        @registry.command(
            "search",
            "Busca",
            options=(OptionSchema("query", OptionType.STRING, "Consulta"),),
        )
        async def search(ctx) -> None:
            return None

        payload = autocomplete_payload(
            "search", [{"name": "query", "type": 3, "value": "", "focused": True}]
        )
        with pytest.raises(NotDispatchableError):
            await make_dispatcher().dispatch(decode_interaction_payload(payload))

    @pytest.mark.asyncio
    async def test_option_schema_mismatch_is_decode_error(self, registry, make_dispatcher):
        @registry.command(
            "roll",
            "Dado",
            options=(OptionSchema("sides", OptionType.INTEGER, "Lados", required=True),),
        )
        async def roll(ctx) -> None:
            return None

        payload = command_payload("roll", [{"name": "sides", "type": 3, "value": "6"}])
        with pytest.raises(DecodeError):
            await make_dispatcher().dispatch(decode_interaction_payload(payload))


@pytest.mark.asyncio
async def test_cancelled_dispatch_posts_deferral_via_rest(registry, make_dispatcher, fake_http):
    @registry.command("slow", "Lento")
    async def slow(ctx) -> None:
        await asyncio.sleep(0.05)
        await ctx.send_message("depois")

    dispatcher = make_dispatcher(deadline=5.0)
    task = asyncio.create_task(
        dispatcher.dispatch(decode_interaction_payload(command_payload("slow")))
    )
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    await dispatcher.background.drain()

    assert fake_http.operations() == ["callback", "message_edit"]
    assert fake_http.calls[0].payload == {"type": 5, "data": {"flags": 0}}


class TestFilesAndFollowupReads:
    @pytest.mark.asyncio
    async def test_initial_response_files_are_returned(self, registry, make_dispatcher):
        @registry.command("cat", "Foto")
        async def cat(ctx) -> None:
            await ctx.send_message(MessagePayload(content="gato").add_file("cat.png", b"png"))

        result = await make_dispatcher(deadline=1.0).dispatch(
            decode_interaction_payload(command_payload("cat"))
        )

        assert [file.filename for file in result.files] == ["cat.png"]
        assert result.payload["data"]["attachments"] == [{"id": 0, "filename": "cat.png"}]

    @pytest.mark.asyncio
    async def test_auto_deferred_response_has_no_files(self, registry, make_dispatcher, fake_http):
        @registry.command("slowcat", "Foto lenta")
        async def slowcat(ctx) -> None:
            await asyncio.sleep(0.1)
            await ctx.send_message(MessagePayload(content="gato").add_file("cat.png", b"png"))

        dispatcher = make_dispatcher(deadline=0.02)
        result = await dispatcher.dispatch(decode_interaction_payload(command_payload("slowcat")))
        await dispatcher.background.drain()

        assert result.files == ()
        assert fake_http.operations() == ["message_edit"]
        assert [file.filename for file in fake_http.calls[0].files] == ["cat.png"]

    @pytest.mark.asyncio
    async def test_context_reads_followup_by_id(self, registry, make_dispatcher, fake_http):
        fetched: list[dict] = []

        @registry.command("peek", "Lê follow-up")
        async def peek(ctx) -> None:
            await ctx.defer()
            created = await ctx.send_followup("primeiro")
            fetched.append(await ctx.get_followup(created["id"]))

        dispatcher = make_dispatcher(deadline=1.0)
        await dispatcher.dispatch(decode_interaction_payload(command_payload("peek")))
        await dispatcher.background.drain()

        assert fake_http.operations() == ["followup_create", "message_get"]
        created_id = fake_http.calls[1].message_id
        assert created_id == "1001"
        assert fetched == [{"id": created_id}]
