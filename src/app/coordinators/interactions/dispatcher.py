"""Roteamento e execução de handlers com prazo de resposta.

Fluxo por interação:
1. Ping → Pong, sem lookup
2. Resolve o handler (registry para comandos/autocomplete, custom id
   para componentes/modais)
3. Executa o handler em uma task e corre contra o prazo interno:
   - handler responde primeiro → essa é a resposta HTTP
   - prazo expira primeiro → ACK automático (exatamente um)
4. A task do handler continua em background após a resposta
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from api.payload_builders.discord import InteractionResponseBuilder, build_callback_payload
from app.commands.registry import validate_invocation
from app.domain.interactions import (
    ApplicationCommandInteraction,
    AutocompleteInteraction,
    ComponentInteraction,
    ModalSubmitInteraction,
    PingInteraction,
)
from app.domain.responses import (
    AutocompleteResult,
    DeferredMessage,
    DeferredUpdate,
    Message,
    MessagePayload,
    Pong,
    files_of,
)
from config.settings.discord import DEFAULT_HANDLER_ERROR_MESSAGE
from fsm import InteractionState, create_fsm
from utils.errors import (
    HandlerError,
    InfrastructureError,
    NotDispatchableError,
    RoutingError,
    TokenExpiredError,
)

from .background import BackgroundTaskSet
from .context import InitialResponseSlot, InteractionContext

if TYPE_CHECKING:
    from app.commands.registry import CommandRegistry
    from app.domain.commands import CommandDefinition, Handler
    from app.domain.interactions import Interaction
    from app.domain.responses import MessageFile, ResponseEnvelope
    from app.protocols.routing import CustomIdResolverProtocol, ErrorReporterProtocol

    from .followup import FollowupCoordinator

logger = logging.getLogger(__name__)

DEFAULT_SOFT_DEADLINE_SECONDS = 2.5


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Resultado do dispatch.

    Attributes:
        payload: Corpo do callback a devolver na resposta HTTP
        state: Estado da interação no momento da resposta
        auto_deferred: True se o prazo interno disparou o ACK automático
        error: Falha do handler convertida em mensagem genérica
        files: Arquivos da resposta inicial (corpo multipart)
    """

    payload: dict[str, Any]
    state: InteractionState
    auto_deferred: bool = False
    error: HandlerError | None = None
    files: tuple[MessageFile, ...] = ()


class InteractionDispatcher:
    """Resolve handlers e garante exatamente uma resposta inicial."""

    def __init__(
        self,
        registry: CommandRegistry,
        followups: FollowupCoordinator,
        *,
        components: CustomIdResolverProtocol | None = None,
        modals: CustomIdResolverProtocol | None = None,
        builder: InteractionResponseBuilder | None = None,
        background: BackgroundTaskSet | None = None,
        error_reporter: ErrorReporterProtocol | None = None,
        soft_deadline_seconds: float = DEFAULT_SOFT_DEADLINE_SECONDS,
        handler_error_message: str = DEFAULT_HANDLER_ERROR_MESSAGE,
    ) -> None:
        self._registry = registry
        self._followups = followups
        self._components = components
        self._modals = modals or components
        self._builder = builder or InteractionResponseBuilder()
        self.background = background or BackgroundTaskSet()
        self._error_reporter = error_reporter
        self._soft_deadline = soft_deadline_seconds
        self._handler_error_message = handler_error_message

    async def dispatch(self, interaction: Interaction) -> DispatchResult:
        """Executa o handler e retorna a resposta inicial.

        Raises:
            RoutingError: Nenhum handler para a interação
            DecodeError: Opções incompatíveis com o schema registrado
        """
        fsm = create_fsm(interaction.id)
        if isinstance(interaction, PingInteraction):
            fsm.transition(InteractionState.RESPONDED, "ping")
            return DispatchResult(payload=build_callback_payload(Pong()), state=fsm.current_state)

        handler, definition, remainder = self._resolve(interaction)

        self._followups.prune_expired()
        self._followups.open(interaction.token, interaction.received_at, interaction.id)

        slot = InitialResponseSlot(fsm, asyncio.get_running_loop().create_future())
        context = InteractionContext(
            interaction,
            slot,
            self._builder,
            self._followups,
            definition=definition,
            remainder=remainder,
        )
        fsm.transition(InteractionState.DISPATCHED, "handler_resolved")
        logger.info("interaction_dispatched", extra=interaction.to_log_dict())

        errors: list[HandlerError] = []
        task = asyncio.create_task(self._run_handler(handler, context, slot, errors))
        try:
            await asyncio.wait(
                {slot.future, task},
                timeout=self._soft_deadline,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            self.background.track(task)
            await self._cancellation_fallback(interaction, slot)
            raise

        if not slot.acknowledged:
            self._auto_defer(interaction, slot)

        self.background.track(task)
        return DispatchResult(
            payload=slot.future.result(),
            state=fsm.current_state,
            auto_deferred=slot.auto_deferred,
            error=errors[0] if errors else None,
            files=files_of(slot.envelope) if slot.envelope is not None else (),
        )

    def failure_payload(self, interaction: Interaction) -> dict[str, Any]:
        """Resposta genérica de falha (efêmera) compatível com a interação."""
        return build_callback_payload(self._failure_envelope(interaction))

    def _resolve(self, interaction: Interaction) -> tuple[Handler, CommandDefinition | None, str]:
        match interaction:
            case ApplicationCommandInteraction(command=command):
                definition = self._registry.lookup(
                    command.name, command.subcommand_path, command.command_type
                )
                validate_invocation(definition, _received_types(command.leaf_options))
                return definition.handler, definition, ""
            case AutocompleteInteraction(command=command):
                definition = self._registry.lookup(
                    command.name, command.subcommand_path, command.command_type
                )
                validate_invocation(definition, _received_types(command.leaf_options), partial=True)
                if definition.autocomplete_handler is None:
                    raise NotDispatchableError(f"autocomplete_not_supported: {command.name}")
                return definition.autocomplete_handler, definition, ""
            case ComponentInteraction(custom_id=custom_id):
                handler, remainder = self._resolve_custom_id(self._components, custom_id)
                return handler, None, remainder
            case ModalSubmitInteraction(custom_id=custom_id):
                handler, remainder = self._resolve_custom_id(self._modals, custom_id)
                return handler, None, remainder
        raise RoutingError(f"unsupported_interaction: {interaction.type.name}")

    @staticmethod
    def _resolve_custom_id(
        resolver: CustomIdResolverProtocol | None,
        custom_id: str,
    ) -> tuple[Handler, str]:
        if resolver is None:
            raise RoutingError("custom_id_router_not_configured")
        return resolver.resolve(custom_id)

    async def _run_handler(
        self,
        handler: Handler,
        context: InteractionContext,
        slot: InitialResponseSlot,
        errors: list[HandlerError],
    ) -> None:
        interaction = context.interaction
        try:
            await handler(context)
        except Exception as exc:
            logger.exception(
                "interaction_handler_failed",
                extra={**interaction.to_log_dict(), "error_type": type(exc).__name__},
            )
            error = HandlerError(f"{type(exc).__name__} in handler")
            error.__cause__ = exc
            errors.append(error)
            await self._on_handler_error(exc, context, slot)
            self._close(slot, "handler_failed")
            return

        if not slot.acknowledged:
            # Handler terminou sem responder: a plataforma exibiria falha genérica
            logger.warning("interaction_handler_no_response", extra=interaction.to_log_dict())
            errors.append(HandlerError("handler_returned_without_response"))
            slot.acknowledge(
                self._failure_envelope(interaction),
                self.failure_payload(interaction),
                trigger="handler_no_response",
            )
        self._close(slot, "handler_completed")

    async def _on_handler_error(
        self,
        exc: Exception,
        context: InteractionContext,
        slot: InitialResponseSlot,
    ) -> None:
        interaction = context.interaction
        if not slot.acknowledged:
            slot.acknowledge(
                self._failure_envelope(interaction),
                self.failure_payload(interaction),
                trigger="handler_error",
            )
            return

        if slot.fsm.current_state is InteractionState.DEFERRED:
            # ACK sem conteúdo: substitui o indicador de carregamento
            try:
                await context.edit_original(
                    MessagePayload.text(self._handler_error_message, ephemeral=True)
                )
            except (TokenExpiredError, InfrastructureError) as delivery_exc:
                logger.warning(
                    "interaction_failure_message_undelivered",
                    extra={
                        "interaction_id": interaction.id,
                        "error_type": type(delivery_exc).__name__,
                    },
                )
                slot.fsm.transition(InteractionState.FAILED, "failure_undelivered")

        if self._error_reporter is not None:
            await self._error_reporter.report(exc, interaction)

    def _auto_defer(self, interaction: Interaction, slot: InitialResponseSlot) -> None:
        envelope = self._deferral_for(interaction)
        slot.acknowledge(
            envelope,
            build_callback_payload(envelope),
            trigger="soft_deadline",
            auto=True,
        )
        logger.info(
            "interaction_auto_deferred",
            extra={
                **interaction.to_log_dict(),
                "response": type(envelope).__name__,
                "soft_deadline_seconds": self._soft_deadline,
            },
        )

    async def _cancellation_fallback(
        self,
        interaction: Interaction,
        slot: InitialResponseSlot,
    ) -> None:
        """Posta o ACK pelo endpoint REST quando o request é cancelado."""
        if slot.acknowledged:
            return
        envelope = self._deferral_for(interaction)
        payload = build_callback_payload(envelope)
        slot.acknowledge(envelope, payload, trigger="dispatch_cancelled", auto=True)
        logger.warning("interaction_dispatch_cancelled", extra=interaction.to_log_dict())
        try:
            await self._followups.send_initial_response(interaction.id, interaction.token, payload)
        except (TokenExpiredError, InfrastructureError) as exc:
            logger.warning(
                "interaction_fallback_failed",
                extra={"interaction_id": interaction.id, "error_type": type(exc).__name__},
            )

    @staticmethod
    def _deferral_for(interaction: Interaction) -> ResponseEnvelope:
        """ACK automático: autocomplete não pode ser deferido."""
        if isinstance(interaction, AutocompleteInteraction):
            return AutocompleteResult(choices=())
        if interaction.has_message:
            return DeferredUpdate()
        return DeferredMessage()

    def _failure_envelope(self, interaction: Interaction) -> ResponseEnvelope:
        if isinstance(interaction, AutocompleteInteraction):
            return AutocompleteResult(choices=())
        return Message(MessagePayload.text(self._handler_error_message, ephemeral=True))

    @staticmethod
    def _close(slot: InitialResponseSlot, trigger: str) -> None:
        slot.fsm.advance(InteractionState.CLOSED, trigger)


def _received_types(options: Any) -> dict[str, Any]:
    return {option.name: option.type for option in options}
