"""Contexto entregue aos handlers.

Expõe os dados da interação e a capacidade de resposta inicial única.
A resposta inicial é publicada em um Future compartilhado com o
dispatcher, que a devolve como corpo da resposta HTTP; follow-ups e
edições são delegados ao FollowupCoordinator.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from app.constants.discord import MessageFlags
from app.domain.commands import Choice
from app.domain.interactions import (
    ApplicationCommandInteraction,
    AutocompleteInteraction,
    ComponentInteraction,
    ModalSubmitInteraction,
)
from app.domain.responses import (
    DEFERRAL,
    AutocompleteResult,
    DeferredMessage,
    DeferredUpdate,
    Message,
    MessagePayload,
    Modal,
    UpdateMessage,
    as_message,
)
from fsm import InteractionState
from utils.errors import AlreadyRespondedError

if TYPE_CHECKING:
    from api.payload_builders.discord import InteractionResponseBuilder
    from app.coordinators.interactions.followup import FollowupCoordinator
    from app.domain.commands import CommandDefinition
    from app.domain.interactions import Interaction, OptionValue, UserRef
    from app.domain.responses import ResponseEnvelope
    from fsm import InteractionStateMachine

logger = logging.getLogger(__name__)


class InitialResponseSlot:
    """Posição única da resposta inicial de uma interação.

    Attributes:
        fsm: Máquina de estados da interação
        future: Recebe o corpo serializado do callback (uma única vez)
        envelope: Resposta inicial aceita
        auto_deferred: True se a resposta foi um ACK automático do dispatcher
        redirected: True quando o handler já ocupou a resposta inicial com
            uma edição após o ACK automático
    """

    __slots__ = ("auto_deferred", "envelope", "fsm", "future", "redirected")

    def __init__(
        self,
        fsm: InteractionStateMachine,
        future: asyncio.Future[dict[str, Any]],
    ) -> None:
        self.fsm = fsm
        self.future = future
        self.envelope: ResponseEnvelope | None = None
        self.auto_deferred = False
        self.redirected = False

    @property
    def acknowledged(self) -> bool:
        return self.future.done()

    def acknowledge(
        self,
        envelope: ResponseEnvelope,
        payload: dict[str, Any],
        *,
        trigger: str,
        auto: bool = False,
    ) -> None:
        """Publica a resposta inicial.

        Raises:
            AlreadyRespondedError: Se já existe resposta inicial
        """
        if self.future.done():
            raise AlreadyRespondedError("initial_response_already_sent")
        target = (
            InteractionState.DEFERRED
            if isinstance(envelope, DEFERRAL)
            else InteractionState.RESPONDED
        )
        result = self.fsm.transition(target, trigger, {"response": type(envelope).__name__})
        if not result.success:
            logger.warning(
                "interaction_transition_rejected",
                extra={"interaction_id": self.fsm.interaction_id, "reason": result.error_reason},
            )
        self.envelope = envelope
        self.auto_deferred = auto
        self.future.set_result(payload)


class InteractionContext:
    """Dados da interação + operações de resposta para o handler."""

    __slots__ = ("_builder", "_followups", "_interaction", "_slot", "definition", "remainder")

    def __init__(
        self,
        interaction: Interaction,
        slot: InitialResponseSlot,
        builder: InteractionResponseBuilder,
        followups: FollowupCoordinator,
        *,
        definition: CommandDefinition | None = None,
        remainder: str = "",
    ) -> None:
        self._interaction = interaction
        self._slot = slot
        self._builder = builder
        self._followups = followups
        self.definition = definition
        self.remainder = remainder

    # ──────────────────────────────────────────────────────────────
    # Dados da interação
    # ──────────────────────────────────────────────────────────────

    @property
    def interaction(self) -> Interaction:
        return self._interaction

    @property
    def token(self) -> str:
        return self._interaction.token

    @property
    def invoker(self) -> UserRef | None:
        return self._interaction.invoker

    @property
    def state(self) -> InteractionState:
        return self._slot.fsm.current_state

    @property
    def responded(self) -> bool:
        """True se a resposta inicial já existe (inclusive ACK automático)."""
        return self._slot.acknowledged

    @property
    def args(self) -> dict[str, OptionValue | None]:
        """Opções folha do comando (vazio para componentes e modais)."""
        match self._interaction:
            case ApplicationCommandInteraction(command=command) | AutocompleteInteraction(
                command=command
            ):
                return command.args
            case _:
                return {}

    @property
    def focused(self) -> str | None:
        """Nome da opção em foco (apenas autocomplete)."""
        if isinstance(self._interaction, AutocompleteInteraction):
            return self._interaction.focused
        return None

    @property
    def focused_value(self) -> str | None:
        if isinstance(self._interaction, AutocompleteInteraction):
            return self._interaction.command.focused_value
        return None

    @property
    def values(self) -> tuple[str, ...]:
        if isinstance(self._interaction, ComponentInteraction):
            return self._interaction.values
        return ()

    @property
    def fields(self) -> Mapping[str, str]:
        if isinstance(self._interaction, ModalSubmitInteraction):
            return self._interaction.fields
        return {}

    # ──────────────────────────────────────────────────────────────
    # Resposta inicial (exatamente uma)
    # ──────────────────────────────────────────────────────────────

    async def respond(self, envelope: ResponseEnvelope) -> None:
        """Envia a resposta inicial.

        Depois de um ACK automático, a primeira mensagem vira edição da
        resposta original e defers são ignorados; qualquer chamada após essa
        edição falha como segunda resposta.

        Raises:
            AlreadyRespondedError: Resposta inicial já enviada
            ValidationError: Resposta incompatível ou fora dos limites
        """
        slot = self._slot
        if slot.acknowledged and (not slot.auto_deferred or slot.redirected):
            raise AlreadyRespondedError("initial_response_already_sent")

        payload = self._builder.build(envelope, self._interaction)

        if not slot.auto_deferred:
            slot.acknowledge(envelope, payload, trigger="handler_responded")
            return

        match envelope:
            case Message(message=message):
                slot.redirected = True
                await self.edit_original(message, require_body=True)
            case UpdateMessage(message=message):
                slot.redirected = True
                await self.edit_original(message)
            case DeferredMessage() | DeferredUpdate():
                logger.debug(
                    "interaction_defer_ignored",
                    extra={"interaction_id": self._interaction.id},
                )
            case _:
                raise AlreadyRespondedError("initial_response_already_sent")

    async def send_message(
        self,
        content: str | MessagePayload,
        *,
        ephemeral: bool = False,
    ) -> None:
        await self.respond(Message(as_message(content, ephemeral=ephemeral)))

    async def defer(self, *, ephemeral: bool = False) -> None:
        flags = MessageFlags.EPHEMERAL if ephemeral else MessageFlags.NONE
        await self.respond(DeferredMessage(flags=flags))

    async def update_message(self, content: str | MessagePayload) -> None:
        await self.respond(UpdateMessage(as_message(content)))

    async def defer_update(self) -> None:
        await self.respond(DeferredUpdate())

    async def show_modal(
        self,
        custom_id: str,
        title: str,
        components: Iterable[Mapping[str, Any]],
    ) -> None:
        await self.respond(Modal(custom_id=custom_id, title=title, components=tuple(components)))

    async def autocomplete(self, choices: Iterable[Choice | tuple[str, str | int | float]]) -> None:
        normalized = tuple(
            choice if isinstance(choice, Choice) else Choice(name=choice[0], value=choice[1])
            for choice in choices
        )
        await self.respond(AutocompleteResult(choices=normalized))

    # ──────────────────────────────────────────────────────────────
    # Follow-ups (delegados ao coordinator)
    # ──────────────────────────────────────────────────────────────

    async def send_followup(
        self,
        message: str | MessagePayload,
        *,
        ephemeral: bool = False,
    ) -> dict[str, Any]:
        result = await self._followups.send_followup(
            self.token, as_message(message, ephemeral=ephemeral)
        )
        self._mark_followed_up("followup_sent")
        return result

    async def edit_original(
        self,
        message: str | MessagePayload,
        *,
        require_body: bool = False,
    ) -> dict[str, Any]:
        result = await self._followups.edit_original(
            self.token, message, require_body=require_body
        )
        self._mark_followed_up("original_edited")
        return result

    async def edit_followup(self, message_id: str, message: str | MessagePayload) -> dict[str, Any]:
        result = await self._followups.edit_followup(self.token, message_id, message)
        self._mark_followed_up("followup_edited")
        return result

    async def get_original(self) -> dict[str, Any]:
        return await self._followups.get_original(self.token)

    async def get_followup(self, message_id: str) -> dict[str, Any]:
        return await self._followups.get_followup(self.token, message_id)

    async def delete_original(self) -> None:
        await self._followups.delete_original(self.token)
        self._mark_followed_up("original_deleted")

    async def delete_followup(self, message_id: str) -> None:
        await self._followups.delete_followup(self.token, message_id)
        self._mark_followed_up("followup_deleted")

    def _mark_followed_up(self, trigger: str) -> None:
        self._slot.fsm.advance(InteractionState.FOLLOWED_UP, trigger)
