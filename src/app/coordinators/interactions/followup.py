"""Coordenação de follow-ups por token de interação.

Cada token tem uma janela de validade contada a partir do recebimento da
interação. Envios para o mesmo token são serializados (asyncio.Lock é FIFO,
então a ordem de chamada é a ordem de envio); tokens diferentes não
compartilham estado.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, NoReturn, TypeVar

from api.payload_builders.discord import InteractionResponseBuilder
from app.constants.discord import ORIGINAL_MESSAGE
from app.domain.responses import as_message
from utils.errors import TokenExpiredError

if TYPE_CHECKING:
    from app.domain.responses import MessageFile, MessagePayload
    from app.protocols.http_client import DiscordHttpClientProtocol

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 900.0

_T = TypeVar("_T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class DeferredState:
    """Janela de continuação de um token.

    Attributes:
        token: Token de continuação
        interaction_id: ID da interação de origem
        issued_at: Início da janela (recebimento da interação)
        expires_at: Fim da janela
        lock: Serializa envios para este token
        followups_sent: Quantidade de follow-ups criados
    """

    token: str
    interaction_id: str
    issued_at: datetime
    expires_at: datetime
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    followups_sent: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class FollowupCoordinator:
    """Envia follow-ups e edições referenciando o token de interação."""

    def __init__(
        self,
        http_client: DiscordHttpClientProtocol,
        builder: InteractionResponseBuilder | None = None,
        *,
        token_ttl_seconds: float = DEFAULT_TOKEN_TTL_SECONDS,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._http = http_client
        self._builder = builder or InteractionResponseBuilder()
        self._ttl = timedelta(seconds=token_ttl_seconds)
        self._now = now
        self._states: dict[str, DeferredState] = {}

    def open(
        self,
        token: str,
        issued_at: datetime | None = None,
        interaction_id: str = "",
    ) -> DeferredState:
        """Registra a janela do token (idempotente)."""
        state = self._states.get(token)
        if state is not None:
            return state
        started = issued_at or self._now()
        state = DeferredState(
            token=token,
            interaction_id=interaction_id,
            issued_at=started,
            expires_at=started + self._ttl,
        )
        self._states[token] = state
        return state

    def close(self, token: str) -> None:
        self._states.pop(token, None)

    def get_state(self, token: str) -> DeferredState | None:
        return self._states.get(token)

    def is_open(self, token: str) -> bool:
        state = self._states.get(token)
        return state is not None and not state.is_expired(self._now())

    def prune_expired(self) -> int:
        """Remove janelas expiradas; retorna quantas foram removidas."""
        now = self._now()
        expired = [
            token
            for token, state in self._states.items()
            if state.is_expired(now) and not state.lock.locked()
        ]
        for token in expired:
            del self._states[token]
        if expired:
            logger.debug("followup_windows_pruned", extra={"pruned": len(expired)})
        return len(expired)

    async def send_initial_response(
        self,
        interaction_id: str,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> None:
        """Envia a resposta inicial pelo endpoint REST de callback."""
        await self._http.create_interaction_response(interaction_id, token, payload, files=files)
        logger.info("interaction_callback_posted", extra={"interaction_id": interaction_id})

    async def send_followup(self, token: str, message: str | MessagePayload) -> dict[str, Any]:
        """Cria uma nova mensagem de follow-up.

        Raises:
            TokenExpiredError: Fora da janela (ou token rejeitado pela plataforma)
            ValidationError: Mensagem viola limites
        """
        normalized = as_message(message)
        payload = self._builder.build_message(normalized)
        result = await self._run(
            token,
            "followup_create",
            lambda: self._http.create_followup_message(token, payload, files=normalized.files),
            counts_as_followup=True,
        )
        return result

    async def edit_original(
        self,
        token: str,
        message: str | MessagePayload,
        *,
        require_body: bool = False,
    ) -> dict[str, Any]:
        """Edita a resposta inicial (inclusive a deferida)."""
        normalized = as_message(message)
        payload = self._builder.build_message(normalized, require_body=require_body)
        return await self._run(
            token,
            "original_edit",
            lambda: self._http.edit_webhook_message(
                token, ORIGINAL_MESSAGE, payload, files=normalized.files
            ),
        )

    async def edit_followup(
        self,
        token: str,
        message_id: str,
        message: str | MessagePayload,
    ) -> dict[str, Any]:
        normalized = as_message(message)
        payload = self._builder.build_message(normalized, require_body=False)
        return await self._run(
            token,
            "followup_edit",
            lambda: self._http.edit_webhook_message(
                token, message_id, payload, files=normalized.files
            ),
        )

    async def get_original(self, token: str) -> dict[str, Any]:
        return await self._run(
            token,
            "original_get",
            lambda: self._http.get_webhook_message(token, ORIGINAL_MESSAGE),
        )

    async def get_followup(self, token: str, message_id: str) -> dict[str, Any]:
        return await self._run(
            token,
            "followup_get",
            lambda: self._http.get_webhook_message(token, message_id),
        )

    async def delete_original(self, token: str) -> None:
        await self._run(
            token,
            "original_delete",
            lambda: self._http.delete_webhook_message(token, ORIGINAL_MESSAGE),
        )

    async def delete_followup(self, token: str, message_id: str) -> None:
        await self._run(
            token,
            "followup_delete",
            lambda: self._http.delete_webhook_message(token, message_id),
        )

    async def _run(
        self,
        token: str,
        operation: str,
        call: Callable[[], Awaitable[_T]],
        *,
        counts_as_followup: bool = False,
    ) -> _T:
        state = self._active_state(token, operation)
        async with state.lock:
            # A janela pode ter fechado enquanto aguardava a vez
            if state.is_expired(self._now()):
                self._expire(state, operation)
            try:
                result = await call()
            except TokenExpiredError:
                self._states.pop(token, None)
                logger.warning(
                    "followup_token_rejected",
                    extra={"operation": operation, "interaction_id": state.interaction_id},
                )
                raise
            if counts_as_followup:
                state.followups_sent += 1
        return result

    def _active_state(self, token: str, operation: str) -> DeferredState:
        state = self._states.get(token)
        if state is None:
            logger.warning("followup_token_unknown", extra={"operation": operation})
            raise TokenExpiredError("unknown_interaction_token")
        if state.is_expired(self._now()):
            self._expire(state, operation)
        return state

    def _expire(self, state: DeferredState, operation: str) -> NoReturn:
        self._states.pop(state.token, None)
        logger.warning(
            "followup_token_expired",
            extra={"operation": operation, "interaction_id": state.interaction_id},
        )
        raise TokenExpiredError("interaction_token_expired")
