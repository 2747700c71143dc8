"""Use case de ponta a ponta para uma entrega de interação.

Bytes + headers → autenticação → decode → dispatch → resultado HTTP.
A rota apenas traduz o InteractionOutcome em resposta.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from api.connectors.discord.webhook import parse_interaction_request
from utils.errors import (
    AuthenticationError,
    DecodeError,
    HandlerError,
    InteractionError,
    RoutingError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.coordinators.interactions import InteractionDispatcher
    from app.domain.responses import MessageFile

logger = logging.getLogger(__name__)


class OutcomeKind(StrEnum):
    HANDLED = "handled"
    SIGNATURE_REJECTED = "signature_rejected"
    DECODE_ERROR = "decode_error"
    ROUTING_ERROR = "routing_error"
    HANDLER_ERROR = "handler_error"


@dataclass(frozen=True, slots=True)
class InteractionOutcome:
    """Resultado do processamento de uma entrega.

    Attributes:
        kind: Classificação do resultado
        status_code: Status HTTP a devolver
        body: Corpo JSON do callback (None quando não há corpo)
        error: Erro que motivou o resultado, se houver
        files: Arquivos da resposta inicial; com eles o corpo vira multipart
    """

    kind: OutcomeKind
    status_code: int
    body: dict[str, Any] | None = None
    error: InteractionError | None = None
    files: tuple[MessageFile, ...] = ()

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.HANDLED


class ProcessInteractionUseCase:
    """Processa uma entrega de interação recebida pelo webhook."""

    def __init__(
        self,
        *,
        public_key: str,
        dispatcher: InteractionDispatcher,
        max_timestamp_age_seconds: float = 0.0,
    ) -> None:
        self._public_key = public_key
        self._dispatcher = dispatcher
        self._max_age = max_timestamp_age_seconds

    async def execute(
        self,
        raw_body: bytes,
        headers: Mapping[str, str],
    ) -> InteractionOutcome:
        """Executa o fluxo completo.

        Autenticação e decode são terminais para a entrega; falhas de
        roteamento e de handler viram mensagem genérica de falha.
        """
        try:
            interaction, _ = parse_interaction_request(
                raw_body,
                headers,
                self._public_key,
                max_age_seconds=self._max_age,
            )
        except AuthenticationError as exc:
            logger.warning("interaction_signature_rejected")
            return InteractionOutcome(OutcomeKind.SIGNATURE_REJECTED, 401, error=exc)
        except DecodeError as exc:
            logger.warning("interaction_decode_failed", extra={"reason": str(exc)})
            return InteractionOutcome(OutcomeKind.DECODE_ERROR, 400, error=exc)

        try:
            result = await self._dispatcher.dispatch(interaction)
        except RoutingError as exc:
            logger.warning(
                "interaction_routing_failed",
                extra={**interaction.to_log_dict(), "reason": str(exc)},
            )
            return InteractionOutcome(
                OutcomeKind.ROUTING_ERROR,
                200,
                body=self._dispatcher.failure_payload(interaction),
                error=exc,
            )
        except DecodeError as exc:
            # Opções recebidas não batem com o schema registrado
            logger.warning(
                "interaction_options_rejected",
                extra={**interaction.to_log_dict(), "reason": str(exc)},
            )
            return InteractionOutcome(OutcomeKind.DECODE_ERROR, 400, error=exc)
        except InteractionError as exc:
            logger.exception("interaction_dispatch_failed", extra=interaction.to_log_dict())
            error = HandlerError(f"dispatch_failed: {type(exc).__name__}")
            error.__cause__ = exc
            return InteractionOutcome(OutcomeKind.HANDLER_ERROR, 500, error=error)

        if result.error is not None:
            return InteractionOutcome(
                OutcomeKind.HANDLER_ERROR,
                200,
                body=result.payload,
                error=result.error,
            )

        logger.info(
            "interaction_handled",
            extra={
                **interaction.to_log_dict(),
                "state": result.state.value,
                "auto_deferred": result.auto_deferred,
            },
        )
        return InteractionOutcome(
            OutcomeKind.HANDLED, 200, body=result.payload, files=result.files
        )
