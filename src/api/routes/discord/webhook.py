"""Endpoint de webhook de interações do Discord.

Endpoints:
- POST /interactions: recebimento de interações assinadas

Fluxo:
1. Lê o body bruto (a assinatura cobre os bytes exatos)
2. Delega ao ProcessInteractionUseCase
3. Traduz o InteractionOutcome em resposta HTTP (multipart quando há arquivos)

Segurança:
- Assinatura Ed25519 obrigatória, inclusive para Ping
- Corpo de erro genérico, sem detalhes da falha
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from api.payload_builders.discord import encode_multipart
from app.observability import (
    CORRELATION_HEADER,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.use_cases.interactions import OutcomeKind

if TYPE_CHECKING:
    from app.use_cases.interactions import InteractionOutcome, ProcessInteractionUseCase

logger = logging.getLogger(__name__)

router = APIRouter()

_PLAIN_BODIES = {
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def _get_use_case(request: Request) -> ProcessInteractionUseCase | None:
    return getattr(request.app.state, "interaction_use_case", None)


@router.post("", response_model=None)
async def receive_interaction(request: Request) -> Response:
    """Recebe uma interação e devolve a resposta inicial no corpo."""
    token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    try:
        use_case = _get_use_case(request)
        if use_case is None:
            logger.error("interaction_use_case_unavailable")
            return Response(
                content="Service Unavailable",
                media_type="text/plain",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        raw_body = await request.body()
        outcome = await use_case.execute(raw_body, request.headers)

        logger.info(
            "interaction_request_completed",
            extra={
                "outcome": outcome.kind.value,
                "status_code": outcome.status_code,
                "payload_size": len(raw_body),
                "correlation_id": get_correlation_id(),
            },
        )
        return _to_response(outcome)
    finally:
        reset_correlation_id(token)


def _to_response(outcome: InteractionOutcome) -> Response:
    if outcome.body is not None and outcome.files:
        content, content_type = encode_multipart(outcome.body, outcome.files)
        return Response(content=content, media_type=content_type, status_code=outcome.status_code)
    if outcome.body is not None and outcome.kind is not OutcomeKind.SIGNATURE_REJECTED:
        return JSONResponse(content=outcome.body, status_code=outcome.status_code)
    return Response(
        content=_PLAIN_BODIES.get(outcome.status_code, ""),
        media_type="text/plain",
        status_code=outcome.status_code,
    )
