"""Parse e validação inicial da entrega (sem conteúdo em log)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from api.normalizers.discord import decode_interaction
from utils.errors import AuthenticationError

from ..signature import SignatureResult, verify_request_signature

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from app.domain.interactions import Interaction


def parse_interaction_request(
    raw_body: bytes,
    headers: Mapping[str, str],
    public_key: str | None,
    *,
    max_age_seconds: float = 0.0,
    received_at: datetime | None = None,
) -> tuple[Interaction, SignatureResult]:
    """Autentica e decodifica uma entrega de interação.

    A verificação é incondicional (inclusive para Ping) e acontece antes
    de qualquer parse do corpo.

    Args:
        raw_body: Corpo bruto do request
        headers: Headers recebidos
        public_key: Chave pública da aplicação (hex)
        max_age_seconds: Janela anti-replay (0 desativa)
        received_at: Instante de recebimento

    Raises:
        AuthenticationError: Se assinatura ausente ou inválida
        DecodeError: Se o payload não for uma interação válida

    Returns:
        (interaction, SignatureResult)
    """
    signature_result = verify_request_signature(
        raw_body,
        headers,
        public_key,
        max_age_seconds=max_age_seconds,
    )
    if not signature_result.valid:
        raise AuthenticationError()

    interaction = decode_interaction(raw_body, received_at=received_at)
    return interaction, signature_result
