"""Verificação Ed25519 das entregas de interação.

Mensagem assinada = bytes do timestamp + corpo bruto (antes de qualquer
parse). Toda falha produz o mesmo resultado rejeitado; o motivo detalhado
fica só no log em nível debug.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from app.constants.discord import SIGNATURE_HEADER, TIMESTAMP_HEADER

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


@dataclass(frozen=True, slots=True)
class SignatureResult:
    """Resultado da verificação (uniforme para qualquer falha)."""

    valid: bool
    error: str | None = None


AUTHENTIC = SignatureResult(valid=True)
REJECTED = SignatureResult(valid=False, error="invalid_signature")


@lru_cache(maxsize=8)
def load_public_key(public_key_hex: str) -> Ed25519PublicKey:
    """Carrega (e memoiza) a chave pública a partir do hex configurado.

    Raises:
        ValueError: Se o hex for inválido ou o tamanho incorreto
    """
    raw = bytes.fromhex(public_key_hex)
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise ValueError("invalid_public_key_length")
    return Ed25519PublicKey.from_public_bytes(raw)


def extract_signature_headers(headers: Mapping[str, str]) -> tuple[str | None, str | None]:
    """Extrai (assinatura, timestamp) sem diferenciar maiúsculas."""
    lowered = {key.lower(): value for key, value in headers.items()}
    return lowered.get(SIGNATURE_HEADER), lowered.get(TIMESTAMP_HEADER)


def verify_interaction_signature(
    raw_body: bytes,
    signature: str | None,
    timestamp: str | None,
    public_key: str | None,
    *,
    max_age_seconds: float = 0.0,
    now: float | None = None,
) -> SignatureResult:
    """Verifica a assinatura de uma entrega.

    Args:
        raw_body: Corpo exatamente como recebido
        signature: Hex da assinatura (header X-Signature-Ed25519)
        timestamp: Header X-Signature-Timestamp
        public_key: Chave pública da aplicação em hex
        max_age_seconds: Janela anti-replay (0 desativa)
        now: Relógio em epoch seconds (testes)

    Returns:
        AUTHENTIC ou REJECTED
    """
    if not signature or not timestamp or not public_key:
        logger.debug("signature_rejected", extra={"reason": "missing_input"})
        return REJECTED

    try:
        key = load_public_key(public_key)
        signature_bytes = bytes.fromhex(signature)
    except ValueError:
        logger.debug("signature_rejected", extra={"reason": "malformed_hex"})
        return REJECTED

    if len(signature_bytes) != SIGNATURE_LENGTH:
        logger.debug("signature_rejected", extra={"reason": "invalid_length"})
        return REJECTED

    try:
        key.verify(signature_bytes, timestamp.encode() + raw_body)
    except InvalidSignature:
        logger.debug("signature_rejected", extra={"reason": "mismatch"})
        return REJECTED

    if max_age_seconds > 0 and _is_stale(timestamp, max_age_seconds, now):
        logger.debug("signature_rejected", extra={"reason": "stale_timestamp"})
        return REJECTED

    return AUTHENTIC


def verify_request_signature(
    raw_body: bytes,
    headers: Mapping[str, str],
    public_key: str | None,
    *,
    max_age_seconds: float = 0.0,
) -> SignatureResult:
    """Atalho: extrai headers e verifica."""
    signature, timestamp = extract_signature_headers(headers)
    return verify_interaction_signature(
        raw_body,
        signature,
        timestamp,
        public_key,
        max_age_seconds=max_age_seconds,
    )


def _is_stale(timestamp: str, max_age_seconds: float, now: float | None) -> bool:
    try:
        issued = float(timestamp)
    except ValueError:
        return True
    current = time.time() if now is None else now
    return abs(current - issued) > max_age_seconds
