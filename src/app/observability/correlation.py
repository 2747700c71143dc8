"""Correlation id por request, propagado aos logs via ContextVar.

A rota define o valor na entrada (header `x-correlation-id` ou UUID novo)
e restaura o anterior na saída. Tasks criadas durante o request herdam
o valor, inclusive handlers que continuam em background.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

CORRELATION_HEADER = "x-correlation-id"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Valor atual (string vazia fora de um request)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation id; gera um UUID quando ausente."""
    return _correlation_id.set(correlation_id or generate_correlation_id())


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())
