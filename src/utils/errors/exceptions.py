"""Exceções do pipeline de interações e falhas recuperáveis de infraestrutura."""

from __future__ import annotations


class InteractionError(Exception):
    """Base para todas as falhas do pipeline de interações."""


class AuthenticationError(InteractionError):
    """Assinatura ausente ou inválida.

    A mensagem é sempre a mesma para não revelar qual verificação falhou.
    """

    def __init__(self, message: str = "invalid_signature") -> None:
        super().__init__(message)


class DecodeError(InteractionError):
    """Payload malformado ou incompatível com o schema declarado."""


class RoutingError(InteractionError):
    """Nenhum handler pode ser resolvido para a interação."""


class CommandNotFoundError(RoutingError):
    """Comando (ou subcomando) não registrado."""


class NotDispatchableError(RoutingError):
    """Nó intermediário (grupo de subcomandos) não possui handler próprio."""


class RegistrationError(InteractionError, ValueError):
    """Definição de comando inválida ou duplicada."""


class HandlerError(InteractionError):
    """Falha dentro do código da aplicação (handler)."""


class ValidationError(InteractionError):
    """Resposta outbound viola limites estruturais da plataforma.

    Attributes:
        constraint: Nome da restrição violada (ex: "content_length")
    """

    def __init__(self, constraint: str, message: str | None = None) -> None:
        super().__init__(message or constraint)
        self.constraint = constraint


class AlreadyRespondedError(InteractionError):
    """Resposta inicial já enviada para esta interação."""


class TokenExpiredError(InteractionError):
    """Token de continuação fora da janela de validade."""


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""
