"""Contratos de roteamento e de reporte de erros do dispatcher."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.commands import Handler
    from app.domain.interactions import Interaction


class CustomIdResolverProtocol(Protocol):
    """Resolve o custom id de um componente/modal para (handler, resto).

    Deve levantar RoutingError quando nenhum handler corresponde.
    """

    def resolve(self, custom_id: str) -> tuple[Handler, str]: ...


class ErrorReporterProtocol(Protocol):
    """Recebe falhas de handler que não podem mais virar resposta."""

    async def report(self, error: BaseException, interaction: Interaction) -> None: ...
