"""Factory de wiring para interações do Discord (bootstrap)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from api.connectors.discord import DiscordHttpClient, create_discord_http_client
from api.payload_builders.discord import InteractionResponseBuilder
from app.commands import CustomIdRouter
from app.coordinators.interactions import (
    BackgroundTaskSet,
    FollowupCoordinator,
    InteractionDispatcher,
)
from app.use_cases.interactions import ProcessInteractionUseCase
from config.settings import get_discord_settings

if TYPE_CHECKING:
    from app.commands import CommandRegistry
    from app.protocols.routing import CustomIdResolverProtocol, ErrorReporterProtocol
    from config.settings import DiscordSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InteractionRuntime:
    """Componentes montados para processar interações.

    Attributes:
        http_client: Cliente REST (follow-ups, fallback, registro de comandos)
        followups: Janelas de token e envios serializados
        dispatcher: Roteamento e prazo interno
        use_case: Fluxo completo usado pela rota
    """

    http_client: DiscordHttpClient
    followups: FollowupCoordinator
    dispatcher: InteractionDispatcher
    use_case: ProcessInteractionUseCase

    @property
    def background(self) -> BackgroundTaskSet:
        return self.dispatcher.background

    async def aclose(self, drain_timeout_seconds: float = 30.0) -> None:
        """Aguarda handlers pendentes e fecha o cliente HTTP."""
        await self.background.drain(timeout_seconds=drain_timeout_seconds)
        await self.http_client.aclose()


def create_custom_id_router(settings: DiscordSettings | None = None) -> CustomIdRouter:
    """Router de custom id com o separador configurado."""
    discord = settings or get_discord_settings()
    return CustomIdRouter(separator=discord.custom_id_separator)


def create_shared_async_client(settings: DiscordSettings) -> httpx.AsyncClient:
    """AsyncClient compartilhado (pool de conexões) para a API do Discord."""
    return httpx.AsyncClient(timeout=settings.request_timeout_seconds)


def create_interaction_runtime(
    registry: CommandRegistry,
    *,
    components: CustomIdResolverProtocol | None = None,
    modals: CustomIdResolverProtocol | None = None,
    settings: DiscordSettings | None = None,
    http_client: DiscordHttpClient | None = None,
    error_reporter: ErrorReporterProtocol | None = None,
) -> InteractionRuntime:
    """Monta dispatcher, follow-ups e use case a partir das settings.

    Args:
        registry: Comandos registrados pela aplicação
        components: Resolver de custom id para componentes
        modals: Resolver para modais (padrão: o mesmo de components)
        settings: DiscordSettings (padrão: ambiente)
        http_client: Cliente REST injetado (testes)
        error_reporter: Destino de falhas de handler após a resposta inicial
    """
    discord = settings or get_discord_settings()
    client = http_client or create_discord_http_client(
        discord, client=create_shared_async_client(discord)
    )
    builder = InteractionResponseBuilder()
    followups = FollowupCoordinator(
        client,
        builder,
        token_ttl_seconds=discord.token_ttl_seconds,
    )
    dispatcher = InteractionDispatcher(
        registry,
        followups,
        components=components,
        modals=modals,
        builder=builder,
        error_reporter=error_reporter,
        soft_deadline_seconds=discord.soft_deadline_seconds,
        handler_error_message=discord.handler_error_message,
    )
    use_case = ProcessInteractionUseCase(
        public_key=discord.public_key,
        dispatcher=dispatcher,
        max_timestamp_age_seconds=discord.max_timestamp_age_seconds,
    )
    logger.info(
        "interaction_runtime_created",
        extra={
            "command_count": len(registry),
            "soft_deadline_seconds": discord.soft_deadline_seconds,
            "token_ttl_seconds": discord.token_ttl_seconds,
        },
    )
    return InteractionRuntime(
        http_client=client,
        followups=followups,
        dispatcher=dispatcher,
        use_case=use_case,
    )


async def sync_registered_commands(
    registry: CommandRegistry,
    http_client: DiscordHttpClient,
    guild_id: str = "",
) -> list[dict]:
    """Publica a árvore de comandos do registry (bulk overwrite).

    Com guild_id o registro é por guild (propagação imediata); sem ele,
    global.
    """
    commands = registry.to_application_commands()
    return await http_client.bulk_overwrite_commands(commands, guild_id=guild_id or None)
