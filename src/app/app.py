"""Fábrica da aplicação ASGI (FastAPI) de interações.

A aplicação registra seus comandos em um CommandRegistry e entrega o
registry à fábrica; o lifespan congela o registry, publica os comandos
(opcional) e drena handlers pendentes no shutdown.

Uso:
    registry = CommandRegistry()

    @registry.command("ping", "Responde pong")
    async def ping(ctx):
        await ctx.send_message("pong")

    app = create_app(registry)

    # uvicorn meu_bot:app --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from app.bootstrap import (
    create_interaction_runtime,
    initialize_app,
    sync_registered_commands,
    validate_runtime_settings,
)
from app.commands import CustomIdRouter
from config.logging import get_logger
from config.settings import get_base_settings, get_discord_settings
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from app.bootstrap import InteractionRuntime
    from app.commands import CommandRegistry
    from app.protocols.routing import CustomIdResolverProtocol, ErrorReporterProtocol
    from config.settings import DiscordSettings

logger = get_logger(__name__)

SHUTDOWN_DRAIN_SECONDS = 30.0


def create_app(
    registry: CommandRegistry,
    *,
    components: CustomIdResolverProtocol | None = None,
    modals: CustomIdResolverProtocol | None = None,
    settings: DiscordSettings | None = None,
    runtime: InteractionRuntime | None = None,
    error_reporter: ErrorReporterProtocol | None = None,
    interactions_path: str = "/interactions",
) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        registry: Comandos da aplicação (congelado no startup)
        components: Resolver de custom id para componentes
        modals: Resolver para modais (padrão: o mesmo de components)
        settings: DiscordSettings (padrão: ambiente)
        runtime: Runtime já montado (testes); ignora os demais argumentos de wiring
        error_reporter: Destino de falhas de handler após a resposta inicial
        interactions_path: Caminho do Interactions Endpoint URL
    """
    discord = settings or get_discord_settings()
    service_name = get_base_settings().service_name

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: valida settings, congela registry, sincroniza comandos.

        Shutdown: drena handlers em background e fecha o cliente HTTP.
        """
        logger.info("app_starting", extra={"service": service_name})
        validate_runtime_settings()
        registry.freeze()
        for router in (components, modals):
            if isinstance(router, CustomIdRouter):
                router.freeze()

        interaction_runtime = runtime or create_interaction_runtime(
            registry,
            components=components,
            modals=modals,
            settings=discord,
            error_reporter=error_reporter,
        )
        app.state.command_registry = registry
        app.state.interaction_runtime = interaction_runtime
        app.state.interaction_use_case = interaction_runtime.use_case

        if discord.sync_commands_on_startup:
            await _sync_commands(registry, interaction_runtime, discord.guild_id)

        yield

        logger.info("app_shutting_down", extra={"service": service_name})
        await interaction_runtime.aclose(drain_timeout_seconds=SHUTDOWN_DRAIN_SECONDS)

    fastapi_app = FastAPI(
        title=service_name,
        description="Webhook de interações do Discord",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    fastapi_app.include_router(create_api_router(interactions_path=interactions_path))

    logger.info("app_configured", extra={"service": service_name})
    return fastapi_app


async def _sync_commands(
    registry: CommandRegistry,
    runtime: InteractionRuntime,
    guild_id: str,
) -> None:
    # Falha de sync não impede o boot: comandos já publicados continuam válidos
    try:
        await sync_registered_commands(registry, runtime.http_client, guild_id)
    except (InfrastructureError, ValueError) as exc:
        logger.warning("commands_sync_failed", extra={"error_type": type(exc).__name__})


def run(app: FastAPI | str, *, host: str = "0.0.0.0", port: int = 8080) -> None:
    """Executa com uvicorn (desenvolvimento)."""
    import uvicorn

    initialize_app()
    logger.info("app_run", extra={"host": host, "port": port})
    uvicorn.run(app, host=host, port=port, log_config=None)
