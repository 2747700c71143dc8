"""Agregador de rotas.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.discord.webhook import router as discord_router
from api.routes.health.router import router as health_router


def create_api_router(*, interactions_path: str = "/interactions") -> APIRouter:
    """Cria o router principal.

    Args:
        interactions_path: Caminho configurado como Interactions Endpoint URL
    """
    api_router = APIRouter()

    # Health checks na raiz (/health, /ready)
    api_router.include_router(health_router, tags=["health"])

    api_router.include_router(
        discord_router,
        prefix=interactions_path,
        tags=["discord"],
    )
    return api_router
