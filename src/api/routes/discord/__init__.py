"""Rotas HTTP do Discord."""

from api.routes.discord.webhook import router

__all__ = ["router"]
