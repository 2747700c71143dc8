"""Agregador de settings do serviço de interações.

Re-exporta todas as settings e funções de cada módulo.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    DEFAULT_SERVICE_NAME,
    BaseSettings,
    Environment,
    get_base_settings,
)

# Channel-specific settings
from config.settings.discord import (
    DISCORD_API_BASE_URL,
    DISCORD_API_VERSION,
    DiscordSettings,
    get_discord_settings,
)

__all__ = [
    # Constants
    "DEFAULT_SERVICE_NAME",
    "DISCORD_API_BASE_URL",
    "DISCORD_API_VERSION",
    # Base
    "BaseSettings",
    # Channels
    "DiscordSettings",
    "Environment",
    "get_base_settings",
    "get_discord_settings",
]
