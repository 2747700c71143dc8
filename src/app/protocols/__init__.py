"""Protocolos e contratos do core da aplicação."""

from .http_client import CommandSyncClientProtocol, DiscordHttpClientProtocol
from .routing import CustomIdResolverProtocol, ErrorReporterProtocol

__all__ = [
    "CommandSyncClientProtocol",
    "CustomIdResolverProtocol",
    "DiscordHttpClientProtocol",
    "ErrorReporterProtocol",
]
