"""Connector Discord — assinatura, recepção de webhook e cliente REST."""

from .discord_errors import DiscordApiError, parse_discord_error
from .http_client import DiscordHttpClient, create_discord_http_client
from .signature import (
    SignatureResult,
    extract_signature_headers,
    load_public_key,
    verify_interaction_signature,
    verify_request_signature,
)

__all__ = [
    "DiscordApiError",
    "DiscordHttpClient",
    "SignatureResult",
    "create_discord_http_client",
    "extract_signature_headers",
    "load_public_key",
    "parse_discord_error",
    "verify_interaction_signature",
    "verify_request_signature",
]
