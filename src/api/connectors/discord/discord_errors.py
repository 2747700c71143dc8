"""Erros e helpers de parsing para a API REST do Discord."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.constants.discord import INVALID_TOKEN_ERROR_CODES


@dataclass(frozen=True)
class DiscordApiError:
    """Erro retornado pela API do Discord (`{"code": ..., "message": ...}`)."""

    status_code: int
    error_code: int
    error_message: str

    @property
    def is_invalid_token(self) -> bool:
        """True se o token de interação expirou ou o webhook não existe mais."""
        return self.error_code in INVALID_TOKEN_ERROR_CODES


def parse_discord_error(status_code: int, response_data: Any) -> DiscordApiError | None:
    """Extrai informações de erro de uma resposta 4xx.

    Args:
        status_code: Status HTTP da resposta
        response_data: JSON decodificado (ou None se o corpo não é JSON)

    Returns:
        DiscordApiError se status >= 400, None se sucesso
    """
    if status_code < 400:
        return None
    if not isinstance(response_data, dict):
        return DiscordApiError(status_code=status_code, error_code=0, error_message="")

    error_code = response_data.get("code", 0)
    if isinstance(error_code, bool) or not isinstance(error_code, int):
        error_code = 0
    error_message = response_data.get("message", "")

    return DiscordApiError(
        status_code=status_code,
        error_code=error_code,
        error_message=str(error_message),
    )
