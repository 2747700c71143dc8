"""Cliente HTTP especializado para os endpoints de interação do Discord.

Estende HttpClient genérico com comportamentos específicos:
- URLs de callback, follow-up e edição por token de interação
- Mapeamento dos códigos de token inválido para TokenExpiredError
- Registro em massa de comandos (Authorization: Bot)
- Mensagens com arquivos enviadas como multipart (payload_json + files[n])
- Logging estruturado sem token nem conteúdo de mensagem
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from api.connectors.discord.discord_errors import DiscordApiError, parse_discord_error
from api.payload_builders.discord.multipart import multipart_data, multipart_files
from app.constants.discord import ORIGINAL_MESSAGE
from app.infra.http import HttpClient, HttpClientConfig, HttpError
from utils.errors import TokenExpiredError

if TYPE_CHECKING:
    import httpx

    from app.domain.responses import MessageFile
    from config.settings import DiscordSettings

logger: logging.Logger = logging.getLogger(__name__)


class DiscordHttpClient(HttpClient):
    """Cliente HTTP para Discord.

    Tratamento específico:
    - 429 e 5xx: retryable (herdado do HttpClient)
    - Códigos 10015/50027: TokenExpiredError
    - Demais 4xx: HttpError permanente com o payload de erro
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        *,
        api_endpoint: str,
        application_id: str,
        bot_token: str = "",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Inicializa cliente Discord.

        Args:
            config: Configuração HTTP base
            api_endpoint: URL base com versão (ex: https://discord.com/api/v10)
            application_id: ID da aplicação (rotas de webhook)
            bot_token: Token do bot (apenas registro de comandos)
            client: AsyncClient injetado (testes)
        """
        super().__init__(config, client)
        self.api_endpoint = api_endpoint.rstrip("/")
        self.application_id = application_id
        self._bot_token = bot_token

    async def create_interaction_response(
        self,
        interaction_id: str,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> None:
        """POST /interactions/{id}/{token}/callback."""
        url = f"{self.api_endpoint}/interactions/{interaction_id}/{token}/callback"
        await self._call("POST", url, "interaction_callback", payload, files=files)

    async def create_followup_message(
        self,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> dict[str, Any]:
        """POST /webhooks/{application_id}/{token}."""
        url = f"{self._webhook_url(token)}?wait=true"
        return await self._call("POST", url, "followup_create", payload, files=files) or {}

    async def edit_webhook_message(
        self,
        token: str,
        message_id: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> dict[str, Any]:
        """PATCH /webhooks/{application_id}/{token}/messages/{message_id}."""
        url = f"{self._webhook_url(token)}/messages/{message_id}"
        return await self._call("PATCH", url, "webhook_message_edit", payload, files=files) or {}

    async def get_webhook_message(self, token: str, message_id: str) -> dict[str, Any]:
        """GET /webhooks/{application_id}/{token}/messages/{message_id}."""
        url = f"{self._webhook_url(token)}/messages/{message_id}"
        return await self._call("GET", url, "webhook_message_get") or {}

    async def delete_webhook_message(self, token: str, message_id: str) -> None:
        """DELETE /webhooks/{application_id}/{token}/messages/{message_id}."""
        url = f"{self._webhook_url(token)}/messages/{message_id}"
        await self._call("DELETE", url, "webhook_message_delete")

    async def bulk_overwrite_commands(
        self,
        commands: list[dict[str, Any]],
        guild_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """PUT com a lista completa de comandos (global ou por guild).

        Raises:
            ValueError: Se o bot token não estiver configurado
        """
        if not self._bot_token or not self._bot_token.strip():
            raise ValueError("bot_token é obrigatório para registrar comandos")
        base = f"{self.api_endpoint}/applications/{self.application_id}"
        url = f"{base}/guilds/{guild_id}/commands" if guild_id else f"{base}/commands"
        headers = {"Authorization": f"Bot {self._bot_token}"}
        result = await self._call("PUT", url, "commands_bulk_overwrite", commands, headers)
        logger.info(
            "commands_synced",
            extra={"command_count": len(commands), "guild_scoped": bool(guild_id)},
        )
        return result if isinstance(result, list) else []

    def _webhook_url(self, token: str) -> str:
        return f"{self.api_endpoint}/webhooks/{self.application_id}/{token}"

    async def _call(
        self,
        method: str,
        url: str,
        operation: str,
        payload: Any = None,
        headers: dict[str, str] | None = None,
        *,
        files: Sequence[MessageFile] = (),
    ) -> Any:
        """Executa a chamada e processa a resposta.

        `operation` identifica a rota nos logs no lugar da URL, que contém
        o token. Com arquivos o corpo vira multipart.
        """
        try:
            if files:
                response = await self.request(
                    method,
                    url,
                    headers=headers,
                    data=multipart_data(payload),
                    files=multipart_files(files),
                )
            else:
                response = await self.request(method, url, json=payload, headers=headers)
        except HttpError as exc:
            logger.warning(
                "discord_request_failed",
                extra={
                    "operation": operation,
                    "status_code": exc.status_code,
                    "is_retryable": exc.is_retryable,
                },
            )
            raise
        return self._process_response(response, operation)

    def _process_response(self, response: httpx.Response, operation: str) -> Any:
        if response.status_code == 204 or not response.content:
            response_data = None
        else:
            try:
                response_data = response.json()
            except json.JSONDecodeError as e:
                if response.status_code < 400:
                    logger.error("discord_invalid_json", extra={"operation": operation})
                    raise HttpError("discord_invalid_json", response.status_code) from e
                response_data = None

        api_error = parse_discord_error(response.status_code, response_data)
        if api_error is not None:
            self._handle_api_error(api_error, operation, response_data)

        logger.debug(
            "discord_request_succeeded",
            extra={"operation": operation, "status_code": response.status_code},
        )
        return response_data

    def _handle_api_error(
        self,
        api_error: DiscordApiError,
        operation: str,
        response_data: Any,
    ) -> None:
        logger.warning(
            "discord_api_error",
            extra={
                "operation": operation,
                "status_code": api_error.status_code,
                "error_code": api_error.error_code,
            },
        )
        if api_error.is_invalid_token:
            raise TokenExpiredError(f"invalid_interaction_token ({api_error.error_code})")
        raise HttpError(
            f"discord_api_error ({api_error.error_code})",
            status_code=api_error.status_code,
            is_retryable=False,
            payload=response_data if isinstance(response_data, dict) else None,
        )


def create_discord_http_client(
    settings: DiscordSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> DiscordHttpClient:
    """Factory para criar cliente Discord com config padrão.

    Args:
        settings: DiscordSettings opcional. Se None, carrega do ambiente.
        client: AsyncClient compartilhado opcional

    Returns:
        Cliente HTTP configurado para Discord.
    """
    # Import local para evitar dependência circular
    from config.settings import get_discord_settings

    discord = settings or get_discord_settings()
    config = HttpClientConfig(
        timeout_seconds=discord.request_timeout_seconds,
        max_retries=discord.max_retries,
        default_headers={"User-Agent": "DiscordBot (discord-interactions-core, 1.0.0)"},
    )
    return DiscordHttpClient(
        config=config,
        api_endpoint=discord.api_endpoint,
        application_id=discord.application_id,
        bot_token=discord.bot_token,
        client=client,
    )
