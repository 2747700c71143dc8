"""Settings específicas de Discord.

Configurações do endpoint de interações e dos prazos da plataforma.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache

# Constantes da Discord API
DISCORD_API_VERSION: str = "v10"
DISCORD_API_BASE_URL: str = "https://discord.com/api"

DEFAULT_HANDLER_ERROR_MESSAGE = "Não foi possível processar este comando agora."

_PUBLIC_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


@dataclass(frozen=True)
class DiscordSettings:
    """Configurações do canal Discord.

    Attributes:
        public_key: Chave pública Ed25519 (hex) para verificação de interações
        application_id: ID da aplicação Discord
        bot_token: Token do bot (apenas registro de comandos)
        guild_id: Servidor para registro de comandos (vazio = global)
        api_version: Versão da API
        api_base_url: URL base da API
        request_timeout_seconds: Timeout para requisições HTTP
        max_retries: Máximo de tentativas em caso de erro transitório
        soft_deadline_seconds: Prazo interno para deferir automaticamente
        response_deadline_seconds: Prazo da plataforma para a resposta inicial
        token_ttl_seconds: Validade do token de continuação
        max_timestamp_age_seconds: Janela anti-replay (0 = desativada)
        custom_id_separator: Separador prefixo/resto em custom ids
        handler_error_message: Mensagem efêmera enviada quando o handler falha
        sync_commands_on_startup: Publica comandos registrados no startup
    """

    # Credenciais
    public_key: str = ""
    application_id: str = ""
    bot_token: str = ""
    guild_id: str = ""

    # API
    api_version: str = DISCORD_API_VERSION
    api_base_url: str = DISCORD_API_BASE_URL

    # Timeouts e retries
    request_timeout_seconds: float = 10.0
    max_retries: int = 2

    # Prazos de interação
    soft_deadline_seconds: float = 2.5
    response_deadline_seconds: float = 3.0
    token_ttl_seconds: float = 900.0
    max_timestamp_age_seconds: float = 0.0

    # Roteamento e respostas
    custom_id_separator: str = "/"
    handler_error_message: str = DEFAULT_HANDLER_ERROR_MESSAGE
    sync_commands_on_startup: bool = False

    @property
    def api_endpoint(self) -> str:
        """URL base completa da API com versão."""
        return f"{self.api_base_url.rstrip('/')}/{self.api_version}"

    def validate(self) -> list[str]:
        """Valida configurações mínimas de Discord.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.public_key:
            errors.append("DISCORD_PUBLIC_KEY não configurado")
        elif not _PUBLIC_KEY_PATTERN.match(self.public_key):
            errors.append("DISCORD_PUBLIC_KEY deve ter 64 caracteres hex")

        if not self.application_id:
            errors.append("DISCORD_APPLICATION_ID não configurado")

        if self.sync_commands_on_startup and not self.bot_token:
            errors.append("DISCORD_BOT_TOKEN obrigatório com DISCORD_SYNC_COMMANDS_ON_STARTUP")

        if self.request_timeout_seconds <= 0:
            errors.append("DISCORD_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("DISCORD_MAX_RETRIES deve ser >= 0")

        if self.soft_deadline_seconds <= 0:
            errors.append("DISCORD_SOFT_DEADLINE_SECONDS deve ser > 0")

        if self.soft_deadline_seconds >= self.response_deadline_seconds:
            errors.append(
                "DISCORD_SOFT_DEADLINE_SECONDS deve ser menor que "
                "DISCORD_RESPONSE_DEADLINE_SECONDS"
            )

        if self.token_ttl_seconds <= 0:
            errors.append("DISCORD_TOKEN_TTL_SECONDS deve ser > 0")

        if self.max_timestamp_age_seconds < 0:
            errors.append("DISCORD_MAX_TIMESTAMP_AGE_SECONDS deve ser >= 0")

        if not self.custom_id_separator:
            errors.append("DISCORD_CUSTOM_ID_SEPARATOR não pode ser vazio")

        return errors


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _load_from_env() -> DiscordSettings:
    """Carrega DiscordSettings de variáveis de ambiente."""
    return DiscordSettings(
        public_key=os.getenv("DISCORD_PUBLIC_KEY", "").strip(),
        application_id=os.getenv("DISCORD_APPLICATION_ID", ""),
        bot_token=os.getenv("DISCORD_BOT_TOKEN", ""),
        guild_id=os.getenv("DISCORD_GUILD_ID", ""),
        api_version=os.getenv("DISCORD_API_VERSION", DISCORD_API_VERSION),
        api_base_url=os.getenv("DISCORD_API_BASE_URL", DISCORD_API_BASE_URL),
        request_timeout_seconds=float(os.getenv("DISCORD_REQUEST_TIMEOUT_SECONDS", "10")),
        max_retries=int(os.getenv("DISCORD_MAX_RETRIES", "2")),
        soft_deadline_seconds=float(os.getenv("DISCORD_SOFT_DEADLINE_SECONDS", "2.5")),
        response_deadline_seconds=float(os.getenv("DISCORD_RESPONSE_DEADLINE_SECONDS", "3.0")),
        token_ttl_seconds=float(os.getenv("DISCORD_TOKEN_TTL_SECONDS", "900")),
        max_timestamp_age_seconds=float(os.getenv("DISCORD_MAX_TIMESTAMP_AGE_SECONDS", "0")),
        custom_id_separator=os.getenv("DISCORD_CUSTOM_ID_SEPARATOR", "/"),
        handler_error_message=os.getenv(
            "DISCORD_HANDLER_ERROR_MESSAGE", DEFAULT_HANDLER_ERROR_MESSAGE
        ),
        sync_commands_on_startup=_env_bool("DISCORD_SYNC_COMMANDS_ON_STARTUP"),
    )


@lru_cache(maxsize=1)
def get_discord_settings() -> DiscordSettings:
    """Retorna instância cacheada de DiscordSettings."""
    return _load_from_env()
