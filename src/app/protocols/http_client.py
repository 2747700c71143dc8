"""Protocolos HTTP usados pelo app.

Evita dependência direta da camada api.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.responses import MessageFile


class DiscordHttpClientProtocol(Protocol):
    """Contrato mínimo para os endpoints de interação do Discord.

    `files` não vazio indica corpo multipart com os arquivos na ordem de
    `payload["attachments"]`.
    """

    async def create_interaction_response(
        self,
        interaction_id: str,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> None: ...

    async def create_followup_message(
        self,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> dict[str, Any]: ...

    async def edit_webhook_message(
        self,
        token: str,
        message_id: str,
        payload: dict[str, Any],
        *,
        files: Sequence[MessageFile] = (),
    ) -> dict[str, Any]: ...

    async def get_webhook_message(self, token: str, message_id: str) -> dict[str, Any]: ...

    async def delete_webhook_message(self, token: str, message_id: str) -> None: ...


class CommandSyncClientProtocol(Protocol):
    """Contrato para publicação em massa de comandos."""

    async def bulk_overwrite_commands(
        self,
        commands: list[dict[str, Any]],
        guild_id: str | None = None,
    ) -> list[dict[str, Any]]: ...
