"""Serialização determinística de respostas de interação.

Regras:
- campos None são omitidos
- tuplas vazias viram listas vazias explícitas (limpam o campo em edições)
- Pong e DeferredUpdate não têm chave `data`
- DeferredMessage sempre carrega `data.flags`
- arquivos viram entradas em `attachments`; os bytes seguem em multipart
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from api.validators.discord import InteractionResponseValidator, validate_message
from app.domain.responses import (
    AutocompleteResult,
    DeferredMessage,
    DeferredUpdate,
    Message,
    Modal,
    Pong,
    UpdateMessage,
)

if TYPE_CHECKING:
    from app.domain.interactions import Interaction
    from app.domain.responses import MessagePayload, ResponseEnvelope


def build_message_payload(message: MessagePayload) -> dict[str, Any]:
    """Serializa uma mensagem (resposta, follow-up ou edição)."""
    data: dict[str, Any] = {}
    if message.content is not None:
        data["content"] = message.content
    if message.embeds is not None:
        data["embeds"] = [_plain(embed) for embed in message.embeds]
    if message.components is not None:
        data["components"] = [_plain(row) for row in message.components]
    if message.flags:
        data["flags"] = int(message.flags)
    if message.tts is not None:
        data["tts"] = message.tts
    if message.allowed_mentions is not None:
        data["allowed_mentions"] = _plain(message.allowed_mentions)
    if message.attachments is not None or message.files:
        data["attachments"] = _attachments(message)
    return data


def _attachments(message: MessagePayload) -> list[dict[str, Any]]:
    """Anexos mantidos (por ID) seguidos dos novos arquivos (por índice `files[n]`)."""
    kept: list[dict[str, Any]] = [{"id": item} for item in message.attachments or ()]
    for index, file in enumerate(message.files):
        entry: dict[str, Any] = {"id": index, "filename": file.filename}
        if file.description is not None:
            entry["description"] = file.description
        kept.append(entry)
    return kept


def build_callback_payload(envelope: ResponseEnvelope) -> dict[str, Any]:
    """Serializa o envelope no corpo de callback da plataforma."""
    payload: dict[str, Any] = {"type": int(envelope.callback_type)}
    match envelope:
        case Pong() | DeferredUpdate():
            pass
        case Message(message=message) | UpdateMessage(message=message):
            payload["data"] = build_message_payload(message)
        case DeferredMessage(flags=flags):
            payload["data"] = {"flags": int(flags)}
        case Modal(custom_id=custom_id, title=title, components=components):
            payload["data"] = {
                "custom_id": custom_id,
                "title": title,
                "components": [_plain(row) for row in components],
            }
        case AutocompleteResult(choices=choices):
            payload["data"] = {"choices": [choice.to_dict() for choice in choices]}
    return payload


def _plain(value: Any) -> Any:
    """Converte Mappings/tuplas aninhados em dict/list JSON-serializáveis."""
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_plain(item) for item in value]
    return value


class InteractionResponseBuilder:
    """Valida e serializa respostas (iniciais e follow-ups)."""

    def __init__(self, validator: InteractionResponseValidator | None = None) -> None:
        self._validator = validator or InteractionResponseValidator()

    def build(self, envelope: ResponseEnvelope, interaction: Interaction) -> dict[str, Any]:
        """Constrói o corpo de callback para a interação.

        Raises:
            ValidationError: Se a resposta viola compatibilidade ou limites
        """
        self._validator.validate(envelope, interaction)
        return build_callback_payload(envelope)

    def build_message(
        self,
        message: MessagePayload,
        *,
        require_body: bool = True,
    ) -> dict[str, Any]:
        """Valida e serializa uma mensagem de follow-up ou edição."""
        validate_message(message, require_body=require_body)
        return build_message_payload(message)
