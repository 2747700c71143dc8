"""Envelopes de resposta a interações.

Cada variante corresponde a um tipo de callback da plataforma. Campos `None`
significam "omitido"; tuplas vazias significam "lista vazia explícita".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, ClassVar

from app.constants.discord import CallbackType, MessageFlags
from app.domain.commands import Choice


@dataclass(frozen=True, slots=True)
class MessageFile:
    """Arquivo enviado junto da mensagem (multipart `files[n]`).

    Attributes:
        filename: Nome exibido e usado em referências `attachment://`
        data: Conteúdo bruto
        description: Texto alternativo do anexo
        content_type: MIME type da parte multipart
    """

    filename: str
    data: bytes
    description: str | None = None
    content_type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class MessagePayload:
    """Conteúdo de mensagem usado em respostas, follow-ups e edições.

    Attributes:
        content: Texto da mensagem
        embeds: Embeds (dicts no formato da plataforma)
        components: Linhas de componentes (action rows)
        flags: Flags de mensagem (ex: EPHEMERAL)
        tts: Text-to-speech
        allowed_mentions: Controle de menções
        files: Novos arquivos anexados
        attachments: IDs de anexos existentes a manter em edições
            (None = não altera; tupla vazia = remove todos)
    """

    content: str | None = None
    embeds: tuple[Mapping[str, Any], ...] | None = None
    components: tuple[Mapping[str, Any], ...] | None = None
    flags: MessageFlags = MessageFlags.NONE
    tts: bool | None = None
    allowed_mentions: Mapping[str, Any] | None = None
    files: tuple[MessageFile, ...] = ()
    attachments: tuple[str, ...] | None = None

    @classmethod
    def text(cls, content: str, *, ephemeral: bool = False) -> MessagePayload:
        flags = MessageFlags.EPHEMERAL if ephemeral else MessageFlags.NONE
        return cls(content=content, flags=flags)

    @property
    def ephemeral(self) -> bool:
        return bool(self.flags & MessageFlags.EPHEMERAL)

    @property
    def is_empty(self) -> bool:
        """True se não há conteúdo, embed, componente nem arquivo."""
        return (
            not self.content and not self.embeds and not self.components and not self.files
        )

    def with_flags(self, flags: MessageFlags) -> MessagePayload:
        return replace(self, flags=self.flags | flags)

    def add_file(
        self,
        filename: str,
        data: bytes,
        *,
        description: str | None = None,
        content_type: str = "application/octet-stream",
    ) -> MessagePayload:
        file = MessageFile(filename, data, description, content_type)
        return replace(self, files=(*self.files, file))

    def keep_attachment(self, attachment_id: str | int) -> MessagePayload:
        """Mantém um anexo já publicado ao editar a mensagem."""
        return replace(self, attachments=(*(self.attachments or ()), str(attachment_id)))


def as_message(value: str | MessagePayload, *, ephemeral: bool = False) -> MessagePayload:
    """Normaliza texto simples ou payload em MessagePayload."""
    if isinstance(value, MessagePayload):
        return value.with_flags(MessageFlags.EPHEMERAL) if ephemeral else value
    return MessagePayload.text(value, ephemeral=ephemeral)


@dataclass(frozen=True, slots=True)
class Pong:
    """Resposta ao Ping de verificação."""

    callback_type: ClassVar[CallbackType] = CallbackType.PONG


@dataclass(frozen=True, slots=True)
class Message:
    """Nova mensagem em resposta à interação."""

    callback_type: ClassVar[CallbackType] = CallbackType.CHANNEL_MESSAGE_WITH_SOURCE

    message: MessagePayload


@dataclass(frozen=True, slots=True)
class DeferredMessage:
    """ACK com indicador de carregamento; conteúdo virá por edição."""

    callback_type: ClassVar[CallbackType] = CallbackType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE

    flags: MessageFlags = MessageFlags.NONE


@dataclass(frozen=True, slots=True)
class UpdateMessage:
    """Edita a mensagem à qual o componente está anexado."""

    callback_type: ClassVar[CallbackType] = CallbackType.UPDATE_MESSAGE

    message: MessagePayload


@dataclass(frozen=True, slots=True)
class DeferredUpdate:
    """ACK de componente sem alterar a mensagem agora."""

    callback_type: ClassVar[CallbackType] = CallbackType.DEFERRED_UPDATE_MESSAGE


@dataclass(frozen=True, slots=True)
class Modal:
    """Abre um formulário modal para o usuário."""

    callback_type: ClassVar[CallbackType] = CallbackType.MODAL

    custom_id: str
    title: str
    components: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True, slots=True)
class AutocompleteResult:
    """Sugestões para a opção em foco."""

    callback_type: ClassVar[CallbackType] = CallbackType.APPLICATION_COMMAND_AUTOCOMPLETE_RESULT

    choices: tuple[Choice, ...] = ()


ResponseEnvelope = (
    Pong | Message | DeferredMessage | UpdateMessage | DeferredUpdate | Modal | AutocompleteResult
)

# Variantes que equivalem a "mostrar uma mensagem" (redirecionáveis para edição)
MESSAGE_LIKE = (Message, UpdateMessage)
DEFERRAL = (DeferredMessage, DeferredUpdate)


def files_of(envelope: ResponseEnvelope) -> tuple[MessageFile, ...]:
    """Arquivos que acompanham a resposta (apenas variantes com mensagem)."""
    if isinstance(envelope, MESSAGE_LIKE):
        return envelope.message.files
    return ()
