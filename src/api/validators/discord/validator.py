"""Validação de respostas antes da serialização.

Duas camadas:
- compatibilidade: a variante de resposta é permitida para o tipo de interação
- limites: tamanhos e contagens aceitos pela plataforma

Toda violação levanta ValidationError com o nome da restrição; nada
inválido chega à rede.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from app.constants.discord import InteractionType
from app.domain.responses import (
    AutocompleteResult,
    DeferredMessage,
    DeferredUpdate,
    Message,
    Modal,
    Pong,
    UpdateMessage,
)
from utils.errors import ValidationError

from .limits import (
    MAX_AUTOCOMPLETE_CHOICES,
    MAX_CHOICE_NAME_LENGTH,
    MAX_CHOICE_VALUE_LENGTH,
    MAX_COMPONENT_ROWS,
    MAX_COMPONENTS_PER_ROW,
    MAX_CONTENT_LENGTH,
    MAX_CUSTOM_ID_LENGTH,
    MAX_EMBED_TOTAL_CHARACTERS,
    MAX_EMBEDS,
    MAX_FILENAME_LENGTH,
    MAX_FILES,
    MAX_MODAL_ROWS,
    MAX_MODAL_TITLE_LENGTH,
    MIN_MODAL_ROWS,
)

if TYPE_CHECKING:
    from app.domain.commands import Choice
    from app.domain.interactions import Interaction
    from app.domain.responses import MessageFile, MessagePayload, ResponseEnvelope

ALLOWED_RESPONSES: dict[InteractionType, tuple[type, ...]] = {
    InteractionType.PING: (Pong,),
    InteractionType.APPLICATION_COMMAND: (Message, DeferredMessage, Modal),
    InteractionType.MESSAGE_COMPONENT: (
        Message,
        DeferredMessage,
        UpdateMessage,
        DeferredUpdate,
        Modal,
    ),
    InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE: (AutocompleteResult,),
    InteractionType.MODAL_SUBMIT: (Message, DeferredMessage, UpdateMessage, DeferredUpdate),
}

# Update só faz sentido quando há mensagem de origem
_REQUIRES_MESSAGE = (UpdateMessage, DeferredUpdate)

_EMBED_TEXT_FIELDS = ("title", "description")
_EMBED_NESTED_TEXT = (("footer", "text"), ("author", "name"))


def is_response_allowed(envelope: ResponseEnvelope, interaction: Interaction) -> bool:
    """Consulta a tabela de compatibilidade interação → resposta."""
    allowed = ALLOWED_RESPONSES.get(interaction.type, ())
    if not isinstance(envelope, allowed):
        return False
    if (
        interaction.type is InteractionType.MODAL_SUBMIT
        and isinstance(envelope, _REQUIRES_MESSAGE)
    ):
        return interaction.has_message
    return True


class InteractionResponseValidator:
    """Valida envelopes de resposta contra compatibilidade e limites."""

    def validate(self, envelope: ResponseEnvelope, interaction: Interaction) -> None:
        """Valida a resposta inicial para a interação.

        Raises:
            ValidationError: Se a variante é incompatível ou um limite é violado
        """
        if not is_response_allowed(envelope, interaction):
            raise ValidationError(
                "response_type_not_allowed",
                f"{type(envelope).__name__} not allowed for {interaction.type.name}",
            )
        self.validate_envelope(envelope)

    def validate_envelope(self, envelope: ResponseEnvelope) -> None:
        """Valida apenas os limites estruturais da variante."""
        match envelope:
            case Message(message=message):
                validate_message(message, require_body=True)
            case UpdateMessage(message=message):
                validate_message(message, require_body=False)
            case Modal():
                validate_modal(envelope)
            case AutocompleteResult(choices=choices):
                validate_choices(choices)
            case Pong() | DeferredMessage() | DeferredUpdate():
                return


def validate_message(message: MessagePayload, *, require_body: bool) -> None:
    """Valida conteúdo, embeds e componentes de uma mensagem.

    Args:
        message: Payload a validar
        require_body: Nova mensagem precisa de conteúdo, embed, componente ou arquivo;
            edições podem alterar só flags ou limpar campos
    """
    if require_body and message.is_empty:
        raise ValidationError("message_empty")
    if message.content is not None and len(message.content) > MAX_CONTENT_LENGTH:
        raise ValidationError("content_length")
    if message.embeds is not None:
        _validate_embeds(message.embeds)
    if message.components is not None:
        _validate_component_rows(message.components, max_rows=MAX_COMPONENT_ROWS)
    if message.files:
        _validate_files(message.files)


def validate_modal(modal: Modal) -> None:
    if not 1 <= len(modal.title) <= MAX_MODAL_TITLE_LENGTH:
        raise ValidationError("modal_title_length")
    _validate_custom_id(modal.custom_id)
    if not MIN_MODAL_ROWS <= len(modal.components) <= MAX_MODAL_ROWS:
        raise ValidationError("modal_row_count")
    _validate_component_rows(modal.components, max_rows=MAX_MODAL_ROWS)


def validate_choices(choices: tuple[Choice, ...]) -> None:
    if len(choices) > MAX_AUTOCOMPLETE_CHOICES:
        raise ValidationError("choice_count")
    for choice in choices:
        if not 1 <= len(choice.name) <= MAX_CHOICE_NAME_LENGTH:
            raise ValidationError("choice_name_length")
        if isinstance(choice.value, str) and len(choice.value) > MAX_CHOICE_VALUE_LENGTH:
            raise ValidationError("choice_value_length")


def _validate_files(files: tuple[MessageFile, ...]) -> None:
    if len(files) > MAX_FILES:
        raise ValidationError("file_count")
    for file in files:
        if not 1 <= len(file.filename) <= MAX_FILENAME_LENGTH:
            raise ValidationError("filename_length")


def _validate_embeds(embeds: tuple[Mapping[str, Any], ...]) -> None:
    if len(embeds) > MAX_EMBEDS:
        raise ValidationError("embed_count")
    total = sum(_embed_text_length(embed) for embed in embeds)
    if total > MAX_EMBED_TOTAL_CHARACTERS:
        raise ValidationError("embed_total_length")


def _embed_text_length(embed: Mapping[str, Any]) -> int:
    """Soma os campos de texto contabilizados no limite agregado."""
    total = sum(len(str(embed.get(key) or "")) for key in _EMBED_TEXT_FIELDS)
    for parent, key in _EMBED_NESTED_TEXT:
        nested = embed.get(parent)
        if isinstance(nested, Mapping):
            total += len(str(nested.get(key) or ""))
    for embed_field in embed.get("fields") or ():
        if isinstance(embed_field, Mapping):
            total += len(str(embed_field.get("name") or ""))
            total += len(str(embed_field.get("value") or ""))
    return total


def _validate_component_rows(rows: Iterable[Mapping[str, Any]], *, max_rows: int) -> None:
    rows = list(rows)
    if len(rows) > max_rows:
        raise ValidationError("component_row_count")
    for row in rows:
        children = row.get("components")
        if children is not None and len(children) > MAX_COMPONENTS_PER_ROW:
            raise ValidationError("components_per_row")
        _validate_nested_custom_ids(row)


def _validate_nested_custom_ids(component: Mapping[str, Any]) -> None:
    if "custom_id" in component:
        _validate_custom_id(component["custom_id"])
    for child in component.get("components") or ():
        if isinstance(child, Mapping):
            _validate_nested_custom_ids(child)
    child = component.get("component")
    if isinstance(child, Mapping):
        _validate_nested_custom_ids(child)


def _validate_custom_id(custom_id: Any) -> None:
    if not isinstance(custom_id, str) or not 1 <= len(custom_id) <= MAX_CUSTOM_ID_LENGTH:
        raise ValidationError("custom_id_length")
