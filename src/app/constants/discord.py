"""Enums e constantes numéricas da API de interações do Discord."""

from __future__ import annotations

from enum import IntEnum, IntFlag

# Headers enviados pelo Discord em toda entrega de webhook
SIGNATURE_HEADER = "x-signature-ed25519"
TIMESTAMP_HEADER = "x-signature-timestamp"


class InteractionType(IntEnum):
    """Discriminante do envelope de interação."""

    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class ApplicationCommandType(IntEnum):
    """Tipos de comando de aplicação."""

    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3


class OptionType(IntEnum):
    """Tipos de opção de comando."""

    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11

    @property
    def is_subcommand(self) -> bool:
        """True para SUB_COMMAND e SUB_COMMAND_GROUP."""
        return self in (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP)


class ComponentType(IntEnum):
    """Tipos de componente de mensagem/modal."""

    ACTION_ROW = 1
    BUTTON = 2
    STRING_SELECT = 3
    TEXT_INPUT = 4
    USER_SELECT = 5
    ROLE_SELECT = 6
    MENTIONABLE_SELECT = 7
    CHANNEL_SELECT = 8
    LABEL = 18


class CallbackType(IntEnum):
    """Tipos de resposta (callback) a uma interação."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7
    APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8
    MODAL = 9


class MessageFlags(IntFlag):
    """Flags de mensagem aceitas em respostas de interação."""

    NONE = 0
    SUPPRESS_EMBEDS = 1 << 2
    EPHEMERAL = 1 << 6
    SUPPRESS_NOTIFICATIONS = 1 << 12


# Códigos de erro da API que indicam token de interação inutilizável
INVALID_TOKEN_ERROR_CODES = frozenset({10015, 50027})

# Identificador da resposta inicial nas rotas de mensagem de webhook
ORIGINAL_MESSAGE = "@original"
