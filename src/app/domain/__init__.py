"""Modelos de domínio: interações, definições de comando e respostas."""

from .commands import Choice, CommandDefinition, Handler, OptionSchema
from .interactions import (
    ApplicationCommandInteraction,
    AutocompleteInteraction,
    CommandInvocation,
    CommandOption,
    ComponentInteraction,
    EntityKind,
    EntityRef,
    Interaction,
    MemberRef,
    ModalSubmitInteraction,
    PingInteraction,
    UserRef,
)
from .responses import (
    AutocompleteResult,
    DeferredMessage,
    DeferredUpdate,
    Message,
    MessageFile,
    MessagePayload,
    Modal,
    Pong,
    ResponseEnvelope,
    UpdateMessage,
    as_message,
    files_of,
)

__all__ = [
    "ApplicationCommandInteraction",
    "AutocompleteInteraction",
    "AutocompleteResult",
    "Choice",
    "CommandDefinition",
    "CommandInvocation",
    "CommandOption",
    "ComponentInteraction",
    "DeferredMessage",
    "DeferredUpdate",
    "EntityKind",
    "EntityRef",
    "Handler",
    "Interaction",
    "MemberRef",
    "Message",
    "MessageFile",
    "MessagePayload",
    "Modal",
    "ModalSubmitInteraction",
    "OptionSchema",
    "PingInteraction",
    "Pong",
    "ResponseEnvelope",
    "UpdateMessage",
    "UserRef",
    "as_message",
    "files_of",
]
