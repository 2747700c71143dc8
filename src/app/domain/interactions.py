"""Modelos de domínio das interações recebidas.

A interação é uma união fechada de variantes (Ping, ApplicationCommand,
Component, Autocomplete, ModalSubmit) que compartilham o mesmo envelope.
Todas as variantes são imutáveis; o decoder é o único ponto de construção
a partir de payloads externos.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

from app.constants.discord import (
    ApplicationCommandType,
    ComponentType,
    InteractionType,
    OptionType,
)


class EntityKind(StrEnum):
    """Tipos de entidade resolvida pelo Discord."""

    USER = "user"
    MEMBER = "member"
    CHANNEL = "channel"
    ROLE = "role"
    ATTACHMENT = "attachment"
    MESSAGE = "message"


@dataclass(frozen=True, slots=True)
class UserRef:
    """Usuário que invocou a interação (ou alvo de um comando)."""

    id: str
    username: str = ""
    global_name: str | None = None
    bot: bool = False


@dataclass(frozen=True, slots=True)
class MemberRef:
    """Membro de guild; presente apenas em interações dentro de servidores."""

    user: UserRef | None
    nick: str | None = None
    roles: tuple[str, ...] = ()
    permissions: str | None = None


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Referência tipada a uma entidade do mapa `resolved`.

    Attributes:
        kind: Tipo da entidade
        id: Snowflake da entidade
        data: Objeto parcial enviado pelo Discord (None se não resolvido)
    """

    kind: EntityKind
    id: str
    data: Mapping[str, Any] | None = None


OptionValue = str | int | float | bool | EntityRef


@dataclass(frozen=True, slots=True)
class CommandOption:
    """Nó da árvore de opções de um comando.

    Subcomandos e grupos carregam `options` filhas e nenhum `value`;
    opções folha carregam o valor já convertido para o tipo declarado.
    """

    name: str
    type: OptionType
    value: OptionValue | None = None
    options: tuple[CommandOption, ...] = ()
    focused: bool = False


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """Dados de um comando invocado (ou em autocomplete)."""

    id: str
    name: str
    command_type: ApplicationCommandType = ApplicationCommandType.CHAT_INPUT
    options: tuple[CommandOption, ...] = ()
    target_id: str | None = None
    target: EntityRef | None = None

    @property
    def subcommand_path(self) -> tuple[str, ...]:
        """Caminho de grupo/subcomando abaixo do comando raiz."""
        path: list[str] = []
        options = self.options
        while len(options) == 1 and options[0].type.is_subcommand:
            path.append(options[0].name)
            options = options[0].options
        return tuple(path)

    @property
    def leaf_options(self) -> tuple[CommandOption, ...]:
        """Opções com valor do subcomando mais interno."""
        options = self.options
        while len(options) == 1 and options[0].type.is_subcommand:
            options = options[0].options
        return options

    @property
    def args(self) -> dict[str, OptionValue | None]:
        """Valores das opções folha indexados pelo nome."""
        return {option.name: option.value for option in self.leaf_options}

    @property
    def focused(self) -> str | None:
        """Nome da opção em foco (apenas autocomplete)."""
        for option in self.leaf_options:
            if option.focused:
                return option.name
        return None

    @property
    def focused_value(self) -> str | None:
        """Texto parcial digitado na opção em foco."""
        for option in self.leaf_options:
            if option.focused:
                return str(option.value or "")
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class BaseInteraction:
    """Campos comuns a todas as variantes de interação.

    Attributes:
        id: ID único da interação
        application_id: ID da aplicação destinatária
        token: Token de continuação (follow-ups e edições)
        version: Versão do envelope
        user: Usuário invocador (fora de guilds)
        member: Membro invocador (dentro de guilds)
        received_at: Instante de decodificação (início da janela do token)
    """

    type: ClassVar[InteractionType]

    id: str
    application_id: str
    token: str
    version: int = 1
    user: UserRef | None = None
    member: MemberRef | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    locale: str | None = None
    guild_locale: str | None = None
    app_permissions: str | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def invoker(self) -> UserRef | None:
        """Usuário que disparou a interação, dentro ou fora de guild."""
        if self.member is not None and self.member.user is not None:
            return self.member.user
        return self.user

    @property
    def has_message(self) -> bool:
        """True se a interação está vinculada a uma mensagem existente."""
        return False

    def to_log_dict(self) -> dict[str, Any]:
        """Representação segura para logs (sem token nem conteúdo)."""
        return {
            "interaction_id": self.id,
            "interaction_type": self.type.name,
            "guild_id": self.guild_id,
            "channel_id": self.channel_id,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class PingInteraction(BaseInteraction):
    """Ping de verificação do endpoint."""

    type: ClassVar[InteractionType] = InteractionType.PING


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplicationCommandInteraction(BaseInteraction):
    """Comando de aplicação (slash ou menu de contexto)."""

    type: ClassVar[InteractionType] = InteractionType.APPLICATION_COMMAND

    command: CommandInvocation


@dataclass(frozen=True, slots=True, kw_only=True)
class AutocompleteInteraction(BaseInteraction):
    """Autocomplete de uma opção enquanto o usuário digita."""

    type: ClassVar[InteractionType] = InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE

    command: CommandInvocation

    @property
    def focused(self) -> str | None:
        return self.command.focused


@dataclass(frozen=True, slots=True, kw_only=True)
class ComponentInteraction(BaseInteraction):
    """Clique em botão ou seleção em menu anexado a uma mensagem."""

    type: ClassVar[InteractionType] = InteractionType.MESSAGE_COMPONENT

    custom_id: str
    component_type: ComponentType
    values: tuple[str, ...] = ()
    resolved_values: tuple[EntityRef, ...] = ()
    message: Mapping[str, Any] | None = None

    @property
    def has_message(self) -> bool:
        return self.message is not None


@dataclass(frozen=True, slots=True, kw_only=True)
class ModalSubmitInteraction(BaseInteraction):
    """Envio de modal com os valores preenchidos."""

    type: ClassVar[InteractionType] = InteractionType.MODAL_SUBMIT

    custom_id: str
    fields: Mapping[str, str] = field(default_factory=dict)
    message: Mapping[str, Any] | None = None

    @property
    def has_message(self) -> bool:
        return self.message is not None


Interaction = (
    PingInteraction
    | ApplicationCommandInteraction
    | AutocompleteInteraction
    | ComponentInteraction
    | ModalSubmitInteraction
)
