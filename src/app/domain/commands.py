"""Definições de comandos registrados pela aplicação.

Validação estrutural acontece na construção (`__post_init__`), de modo que
uma definição inválida falha no registro e nunca em tempo de dispatch.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.constants.discord import ApplicationCommandType, OptionType
from utils.errors import RegistrationError

if TYPE_CHECKING:
    from app.coordinators.interactions.context import InteractionContext

Handler = Callable[["InteractionContext"], Awaitable[Any]]

MAX_NAME_LENGTH = 32
MAX_DESCRIPTION_LENGTH = 100
MAX_OPTIONS = 25
MAX_CHOICES = 25
MAX_CHOICE_NAME_LENGTH = 100
MAX_CHOICE_VALUE_LENGTH = 100
# Comando raiz -> grupo -> subcomando
MAX_PARENT_DEPTH = 2

_CHAT_INPUT_NAME = re.compile(r"^[-_\w]{1,32}$")
_CHOICE_TYPES = frozenset({OptionType.STRING, OptionType.INTEGER, OptionType.NUMBER})


def validate_command_name(name: str, command_type: ApplicationCommandType) -> None:
    """Valida nome de comando/opção conforme o tipo de comando.

    Raises:
        RegistrationError: Se o nome for inválido
    """
    if command_type is ApplicationCommandType.CHAT_INPUT:
        if not _CHAT_INPUT_NAME.match(name) or name != name.lower():
            raise RegistrationError(f"invalid_command_name: {name!r}")
        return
    if not name or len(name) > MAX_NAME_LENGTH:
        raise RegistrationError(f"invalid_command_name: {name!r}")


@dataclass(frozen=True, slots=True)
class Choice:
    """Escolha pré-definida de uma opção (ou sugestão de autocomplete)."""

    name: str
    value: str | int | float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True, slots=True)
class OptionSchema:
    """Schema declarado de uma opção folha.

    Attributes:
        name: Nome da opção (minúsculo, 1-32 caracteres)
        type: Tipo declarado; subcomandos são modelados pelo `parent` do comando
        description: Texto exibido no cliente
        required: Se a opção é obrigatória
        choices: Escolhas fixas (apenas string, integer e number)
        autocomplete: Se a opção usa autocomplete (exclusivo com choices)
    """

    name: str
    type: OptionType
    description: str
    required: bool = False
    choices: tuple[Choice, ...] = ()
    autocomplete: bool = False

    def __post_init__(self) -> None:
        validate_command_name(self.name, ApplicationCommandType.CHAT_INPUT)
        if self.type.is_subcommand:
            raise RegistrationError(f"subcommand_as_option: {self.name}")
        if not 1 <= len(self.description) <= MAX_DESCRIPTION_LENGTH:
            raise RegistrationError(f"invalid_description_length: {self.name}")
        if self.choices and self.type not in _CHOICE_TYPES:
            raise RegistrationError(f"choices_not_supported: {self.name}")
        if self.choices and self.autocomplete:
            raise RegistrationError(f"choices_with_autocomplete: {self.name}")
        if self.autocomplete and self.type not in _CHOICE_TYPES:
            raise RegistrationError(f"autocomplete_not_supported: {self.name}")
        if len(self.choices) > MAX_CHOICES:
            raise RegistrationError(f"too_many_choices: {self.name}")
        for choice in self.choices:
            _validate_choice(choice, self.type, self.name)

    def to_dict(self) -> dict[str, Any]:
        """Representação no formato de registro da plataforma."""
        data: dict[str, Any] = {
            "type": int(self.type),
            "name": self.name,
            "description": self.description,
        }
        if self.required:
            data["required"] = True
        if self.choices:
            data["choices"] = [choice.to_dict() for choice in self.choices]
        if self.autocomplete:
            data["autocomplete"] = True
        return data


def _validate_choice(choice: Choice, option_type: OptionType, option_name: str) -> None:
    if not 1 <= len(choice.name) <= MAX_CHOICE_NAME_LENGTH:
        raise RegistrationError(f"invalid_choice_name: {option_name}")
    value = choice.value
    if option_type is OptionType.STRING:
        valid = isinstance(value, str) and len(value) <= MAX_CHOICE_VALUE_LENGTH
    elif option_type is OptionType.INTEGER:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, int | float) and not isinstance(value, bool)
    if not valid:
        raise RegistrationError(f"invalid_choice_value: {option_name}")


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    """Comando (ou subcomando) invocável.

    `parent` é o caminho do comando raiz até o nó pai; um subcomando
    `/config set` é `CommandDefinition(name="set", parent=("config",), ...)`.
    """

    name: str
    description: str
    handler: Handler
    parent: tuple[str, ...] = ()
    options: tuple[OptionSchema, ...] = ()
    command_type: ApplicationCommandType = ApplicationCommandType.CHAT_INPUT
    autocomplete_handler: Handler | None = None

    def __post_init__(self) -> None:
        validate_command_name(self.name, self.command_type)
        if len(self.parent) > MAX_PARENT_DEPTH:
            raise RegistrationError(f"nesting_too_deep: {self.name}")
        for segment in self.parent:
            validate_command_name(segment, ApplicationCommandType.CHAT_INPUT)
        if self.command_type is not ApplicationCommandType.CHAT_INPUT:
            # Menus de contexto não têm descrição, opções nem subcomandos
            if self.parent or self.options:
                raise RegistrationError(f"context_menu_with_options: {self.name}")
            if self.description:
                raise RegistrationError(f"context_menu_with_description: {self.name}")
            return
        if not 1 <= len(self.description) <= MAX_DESCRIPTION_LENGTH:
            raise RegistrationError(f"invalid_description_length: {self.name}")
        if len(self.options) > MAX_OPTIONS:
            raise RegistrationError(f"too_many_options: {self.name}")
        names = [option.name for option in self.options]
        if len(set(names)) != len(names):
            raise RegistrationError(f"duplicate_option: {self.name}")
        seen_optional = False
        for option in self.options:
            if not option.required:
                seen_optional = True
            elif seen_optional:
                raise RegistrationError(f"required_after_optional: {self.name}")

    @property
    def path(self) -> tuple[str, ...]:
        """Caminho completo (pais + nome)."""
        return (*self.parent, self.name)

    @property
    def has_autocomplete(self) -> bool:
        return any(option.autocomplete for option in self.options)

    def option(self, name: str) -> OptionSchema | None:
        for option in self.options:
            if option.name == name:
                return option
        return None
