"""Registro de comandos da aplicação.

Árvore armazenada como arena: cada nó é endereçado por índice inteiro e
guarda os filhos em um dict nome → índice, o que dá lookup O(profundidade)
sem ponteiros entre objetos. Grupos de subcomandos são nós intermediários
sem handler.

Escritas acontecem apenas no startup (serializadas por lock); após
`freeze()` o registro é somente leitura e os lookups não usam lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from app.constants.discord import ApplicationCommandType, OptionType
from app.domain.commands import CommandDefinition, Handler, OptionSchema
from utils.errors import (
    CommandNotFoundError,
    DecodeError,
    NotDispatchableError,
    RegistrationError,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _CommandNode:
    name: str
    parent: int | None
    children: dict[str, int] = field(default_factory=dict)
    definition: CommandDefinition | None = None
    description: str = ""


class CommandRegistry:
    """Registro de comandos indexado por (tipo, nome, caminho de subcomando).

    Attributes:
        is_frozen: True após freeze(); novos registros são rejeitados
    """

    __slots__ = ("_frozen", "_lock", "_nodes", "_roots")

    def __init__(self) -> None:
        self._nodes: list[_CommandNode] = []
        self._roots: dict[ApplicationCommandType, dict[str, int]] = {
            command_type: {} for command_type in ApplicationCommandType
        }
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return sum(1 for node in self._nodes if node.definition is not None)

    def register(self, definition: CommandDefinition) -> None:
        """Registra um comando ou subcomando.

        Raises:
            RegistrationError: Se (nome, caminho pai) já existe, se o caminho
                atravessa um comando com handler ou se o registro está congelado
        """
        with self._lock:
            if self._frozen:
                raise RegistrationError("registry_frozen")
            path = definition.path
            roots = self._roots[definition.command_type]
            parent_index: int | None = None
            for depth, segment in enumerate(path[:-1]):
                parent_index = self._child_or_create(roots, parent_index, segment)
                if self._nodes[parent_index].definition is not None:
                    raise RegistrationError(
                        f"parent_has_handler: {'/'.join(path[: depth + 1])}"
                    )

            siblings = roots if parent_index is None else self._nodes[parent_index].children
            existing = siblings.get(definition.name)
            if existing is not None:
                node = self._nodes[existing]
                if node.definition is not None:
                    raise RegistrationError(f"duplicate_command: {'/'.join(path)}")
                if node.children:
                    raise RegistrationError(f"name_is_group: {'/'.join(path)}")
                node.definition = definition
            else:
                self._nodes.append(
                    _CommandNode(name=definition.name, parent=parent_index, definition=definition)
                )
                siblings[definition.name] = len(self._nodes) - 1

        logger.debug(
            "command_registered",
            extra={"command_path": "/".join(path), "command_type": definition.command_type.name},
        )

    def describe_group(self, path: tuple[str, ...], description: str) -> None:
        """Define a descrição exibida para um nó intermediário (grupo)."""
        if not path:
            raise RegistrationError("empty_group_path")
        with self._lock:
            if self._frozen:
                raise RegistrationError("registry_frozen")
            roots = self._roots[ApplicationCommandType.CHAT_INPUT]
            index: int | None = None
            for segment in path:
                index = self._child_or_create(roots, index, segment)
            node = self._nodes[index]
            if node.definition is not None:
                raise RegistrationError(f"not_a_group: {'/'.join(path)}")
            node.description = description

    def command(
        self,
        name: str,
        description: str,
        *,
        parent: tuple[str, ...] = (),
        options: tuple[OptionSchema, ...] = (),
        command_type: ApplicationCommandType = ApplicationCommandType.CHAT_INPUT,
        autocomplete: Handler | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator que registra a função como handler de um comando."""

        def decorator(handler: Handler) -> Handler:
            self.register(
                CommandDefinition(
                    name=name,
                    description=description,
                    handler=handler,
                    parent=parent,
                    options=options,
                    command_type=command_type,
                    autocomplete_handler=autocomplete,
                )
            )
            return handler

        return decorator

    def lookup(
        self,
        name: str,
        subcommand_path: tuple[str, ...] = (),
        command_type: ApplicationCommandType = ApplicationCommandType.CHAT_INPUT,
    ) -> CommandDefinition:
        """Resolve a definição para o comando invocado.

        Raises:
            CommandNotFoundError: Se algum segmento não existe
            NotDispatchableError: Se o caminho termina em um grupo
        """
        index = self._roots[command_type].get(name)
        if index is None:
            raise CommandNotFoundError(f"unknown_command: {name}")
        for segment in subcommand_path:
            index = self._nodes[index].children.get(segment)
            if index is None:
                raise CommandNotFoundError(
                    f"unknown_subcommand: {'/'.join((name, *subcommand_path))}"
                )
        definition = self._nodes[index].definition
        if definition is None:
            raise NotDispatchableError(
                f"group_not_dispatchable: {'/'.join((name, *subcommand_path))}"
            )
        return definition

    def freeze(self) -> None:
        """Congela o registro (chamado no startup, antes de servir)."""
        with self._lock:
            self._frozen = True
        logger.info("command_registry_frozen", extra={"command_count": len(self)})

    def definitions(self) -> Iterator[CommandDefinition]:
        for node in self._nodes:
            if node.definition is not None:
                yield node.definition

    def to_application_commands(self) -> list[dict[str, Any]]:
        """Renderiza a árvore no formato de registro em massa da plataforma."""
        commands: list[dict[str, Any]] = []
        for command_type, roots in self._roots.items():
            for index in roots.values():
                commands.append(self._render_root(index, command_type))
        return commands

    def _child_or_create(
        self,
        roots: dict[str, int],
        parent_index: int | None,
        name: str,
    ) -> int:
        siblings = roots if parent_index is None else self._nodes[parent_index].children
        index = siblings.get(name)
        if index is None:
            self._nodes.append(_CommandNode(name=name, parent=parent_index))
            index = len(self._nodes) - 1
            siblings[name] = index
        return index

    def _render_root(self, index: int, command_type: ApplicationCommandType) -> dict[str, Any]:
        node = self._nodes[index]
        data: dict[str, Any] = {"name": node.name, "type": int(command_type)}
        if command_type is not ApplicationCommandType.CHAT_INPUT:
            return data
        if node.definition is not None:
            data["description"] = node.definition.description
            data["options"] = [option.to_dict() for option in node.definition.options]
        else:
            data["description"] = node.description or node.name
            data["options"] = [self._render_child(child) for child in node.children.values()]
        return data

    def _render_child(self, index: int) -> dict[str, Any]:
        node = self._nodes[index]
        if node.definition is not None:
            return {
                "type": int(OptionType.SUB_COMMAND),
                "name": node.name,
                "description": node.definition.description,
                "options": [option.to_dict() for option in node.definition.options],
            }
        return {
            "type": int(OptionType.SUB_COMMAND_GROUP),
            "name": node.name,
            "description": node.description or node.name,
            "options": [self._render_child(child) for child in node.children.values()],
        }


def validate_invocation(
    definition: CommandDefinition,
    received: dict[str, OptionType],
    *,
    partial: bool = False,
) -> None:
    """Confere as opções recebidas contra o schema registrado.

    Args:
        definition: Definição resolvida
        received: Nome → tipo das opções folha recebidas
        partial: Autocomplete (opções obrigatórias podem faltar)

    Raises:
        DecodeError: Opção desconhecida, tipo divergente ou obrigatória ausente
    """
    for name, option_type in received.items():
        schema = definition.option(name)
        if schema is None:
            raise DecodeError(f"unknown_option: {name}")
        if schema.type is not option_type:
            raise DecodeError(f"option_type_mismatch: {name}")
    if partial:
        return
    for schema in definition.options:
        if schema.required and schema.name not in received:
            raise DecodeError(f"missing_required_option: {schema.name}")
