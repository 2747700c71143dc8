"""Decoder de interações: bytes verificados → variantes de domínio.

Responsabilidades:
- Validar a estrutura do envelope (pydantic)
- Selecionar a variante pelo discriminante `type`
- Resolver a árvore de opções recursivamente, tipando cada valor folha
- Resolver referências de entidade a partir do mapa `resolved`

Toda falha vira DecodeError com um código curto; nenhuma entrada
escapa como exceção não tratada.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.constants.discord import (
    ApplicationCommandType,
    ComponentType,
    InteractionType,
    OptionType,
)
from app.domain.interactions import (
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
    OptionValue,
    PingInteraction,
    UserRef,
)
from utils.errors import DecodeError

from .models import (
    RawCommandData,
    RawComponentData,
    RawInteraction,
    RawMember,
    RawModalData,
    RawOption,
    RawResolved,
    RawUser,
)

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

_ENTITY_TABLES: dict[OptionType, tuple[EntityKind, str]] = {
    OptionType.USER: (EntityKind.USER, "users"),
    OptionType.CHANNEL: (EntityKind.CHANNEL, "channels"),
    OptionType.ROLE: (EntityKind.ROLE, "roles"),
    OptionType.ATTACHMENT: (EntityKind.ATTACHMENT, "attachments"),
}

_SELECT_TABLES: dict[ComponentType, tuple[EntityKind, str]] = {
    ComponentType.USER_SELECT: (EntityKind.USER, "users"),
    ComponentType.ROLE_SELECT: (EntityKind.ROLE, "roles"),
    ComponentType.CHANNEL_SELECT: (EntityKind.CHANNEL, "channels"),
}


def decode_interaction(
    raw_body: bytes,
    *,
    received_at: datetime | None = None,
) -> Interaction:
    """Decodifica o corpo bruto (já autenticado) em uma interação.

    Args:
        raw_body: Corpo exatamente como recebido
        received_at: Instante de recebimento (default: agora, UTC)

    Returns:
        Variante de Interaction correspondente ao discriminante

    Raises:
        DecodeError: JSON inválido, discriminante ausente/desconhecido ou
            payload incompatível com o schema
    """
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise DecodeError("invalid_json") from exc
    if not isinstance(payload, dict):
        raise DecodeError("payload_not_object")
    try:
        return decode_interaction_payload(payload, received_at=received_at)
    except RecursionError as exc:
        raise DecodeError("payload_too_deep") from exc


def decode_interaction_payload(
    payload: Mapping[str, Any],
    *,
    received_at: datetime | None = None,
) -> Interaction:
    """Decodifica um payload já convertido em dict."""
    interaction_type = _interaction_type(payload.get("type"))
    raw = _validate(RawInteraction, payload, "invalid_envelope")
    common = _common_fields(raw, received_at or datetime.now(UTC))

    match interaction_type:
        case InteractionType.PING:
            return PingInteraction(**common)
        case InteractionType.APPLICATION_COMMAND:
            command_data = _validate(RawCommandData, raw.data, "invalid_command_data")
            return ApplicationCommandInteraction(
                **common,
                command=_decode_command(command_data, autocomplete=False),
            )
        case InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE:
            command_data = _validate(RawCommandData, raw.data, "invalid_command_data")
            command = _decode_command(command_data, autocomplete=True)
            if command.focused is None:
                raise DecodeError("missing_focused_option")
            return AutocompleteInteraction(**common, command=command)
        case InteractionType.MESSAGE_COMPONENT:
            component_data = _validate(RawComponentData, raw.data, "invalid_component_data")
            component_type = _enum(
                ComponentType, component_data.component_type, "unknown_component_type"
            )
            return ComponentInteraction(
                **common,
                custom_id=component_data.custom_id,
                component_type=component_type,
                values=tuple(component_data.values),
                resolved_values=_resolve_select_values(component_type, component_data),
                message=raw.message,
            )
        case InteractionType.MODAL_SUBMIT:
            modal_data = _validate(RawModalData, raw.data, "invalid_modal_data")
            return ModalSubmitInteraction(
                **common,
                custom_id=modal_data.custom_id,
                fields=dict(_walk_modal_fields(modal_data.components)),
                message=raw.message,
            )


def _interaction_type(value: Any) -> InteractionType:
    if value is None:
        raise DecodeError("missing_type")
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError("unknown_interaction_type")
    return _enum(InteractionType, value, "unknown_interaction_type")


def _enum(enum_cls: Any, value: int, reason: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise DecodeError(reason) from exc


def _validate(model: type[_ModelT], data: Any, reason: str) -> _ModelT:
    if data is None:
        raise DecodeError(reason)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        logger.debug(
            "interaction_decode_validation_failed",
            extra={"reason": reason, "error_count": exc.error_count()},
        )
        raise DecodeError(reason) from exc


def _common_fields(raw: RawInteraction, received_at: datetime) -> dict[str, Any]:
    return {
        "id": raw.id,
        "application_id": raw.application_id,
        "token": raw.token,
        "version": raw.version,
        "user": _user(raw.user),
        "member": _member(raw.member),
        "guild_id": raw.guild_id,
        "channel_id": raw.channel_id,
        "locale": raw.locale,
        "guild_locale": raw.guild_locale,
        "app_permissions": raw.app_permissions,
        "received_at": received_at,
    }


def _user(raw: RawUser | None) -> UserRef | None:
    if raw is None:
        return None
    return UserRef(
        id=raw.id,
        username=raw.username,
        global_name=raw.global_name,
        bot=raw.bot,
    )


def _member(raw: RawMember | None) -> MemberRef | None:
    if raw is None:
        return None
    return MemberRef(
        user=_user(raw.user),
        nick=raw.nick,
        roles=tuple(raw.roles),
        permissions=raw.permissions,
    )


def _decode_command(data: RawCommandData, *, autocomplete: bool) -> CommandInvocation:
    command_type = _enum(ApplicationCommandType, data.type, "unknown_command_type")
    target: EntityRef | None = None
    if data.target_id is not None:
        kind, table = (
            (EntityKind.USER, "users")
            if command_type is ApplicationCommandType.USER
            else (EntityKind.MESSAGE, "messages")
        )
        target = _entity(kind, data.target_id, data.resolved, table)
    return CommandInvocation(
        id=data.id,
        name=data.name,
        command_type=command_type,
        options=_decode_options(data.options, data.resolved, autocomplete=autocomplete),
        target_id=data.target_id,
        target=target,
    )


def _decode_options(
    raw_options: list[RawOption],
    resolved: RawResolved | None,
    *,
    autocomplete: bool,
) -> tuple[CommandOption, ...]:
    """Resolve a árvore de opções (grupos → subcomandos → folhas)."""
    decoded: list[CommandOption] = []
    for raw in raw_options:
        option_type = _enum(OptionType, raw.type, "unknown_option_type")
        if option_type.is_subcommand:
            if len(raw_options) != 1:
                raise DecodeError("mixed_subcommand_options")
            if raw.value is not None:
                raise DecodeError("subcommand_with_value")
            children = _decode_options(raw.options, resolved, autocomplete=autocomplete)
            decoded.append(CommandOption(name=raw.name, type=option_type, options=children))
            continue
        if raw.options:
            raise DecodeError("leaf_option_with_children")
        if autocomplete and raw.focused:
            # Valor parcial digitado; não é convertido para o tipo declarado
            partial = "" if raw.value is None else str(raw.value)
            decoded.append(
                CommandOption(name=raw.name, type=option_type, value=partial, focused=True)
            )
            continue
        value = _coerce_value(option_type, raw.value, resolved)
        decoded.append(CommandOption(name=raw.name, type=option_type, value=value))
    return tuple(decoded)


def _coerce_value(
    option_type: OptionType,
    value: Any,
    resolved: RawResolved | None,
) -> OptionValue:
    """Converte o valor folha para o tipo declarado.

    `bool` é subclasse de `int` em Python e precisa ser excluído
    explicitamente nos tipos numéricos.
    """
    if value is None:
        raise DecodeError("missing_option_value")
    match option_type:
        case OptionType.STRING:
            if isinstance(value, str):
                return value
        case OptionType.INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        case OptionType.NUMBER:
            if isinstance(value, int | float) and not isinstance(value, bool):
                return float(value)
        case OptionType.BOOLEAN:
            if isinstance(value, bool):
                return value
        case OptionType.MENTIONABLE:
            if isinstance(value, str) and value:
                return _mentionable(value, resolved)
        case _:
            if isinstance(value, str) and value:
                kind, table = _ENTITY_TABLES[option_type]
                return _entity(kind, value, resolved, table)
    raise DecodeError("option_type_mismatch")


def _entity(
    kind: EntityKind,
    entity_id: str,
    resolved: RawResolved | None,
    table: str,
) -> EntityRef:
    if resolved is None:
        return EntityRef(kind=kind, id=entity_id)
    data = getattr(resolved, table).get(entity_id)
    if data is None:
        raise DecodeError("unresolved_entity")
    if kind is EntityKind.USER and entity_id in resolved.members:
        data = {**data, "member": resolved.members[entity_id]}
    return EntityRef(kind=kind, id=entity_id, data=data)


def _mentionable(entity_id: str, resolved: RawResolved | None) -> EntityRef:
    """Mentionable resolve para usuário ou cargo (usuário tem precedência)."""
    if resolved is None:
        raise DecodeError("unresolved_mentionable")
    if entity_id in resolved.users:
        return _entity(EntityKind.USER, entity_id, resolved, "users")
    if entity_id in resolved.roles:
        return _entity(EntityKind.ROLE, entity_id, resolved, "roles")
    raise DecodeError("unresolved_entity")


def _resolve_select_values(
    component_type: ComponentType,
    data: RawComponentData,
) -> tuple[EntityRef, ...]:
    if data.resolved is None:
        return ()
    if component_type is ComponentType.MENTIONABLE_SELECT:
        return tuple(_mentionable(value, data.resolved) for value in data.values)
    if component_type not in _SELECT_TABLES:
        return ()
    kind, table = _SELECT_TABLES[component_type]
    return tuple(_entity(kind, value, data.resolved, table) for value in data.values)


def _walk_modal_fields(components: list[Any]) -> Iterator[tuple[str, str]]:
    """Percorre action rows e labels coletando custom_id → valor."""
    for component in components:
        if not isinstance(component, dict):
            raise DecodeError("invalid_modal_component")
        custom_id = component.get("custom_id")
        value = component.get("value")
        if isinstance(custom_id, str) and isinstance(value, str):
            yield custom_id, value
        nested = component.get("components")
        if isinstance(nested, list):
            yield from _walk_modal_fields(nested)
        child = component.get("component")
        if isinstance(child, dict):
            yield from _walk_modal_fields([child])
