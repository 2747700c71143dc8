"""Modelos pydantic do payload bruto de interação.

Espelham apenas a estrutura recebida; a conversão para os modelos de
domínio (tipagem de opções, resolução de entidades) fica no decoder.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RawUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str = ""
    global_name: str | None = None
    bot: bool = False


class RawMember(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: RawUser | None = None
    nick: str | None = None
    roles: list[str] = Field(default_factory=list)
    permissions: str | None = None


class RawOption(BaseModel):
    """Nó da árvore de opções (subcomando, grupo ou folha)."""

    model_config = ConfigDict(extra="ignore")

    name: str
    type: int
    value: Any = None
    options: list[RawOption] = Field(default_factory=list)
    focused: bool = False


class RawResolved(BaseModel):
    """Mapa `resolved`: objetos parciais indexados por snowflake."""

    model_config = ConfigDict(extra="ignore")

    users: dict[str, dict[str, Any]] = Field(default_factory=dict)
    members: dict[str, dict[str, Any]] = Field(default_factory=dict)
    roles: dict[str, dict[str, Any]] = Field(default_factory=dict)
    channels: dict[str, dict[str, Any]] = Field(default_factory=dict)
    messages: dict[str, dict[str, Any]] = Field(default_factory=dict)
    attachments: dict[str, dict[str, Any]] = Field(default_factory=dict)


class RawCommandData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    type: int = 1
    options: list[RawOption] = Field(default_factory=list)
    resolved: RawResolved | None = None
    target_id: str | None = None


class RawComponentData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    custom_id: str
    component_type: int
    values: list[str] = Field(default_factory=list)
    resolved: RawResolved | None = None


class RawModalData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    custom_id: str
    components: list[dict[str, Any]] = Field(default_factory=list)


class RawInteraction(BaseModel):
    """Envelope comum a todos os tipos de interação."""

    model_config = ConfigDict(extra="ignore")

    id: str
    application_id: str
    type: int
    token: str
    version: int = 1
    data: dict[str, Any] | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    user: RawUser | None = None
    member: RawMember | None = None
    message: dict[str, Any] | None = None
    locale: str | None = None
    guild_locale: str | None = None
    app_permissions: str | None = None
