"""Fake in-memory do cliente REST do Discord para testes deterministas."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RecordedCall:
    operation: str
    token: str
    message_id: str | None = None
    payload: Any = None
    files: tuple[Any, ...] = ()


@dataclass
class FakeDiscordHttpClient:
    """Implementa DiscordHttpClientProtocol sem IO.

    `delays` atrasa operações por nome; `failures` levanta a exceção
    configurada na próxima chamada daquela operação.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    delays: dict[str, float] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    synced: list[tuple[list[dict[str, Any]], str | None]] = field(default_factory=list)
    closed: bool = False
    _next_id: int = 1000

    async def create_interaction_response(
        self,
        interaction_id: str,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[Any] = (),
    ) -> None:
        await self._record("callback", token, interaction_id, payload, files)

    async def create_followup_message(
        self,
        token: str,
        payload: dict[str, Any],
        *,
        files: Sequence[Any] = (),
    ) -> dict[str, Any]:
        await self._record("followup_create", token, None, payload, files)
        self._next_id += 1
        return {"id": str(self._next_id), **payload}

    async def edit_webhook_message(
        self,
        token: str,
        message_id: str,
        payload: dict[str, Any],
        *,
        files: Sequence[Any] = (),
    ) -> dict[str, Any]:
        await self._record("message_edit", token, message_id, payload, files)
        return {"id": message_id, **payload}

    async def get_webhook_message(self, token: str, message_id: str) -> dict[str, Any]:
        await self._record("message_get", token, message_id)
        return {"id": message_id}

    async def delete_webhook_message(self, token: str, message_id: str) -> None:
        await self._record("message_delete", token, message_id)

    async def bulk_overwrite_commands(
        self,
        commands: list[dict[str, Any]],
        guild_id: str | None = None,
    ) -> list[dict[str, Any]]:
        self.synced.append((commands, guild_id))
        return commands

    async def aclose(self) -> None:
        self.closed = True

    def operations(self, token: str | None = None) -> list[str]:
        return [call.operation for call in self.calls if token is None or call.token == token]

    async def _record(
        self,
        operation: str,
        token: str,
        message_id: str | None,
        payload: Any = None,
        files: Sequence[Any] = (),
    ) -> None:
        delay = self.delays.get(operation)
        if delay:
            await asyncio.sleep(delay)
        failure = self.failures.pop(operation, None)
        if failure is not None:
            raise failure
        self.calls.append(RecordedCall(operation, token, message_id, payload, tuple(files)))
