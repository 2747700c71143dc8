"""Controle das tasks de handler que continuam após a resposta inicial."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTaskSet:
    """Conjunto de tasks pertencentes ao processo (não ao request HTTP).

    Mantém referência forte até a conclusão e registra falhas não tratadas.
    """

    __slots__ = ("_tasks",)

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def track(self, task: asyncio.Task[Any]) -> None:
        """Passa a acompanhar uma task já criada."""
        if task.done():
            return
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        logger.debug("interaction_task_tracked", extra={"active_tasks": len(self._tasks)})

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "interaction_task_failed",
                    extra={
                        "error_type": type(exc).__name__,
                        "active_tasks": len(self._tasks),
                    },
                )

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda tasks pendentes durante shutdown do processo."""
        if not self._tasks:
            return

        pending_now = list(self._tasks)
        logger.info(
            "interaction_tasks_shutdown_wait",
            extra={
                "pending_tasks": len(pending_now),
                "timeout_seconds": timeout_seconds,
            },
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "interaction_tasks_shutdown_cancelled",
            extra={"cancelled_tasks": len(pending)},
        )
