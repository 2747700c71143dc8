"""Máquina de estados do ciclo de vida de uma interação.

Uma instância por entrega, criada pelo dispatcher e descartada quando o
handler termina. Não há persistência: o histórico serve apenas para logs
e testes.

    RECEIVED → DISPATCHED → RESPONDED | DEFERRED → FOLLOWED_UP* → CLOSED
"""

from __future__ import annotations

import logging
from typing import Any

from fsm.states.interaction import (
    DEFAULT_INITIAL_STATE,
    InteractionState,
    is_acknowledged,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

logger = logging.getLogger(__name__)


class InteractionStateMachine:
    """Estado corrente de uma interação e as transições já aceitas."""

    __slots__ = ("_history", "_interaction_id", "_state")

    def __init__(
        self,
        interaction_id: str = "",
        initial_state: InteractionState | None = None,
    ) -> None:
        self._interaction_id = interaction_id
        self._state = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []

    @property
    def interaction_id(self) -> str:
        return self._interaction_id

    @property
    def current_state(self) -> InteractionState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._state)

    @property
    def is_acknowledged(self) -> bool:
        """True quando a resposta inicial (direta ou deferida) já saiu."""
        return is_acknowledged(self._state)

    def can_transition_to(self, target: InteractionState) -> bool:
        return is_transition_valid(self._state, target)

    def get_valid_targets(self) -> frozenset[InteractionState]:
        return get_valid_targets(self._state)

    def transition(
        self,
        target: InteractionState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Aplica a transição se a tabela permitir.

        Transições recusadas não alteram o estado nem o histórico.
        """
        if not is_transition_valid(self._state, target):
            logger.debug(
                "interaction_transition_refused",
                extra={
                    "interaction_id": self._interaction_id,
                    "from_state": self._state.name,
                    "to_state": target.name,
                    "trigger": trigger,
                },
            )
            return TransitionResult.rejected(self._state, target)

        change = StateTransition(self._state, target, trigger, metadata or {})
        self._state = target
        self._history.append(change)
        return TransitionResult.accepted(change)

    def advance(self, target: InteractionState, trigger: str) -> bool:
        """Transição oportunista: aplica apenas quando permitida.

        Usada para FOLLOWED_UP / CLOSED, onde o estado anterior pode
        legitimamente já ser terminal.
        """
        if not self.can_transition_to(target):
            return False
        return self.transition(target, trigger).success

    def get_state_summary(self) -> dict[str, Any]:
        return {
            "interaction_id": self._interaction_id,
            "current_state": self._state.name,
            "acknowledged": self.is_acknowledged,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        return [change.to_log_dict() for change in self._history]


def create_fsm(interaction_id: str) -> InteractionStateMachine:
    return InteractionStateMachine(interaction_id=interaction_id)
