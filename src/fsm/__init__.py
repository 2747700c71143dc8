"""
Módulo FSM — Máquina de Estados do ciclo de vida de interações.

Estrutura:
    - states/: Definições dos estados (InteractionState enum)
    - transitions/: Regras de transição (VALID_TRANSITIONS)
    - manager/: Máquina de estados (InteractionStateMachine)
    - types/: Tipos de dados (StateTransition, TransitionResult)
"""

from fsm.manager import InteractionStateMachine, create_fsm
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    InteractionState,
    is_acknowledged,
    is_terminal,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import StateTransition, TransitionResult

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "InteractionState",
    "InteractionStateMachine",
    "StateTransition",
    "TransitionResult",
    "create_fsm",
    "get_valid_targets",
    "is_acknowledged",
    "is_terminal",
    "is_transition_valid",
    "validate_transition_map",
]
