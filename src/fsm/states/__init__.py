"""
Exports públicos do módulo fsm/states.

Estados do ciclo de vida de uma interação.
"""

from fsm.states.interaction import (
    ACKNOWLEDGED_STATES,
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    InteractionState,
    is_acknowledged,
    is_terminal,
)

__all__ = [
    "ACKNOWLEDGED_STATES",
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "InteractionState",
    "is_acknowledged",
    "is_terminal",
]
