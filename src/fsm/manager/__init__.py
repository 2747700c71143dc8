"""
Exports públicos do módulo fsm/manager.

Máquina de estados (InteractionStateMachine) do ciclo de vida de interações.
"""

from fsm.manager.machine import InteractionStateMachine, create_fsm

__all__ = [
    "InteractionStateMachine",
    "create_fsm",
]
