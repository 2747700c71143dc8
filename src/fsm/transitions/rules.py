"""
Regras de transição válidas entre estados de interação.

Grafo: Received → Dispatched → {Responded | Deferred → FollowedUp* → Closed}.
Ping vai direto de Received para Responded.
"""

from fsm.states.interaction import TERMINAL_STATES, InteractionState

TransitionMap = dict[InteractionState, frozenset[InteractionState]]

VALID_TRANSITIONS: TransitionMap = {
    InteractionState.RECEIVED: frozenset({
        InteractionState.DISPATCHED,
        InteractionState.RESPONDED,
        InteractionState.FAILED,
    }),

    InteractionState.DISPATCHED: frozenset({
        InteractionState.RESPONDED,
        InteractionState.DEFERRED,
        InteractionState.FAILED,
    }),

    InteractionState.RESPONDED: frozenset({
        InteractionState.FOLLOWED_UP,
        InteractionState.CLOSED,
    }),

    InteractionState.DEFERRED: frozenset({
        InteractionState.FOLLOWED_UP,
        InteractionState.CLOSED,
        InteractionState.FAILED,
    }),

    # Loop: vários follow-ups por token
    InteractionState.FOLLOWED_UP: frozenset({
        InteractionState.FOLLOWED_UP,
        InteractionState.CLOSED,
    }),

    InteractionState.CLOSED: frozenset(),
    InteractionState.FAILED: frozenset(),
}


def get_valid_targets(state: InteractionState) -> frozenset[InteractionState]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem

    Returns:
        Conjunto de estados de destino permitidos (vazio se terminal)
    """
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: InteractionState, to_state: InteractionState) -> bool:
    """Verifica se uma transição é permitida."""
    if from_state in TERMINAL_STATES:
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in InteractionState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        targets = VALID_TRANSITIONS.get(state, frozenset())
        if targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )

    return errors
