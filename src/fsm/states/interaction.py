"""
Estados do ciclo de vida de uma interação.

Uma interação recebe exatamente uma resposta inicial (direta ou deferida)
e depois zero ou mais follow-ups até ser encerrada.
"""

from enum import StrEnum


class InteractionState(StrEnum):
    """
    Estados de uma interação em processamento.

    Estados não-terminais:
        - RECEIVED: Autenticada e decodificada, ainda sem handler
        - DISPATCHED: Handler em execução, nenhuma resposta enviada
        - RESPONDED: Resposta inicial direta enviada
        - DEFERRED: ACK deferido enviado; conteúdo virá por follow-up
        - FOLLOWED_UP: Ao menos um follow-up/edição enviado

    Estados terminais:
        - CLOSED: Handler concluído
        - FAILED: Nenhuma resposta utilizável pôde ser produzida
    """

    RECEIVED = "RECEIVED"
    DISPATCHED = "DISPATCHED"
    RESPONDED = "RESPONDED"
    DEFERRED = "DEFERRED"
    FOLLOWED_UP = "FOLLOWED_UP"

    CLOSED = "CLOSED"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value


TERMINAL_STATES: frozenset[InteractionState] = frozenset({
    InteractionState.CLOSED,
    InteractionState.FAILED,
})

# Estados em que a resposta inicial já existe
ACKNOWLEDGED_STATES: frozenset[InteractionState] = frozenset({
    InteractionState.RESPONDED,
    InteractionState.DEFERRED,
    InteractionState.FOLLOWED_UP,
    InteractionState.CLOSED,
})

DEFAULT_INITIAL_STATE: InteractionState = InteractionState.RECEIVED


def is_terminal(state: InteractionState) -> bool:
    """
    Verifica se o estado é terminal.

    Args:
        state: Estado a ser verificado

    Returns:
        True se o estado é terminal, False caso contrário
    """
    return state in TERMINAL_STATES


def is_acknowledged(state: InteractionState) -> bool:
    """Verifica se a resposta inicial já foi enviada."""
    return state in ACKNOWLEDGED_STATES
