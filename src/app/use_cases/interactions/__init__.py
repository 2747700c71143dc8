"""Use cases de interação."""

from .process_interaction import InteractionOutcome, OutcomeKind, ProcessInteractionUseCase

__all__ = [
    "InteractionOutcome",
    "OutcomeKind",
    "ProcessInteractionUseCase",
]
