"""Coordenação do ciclo de vida de uma interação."""

from .background import BackgroundTaskSet
from .context import InitialResponseSlot, InteractionContext
from .dispatcher import DispatchResult, InteractionDispatcher
from .followup import DeferredState, FollowupCoordinator

__all__ = [
    "BackgroundTaskSet",
    "DeferredState",
    "DispatchResult",
    "FollowupCoordinator",
    "InitialResponseSlot",
    "InteractionContext",
    "InteractionDispatcher",
]
