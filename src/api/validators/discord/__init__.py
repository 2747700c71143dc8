"""Validadores Discord — limites e compatibilidade de respostas."""

from .validator import (
    ALLOWED_RESPONSES,
    InteractionResponseValidator,
    is_response_allowed,
    validate_choices,
    validate_message,
    validate_modal,
)

__all__ = [
    "ALLOWED_RESPONSES",
    "InteractionResponseValidator",
    "is_response_allowed",
    "validate_choices",
    "validate_message",
    "validate_modal",
]
