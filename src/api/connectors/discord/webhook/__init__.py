"""Recepção de entregas de interação."""

from .receive import parse_interaction_request

__all__ = ["parse_interaction_request"]
