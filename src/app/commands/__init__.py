"""Registro de comandos e roteamento de componentes."""

from .components import DEFAULT_SEPARATOR, CustomIdRouter
from .registry import CommandRegistry, validate_invocation

__all__ = [
    "DEFAULT_SEPARATOR",
    "CommandRegistry",
    "CustomIdRouter",
    "validate_invocation",
]
