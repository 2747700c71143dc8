"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    AlreadyRespondedError,
    AuthenticationError,
    CommandNotFoundError,
    DecodeError,
    HandlerError,
    InfrastructureError,
    InteractionError,
    NotDispatchableError,
    RegistrationError,
    RoutingError,
    TokenExpiredError,
    ValidationError,
)

__all__ = [
    "AlreadyRespondedError",
    "AuthenticationError",
    "CommandNotFoundError",
    "DecodeError",
    "HandlerError",
    "InfrastructureError",
    "InteractionError",
    "NotDispatchableError",
    "RegistrationError",
    "RoutingError",
    "TokenExpiredError",
    "ValidationError",
]
