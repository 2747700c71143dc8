"""Roteamento de componentes e modais por convenção de custom id.

Convenção padrão: `"<prefixo><separador><resto>"`. O prefixo seleciona o
handler; o resto fica disponível para o handler (ex: id de um registro).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from app.domain.commands import Handler
from utils.errors import RegistrationError, RoutingError

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "/"


class CustomIdRouter:
    """Resolve custom ids para handlers registrados por prefixo."""

    __slots__ = ("_frozen", "_handlers", "_lock", "_separator")

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        if not separator:
            raise ValueError("separator não pode ser vazio")
        self._separator = separator
        self._handlers: dict[str, Handler] = {}
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def separator(self) -> str:
        return self._separator

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, prefix: str, handler: Handler) -> None:
        """Associa um prefixo a um handler.

        Raises:
            RegistrationError: Prefixo vazio, contendo o separador, duplicado
                ou registro congelado
        """
        if not prefix or self._separator in prefix:
            raise RegistrationError(f"invalid_custom_id_prefix: {prefix!r}")
        with self._lock:
            if self._frozen:
                raise RegistrationError("router_frozen")
            if prefix in self._handlers:
                raise RegistrationError(f"duplicate_custom_id_prefix: {prefix}")
            self._handlers[prefix] = handler

    def route(self, prefix: str) -> Callable[[Handler], Handler]:
        """Decorator equivalente a register(prefix, handler)."""

        def decorator(handler: Handler) -> Handler:
            self.register(prefix, handler)
            return handler

        return decorator

    def resolve(self, custom_id: str) -> tuple[Handler, str]:
        """Retorna (handler, resto) para o custom id.

        Raises:
            RoutingError: Se nenhum handler corresponde ao prefixo
        """
        prefix, _, remainder = custom_id.partition(self._separator)
        handler = self._handlers.get(prefix)
        if handler is None:
            raise RoutingError(f"unknown_custom_id_prefix: {prefix}")
        return handler, remainder

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def build_custom_id(self, prefix: str, *parts: str) -> str:
        """Monta um custom id na convenção do router."""
        return self._separator.join((prefix, *parts))
