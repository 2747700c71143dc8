"""Formatters de logging estruturado.

Todo log JSON carrega: asctime, level, logger, message, correlation_id
e service. Campos de `extra` entram como chaves adicionais.
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

# Ordem estável: é a ordem das chaves no JSON emitido
REQUIRED_LOG_FIELDS: tuple[str, ...] = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-02-02 10:30:00,123",
            "level": "INFO",
            "logger": "app.coordinators.interactions.dispatcher",
            "message": "interaction_dispatched",
            "correlation_id": "abc-123",
            "service": "discord-interactions",
            "interaction_type": "APPLICATION_COMMAND"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)
    return JsonFormatter(format_string, rename_fields=FIELD_RENAME_MAP)


def create_text_formatter() -> logging.Formatter:
    """Formatter legível para desenvolvimento local e testes."""
    return logging.Formatter(TEXT_FORMAT)
