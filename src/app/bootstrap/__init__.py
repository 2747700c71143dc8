"""Bootstrap da aplicação — inicialização e wiring.

Composition root: configura logging, valida settings e conecta
implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, create_interaction_runtime

    initialize_app()
    runtime = create_interaction_runtime(registry, components=router)
"""

from __future__ import annotations

import logging

from app.bootstrap.discord_factory import (
    InteractionRuntime,
    create_custom_id_router,
    create_interaction_runtime,
    sync_registered_commands,
)
from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import get_base_settings, get_discord_settings

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Configura logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Logging DEBUG em texto para facilitar debug em testes."""
    configure_logging(
        level="DEBUG",
        service_name=f"{get_base_settings().service_name}-test",
        correlation_id_getter=get_correlation_id,
        json_output=False,
    )


def validate_runtime_settings() -> list[str]:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.

    Raises:
        RuntimeError: Configuração inválida em ambiente estrito

    Returns:
        Lista de erros encontrados (vazia = OK).
    """
    base = get_base_settings()
    environment = base.environment
    errors: list[str] = [f"base: {error}" for error in base.validate()]
    errors.extend(f"discord: {error}" for error in get_discord_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return errors

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if environment in STRICT_VALIDATION_ENVS:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")
    return errors


__all__ = [
    "InteractionRuntime",
    "create_custom_id_router",
    "create_interaction_runtime",
    "initialize_app",
    "initialize_test_app",
    "sync_registered_commands",
    "validate_runtime_settings",
]
