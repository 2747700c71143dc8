"""Endpoints de health check."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_base_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class ComponentCheck:
    """Resultado de checagem de um componente interno."""

    status: Literal["ok", "failed"]
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status, "error": self.error}


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=get_base_settings().service_name,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness: use case montado e registry congelado."""
    state = request.app.state
    checks = {
        "interaction_use_case": _check_present(getattr(state, "interaction_use_case", None)),
        "command_registry": _check_registry(getattr(state, "command_registry", None)),
    }
    ready = all(check.status == "ok" for check in checks.values())
    if not ready:
        logger.warning(
            "readiness_check_failed",
            extra={name: check.error for name, check in checks.items() if check.error},
        )
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {name: check.as_dict() for name, check in checks.items()},
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


def _check_present(component: Any | None) -> ComponentCheck:
    if component is None:
        return ComponentCheck(status="failed", error="not_configured")
    return ComponentCheck(status="ok")


def _check_registry(registry: Any | None) -> ComponentCheck:
    if registry is None:
        return ComponentCheck(status="failed", error="not_configured")
    if not registry.is_frozen:
        return ComponentCheck(status="failed", error="not_frozen")
    return ComponentCheck(status="ok")
