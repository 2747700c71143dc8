"""Registro de transições do ciclo de vida de uma interação."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.interaction import InteractionState


@dataclass(frozen=True, slots=True)
class StateTransition:
    """Mudança de estado aceita pela máquina.

    Attributes:
        from_state: Estado anterior
        to_state: Novo estado
        trigger: Evento que causou a mudança ('handler_responded', 'soft_deadline', ...)
        metadata: Dados de auditoria (nunca token ou conteúdo de mensagem)
        at: Instante da mudança (UTC)
    """

    from_state: InteractionState
    to_state: InteractionState
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger.strip():
            raise ValueError("empty_trigger")

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "from_state": self.from_state.name,
            "to_state": self.to_state.name,
            "trigger": self.trigger,
            "at": self.at.isoformat(),
            **self.metadata,
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """Resultado de `InteractionStateMachine.transition`.

    Use as fábricas `accepted` / `rejected`; a combinação de campos é
    verificada na construção.
    """

    success: bool
    transition: StateTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        if self.success != (self.transition is not None):
            raise ValueError("transition_required_on_success")
        if not self.success and not self.error_reason:
            raise ValueError("error_reason_required_on_rejection")

    @classmethod
    def accepted(cls, transition: StateTransition) -> TransitionResult:
        return cls(success=True, transition=transition)

    @classmethod
    def rejected(cls, current: InteractionState, target: InteractionState) -> TransitionResult:
        return cls(success=False, error_reason=f"{current.name} -> {target.name} not allowed")
