"""Testes da máquina de estados de interações."""

import pytest

from fsm import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    InteractionState,
    InteractionStateMachine,
    StateTransition,
    TransitionResult,
    create_fsm,
    get_valid_targets,
    is_acknowledged,
    is_terminal,
    is_transition_valid,
    validate_transition_map,
)


class TestStates:
    def test_initial_and_terminal_states(self) -> None:
        assert DEFAULT_INITIAL_STATE is InteractionState.RECEIVED
        assert TERMINAL_STATES == {InteractionState.CLOSED, InteractionState.FAILED}
        assert is_terminal(InteractionState.FAILED)
        assert not is_terminal(InteractionState.DEFERRED)

    def test_acknowledged_states(self) -> None:
        assert is_acknowledged(InteractionState.DEFERRED)
        assert is_acknowledged(InteractionState.FOLLOWED_UP)
        assert not is_acknowledged(InteractionState.DISPATCHED)
        assert not is_acknowledged(InteractionState.FAILED)

    def test_transition_map_is_complete(self) -> None:
        assert set(VALID_TRANSITIONS) == set(InteractionState)
        assert validate_transition_map() == []


class TestTransitions:
    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (InteractionState.RECEIVED, InteractionState.DISPATCHED),
            (InteractionState.RECEIVED, InteractionState.RESPONDED),
            (InteractionState.DISPATCHED, InteractionState.DEFERRED),
            (InteractionState.DEFERRED, InteractionState.FOLLOWED_UP),
            (InteractionState.FOLLOWED_UP, InteractionState.FOLLOWED_UP),
            (InteractionState.FOLLOWED_UP, InteractionState.CLOSED),
            (InteractionState.DEFERRED, InteractionState.FAILED),
        ],
    )
    def test_valid(self, source: InteractionState, target: InteractionState) -> None:
        assert is_transition_valid(source, target)

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (InteractionState.RESPONDED, InteractionState.DEFERRED),
            (InteractionState.DEFERRED, InteractionState.RESPONDED),
            (InteractionState.RESPONDED, InteractionState.FAILED),
            (InteractionState.CLOSED, InteractionState.FOLLOWED_UP),
            (InteractionState.FAILED, InteractionState.CLOSED),
            (InteractionState.RECEIVED, InteractionState.DEFERRED),
        ],
    )
    def test_invalid(self, source: InteractionState, target: InteractionState) -> None:
        assert not is_transition_valid(source, target)

    def test_terminal_states_have_no_targets(self) -> None:
        for state in TERMINAL_STATES:
            assert get_valid_targets(state) == frozenset()


class TestMachine:
    def test_deferred_lifecycle_history(self) -> None:
        fsm = create_fsm("900")

        fsm.transition(InteractionState.DISPATCHED, "handler_resolved")
        fsm.transition(InteractionState.DEFERRED, "soft_deadline", {"response": "DeferredMessage"})
        fsm.transition(InteractionState.FOLLOWED_UP, "original_edited")
        fsm.transition(InteractionState.FOLLOWED_UP, "followup_sent")
        result = fsm.transition(InteractionState.CLOSED, "handler_completed")

        assert result.success
        assert fsm.is_terminal
        assert [t.trigger for t in fsm.history] == [
            "handler_resolved",
            "soft_deadline",
            "original_edited",
            "followup_sent",
            "handler_completed",
        ]
        assert fsm.get_state_summary() == {
            "interaction_id": "900",
            "current_state": "CLOSED",
            "acknowledged": True,
            "is_terminal": True,
            "transition_count": 5,
        }

    def test_rejected_transition_keeps_state(self) -> None:
        fsm = InteractionStateMachine("1", initial_state=InteractionState.RESPONDED)

        result = fsm.transition(InteractionState.DEFERRED, "late_defer")

        assert not result.success
        assert "RESPONDED" in result.error_reason
        assert fsm.current_state is InteractionState.RESPONDED
        assert fsm.history == []

    def test_history_is_a_copy(self) -> None:
        fsm = create_fsm("1")
        fsm.transition(InteractionState.RESPONDED, "ping")

        fsm.history.clear()

        assert len(fsm.history) == 1
        assert fsm.get_history_summary()[0]["to_state"] == "RESPONDED"


class TestTypes:
    def test_empty_trigger_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            StateTransition(InteractionState.RECEIVED, InteractionState.RESPONDED, " ")

    def test_result_consistency(self) -> None:
        with pytest.raises(ValueError):
            TransitionResult(success=True)
        with pytest.raises(ValueError):
            TransitionResult(success=False)

    def test_advance_is_a_noop_when_not_allowed(self) -> None:
        fsm = InteractionStateMachine("1", initial_state=InteractionState.FAILED)

        assert fsm.advance(InteractionState.CLOSED, "handler_completed") is False
        assert fsm.current_state is InteractionState.FAILED

    def test_advance_applies_allowed_transition(self) -> None:
        fsm = InteractionStateMachine("1", initial_state=InteractionState.RESPONDED)

        assert fsm.advance(InteractionState.FOLLOWED_UP, "followup_sent") is True
        assert fsm.history[0].to_log_dict()["trigger"] == "followup_sent"
