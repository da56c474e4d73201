"""Unit tests for the pipeline state machine.

Tests cover:
- The success path and the not-found shortcut
- Error states and their short-circuit to done
- Rejection of invalid transitions
- Transition records
"""

import pytest

from guestbook_feed.state_machine import (
    ERROR_STATES,
    VALID_TRANSITIONS,
    InvalidStateTransitionError,
    PipelineStateMachine,
)
from guestbook_feed.types import PipelineState as S


class TestTransitionTable:
    """Test the shape of the transition table."""

    def test_every_state_listed(self):
        """Test that every pipeline state has an entry."""
        assert set(VALID_TRANSITIONS) == set(S)

    def test_done_is_only_terminal_state(self):
        """Test that done is the only state without successors."""
        terminal = {s for s, targets in VALID_TRANSITIONS.items() if not targets}
        assert terminal == {S.DONE}

    def test_error_states_only_lead_to_done(self):
        """Test that error states lead only to done."""
        for state in ERROR_STATES:
            assert VALID_TRANSITIONS[state] == {S.DONE}


class TestPaths:
    """Test complete runs through the machine."""

    def test_success_path(self):
        """Test the full success path."""
        sm = PipelineStateMachine()
        for state in (
            S.CONFIG_RESOLVED,
            S.FORMS_LISTED,
            S.FORM_RESOLVED,
            S.SUBMISSIONS_FETCHED,
            S.NORMALIZED,
            S.DONE,
        ):
            sm.transition_to(state)

        assert sm.is_terminal()
        assert not sm.failed()
        assert len(sm.get_transitions()) == 6

    def test_not_found_skips_fetch(self):
        """Test that a missing form skips the submissions fetch."""
        sm = PipelineStateMachine()
        sm.transition_to(S.CONFIG_RESOLVED)
        sm.transition_to(S.FORMS_LISTED)
        sm.transition_to(S.FORM_NOT_FOUND)
        sm.transition_to(S.DONE)

        assert sm.path() == [S.INIT, S.CONFIG_RESOLVED, S.FORMS_LISTED, S.FORM_NOT_FOUND, S.DONE]
        assert not sm.failed()

    @pytest.mark.parametrize(
        "prefix,error_state",
        [
            ([], S.CONFIG_ERROR),
            ([S.CONFIG_RESOLVED], S.FORMS_LIST_ERROR),
            ([S.CONFIG_RESOLVED, S.FORMS_LISTED, S.FORM_RESOLVED], S.SUBMISSIONS_LIST_ERROR),
        ],
    )
    def test_error_short_circuits_to_done(self, prefix, error_state):
        """Test that each error state goes straight to done."""
        sm = PipelineStateMachine()
        for state in prefix:
            sm.transition_to(state)
        sm.transition_to(error_state)
        sm.transition_to(S.DONE)

        assert sm.failed()
        assert sm.is_terminal()


class TestInvalidTransitions:
    """Test rejection of transitions outside the table."""

    def test_cannot_skip_stage(self):
        """Test that skipping a stage is rejected."""
        sm = PipelineStateMachine()
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            sm.transition_to(S.FORMS_LISTED)

        assert exc_info.value.current_state == S.INIT
        assert exc_info.value.target_state == S.FORMS_LISTED
        assert "config_error, config_resolved" in str(exc_info.value)
        assert sm.state == S.INIT

    def test_not_found_cannot_fetch(self):
        """Test that not-found cannot move on to fetching."""
        sm = PipelineStateMachine(state=S.FORM_NOT_FOUND)
        assert not sm.can_transition_to(S.SUBMISSIONS_FETCHED)

    def test_done_is_terminal(self):
        """Test that no transition leaves done."""
        sm = PipelineStateMachine(state=S.DONE)
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            sm.transition_to(S.INIT)
        assert "terminal state" in str(exc_info.value)


class TestTransitionRecords:
    """Test recorded transitions."""

    def test_detail_recorded(self):
        """Test that transition detail is recorded."""
        sm = PipelineStateMachine()
        sm.transition_to(S.CONFIG_RESOLVED, {"site_scope": "s1"})

        record = sm.get_transitions()[0]
        assert record.from_state == S.INIT
        assert record.to_state == S.CONFIG_RESOLVED
        assert record.to_dict()["detail"] == {"site_scope": "s1"}
        assert record.to_dict()["from"] == "init"

    def test_get_transitions_returns_copy(self):
        """Test that the transition list is returned as a copy."""
        sm = PipelineStateMachine()
        sm.transition_to(S.CONFIG_RESOLVED)
        sm.get_transitions().clear()
        assert len(sm.get_transitions()) == 1

    def test_path_before_any_transition(self):
        """Test the path of a fresh machine."""
        assert PipelineStateMachine().path() == [S.INIT]
