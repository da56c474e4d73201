"""Pipeline state machine for a single guestbook request.

Each request walks a fixed path through the resolution pipeline:

    init -> config_resolved -> forms_listed -> form_resolved
         -> submissions_fetched -> normalized -> done

with two shortcuts: ``form_not_found`` goes straight to ``done`` with an
empty result, and each failing stage moves to its error state, which only
leads to ``done``.

The state machine:
- Enforces valid transitions between stages
- Records every transition with a timestamp for debugging
- Logs transitions at DEBUG level

Usage:
    >>> from guestbook_feed.state_machine import PipelineStateMachine
    >>> from guestbook_feed.types import PipelineState
    >>> sm = PipelineStateMachine()
    >>> sm.state
    <PipelineState.INIT: 'init'>
    >>> sm.transition_to(PipelineState.CONFIG_RESOLVED)
    >>> sm.state
    <PipelineState.CONFIG_RESOLVED: 'config_resolved'>
    >>> len(sm.get_transitions())
    1
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from guestbook_feed.types import PipelineState

logger = logging.getLogger(__name__)


class InvalidStateTransitionError(Exception):
    """Raised when attempting an invalid state transition.

    Attributes:
        current_state: The current state before the attempted transition
        target_state: The target state that was attempted
    """

    def __init__(self, current_state: PipelineState, target_state: PipelineState, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


# Maps each state to the set of states it can transition to
VALID_TRANSITIONS: Dict[PipelineState, Set[PipelineState]] = {
    PipelineState.INIT: {
        PipelineState.CONFIG_RESOLVED,
        PipelineState.CONFIG_ERROR,
    },
    PipelineState.CONFIG_RESOLVED: {
        PipelineState.FORMS_LISTED,
        PipelineState.FORMS_LIST_ERROR,
    },
    PipelineState.FORMS_LISTED: {
        PipelineState.FORM_RESOLVED,
        PipelineState.FORM_NOT_FOUND,
    },
    PipelineState.FORM_RESOLVED: {
        PipelineState.SUBMISSIONS_FETCHED,
        PipelineState.SUBMISSIONS_LIST_ERROR,
    },
    PipelineState.FORM_NOT_FOUND: {PipelineState.DONE},
    PipelineState.SUBMISSIONS_FETCHED: {PipelineState.NORMALIZED},
    PipelineState.NORMALIZED: {PipelineState.DONE},
    PipelineState.CONFIG_ERROR: {PipelineState.DONE},
    PipelineState.FORMS_LIST_ERROR: {PipelineState.DONE},
    PipelineState.SUBMISSIONS_LIST_ERROR: {PipelineState.DONE},
    # Terminal
    PipelineState.DONE: set(),
}

ERROR_STATES: Set[PipelineState] = {
    PipelineState.CONFIG_ERROR,
    PipelineState.FORMS_LIST_ERROR,
    PipelineState.SUBMISSIONS_LIST_ERROR,
}


@dataclass(frozen=True)
class PipelineTransition:
    """One recorded state change.

    Attributes:
        from_state: State before the transition
        to_state: State after the transition
        ts: UTC timestamp of the transition
        detail: Optional context (e.g. form id, row count, error message)
    """
    from_state: PipelineState
    to_state: PipelineState
    ts: datetime
    detail: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "from": self.from_state.value,
            "to": self.to_state.value,
            "ts": self.ts.isoformat(),
        }
        if self.detail is not None:
            result["detail"] = self.detail
        return result


@dataclass
class PipelineStateMachine:
    """Tracks one request's progress through the pipeline.

    Examples:
        >>> sm = PipelineStateMachine()
        >>> sm.can_transition_to(PipelineState.CONFIG_RESOLVED)
        True
        >>> sm.can_transition_to(PipelineState.DONE)
        False
    """

    state: PipelineState = PipelineState.INIT
    _transitions: List[PipelineTransition] = field(default_factory=list, init=False, repr=False)

    def can_transition_to(self, target_state: PipelineState) -> bool:
        return target_state in VALID_TRANSITIONS.get(self.state, set())

    def transition_to(
        self,
        target_state: PipelineState,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Move to a new state and record the transition.

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(target_state):
            valid = VALID_TRANSITIONS[self.state]
            raise InvalidStateTransitionError(
                current_state=self.state,
                target_state=target_state,
                message=(
                    f"Invalid state transition: cannot transition from "
                    f"'{self.state.value}' to '{target_state.value}'. "
                    f"Valid transitions from '{self.state.value}' are: "
                    f"{', '.join(sorted(s.value for s in valid))}"
                    if valid
                    else f"Invalid state transition: '{self.state.value}' is a terminal state, "
                    f"no transitions are allowed."
                ),
            )

        old_state = self.state
        self.state = target_state
        self._transitions.append(
            PipelineTransition(
                from_state=old_state,
                to_state=target_state,
                ts=datetime.now(timezone.utc),
                detail=detail,
            )
        )
        logger.debug("Pipeline %s -> %s %s", old_state.value, target_state.value, detail or "")

    def is_terminal(self) -> bool:
        return len(VALID_TRANSITIONS[self.state]) == 0

    def failed(self) -> bool:
        """Whether the run passed through an error state."""
        return any(t.to_state in ERROR_STATES for t in self._transitions)

    def get_transitions(self) -> List[PipelineTransition]:
        """Get all recorded transitions in chronological order."""
        return list(self._transitions)

    def path(self) -> List[PipelineState]:
        """States visited so far, starting with the initial one.

        Examples:
            >>> sm = PipelineStateMachine()
            >>> sm.transition_to(PipelineState.CONFIG_ERROR)
            >>> sm.transition_to(PipelineState.DONE)
            >>> [s.value for s in sm.path()]
            ['init', 'config_error', 'done']
        """
        if not self._transitions:
            return [self.state]
        return [self._transitions[0].from_state] + [t.to_state for t in self._transitions]


__all__ = [
    "PipelineStateMachine",
    "PipelineTransition",
    "InvalidStateTransitionError",
    "VALID_TRANSITIONS",
    "ERROR_STATES",
]
