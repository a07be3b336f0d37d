"""
hms/engine/state_machine.py

Transition-table state machine used by the booking lifecycle
"""
from typing import Dict, List, Optional
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass
class StateTransition:
    """
    One allowed transition

    Attributes:
        from_state: source state
        to_state: target state
        trigger: action name
    """

    from_state: str
    to_state: str
    trigger: str


@dataclass
class StateMachineConfig:
    """
    State machine definition

    Attributes:
        name: machine name, used in log lines
        states: every valid state
        transitions: allowed transitions
        initial_state: state a fresh machine starts in
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str


class StateMachine:
    """
    State machine over a transition table

    Example:
        >>> machine = StateMachine(
        ...     config=StateMachineConfig(
        ...         name="Booking",
        ...         states=["RESERVED", "CONFIRMED"],
        ...         transitions=[StateTransition("RESERVED", "CONFIRMED", "confirm")],
        ...         initial_state="RESERVED"
        ...     )
        ... )
        >>> machine.transition_to("CONFIRMED", "confirm")
        True
    """

    def __init__(self, config: StateMachineConfig, current_state: Optional[str] = None):
        self._config = config
        self._current_state = current_state if current_state is not None else config.initial_state
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # (from_state, trigger) -> transition
        for t in config.transitions:
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def current_state(self) -> str:
        return self._current_state

    def target_of(self, trigger: str) -> Optional[str]:
        """State the trigger leads to from the current state, None if not allowed"""
        transition = self._transition_map.get(self._current_state, {}).get(trigger)
        return transition.to_state if transition else None

    def available_triggers(self) -> List[str]:
        return list(self._transition_map.get(self._current_state, {}).keys())

    def can_transition_to(self, target_state: str, trigger: str) -> bool:
        """
        Check whether the trigger may move the machine to target_state

        Args:
            target_state: desired state
            trigger: action name

        Returns:
            True if the transition is allowed
        """
        if target_state not in self._config.states:
            return False

        transition = self._transition_map.get(self._current_state, {}).get(trigger)
        return transition is not None and transition.to_state == target_state

    def transition_to(self, target_state: str, trigger: str) -> bool:
        """
        Perform the transition

        Returns:
            True if the transition happened
        """
        if not self.can_transition_to(target_state, trigger):
            logger.warning(
                f"{self._config.name}: invalid transition {self._current_state} -> {target_state} (trigger: {trigger})"
            )
            return False

        previous_state = self._current_state
        self._current_state = target_state
        logger.debug(f"{self._config.name}: {previous_state} -> {target_state} (trigger: {trigger})")
        return True


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
