"""Event-driven state machine with transition validation."""

from eventfsm.state_machine.emitter import ListenerRegistry
from eventfsm.state_machine.machine import StateMachine
from eventfsm.state_machine.transitions import (
    TRANSITION_CHANNEL,
    TransitionTable,
    build_transition_table,
)

__all__ = [
    "ListenerRegistry",
    "StateMachine",
    "TRANSITION_CHANNEL",
    "TransitionTable",
    "build_transition_table",
]
