"""eventfsm: finite state machines with asynchronous, event-mediated transitions."""

from eventfsm.domain.errors import (
    ConfigurationError,
    FsmError,
    StateTransitionError,
    UnknownEventError,
)
from eventfsm.domain.models import MachineConfig, TransitionDefinition
from eventfsm.graph.dot import to_dot
from eventfsm.state_machine import StateMachine, TransitionTable, build_transition_table

__all__ = [
    "ConfigurationError",
    "FsmError",
    "MachineConfig",
    "StateMachine",
    "StateTransitionError",
    "TransitionDefinition",
    "TransitionTable",
    "UnknownEventError",
    "build_transition_table",
    "to_dot",
]
