"""Domain models and errors for eventfsm."""

from eventfsm.domain.errors import (
    ConfigurationError,
    FsmError,
    StateTransitionError,
    UnknownEventError,
)
from eventfsm.domain.models import MachineConfig, TransitionDefinition

__all__ = [
    "ConfigurationError",
    "FsmError",
    "MachineConfig",
    "StateTransitionError",
    "TransitionDefinition",
    "UnknownEventError",
]
