"""Exception classes raised by the event-driven state machine."""

from __future__ import annotations

from typing import Any


class FsmError(Exception):
    """Base class for all errors raised by eventfsm."""


class ConfigurationError(FsmError):
    """Raised when a machine definition cannot be built.

    Attributes:
        event_name: The offending event name, if the error concerns one.
    """

    def __init__(self, message: str, event_name: str | None = None) -> None:
        self.event_name = event_name
        super().__init__(message)

    @classmethod
    def illegal_event_name(cls, event_name: str) -> ConfigurationError:
        """Build the error for an event name that would shadow a machine member."""
        return cls(
            f'Illegal event name "{event_name}"; can\'t overwrite property',
            event_name=event_name,
        )


class StateTransitionError(FsmError):
    """Raised when an event is fired from a state outside its source set.

    Attributes:
        current_state: The state the machine was in when the transition was attempted.
        event: The event that was rejected.
    """

    def __init__(self, current_state: Any, event: str) -> None:
        self.current_state = current_state
        self.event = event
        super().__init__(f"Cannot transition from {current_state} via {event}")


class UnknownEventError(FsmError, KeyError):
    """Raised when an event name is not declared on the machine."""

    def __init__(self, event: str) -> None:
        self.event = event
        super().__init__(f"Unknown event '{event}'")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])
