"""StateMachine class: guarded, event-mediated asynchronous transitions."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from eventfsm.config import get_settings
from eventfsm.domain.errors import ConfigurationError, StateTransitionError, UnknownEventError
from eventfsm.domain.models import MachineConfig, TransitionDefinition
from eventfsm.graph.dot import Replacer, to_dot
from eventfsm.state_machine.emitter import Listener, ListenerRegistry
from eventfsm.state_machine.transitions import (
    TRANSITION_CHANNEL,
    TransitionTable,
    build_transition_table,
)

logger = structlog.get_logger()

EventOperation = Callable[..., Coroutine[Any, Any, list[Any]]]


class StateMachine:
    """Finite state machine whose transitions are broadcast to async listeners.

    Firing an event checks that the current state is one of the event's
    source states, broadcasts on the generic ``"transition"`` channel, then on
    the event's own channel, and only after every listener of both rounds has
    finished does it commit the destination state.  The operation resolves to
    the results of the event-channel listeners, in registration order.

    Every declared event is available both through :meth:`transition` and as
    a named operation::

        fsm = StateMachine(
            initial="pending",
            events={
                "approve": {"from": "pending", "to": "approved"},
                "reject": {"from": ["pending", "approved"], "to": "rejected"},
            },
        )
        fsm.on("approve", notify_reviewer)
        await fsm.approve(ticket_id)      # -> [notify_reviewer result]
        fsm.is_state("approved")          # -> True

    Overlapping transitions on one machine are not serialized by default:
    each checks :meth:`can` against the state visible when it starts, and the
    last one to finish decides the final state.  Pass
    ``serialize_transitions=True`` to run them one at a time instead.
    """

    def __init__(
        self,
        initial: Any = None,
        events: Mapping[str, Any] | None = None,
        *,
        serialize_transitions: bool | None = None,
    ) -> None:
        if serialize_transitions is None:
            serialize_transitions = get_settings().serialize_transitions

        self._state: Any = initial
        self._listeners = ListenerRegistry()
        self._lock: asyncio.Lock | None = asyncio.Lock() if serialize_transitions else None
        self._events = TransitionTable({})
        self._operations: dict[str, EventOperation] = {}

        # Every attribute is assigned above, so dir() covers the whole surface.
        self._events = build_transition_table(events or {}, reserved=dir(self))
        self._operations = {
            name: self._build_operation(name, definition)
            for name, definition in self._events.items()
        }

    @classmethod
    def from_config(
        cls,
        config: MachineConfig | Mapping[str, Any],
        **kwargs: Any,
    ) -> StateMachine:
        """Build a machine from a ``{"initial": ..., "events": {...}}`` object.

        Args:
            config: A :class:`MachineConfig` or a mapping in the same shape.
            **kwargs: Forwarded to the constructor (``serialize_transitions``).

        Raises:
            ConfigurationError: If *config* does not describe a valid machine.
        """
        if not isinstance(config, MachineConfig):
            try:
                config = MachineConfig.model_validate(config)
            except ValidationError as exc:
                logger.error("invalid_machine_config", errors=exc.errors())
                raise ConfigurationError(
                    f"Invalid machine configuration: {exc.error_count()} validation error(s)"
                ) from exc
        return cls(initial=config.initial, events=config.events, **kwargs)

    def __getattr__(self, name: str) -> EventOperation:
        # Only reached for names not found normally, i.e. declared events.
        operations = self.__dict__.get("_operations", {})
        try:
            return operations[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            ) from None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={self._state!r} events={list(self._events)}>"

    # -- Introspection -----------------------------------------------------------

    @property
    def state(self) -> Any:
        """Return the current state."""
        return self._state

    @property
    def events(self) -> TransitionTable:
        """Return the immutable transition table."""
        return self._events

    def is_state(self, candidate: Any) -> bool:
        """Return True if *candidate* is the current state."""
        return self._state == candidate

    def can(self, event: str) -> bool:
        """Return True if *event* may fire from the current state.

        Raises:
            UnknownEventError: If *event* is not declared on this machine.
        """
        return self._definition(event).allows(self._state)

    def get_valid_events(self) -> list[str]:
        """Return a sorted list of events that may fire from the current state."""
        return sorted(self._events.events_from(self._state))

    def to_dot(self, replacer: Replacer | None = None) -> str | None:
        """Render the transition table as Graphviz DOT; see :func:`eventfsm.graph.to_dot`."""
        return to_dot(self._events, replacer)

    # -- Listeners ---------------------------------------------------------------

    def on(self, channel: str, listener: Listener) -> Listener:
        """Call *listener* on every broadcast of *channel* (an event name or ``"transition"``)."""
        return self._listeners.on(channel, listener)

    def once(self, channel: str, listener: Listener) -> Listener:
        """Call *listener* on the next broadcast of *channel* only."""
        return self._listeners.once(channel, listener)

    def remove_listener(self, channel: str, listener: Listener) -> bool:
        return self._listeners.remove_listener(channel, listener)

    def remove_all_listeners(self, channel: str | None = None) -> None:
        self._listeners.remove_all_listeners(channel)

    def listeners(self, channel: str) -> list[Listener]:
        return self._listeners.listeners(channel)

    def listener_count(self, channel: str) -> int:
        return self._listeners.listener_count(channel)

    # -- Transitions -------------------------------------------------------------

    async def transition(self, event: str, *args: Any, **kwargs: Any) -> list[Any]:
        """Fire *event*, passing *args* and *kwargs* through to the listeners.

        ``"transition"`` listeners are called with
        ``(event, from_state, to_state, *args, **kwargs)``; listeners of the
        event itself with ``(from_state, to_state, *args, **kwargs)``.

        Returns:
            The results of the event's own listeners, in registration order.

        Raises:
            UnknownEventError: If *event* is not declared on this machine.
            StateTransitionError: If the current state is not a source of *event*.
            Exception: Whatever a failing listener raised; the state is left unchanged.
        """
        return await self._fire(event, self._definition(event), args, kwargs)

    def _definition(self, event: str) -> TransitionDefinition:
        try:
            return self._events[event]
        except KeyError:
            raise UnknownEventError(event) from None

    def _build_operation(self, event: str, definition: TransitionDefinition) -> EventOperation:
        async def operation(*args: Any, **kwargs: Any) -> list[Any]:
            return await self._fire(event, definition, args, kwargs)

        operation.__name__ = event
        operation.__qualname__ = f"{type(self).__name__}.{event}"
        operation.__doc__ = f"Fire ``{event}``: {list(definition.sources)} -> {definition.target!r}."
        return operation

    async def _fire(
        self,
        event: str,
        definition: TransitionDefinition,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> list[Any]:
        if self._lock is None:
            return await self._run(event, definition, args, kwargs)
        async with self._lock:
            return await self._run(event, definition, args, kwargs)

    async def _run(
        self,
        event: str,
        definition: TransitionDefinition,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> list[Any]:
        from_state = self._state
        to_state = definition.target

        if not definition.allows(from_state):
            logger.warning("transition_denied", event_name=event, from_state=from_state)
            raise StateTransitionError(from_state, event)

        logger.debug(
            "transition_started", event_name=event, from_state=from_state, to_state=to_state
        )
        try:
            await self._listeners.emit(
                TRANSITION_CHANNEL, event, from_state, to_state, *args, **kwargs
            )
            results = await self._listeners.emit(event, from_state, to_state, *args, **kwargs)
        except Exception as exc:
            logger.warning(
                "transition_failed",
                event_name=event,
                from_state=from_state,
                to_state=to_state,
                error=repr(exc),
            )
            raise

        self._state = to_state
        logger.info("state_committed", event_name=event, from_state=from_state, to_state=to_state)
        return results
