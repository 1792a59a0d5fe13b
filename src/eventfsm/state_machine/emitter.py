"""Awaitable publish/subscribe registry used to broadcast transition events.

Listeners are kept per channel in registration order.  :meth:`ListenerRegistry.emit`
starts every listener of a channel concurrently and joins them with
:func:`asyncio.gather`: results come back in registration order regardless of
completion order, and the first listener to raise fails the whole broadcast.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger()

Listener = Callable[..., Any]


@dataclass(frozen=True, eq=False)
class _Registration:
    listener: Listener
    once: bool = False


async def _invoke(listener: Listener, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
    result = listener(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class ListenerRegistry:
    """Ordered listener lists keyed by channel name."""

    def __init__(self) -> None:
        self._channels: dict[str, list[_Registration]] = {}

    def on(self, channel: str, listener: Listener) -> Listener:
        """Register *listener* for every broadcast on *channel*.

        Returns the listener unchanged.
        """
        return self._add(channel, listener, once=False)

    def once(self, channel: str, listener: Listener) -> Listener:
        """Register *listener* for the next broadcast on *channel* only."""
        return self._add(channel, listener, once=True)

    def _add(self, channel: str, listener: Listener, *, once: bool) -> Listener:
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {type(listener).__name__}")
        self._channels.setdefault(channel, []).append(_Registration(listener, once))
        logger.debug("listener_registered", channel=channel, once=once)
        return listener

    def remove_listener(self, channel: str, listener: Listener) -> bool:
        """Remove the most recently added registration of *listener* on *channel*.

        Returns:
            True if a registration was removed, False if none matched.
        """
        registrations = self._channels.get(channel, [])
        for index in range(len(registrations) - 1, -1, -1):
            if registrations[index].listener == listener:
                del registrations[index]
                if not registrations:
                    del self._channels[channel]
                return True
        return False

    def remove_all_listeners(self, channel: str | None = None) -> None:
        """Drop every listener on *channel*, or on all channels when omitted."""
        if channel is None:
            self._channels.clear()
        else:
            self._channels.pop(channel, None)

    def listeners(self, channel: str) -> list[Listener]:
        """Return a copy of the listeners registered on *channel*, in order."""
        return [registration.listener for registration in self._channels.get(channel, [])]

    def listener_count(self, channel: str) -> int:
        return len(self._channels.get(channel, []))

    def _discard(self, channel: str, registration: _Registration) -> None:
        registrations = self._channels.get(channel)
        if registrations is None:
            return
        # Identity match: the same listener may be registered more than once.
        self._channels[channel] = [r for r in registrations if r is not registration]
        if not self._channels[channel]:
            del self._channels[channel]

    async def emit(self, channel: str, *args: Any, **kwargs: Any) -> list[Any]:
        """Broadcast to every listener on *channel* and wait for all of them.

        Once-listeners are deregistered before any listener is invoked, so a
        once-listener joins at most one broadcast even when broadcasts overlap.

        Returns:
            The listeners' results in registration order.

        Raises:
            Exception: Whatever the first failing listener raised, unchanged.
        """
        registrations = list(self._channels.get(channel, []))
        for registration in registrations:
            if registration.once:
                self._discard(channel, registration)

        # Failures after the first are marked retrieved by gather once the join has failed.
        results = await asyncio.gather(
            *(_invoke(registration.listener, args, kwargs) for registration in registrations)
        )
        return list(results)
